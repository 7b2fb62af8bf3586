"""
A running client process.
"""

import dataclasses
import subprocess
from typing import Optional

from launchkit.client.models import ClientConfiguration, PlayerConfiguration
from launchkit.launchkit_exceptions import ConfigurationError
from launchkit.runtime import ApplicationLaunchConfiguration


@dataclasses.dataclass(frozen=True)
class Client:
    """
    A launched client: its configuration, the player it runs for, what was launched and the live process.
    """

    configuration: ClientConfiguration
    player: PlayerConfiguration
    launch_configuration: ApplicationLaunchConfiguration
    process: subprocess.Popen

    def __post_init__(self) -> None:
        if self.configuration is None or self.player is None or self.process is None:
            raise TypeError("Client configuration, player and process must not be None")
        if self.process.poll() is not None:
            raise ConfigurationError(
                f"Client process exited immediately with code {self.process.returncode}"
            )

    @property
    def pid(self) -> int:
        return self.process.pid

    def is_alive(self) -> bool:
        return self.process.poll() is None

    def wait(self, timeout: Optional[float] = None) -> int:
        return self.process.wait(timeout=timeout)

    def terminate(self, timeout: float = 10.0) -> int:
        """
        Stop the client, killing it if it does not exit within ``timeout`` seconds.

        Returns:
            The exit code of the process
        """
        if not self.is_alive():
            return self.process.returncode
        self.process.terminate()
        try:
            return self.process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            self.process.kill()
            return self.process.wait()
