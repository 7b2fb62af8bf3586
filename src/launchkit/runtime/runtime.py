"""
A reference to a runtime executable (for example a ``java`` binary) and its version probe.
"""

import dataclasses
import os
import pathlib
import re
import subprocess
from typing import List, Pattern, Sequence, Union

from launchkit.launchkit_exceptions import (
    ConfigurationError,
    ProcessExecutionError,
    ProcessTimeoutError,
    VersionParseError,
)
from launchkit.launchkit_utils import PlatformUtils

VERSION_ARGUMENT = "-version"
VERSION_PATTERN = re.compile(r'version\s+"([^"]+)"')
VERSION_TIMEOUT_SECONDS = 10.0


@dataclasses.dataclass(frozen=True)
class RuntimeDescriptor:
    """
    An executable validated at construction to exist, be a regular file and be executable.

    Acts as a factory for command lines and processes tied to that executable.
    """

    executable_path: pathlib.Path
    version_timeout: float = VERSION_TIMEOUT_SECONDS
    version_argument: str = VERSION_ARGUMENT
    version_pattern: Pattern[str] = VERSION_PATTERN

    def __post_init__(self) -> None:
        if self.executable_path is None:
            raise TypeError("Executable path must not be None")
        path = pathlib.Path(self.executable_path)
        object.__setattr__(self, "executable_path", path)

        if not path.exists():
            raise ConfigurationError(f"Runtime executable not found: {path.absolute()}")
        if not path.is_file():
            raise ConfigurationError(f"Specified path is not a file: {path.absolute()}")
        if not os.access(path, os.X_OK):
            raise ConfigurationError(f"Runtime executable is not accessible: {path.absolute()}")
        if self.version_timeout <= 0:
            raise ConfigurationError("Version timeout must be greater than zero")

        if isinstance(self.version_pattern, str):
            object.__setattr__(self, "version_pattern", re.compile(self.version_pattern))

    @classmethod
    def from_java_home(cls, java_home: Union[str, "os.PathLike[str]"], **kwargs) -> "RuntimeDescriptor":
        executable = "java.exe" if PlatformUtils.is_windows() else "java"
        return cls(pathlib.Path(java_home) / "bin" / executable, **kwargs)

    def create_command_line(self, arguments: Sequence[str] = ()) -> List[str]:
        """
        Prepend the executable path to the arguments. Has no side effects.
        """
        return [str(self.executable_path), *arguments]

    def start(self, arguments: Sequence[str] = (), **popen_kwargs) -> subprocess.Popen:
        return subprocess.Popen(self.create_command_line(arguments), **popen_kwargs)

    def get_version(self) -> str:
        """
        Run the executable with the version flag and parse the version from its output.

        Returns:
            The version token, e.g. "21.0.2" or "1.8.0_442"

        Raises:
            ProcessTimeoutError: If the probe does not finish within ``version_timeout``
            ProcessExecutionError: If the probe exits with a non-zero code
            VersionParseError: If the output carries no version string
        """
        process = self.start(
            [self.version_argument],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        )

        try:
            raw_output, _ = process.communicate(timeout=self.version_timeout)
        except subprocess.TimeoutExpired:
            process.kill()
            if process.stdout is not None:
                process.stdout.close()
            process.wait()
            raise ProcessTimeoutError(self.version_timeout)

        output = raw_output.decode("utf-8", errors="replace").strip()

        if process.returncode != 0:
            raise ProcessExecutionError(process.returncode, output)

        match = self.version_pattern.search(output)
        if match is None:
            raise VersionParseError(output)

        return match.group(1)
