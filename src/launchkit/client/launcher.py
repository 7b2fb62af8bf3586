"""
Provisions a client bundle and starts it for a player.
"""

import logging
from typing import Dict, Optional, Sequence

from launchkit.client.client import Client
from launchkit.client.models import ClientConfiguration, PlayerConfiguration
from launchkit.client.preprocessor import Preprocessor
from launchkit.condition import ConditionEvaluator, ConditionValidator, EnvironmentContext, default_validators
from launchkit.downloader import FileDownloader, HttpFileDownloader
from launchkit.integrity import IntegrityVerifier
from launchkit.launchkit_config import LaunchkitConfig
from launchkit.launchkit_logger import LaunchkitLogger
from launchkit.provisioning import Provisioner, ProvisioningManager
from launchkit.runtime import ApplicationLaunchConfiguration, ProcessExecutor, RuntimeDescriptor


class ClientLauncher:
    """
    Launches clients on a runtime.

    ``launch`` resolves every artifact and applicable native library of the
    client into the library directory, substitutes player variables into the
    arguments and starts the main class with the resolved artifacts on the classpath.
    """

    def __init__(
        self,
        runtime: RuntimeDescriptor,
        config: Optional[LaunchkitConfig] = None,
        logger: Optional[LaunchkitLogger] = None,
        downloader: Optional[FileDownloader] = None,
        verifier: Optional[IntegrityVerifier] = None,
        validators: Optional[Sequence[ConditionValidator]] = None,
    ):
        """
        Args:
            runtime: The runtime that runs the client
            config: Library location and download settings
            logger: Logger for progress and error messages
            downloader: Downloader to use; a pooled HTTP downloader is created per launch when omitted
            verifier: Checks downloaded and existing files
            validators: Condition validators for native libraries
        """
        self.runtime = runtime
        self.config = config or LaunchkitConfig()
        self.logger = logger or LaunchkitLogger(level=self.config.log_level)
        self.downloader = downloader
        self.verifier = verifier or IntegrityVerifier(self.logger)
        self.validators = list(validators) if validators is not None else default_validators()
        self.executor = ProcessExecutor(runtime, self.logger)

    def launch(
        self,
        client_configuration: ClientConfiguration,
        player_configuration: PlayerConfiguration,
        main_class: str,
        jvm_arguments: Sequence[str] = (),
        application_arguments: Sequence[str] = (),
        environment: Optional[EnvironmentContext] = None,
        **popen_kwargs,
    ) -> Client:
        """
        Provision and start a client.

        Args:
            client_configuration: The bundle to launch
            player_configuration: The player to launch it for
            main_class: Entry point of the client
            jvm_arguments: Runtime arguments, may contain ``${variable}`` placeholders
            application_arguments: Client arguments, may contain ``${variable}`` placeholders
            environment: Environment to evaluate native library conditions against, defaults to this machine
            **popen_kwargs: Passed to subprocess.Popen

        Returns:
            The running client

        Raises:
            ProvisioningError: If some resources could not be downloaded or verified
            ConfigurationError: If the client process exits immediately
        """
        self.logger.log(
            f"Launching {client_configuration.name} {client_configuration.version} "
            f"for {player_configuration.user_name}",
            logging.INFO,
        )

        evaluator = ConditionEvaluator(environment or EnvironmentContext.from_platform(), self.validators, self.logger)
        manager = ProvisioningManager(
            client_configuration.artifacts, evaluator, self.config, self.verifier, self.logger
        )
        self._provision(manager)

        preprocessor = Preprocessor(variables=self.get_variables(client_configuration, player_configuration, manager))
        launch_configuration = ApplicationLaunchConfiguration(
            main_class=main_class,
            classpath_entries=manager.get_classpath(),
            jvm_arguments=preprocessor.preprocess_all(jvm_arguments),
            application_arguments=preprocessor.preprocess_all(application_arguments),
        )

        process = self.executor.execute(launch_configuration, **popen_kwargs)
        return Client(client_configuration, player_configuration, launch_configuration, process)

    def _provision(self, manager: ProvisioningManager) -> None:
        if self.downloader is not None:
            Provisioner(manager, self.downloader, self.verifier, self.logger).provision()
            return

        with HttpFileDownloader(pool_size=self.config.download_pool_size, logger=self.logger) as downloader:
            Provisioner(manager, downloader, self.verifier, self.logger).provision()

    @staticmethod
    def get_variables(
        client_configuration: ClientConfiguration,
        player_configuration: PlayerConfiguration,
        manager: ProvisioningManager,
    ) -> Dict[str, Optional[str]]:
        return {
            "user_name": player_configuration.user_name,
            "player_uuid": str(player_configuration.player_uuid),
            "session_id": player_configuration.session_id,
            "library_directory": str(manager.library_directory),
            "natives_directory": str(manager.natives_directory),
            "client_name": client_configuration.name,
            "client_version": client_configuration.version,
        }
