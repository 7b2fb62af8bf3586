"""
Starts applications described by an ApplicationLaunchConfiguration.
"""

import logging
import os
import pathlib
import subprocess
from typing import List, Optional

from launchkit.launchkit_exceptions import EmptyClasspathError
from launchkit.launchkit_logger import LaunchkitLogger
from launchkit.runtime.configuration import ApplicationLaunchConfiguration
from launchkit.runtime.runtime import RuntimeDescriptor

CLASSPATH_ARGUMENT = "-cp"
DIRECTORY_WILDCARD = "*"


class ProcessExecutor:
    """
    Assembles the command line for an application and starts it on the given runtime.

    The command is built in the order
    ``[executable] [jvm arguments] -cp [classpath] [main class] [application arguments]``.
    """

    def __init__(self, runtime: RuntimeDescriptor, logger: Optional[LaunchkitLogger] = None):
        if runtime is None:
            raise TypeError("Runtime must not be None")
        self.runtime = runtime
        self.logger = logger or LaunchkitLogger()

    def execute(self, configuration: ApplicationLaunchConfiguration, **popen_kwargs) -> subprocess.Popen:
        """
        Start the configured application.

        Args:
            configuration: What to run
            **popen_kwargs: Passed to subprocess.Popen (cwd, env, stdout, ...)

        Returns:
            The started process

        Raises:
            EmptyClasspathError: If the configuration has no classpath entries
        """
        if configuration is None:
            raise TypeError("Launch configuration must not be None")
        if not configuration.classpath_entries:
            raise EmptyClasspathError()

        arguments = self.build_arguments(configuration)
        self.logger.log(
            f"Launching {configuration.main_class} with {len(configuration.classpath_entries)} classpath entries",
            logging.INFO,
        )
        self.logger.log(f"Command line: {self.runtime.create_command_line(arguments)}", logging.DEBUG)
        return self.runtime.start(arguments, **popen_kwargs)

    def build_arguments(self, configuration: ApplicationLaunchConfiguration) -> List[str]:
        arguments = list(configuration.jvm_arguments)
        arguments.append(CLASSPATH_ARGUMENT)
        arguments.append(self.build_classpath(configuration.classpath_entries))
        arguments.append(configuration.main_class)
        arguments.extend(configuration.application_arguments)
        return arguments

    @staticmethod
    def build_classpath(entries) -> str:
        """
        Join classpath entries with the platform path separator, expanding directories to ``<dir>/*``.
        """
        return os.pathsep.join(
            os.path.join(str(entry), DIRECTORY_WILDCARD) if pathlib.Path(entry).is_dir() else str(entry)
            for entry in entries
        )
