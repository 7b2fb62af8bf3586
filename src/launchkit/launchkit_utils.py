"""
Utilities for describing the platform launchkit runs on.
"""

import os
import platform
from typing import Dict


class PlatformUtils:
    """
    This class provides utilities for describing the platform launchkit is running on.
    """

    OS_NAME_PROPERTY = "os.name"
    OS_VERSION_PROPERTY = "os.version"
    CPU_ARCHITECTURE_PROPERTY = "cpu.architecture"

    _machine_aliases = {
        "x86_64": "amd64",
        "aarch64": "arm64",
        "i386": "x86",
        "i686": "x86",
    }

    @staticmethod
    def get_os_name() -> str:
        """
        Returns the lower-case operating system name, e.g. "linux", "windows" or "mac os x".
        """
        system = platform.system()
        if system == "Darwin":
            return "mac os x"
        return system.lower()

    @staticmethod
    def get_cpu_architecture() -> str:
        machine = platform.machine().lower()
        return PlatformUtils._machine_aliases.get(machine, machine)

    @staticmethod
    def get_environment_properties() -> Dict[str, str]:
        """
        Returns a snapshot of the environment properties understood by the condition validators.
        """
        return {
            PlatformUtils.OS_NAME_PROPERTY: PlatformUtils.get_os_name(),
            PlatformUtils.OS_VERSION_PROPERTY: platform.release(),
            PlatformUtils.CPU_ARCHITECTURE_PROPERTY: PlatformUtils.get_cpu_architecture(),
        }

    @staticmethod
    def is_windows() -> bool:
        return os.name == "nt"
