"""
Runtime executables and application launching.
"""

from .configuration import ApplicationLaunchConfiguration
from .executor import ProcessExecutor
from .runtime import RuntimeDescriptor

__all__ = [
    "ApplicationLaunchConfiguration",
    "ProcessExecutor",
    "RuntimeDescriptor",
]
