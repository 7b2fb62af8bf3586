"""
launchkit: provisions application bundles (artifacts and native libraries) and launches them on a runtime.
"""

from launchkit.client import ClientConfiguration, ClientLauncher, PlayerConfiguration
from launchkit.launchkit_config import LaunchkitConfig
from launchkit.launchkit_logger import LaunchkitLogger

__all__ = [
    "ClientConfiguration",
    "ClientLauncher",
    "PlayerConfiguration",
    "LaunchkitConfig",
    "LaunchkitLogger",
]
