"""
Defines the default filesystem locations used by launchkit.
"""

import os
import pathlib


class LaunchkitSettings:
    """
    Provides the various settings for launchkit.
    """

    _home_override_env = "LAUNCHKIT_HOME"

    @staticmethod
    def get_launchkit_dir() -> str:
        """
        Get the root directory for launchkit data, honouring ``LAUNCHKIT_HOME``.
        """
        override = os.environ.get(LaunchkitSettings._home_override_env)
        if override:
            root = pathlib.Path(override)
        else:
            root = pathlib.Path.home() / ".launchkit"
        root.mkdir(parents=True, exist_ok=True)
        return str(root)

    @staticmethod
    def get_library_directory() -> str:
        """
        Get the directory where downloaded artifacts and native libraries are stored.
        """
        library_dir = pathlib.Path(LaunchkitSettings.get_launchkit_dir()) / "libraries"
        library_dir.mkdir(parents=True, exist_ok=True)
        return str(library_dir)

    @staticmethod
    def get_global_cache_directory() -> str:
        cache_dir = pathlib.Path(LaunchkitSettings.get_launchkit_dir()) / "cache"
        cache_dir.mkdir(parents=True, exist_ok=True)
        return str(cache_dir)
