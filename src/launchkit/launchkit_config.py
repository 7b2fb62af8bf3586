"""
Configuration parameters for launchkit.
"""

import os
from dataclasses import asdict, dataclass, field
from typing import Any, Dict

try:
    import tomllib
except ModuleNotFoundError:
    # Python < 3.11
    import tomli as tomllib

from launchkit.launchkit_exceptions import ConfigurationError
from launchkit.launchkit_settings import LaunchkitSettings

LAUNCHKIT_TOML_SCHEMA = """
# Launchkit configuration

[launchkit]
# Where artifacts and native libraries are stored (optional)
# library_directory = "/home/user/.launchkit/libraries"

# Number of concurrent downloads (default 1)
download_pool_size = 4

# Per-request timeout in seconds (default 300)
download_timeout = 300

# Attempts per resource, including the first one (default 1)
download_retries = 3

# Re-verify files that are already present locally (default true)
verify_existing = true

log_level = "INFO"
"""

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class LaunchkitConfig:
    """
    Configuration parameters
    """

    library_directory: str = field(default_factory=LaunchkitSettings.get_library_directory)
    download_pool_size: int = 1
    download_timeout: float = 300.0
    download_retries: int = 1
    verify_existing: bool = True
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.download_pool_size < 1:
            raise ConfigurationError("'download_pool_size' must be greater than zero")
        if self.download_timeout <= 0:
            raise ConfigurationError("'download_timeout' must be greater than zero")
        if self.download_retries < 1:
            raise ConfigurationError("'download_retries' must be greater than zero")
        self.log_level = str(self.log_level).upper()
        if self.log_level not in _LOG_LEVELS:
            raise ConfigurationError(f"Unsupported log level: {self.log_level}")
        self.library_directory = os.path.expanduser(str(self.library_directory))

    @classmethod
    def from_dict(cls, env: Dict[str, Any]) -> "LaunchkitConfig":
        """
        Create a LaunchkitConfig instance from a dictionary
        """
        known = {name for name in cls.__dataclass_fields__}
        unknown = set(env) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown)}")
        return cls(**env)

    @classmethod
    def from_toml(cls, path: str) -> "LaunchkitConfig":
        """
        Load the ``[launchkit]`` table of a TOML file.

        Raises:
            ConfigurationError: If the file is missing, malformed or holds invalid values
        """
        if not os.path.exists(path):
            raise ConfigurationError(f"Configuration file not found: {path}")

        try:
            with open(path, "rb") as f:
                toml_dict = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Malformed configuration file {path}: {e}") from e

        section = toml_dict.get("launchkit", {})
        if not isinstance(section, dict):
            raise ConfigurationError("'launchkit' must be a table")
        return cls.from_dict(section)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
