"""
Pydantic data models for client bundle declarations and player sessions.
"""

import json
import os
import uuid
from typing import Any, Dict, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from launchkit.launchkit_exceptions import ConfigurationError
from launchkit.resource_models import MavenArtifact, parse_artifact

DEFAULT_NAME = "Unnamed Client Configuration"
DEFAULT_VERSION = "0.0.0"
DEFAULT_AUTHOR = "N/A"


class ClientConfiguration(BaseModel):
    """
    A client bundle: descriptive metadata and the artifacts it is assembled from.

    Structure:
    {
      "name": "...",
      "version": "1.0.0",
      "author": "...",
      "artifacts": [{"type": "maven", "group_id": ..., ...}, ...]
    }
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = DEFAULT_NAME
    version: str = DEFAULT_VERSION
    author: str = DEFAULT_AUTHOR
    artifacts: Tuple[MavenArtifact, ...]

    @field_validator("name", "version", "author", mode="before")
    @classmethod
    def _apply_defaults(cls, value: Any, info) -> Any:
        if value is None:
            return {"name": DEFAULT_NAME, "version": DEFAULT_VERSION, "author": DEFAULT_AUTHOR}[info.field_name]
        return value

    @field_validator("artifacts", mode="before")
    @classmethod
    def _parse_artifacts(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("Client configuration must define artifacts")
        if isinstance(value, (str, bytes)) or not hasattr(value, "__iter__"):
            raise ValueError("artifacts must be a list of artifact declarations")
        artifacts = [parse_artifact(item) for item in value]
        if not artifacts:
            raise ValueError("Client configuration must contain at least one artifact")
        return tuple(dict.fromkeys(artifacts))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClientConfiguration":
        """
        Build a client configuration from a declaration.

        Raises:
            ConfigurationError: If the declaration is invalid
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid client configuration: {e}") from e

    @classmethod
    def from_json_file(cls, path: Union[str, "os.PathLike[str]"]) -> "ClientConfiguration":
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise ConfigurationError(f"Client configuration not found: {path}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Malformed client configuration {path}: {e}") from e
        return cls.from_dict(data)

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)


class PlayerConfiguration(BaseModel):
    """
    The player a client is launched for.

    ``session_id`` is never serialized.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    user_name: str
    player_uuid: uuid.UUID
    session_id: Optional[str] = Field(None, exclude=True)

    @field_validator("user_name")
    @classmethod
    def _validate_user_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("User name (user_name) must not be empty")
        return value
