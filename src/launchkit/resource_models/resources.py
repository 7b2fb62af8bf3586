"""
Pydantic data models for the resources a client bundle declares.

Two variants exist, tagged by the ``type`` field of their declaration:

{
  "type": "maven",
  "group_id": "org.lwjgl",
  "artifact_id": "lwjgl",
  "version": "3.3.3",
  "dependencies": [
    {
      "type": "remote",
      "source_uri": "https://example.org/natives/liblwjgl.so",
      "checksums": {"crc32": "deadbeef"},
      "hashes": {"sha256": "..."},
      "conditions": {"os.name.contains": "linux", "cpu.architecture.contains": "64"}
    }
  ]
}

Artifacts own one level of native-library dependencies; native libraries have
no dependencies of their own.
"""

import posixpath
import re
import types
from typing import Any, Dict, FrozenSet, Literal, Mapping, Tuple, Type, Union
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from launchkit.integrity.checksum import ChecksumAlgorithm
from launchkit.integrity.hashing import HashAlgorithm
from launchkit.launchkit_exceptions import ConfigurationError

MAVEN_CENTRAL_URL = "https://repo1.maven.org/maven2"

_HEX_DIGEST = re.compile(r"^[0-9a-f]+$")


def decode_checksum(value: Union[int, str]) -> int:
    """
    Decode a checksum from its textual form.

    Decimal text is tried first and hexadecimal text second, so that older
    declarations written in decimal keep working. Blank text decodes to 0.
    """
    if isinstance(value, bool):
        raise ValueError(f"Incorrect checksum value: {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise ValueError(f"Checksum must not be negative: {value}")
        return value
    if not isinstance(value, str):
        raise ValueError(f"Incorrect checksum value: {value!r}")

    prepared = value.strip()
    if not prepared:
        return 0
    try:
        decoded = int(prepared, 10)
    except ValueError:
        try:
            decoded = int(prepared, 16)
        except ValueError:
            raise ValueError(f"Incorrect HEX number format: '{value}'") from None
    if decoded < 0:
        raise ValueError(f"Checksum must not be negative: '{value}'")
    return decoded


def encode_checksum(value: int) -> str:
    return format(value, "x")


class RemoteNativeLibrary(BaseModel):
    """
    A native library fetched from a remote location.

    It is Downloadable, Conditional and Checkable, and is identified by its source URI.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["remote"] = "remote"
    source_uri: str = Field(..., description="Location the library is downloaded from")
    checksums: Mapping[ChecksumAlgorithm, int] = Field(default_factory=dict, validate_default=True)
    hashes: Mapping[HashAlgorithm, str] = Field(default_factory=dict, validate_default=True)
    conditions: Mapping[str, str] = Field(default_factory=dict, validate_default=True)

    @field_validator("source_uri")
    @classmethod
    def _validate_source_uri(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Source URI (source_uri) must not be blank")
        return value

    @field_validator("checksums", mode="before")
    @classmethod
    def _decode_checksums(cls, value: Any) -> Any:
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            return value
        return {
            ChecksumAlgorithm.get_by_name(k) if isinstance(k, str) else k: decode_checksum(v)
            for k, v in value.items()
        }

    @field_validator("hashes", mode="before")
    @classmethod
    def _normalize_hashes(cls, value: Any) -> Any:
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            return value
        normalized = {}
        for k, v in value.items():
            algorithm = HashAlgorithm.get_by_name(k) if isinstance(k, str) else k
            digest = str(v).strip().lower()
            if not _HEX_DIGEST.match(digest):
                raise ValueError(f"Hash for {algorithm} is not hexadecimal: '{v}'")
            normalized[algorithm] = digest
        return normalized

    @field_validator("conditions", mode="before")
    @classmethod
    def _default_conditions(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("checksums", "hashes", "conditions")
    @classmethod
    def _freeze_mapping(cls, value: Mapping) -> Mapping:
        # shared between artifacts, so the mappings must stay read-only
        return types.MappingProxyType(dict(value))

    @field_serializer("checksums")
    def _serialize_checksums(self, checksums: Mapping[ChecksumAlgorithm, int]) -> Dict[str, str]:
        return {ChecksumAlgorithm(k).value: encode_checksum(v) for k, v in checksums.items()}

    @field_serializer("hashes")
    def _serialize_hashes(self, hashes: Mapping[HashAlgorithm, str]) -> Dict[str, str]:
        return {HashAlgorithm(k).value: v for k, v in hashes.items()}

    @field_serializer("conditions")
    def _serialize_conditions(self, conditions: Mapping[str, str]) -> Dict[str, str]:
        return dict(conditions)

    @property
    def identity(self) -> str:
        return self.source_uri

    @property
    def file_name(self) -> str:
        """The last path segment of the source URI."""
        path = urlparse(self.source_uri).path
        name = posixpath.basename(path.rstrip("/"))
        if not name:
            raise ConfigurationError(f"Cannot derive a file name from {self.source_uri}")
        return name

    def __hash__(self) -> int:
        return hash((self.type, self.identity))


class MavenArtifact(BaseModel):
    """
    An artifact identified by Maven coordinates.

    The source location is a pure function of (group_id, artifact_id, version)
    and the repository it is resolved against.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["maven"] = "maven"
    group_id: str
    artifact_id: str
    version: str
    repository_url: str = MAVEN_CENTRAL_URL
    dependencies: Tuple[RemoteNativeLibrary, ...] = Field(default_factory=tuple)

    @field_validator("group_id", "artifact_id", "version")
    @classmethod
    def _validate_coordinate(cls, value: str, info) -> str:
        value = value.strip()
        if not value:
            raise ValueError(f"{info.field_name} must not be blank")
        return value

    @field_validator("repository_url")
    @classmethod
    def _validate_repository_url(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value:
            raise ValueError("repository_url must not be blank")
        return value

    @field_validator("dependencies", mode="before")
    @classmethod
    def _validate_dependencies(cls, value: Any) -> Any:
        if value is None:
            return ()
        return value

    @field_validator("dependencies")
    @classmethod
    def _deduplicate_dependencies(
        cls, value: Tuple[RemoteNativeLibrary, ...]
    ) -> Tuple[RemoteNativeLibrary, ...]:
        unique: Dict[str, RemoteNativeLibrary] = {}
        for library in value:
            unique.setdefault(library.identity, library)
        return tuple(unique[key] for key in sorted(unique))

    @property
    def identity(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"

    @property
    def relative_path(self) -> str:
        """
        Repository-relative path, e.g. ``org/lwjgl/lwjgl/3.3.3/lwjgl-3.3.3.jar``.
        """
        return "{}/{}/{}/{}-{}.jar".format(
            self.group_id.replace(".", "/"),
            self.artifact_id,
            self.version,
            self.artifact_id,
            self.version,
        )

    @property
    def source_uri(self) -> str:
        return f"{self.repository_url}/{self.relative_path}"

    @property
    def dependency_set(self) -> FrozenSet[RemoteNativeLibrary]:
        return frozenset(self.dependencies)

    def __hash__(self) -> int:
        return hash((self.type, self.identity))


Artifact = MavenArtifact
NativeLibrary = RemoteNativeLibrary

ARTIFACT_TYPES: Dict[str, Type[BaseModel]] = {"maven": MavenArtifact}
NATIVE_LIBRARY_TYPES: Dict[str, Type[BaseModel]] = {"remote": RemoteNativeLibrary}


def _parse_tagged(data: Any, registry: Dict[str, Type[BaseModel]], kind: str):
    if isinstance(data, tuple(registry.values())):
        return data
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"{kind} declaration must be a mapping, got {type(data).__name__}")
    tag = data.get("type")
    if not tag:
        raise ConfigurationError(f"{kind} declaration is missing the 'type' field")
    model = registry.get(str(tag).lower())
    if model is None:
        raise ConfigurationError(
            f"Unknown {kind} type '{tag}', expected one of {sorted(registry)}"
        )
    return model.model_validate({**data, "type": str(tag).lower()})


def parse_artifact(data: Any) -> MavenArtifact:
    """
    Build an artifact from its declaration, dispatching on the ``type`` field.

    Raises:
        ConfigurationError: If the type tag is missing or unknown
        pydantic.ValidationError: If a required field is missing or invalid
    """
    return _parse_tagged(data, ARTIFACT_TYPES, "artifact")


def parse_native_library(data: Any) -> RemoteNativeLibrary:
    return _parse_tagged(data, NATIVE_LIBRARY_TYPES, "native library")
