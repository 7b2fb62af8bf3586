"""
Resource models for client bundles.

This package provides Pydantic data models for the artifacts and native
libraries a bundle declares, and the capability protocols they expose.
"""

from .capabilities import Checkable, Conditional, Downloadable
from .resources import (
    ARTIFACT_TYPES,
    MAVEN_CENTRAL_URL,
    NATIVE_LIBRARY_TYPES,
    Artifact,
    MavenArtifact,
    NativeLibrary,
    RemoteNativeLibrary,
    decode_checksum,
    encode_checksum,
    parse_artifact,
    parse_native_library,
)

__all__ = [
    # Capabilities
    "Checkable",
    "Conditional",
    "Downloadable",
    # Resources
    "ARTIFACT_TYPES",
    "MAVEN_CENTRAL_URL",
    "NATIVE_LIBRARY_TYPES",
    "Artifact",
    "MavenArtifact",
    "NativeLibrary",
    "RemoteNativeLibrary",
    "decode_checksum",
    "encode_checksum",
    "parse_artifact",
    "parse_native_library",
]
