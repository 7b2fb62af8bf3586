"""
Shared fixtures for launchkit tests.
"""

import pytest

from launchkit.launchkit_config import LaunchkitConfig
from launchkit.launchkit_logger import LaunchkitLogger
from launchkit.resource_models import MavenArtifact, RemoteNativeLibrary


@pytest.fixture
def logger():
    return LaunchkitLogger(level="DEBUG")


@pytest.fixture
def config(tmp_path):
    return LaunchkitConfig(library_directory=str(tmp_path / "libraries"))


@pytest.fixture
def linux_library():
    return RemoteNativeLibrary(
        source_uri="https://natives.example.org/linux/liblwjgl.so",
        conditions={"os.name.contains": "linux"},
    )


@pytest.fixture
def windows_library():
    return RemoteNativeLibrary(
        source_uri="https://natives.example.org/windows/lwjgl.dll",
        conditions={"os.name.contains": "windows"},
    )


@pytest.fixture
def artifact(linux_library, windows_library):
    return MavenArtifact(
        group_id="org.lwjgl",
        artifact_id="lwjgl",
        version="3.3.3",
        dependencies=[linux_library, windows_library],
    )
