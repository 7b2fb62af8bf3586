"""
Provisioning manager.

Turns the declared artifacts and native libraries into download plans, and
tracks which of them are resolved to local files.
"""

import logging
import pathlib
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

from launchkit.condition import ConditionEvaluator
from launchkit.downloader import DownloadRequest
from launchkit.integrity import IntegrityVerifier
from launchkit.launchkit_config import LaunchkitConfig
from launchkit.launchkit_exceptions import ConfigurationError
from launchkit.launchkit_logger import LaunchkitLogger
from launchkit.resource_models import MavenArtifact

NATIVES_DIRECTORY = "natives"


class DownloadStatus(str, Enum):
    """Enumeration of download statuses."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class ResourceKind(str, Enum):
    ARTIFACT = "artifact"
    NATIVE_LIBRARY = "native_library"


class DownloadPlan:
    """
    A plan to resolve one resource to a local file.

    Captures the resource, the request that fetches it and the attempts made so far.
    """

    def __init__(
        self,
        resource,
        kind: ResourceKind,
        request: DownloadRequest,
        status: DownloadStatus = DownloadStatus.PENDING,
    ):
        """
        Initialize a download plan.

        Args:
            resource: The artifact or native library to resolve
            kind: Whether the resource goes on the classpath or the native path
            request: The request that downloads the resource
            status: Current download status
        """
        self.resource = resource
        self.kind = kind
        self.request = request
        self.status = status
        self.attempts = 0
        self.error: Optional[BaseException] = None

    @property
    def key(self) -> str:
        return self.resource.identity

    @property
    def destination_path(self) -> pathlib.Path:
        return self.request.destination_path

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None

    def can_retry(self) -> bool:
        return self.attempts < self.request.retries

    def __repr__(self) -> str:
        return (
            f"DownloadPlan(key={self.key}, "
            f"status={self.status.value}, attempts={self.attempts}, url={self.request.source_uri})"
        )


class ProvisioningManager:
    """
    Decides which resources must be downloaded and where they live locally.

    Native libraries whose conditions do not hold in the environment are left out.
    Files already present locally are reused when they pass integrity verification.
    """

    def __init__(
        self,
        artifacts: Iterable[MavenArtifact],
        evaluator: ConditionEvaluator,
        config: LaunchkitConfig,
        verifier: Optional[IntegrityVerifier] = None,
        logger: Optional[LaunchkitLogger] = None,
    ):
        """
        Initialize the provisioning manager.

        Args:
            artifacts: The artifacts to resolve, each with its native libraries
            evaluator: Decides which native libraries apply to this machine
            config: Library location and download settings
            verifier: Checks files already present locally
            logger: Logger for progress and error messages
        """
        self.artifacts: List[MavenArtifact] = list(dict.fromkeys(artifacts))
        self.evaluator = evaluator
        self.config = config
        self.logger = logger or LaunchkitLogger()
        self.verifier = verifier or IntegrityVerifier(self.logger)
        self.library_directory = pathlib.Path(config.library_directory)
        self.download_plans: Dict[str, DownloadPlan] = {}

    @property
    def natives_directory(self) -> pathlib.Path:
        return self.library_directory / NATIVES_DIRECTORY

    def create_download_plan(self) -> None:
        """
        Create download plans for every artifact and every applicable native library.

        Raises:
            NoSuchPropertyError: If a condition needs an environment property that is missing
            ConfigurationError: If two different resources resolve to the same local file
        """
        self.download_plans = {}
        destinations: Dict[pathlib.Path, str] = {}

        for artifact in self.artifacts:
            self._add_plan(artifact, ResourceKind.ARTIFACT, destinations)
            for library in artifact.dependencies:
                if not self.evaluator.is_applicable(library):
                    continue
                if library.identity in self.download_plans:
                    continue
                self._add_plan(library, ResourceKind.NATIVE_LIBRARY, destinations)

        pending = len(self.get_pending_downloads())
        self.logger.log(
            f"Planned {len(self.download_plans)} resources, {pending} need downloading",
            logging.INFO,
        )

    def _add_plan(self, resource, kind: ResourceKind, destinations: Dict[pathlib.Path, str]) -> None:
        destination = self._get_destination_path(resource, kind)

        owner = destinations.get(destination)
        if owner is not None and owner != resource.identity:
            raise ConfigurationError(
                f"Resources {owner} and {resource.identity} both resolve to {destination}"
            )
        destinations[destination] = resource.identity

        request = DownloadRequest.create(
            resource.source_uri,
            destination,
            timeout=self.config.download_timeout,
            retries=self.config.download_retries,
        )
        plan = DownloadPlan(resource, kind, request)

        if self._is_resolved_locally(plan):
            plan.status = DownloadStatus.COMPLETED
            self.logger.log(f"Using existing {destination} for {plan.key}", logging.DEBUG)

        self.download_plans[plan.key] = plan

    def _get_destination_path(self, resource, kind: ResourceKind) -> pathlib.Path:
        if kind == ResourceKind.ARTIFACT:
            return self.library_directory / pathlib.PurePosixPath(resource.relative_path)
        return self.natives_directory / resource.file_name

    def _is_resolved_locally(self, plan: DownloadPlan) -> bool:
        path = plan.destination_path
        if not path.is_file():
            return False
        if not self.config.verify_existing:
            return True
        return self.verifier.verify(plan.resource, path).accepted

    def get_download_plans(self) -> Dict[str, DownloadPlan]:
        return self.download_plans

    def get_pending_downloads(self) -> List[DownloadPlan]:
        return [p for p in self.download_plans.values() if p.status == DownloadStatus.PENDING]

    def get_failed_downloads(self) -> List[DownloadPlan]:
        return [p for p in self.download_plans.values() if p.status == DownloadStatus.FAILED]

    def mark_download_completed(
        self, plan: DownloadPlan, success: bool = True, error: Optional[BaseException] = None
    ) -> None:
        """
        Mark a download plan as completed or failed.

        Args:
            plan: The download plan to mark
            success: Whether the download was successful
            error: What made the download fail
        """
        plan.status = DownloadStatus.COMPLETED if success else DownloadStatus.FAILED
        plan.error = None if success else error

    def _resolved_paths(self, kind: ResourceKind) -> List[pathlib.Path]:
        return [
            plan.destination_path
            for plan in self.download_plans.values()
            if plan.kind == kind and plan.status == DownloadStatus.COMPLETED
        ]

    def get_classpath(self) -> List[pathlib.Path]:
        """Local paths of every resolved artifact, in declaration order."""
        return self._resolved_paths(ResourceKind.ARTIFACT)

    def get_native_paths(self) -> List[pathlib.Path]:
        return self._resolved_paths(ResourceKind.NATIVE_LIBRARY)

    def get_resolved_paths(self) -> List[pathlib.Path]:
        return self.get_classpath() + self.get_native_paths()

    def get_download_summary(self) -> Dict[str, int]:
        """
        Get a summary of download results.

        Returns:
            Dictionary with counts of completed, failed, and pending downloads
        """
        plans: Sequence[DownloadPlan] = list(self.download_plans.values())
        completed = sum(1 for p in plans if p.status == DownloadStatus.COMPLETED)
        failed = sum(1 for p in plans if p.status == DownloadStatus.FAILED)
        pending = sum(1 for p in plans if p.status in (DownloadStatus.PENDING, DownloadStatus.IN_PROGRESS))
        return {
            "completed": completed,
            "failed": failed,
            "pending": pending,
            "total": len(plans),
        }
