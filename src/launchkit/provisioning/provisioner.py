"""
Executes the download plans of a ProvisioningManager.
"""

import logging
import pathlib
from typing import Dict, List, Optional

from launchkit.downloader import DownloadRequest, DownloadResult, FileDownloader
from launchkit.integrity import IntegrityVerifier
from launchkit.launchkit_exceptions import DownloadCancelledError, IntegrityError, ProvisioningError
from launchkit.launchkit_logger import LaunchkitLogger
from launchkit.provisioning.manager import DownloadPlan, DownloadStatus, ProvisioningManager


class Provisioner:
    """
    Downloads and verifies every pending resource of a ProvisioningManager.

    Failed requests are re-enqueued in a new batch until each request's retry
    budget is used up. A downloaded file that fails integrity verification is
    deleted and counts as a failed attempt.
    """

    def __init__(
        self,
        manager: ProvisioningManager,
        downloader: FileDownloader,
        verifier: Optional[IntegrityVerifier] = None,
        logger: Optional[LaunchkitLogger] = None,
    ):
        self.manager = manager
        self.downloader = downloader
        self.logger = logger or LaunchkitLogger()
        self.verifier = verifier or manager.verifier

    def provision(self) -> List[pathlib.Path]:
        """
        Resolve every planned resource to a verified local file.

        Returns:
            Local paths of all resolved artifacts followed by all resolved native libraries

        Raises:
            ProvisioningError: If some resources are still unresolved after their retry budget
        """
        if not self.manager.get_download_plans():
            self.manager.create_download_plan()

        pending = self.manager.get_pending_downloads()
        if not pending:
            self.logger.log("No pending downloads", logging.INFO)

        while pending:
            pending = self._run_batch(pending)

        summary = self.manager.get_download_summary()
        self.logger.log(
            f"Download summary: {summary['completed']} completed, "
            f"{summary['failed']} failed, {summary['pending']} pending",
            logging.INFO,
        )

        failed = self.manager.get_failed_downloads()
        if failed:
            raise ProvisioningError(
                f"{len(failed)} resources could not be provisioned: "
                + ", ".join(f"{plan.key} ({plan.error_message})" for plan in failed),
                failed,
            )

        return self.manager.get_resolved_paths()

    def _run_batch(self, plans: List[DownloadPlan]) -> List[DownloadPlan]:
        plans_by_request: Dict[DownloadRequest, DownloadPlan] = {}
        for plan in plans:
            plan.status = DownloadStatus.IN_PROGRESS
            plan.attempts += 1
            plans_by_request[plan.request] = plan

        self.downloader.enqueue_all(plan.request for plan in plans)
        results = self.downloader.download()

        retry: List[DownloadPlan] = []
        for result in results:
            plan = plans_by_request.get(result.request)
            if plan is None:
                continue
            error = self._check_result(plan, result)
            if error is None:
                self.manager.mark_download_completed(plan, success=True)
            elif plan.can_retry() and not isinstance(error, DownloadCancelledError):
                self.logger.log(
                    f"Retrying {plan.key} (attempt {plan.attempts} of {plan.request.retries}): {error}",
                    logging.WARNING,
                )
                plan.status = DownloadStatus.PENDING
                plan.error = error
                retry.append(plan)
            else:
                self.logger.log(f"Giving up on {plan.key}: {error}", logging.ERROR)
                self.manager.mark_download_completed(plan, success=False, error=error)

        return retry

    def _check_result(self, plan: DownloadPlan, result: DownloadResult) -> Optional[BaseException]:
        if not result.succeeded:
            return result.error

        report = self.verifier.verify(plan.resource, plan.destination_path)
        if report.accepted:
            return None

        plan.destination_path.unlink(missing_ok=True)
        return IntegrityError(plan.resource, report.path, report.mismatches)
