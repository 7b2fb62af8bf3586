"""
This module contains the exceptions raised by the launchkit framework.
"""

from typing import Any, List, Optional


class LaunchkitException(Exception):
    """
    Base class for all exceptions raised by launchkit.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(LaunchkitException, ValueError):
    """
    Raised when a required field is missing or invalid at construction time.
    """


class EmptyClasspathError(ConfigurationError):
    """
    Raised when a process is launched with an empty classpath.
    """

    def __init__(self, message: str = "Classpath entries list cannot be empty"):
        super().__init__(message)


# ============================================================================
# Conditions
# ============================================================================


class NoSuchPropertyError(LaunchkitException):
    """
    Raised when a condition requires an environment property that was not supplied.
    """

    def __init__(self, context: Any, property_name: str, message: Optional[str] = None):
        super().__init__(
            message
            or f'Property "{property_name}" is empty or not defined in the environment context'
        )
        self.context = context
        self.property_name = property_name


# ============================================================================
# Integrity
# ============================================================================


class UnsupportedAlgorithmError(LaunchkitException, ValueError):
    """
    Raised when a checksum or hash algorithm name is not recognised.
    """

    def __init__(self, kind: str, algorithm_name: str):
        super().__init__(f"No such {kind} algorithm: {algorithm_name}")
        self.algorithm_name = algorithm_name


class IntegrityError(LaunchkitException):
    """
    Raised when a file does not match the checksums or hashes declared for its resource.
    """

    def __init__(self, resource: Any, path: Any, mismatches: List[Any]):
        details = ", ".join(str(m) for m in mismatches)
        super().__init__(f"Integrity verification failed for {path}: {details}")
        self.resource = resource
        self.path = path
        self.mismatches = list(mismatches)


# ============================================================================
# Downloads
# ============================================================================


class UnsupportedDownloadRequestError(LaunchkitException):
    """
    Raised when a download request uses a transport the downloader cannot handle.
    """

    def __init__(self, request: Any, message: str = "Download request format is not supported"):
        super().__init__(f"{message}: {getattr(request, 'source_uri', request)}")
        self.request = request


class DownloadError(LaunchkitException, IOError):
    """
    Raised when a single download attempt fails.
    """

    def __init__(self, message: str, request: Any = None):
        super().__init__(message)
        self.request = request


class DownloadStatusError(DownloadError):
    """
    Raised when the transport answers with a status other than OK.
    """

    def __init__(self, status_code: int, request: Any = None):
        super().__init__(
            f"Failed to download file. HTTP status code is {status_code}", request
        )
        self.status_code = status_code


class DownloadCancelledError(DownloadError):
    """
    Raised when an in-flight download is stopped by cancellation or shutdown.
    """

    def __init__(self, request: Any = None):
        super().__init__("Download was cancelled", request)


class DownloaderClosedError(LaunchkitException):
    """
    Raised when a closed downloader is asked to do more work.
    """


class DownloaderTerminationError(LaunchkitException):
    """
    Raised when download workers fail to terminate even after forced cancellation.
    """


class ProvisioningError(LaunchkitException):
    """
    Raised when some resources could not be downloaded within their retry budget.
    """

    def __init__(self, message: str, failed_plans: Optional[List[Any]] = None):
        super().__init__(message)
        self.failed_plans = list(failed_plans or [])


# ============================================================================
# Processes
# ============================================================================


class ProcessExecutionError(LaunchkitException, OSError):
    """
    Raised when a probed process exits with a non-zero exit code.
    """

    def __init__(self, exit_code: int, process_output: str):
        super().__init__(
            f"Process finished with exit code: {exit_code}, process output: {process_output}"
        )
        self.exit_code = exit_code
        self.process_output = process_output


class ProcessTimeoutError(LaunchkitException, OSError):
    """
    Raised when a probed process does not finish within the configured timeout.
    """

    def __init__(self, timeout: float):
        super().__init__(f"Process timed out after {timeout:g} seconds")
        self.timeout = timeout


class VersionParseError(LaunchkitException, OSError):
    """
    Raised when a probed process succeeds but its output carries no version string.
    """

    def __init__(self, process_output: str):
        super().__init__(
            f"Failed to parse runtime version from process output: {process_output}"
        )
        self.process_output = process_output
