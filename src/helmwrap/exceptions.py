"""Custom exceptions for helmwrap.

This module defines the exception hierarchy raised by the Helm client
and the table used to classify helm's stderr output.
"""

_INSTALL_DOCS_URL = "https://helm.sh/docs/intro/install/"


class HelmError(Exception):
    """Base exception for all helmwrap errors.

    All custom exceptions in this package inherit from this class,
    allowing callers to catch all helmwrap errors with a single
    except clause if desired.
    """

    pass


class BinaryNotFoundError(HelmError):
    """Raised when the helm executable cannot be found or spawned.

    This can occur when:
    - helm is not installed
    - helm is not in the system PATH
    - the configured binary path is wrong
    """

    def __init__(self, binary: str = "helm") -> None:
        """Build the error message for a missing binary.

        Args:
            binary: Name or path of the binary that could not be executed.

        """
        self.binary = binary
        super().__init__(
            f"Unable to find '{binary}' executable. "
            f"Please make sure helm is installed and in your PATH. "
            f"See {_INSTALL_DOCS_URL} for more help"
        )


class VersionNotFoundError(HelmError):
    """Raised when `helm version` runs but does not report a version."""

    def __init__(self, output: str) -> None:
        self.output = output
        super().__init__(f"Failed to read helm client version: {output!r}")


class ClusterConnectionError(HelmError):
    """Raised when helm reports that the Kubernetes cluster is unreachable.

    The condition is transient from the caller's point of view; helmwrap
    itself never retries.
    """

    pass


class OutputEncodingError(HelmError):
    """Raised when helm output is not valid UTF-8 text."""

    pass


class OutputParsingError(HelmError):
    """Raised when helm stdout does not match the expected JSON shape."""

    pass


class CommandFailedError(HelmError):
    """Raised when helm exits with a non-zero status.

    Attributes:
        args_list: The argument vector that was executed (secrets redacted).
        returncode: The process exit status.
        stderr: Captured stderr, empty when output was streamed.

    """

    def __init__(self, args_list: list[str], returncode: int, stderr: str = "") -> None:
        self.args_list = args_list
        self.returncode = returncode
        self.stderr = stderr
        message = f"helm command failed (exit code {returncode})"
        if stderr.strip():
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)


# Marker substrings searched for in helm's stderr, checked in order.
# helm has no versioned contract for these messages, so a wording change
# upstream silently turns a match into a plain CommandFailedError.
STDERR_MARKERS: tuple[tuple[str, type[HelmError], str], ...] = (
    ("Kubernetes cluster unreachable", ClusterConnectionError, "Failed to connect to Kubernetes"),
)


def classify_stderr(stderr: str) -> HelmError | None:
    """Map helm stderr text to a typed error.

    Args:
        stderr: Decoded stderr of a helm invocation.

    Returns:
        An instance of the matching error class, or None when no marker
        is present.

    """
    if not stderr:
        return None
    for marker, error_cls, message in STDERR_MARKERS:
        if marker in stderr:
            return error_cls(f"{message}: {stderr.strip()}")
    return None
