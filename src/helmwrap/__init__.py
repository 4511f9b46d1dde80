"""helmwrap: typed Python facade over the helm binary.

This package builds helm command lines from typed arguments, runs them,
and parses helm's JSON output into typed records.

Example usage:
    from helmwrap import Helm, InstallArgs

    helm = Helm()
    helm.upgrade(InstallArgs("web", "bitnami/nginx").with_override("replicaCount", "2"))
    releases = helm.get_installed_by_name("web", namespace="default")
"""

__version__ = "0.6.0"

from helmwrap.args import (
    ChartExportArgs,
    ChartPullArgs,
    InstallArgs,
    ListInstalledArgs,
    RegistryLoginArgs,
    RepoAddArgs,
    UninstallArgs,
)
from helmwrap.cli import cli
from helmwrap.client import Helm, normalize_version
from helmwrap.exceptions import (
    BinaryNotFoundError,
    ClusterConnectionError,
    CommandFailedError,
    HelmError,
    OutputEncodingError,
    OutputParsingError,
    VersionNotFoundError,
)
from helmwrap.models import Chart, InstalledRelease
from helmwrap.runner import CommandResult, CommandRunner, SubprocessRunner

__all__ = [
    # Version
    "__version__",
    # Main CLI
    "cli",
    # Client
    "Helm",
    "normalize_version",
    # Arguments
    "InstallArgs",
    "UninstallArgs",
    "RepoAddArgs",
    "RegistryLoginArgs",
    "ChartPullArgs",
    "ChartExportArgs",
    "ListInstalledArgs",
    # Results
    "Chart",
    "InstalledRelease",
    # Execution
    "CommandResult",
    "CommandRunner",
    "SubprocessRunner",
    # Exceptions
    "HelmError",
    "BinaryNotFoundError",
    "VersionNotFoundError",
    "ClusterConnectionError",
    "OutputEncodingError",
    "OutputParsingError",
    "CommandFailedError",
]
