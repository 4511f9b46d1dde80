"""Helm client facade.

This module provides the Helm class which serves as the main entry point
for all helm operations: it renders argument vectors, runs them through a
CommandRunner, and turns helm's output into typed results or exceptions.
"""

import json
import re
from typing import Any, TypeVar

from icecream import ic

from helmwrap import console
from helmwrap.args import (
    ChartExportArgs,
    ChartPullArgs,
    InstallArgs,
    ListInstalledArgs,
    RegistryLoginArgs,
    RepoAddArgs,
    UninstallArgs,
    repo_update_args,
    search_repo_args,
    versions_args,
)
from helmwrap.exceptions import (
    CommandFailedError,
    OutputEncodingError,
    OutputParsingError,
    VersionNotFoundError,
    classify_stderr,
)
from helmwrap.models import Chart, InstalledRelease
from helmwrap.runner import CommandResult, CommandRunner, SubprocessRunner, redact

_VERSION_MARKER = "version"

_Record = TypeVar("_Record", Chart, InstalledRelease)


def normalize_version(version: str) -> str:
    """Normalize a helm version string.

    Strips surrounding whitespace and a single leading 'v' so the result
    can be handed to a semantic-version parser.

    Args:
        version: The version string (e.g. 'v3.15.4+gfa9efb0').

    Returns:
        The version without the prefix (e.g. '3.15.4+gfa9efb0').

    """
    version = version.strip()
    return version[1:] if version.startswith("v") else version


def _decode(raw: bytes) -> str:
    """Decode helm output as UTF-8.

    Raises:
        OutputEncodingError: If the bytes are not valid UTF-8.

    """
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as err:
        raise OutputEncodingError(f"Failed to parse helm output as UTF-8: {err}") from err


def _parse_records(stdout: bytes, record_cls: type[_Record]) -> list[_Record]:
    """Decode a JSON array from helm stdout into records.

    Raises:
        OutputEncodingError: If stdout is not valid UTF-8.
        OutputParsingError: If stdout is not a JSON array of matching objects.

    """
    text = _decode(stdout)
    try:
        data: Any = json.loads(text)
    except json.JSONDecodeError as err:
        raise OutputParsingError(f"Failed to parse JSON from helm output: {err}") from err

    if not isinstance(data, list):
        raise OutputParsingError(f"Expected a JSON array from helm, got {type(data).__name__}")

    records: list[_Record] = []
    for item in data:
        if not isinstance(item, dict):
            raise OutputParsingError(f"Expected JSON objects in helm output, got {type(item).__name__}")
        try:
            records.append(record_cls.from_dict(item))
        except (KeyError, TypeError) as err:
            raise OutputParsingError(f"Unexpected {record_cls.__name__} record in helm output: {err}") from err
    return records


class Helm:
    """Wrapper for helm binary operations.

    Construction probes `helm version`; an instance only exists once helm
    has been found and answered. The instance keeps no other state, so it
    can be shared between threads: every call owns its own subprocess.

    Attributes:
        binary: Name or path of the helm binary.

    """

    def __init__(self, binary: str = "helm", runner: CommandRunner | None = None) -> None:
        """Initialize the client and verify the helm binary.

        Args:
            binary: Name or path of the helm binary, resolved through PATH.
            runner: Execution boundary; defaults to SubprocessRunner.

        Raises:
            BinaryNotFoundError: If helm cannot be executed.
            VersionNotFoundError: If `helm version` does not report a version.
            OutputEncodingError: If the probe output is not UTF-8.

        """
        self.binary: str = binary
        self._runner: CommandRunner = runner if runner is not None else SubprocessRunner()

        result = self._capture(["version"])
        output = _decode(result.stdout)
        if not result.ok or _VERSION_MARKER not in output:
            raise VersionNotFoundError(output or _decode(result.stderr))

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"Helm(binary={self.binary!r})"

    def _capture(self, args: list[str]) -> CommandResult:
        argv = [self.binary, *args]
        ic(redact(argv))
        return self._runner.run(argv)

    def _execute(self, args: list[str], *, stream: bool = False) -> None:
        """Run a write command and check its exit status.

        Args:
            args: Argument vector without the binary.
            stream: Attach the caller's stdio instead of capturing output.

        Raises:
            ClusterConnectionError: If helm cannot reach the cluster.
            CommandFailedError: If helm exits with a non-zero status.

        """
        argv = [self.binary, *args]
        if stream:
            ic(redact(argv))
            returncode = self._runner.run_streaming(argv)
            if returncode != 0:
                raise CommandFailedError(redact(argv), returncode)
            return

        result = self._capture(args)
        if result.ok:
            return
        stderr = _decode(result.stderr)
        error = classify_stderr(stderr)
        if error is not None:
            raise error
        raise CommandFailedError(redact(argv), result.returncode, stderr)

    def _query(self, args: list[str], record_cls: type[_Record]) -> list[_Record]:
        """Run a read command and decode its JSON output.

        stderr is classified before anything else, because helm may print
        the connection error and still exit cleanly with empty output.
        Other stderr text is treated as warnings and ignored.

        Raises:
            ClusterConnectionError: If helm cannot reach the cluster.
            CommandFailedError: If helm exits with a non-zero status.
            OutputEncodingError: If output is not UTF-8.
            OutputParsingError: If stdout is not the expected JSON.

        """
        result = self._capture(args)
        stderr = _decode(result.stderr)
        error = classify_stderr(stderr)
        if error is not None:
            raise error
        if not result.ok:
            raise CommandFailedError(redact([self.binary, *args]), result.returncode, stderr)
        records = _parse_records(result.stdout, record_cls)
        ic(len(records))
        return records

    # -----------------------------------------------------------------------
    # Release management
    # -----------------------------------------------------------------------

    def install(self, args: InstallArgs, *, stream: bool = False) -> None:
        """Install the given chart under the given release name."""
        self._execute(args.install_args(), stream=stream)

    def upgrade(self, args: InstallArgs, *, stream: bool = False) -> None:
        """Upgrade a release, installing it if it does not exist yet."""
        self._execute(args.upgrade_args(), stream=stream)

    def uninstall(self, args: UninstallArgs, *, stream: bool = False) -> bool:
        """Uninstall a release.

        With `ignore_not_found` set, the release is looked up first and the
        uninstall is skipped when it does not exist. The lookup searches the
        namespace the delete runs in, the current one when `args.namespace`
        is None. The lookup and the delete are separate helm calls.

        Args:
            args: Uninstall parameters.
            stream: Attach the caller's stdio to the helm process.

        Returns:
            False when the uninstall was skipped, True otherwise.

        """
        if args.ignore_not_found:
            releases = self._find_release(args.release, args.namespace, all_namespaces=False)
            if not releases:
                console.warning(f"Release {console.highlight(args.release)} does not exist, skipping uninstall")
                return False
        self._execute(args.to_args(), stream=stream)
        return True

    # -----------------------------------------------------------------------
    # Repositories and registries
    # -----------------------------------------------------------------------

    def repo_add(self, name: str, url: str, *, stream: bool = False) -> None:
        """Add a chart repository with the given name and location."""
        self.repo_add_with_options(RepoAddArgs(name=name, url=url), stream=stream)

    def repo_add_with_options(self, args: RepoAddArgs, *, stream: bool = False) -> None:
        """Add a chart repository with TLS and authentication options."""
        self._execute(args.to_args(), stream=stream)

    def repo_update(self, *, stream: bool = False) -> None:
        """Update the local cache of every configured repository."""
        self._execute(repo_update_args(), stream=stream)

    def registry_login(self, args: RegistryLoginArgs, *, stream: bool = False) -> None:
        """Log in to an OCI registry."""
        self._execute(args.to_args(), stream=stream)

    def chart_pull(self, args: ChartPullArgs, *, stream: bool = False) -> None:
        """Download a chart from a remote registry into the local cache."""
        self._execute(args.to_args(), stream=stream)

    def chart_export(self, args: ChartExportArgs, *, stream: bool = False) -> None:
        """Export a chart stored in the local registry cache to a directory."""
        self._execute(args.to_args(), stream=stream)

    # -----------------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------------

    def search_repo(self, chart: str, version: str) -> list[Chart]:
        """Search the configured repositories for a chart at a version.

        Args:
            chart: Chart name, optionally qualified with its repository.
            version: Version or version constraint.

        Returns:
            Matching charts as reported by helm.

        """
        return self._query(search_repo_args(chart, version), Chart)

    def versions(self, chart: str) -> list[Chart]:
        """List every available version of a chart, development versions included."""
        return self._query(versions_args(chart), Chart)

    def chart_version_exists(self, name: str, version: str) -> bool:
        """Check that a given version of a given chart exists in the repositories.

        helm matches names by substring and versions by constraint, so the
        search result is filtered again for exact equality.
        """
        charts = self.search_repo(name, version)
        return any(chart.name == name and chart.version == version for chart in charts)

    def list_installed(self, args: ListInstalledArgs | None = None) -> list[InstalledRelease]:
        """List installed releases.

        Args:
            args: Filters for `helm list`; defaults to helm's own defaults.

        Returns:
            The releases reported by helm.

        """
        return self._query((args or ListInstalledArgs()).to_args(), InstalledRelease)

    def get_installed_by_name(self, name: str, namespace: str | None = None) -> list[InstalledRelease]:
        """Return installed releases whose name is exactly `name`.

        Args:
            name: The release name.
            namespace: Namespace to search; all namespaces when None.

        Returns:
            The matching releases, empty if none is installed.

        """
        return self._find_release(name, namespace, all_namespaces=namespace is None)

    def _find_release(self, name: str, namespace: str | None, *, all_namespaces: bool) -> list[InstalledRelease]:
        # helm treats --filter as a regular expression
        args = ListInstalledArgs(
            all_namespaces=all_namespaces,
            filter=f"^{re.escape(name)}$",
            namespace=namespace,
        )
        return self._query(args.to_args(), InstalledRelease)

    def get_version(self) -> str:
        """Return the helm client version without the leading 'v'.

        Raises:
            CommandFailedError: If `helm version --short` fails.
            OutputEncodingError: If the output is not UTF-8.

        """
        args = ["version", "--short"]
        result = self._capture(args)
        if not result.ok:
            raise CommandFailedError(redact([self.binary, *args]), result.returncode, _decode(result.stderr))
        return normalize_version(_decode(result.stdout))
