"""Argument builders for helm commands.

Each class in this module holds the parameters of one helm operation and
renders them into an ordered argument vector. Rendering never touches the
filesystem or network and never raises: validating the values is the
caller's job.

The binary name is not part of the rendered vector; the client prepends it.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path

# CLI flag constants shared by several commands
_OUTPUT_JSON = ["--output", "json"]
_NAMESPACE = "--namespace"
_VERSION = "--version"


def _flag_pairs(flag: str, values: list[str] | tuple[str, ...]) -> list[str]:
    """Render one `flag value` pair per element, in order."""
    argv: list[str] = []
    for value in values:
        argv.extend([flag, value])
    return argv


@dataclass(frozen=True, slots=True)
class InstallArgs:
    """Parameters for `helm install` and `helm upgrade --install`.

    Attributes:
        name: Release name.
        chart: Chart reference (repo/chart, path, or URL).
        version: Chart version constraint.
        namespace: Target namespace.
        overrides: Ordered (key, value) pairs passed as `--set`. Later
            duplicates shadow earlier ones, as helm applies them in order.
        values: Paths to values files passed as `--values`.
        develop: Pass `--devel` so development versions are considered.

    """

    name: str
    chart: str
    version: str | None = None
    namespace: str | None = None
    overrides: tuple[tuple[str, str], ...] = ()
    values: tuple[str, ...] = ()
    develop: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "overrides", tuple((str(k), str(v)) for k, v in self.overrides))
        object.__setattr__(self, "values", tuple(str(path) for path in self.values))

    def with_version(self, version: str) -> "InstallArgs":
        return replace(self, version=version)

    def with_namespace(self, namespace: str) -> "InstallArgs":
        return replace(self, namespace=namespace)

    def with_develop(self) -> "InstallArgs":
        return replace(self, develop=True)

    def with_override(self, key: str, value: str) -> "InstallArgs":
        """Return a copy with one more `--set` pair appended."""
        return replace(self, overrides=(*self.overrides, (key, value)))

    def with_values_file(self, path: str | Path) -> "InstallArgs":
        """Return a copy with one more values file appended."""
        return replace(self, values=(*self.values, str(path)))

    def _flags(self) -> list[str]:
        """Render the flag tail shared by install and upgrade.

        Both `--devel` and `--version` render when set; helm decides
        which one wins.
        """
        argv: list[str] = []
        if self.namespace is not None:
            argv.extend([_NAMESPACE, self.namespace])
        if self.develop:
            argv.append("--devel")
        if self.version is not None:
            argv.extend([_VERSION, self.version])
        argv.extend(_flag_pairs("--values", self.values))
        for key, value in self.overrides:
            argv.extend(["--set", f'{key}="{value}"'])
        return argv

    def install_args(self) -> list[str]:
        """Render `install NAME CHART` followed by the flags."""
        return ["install", self.name, self.chart, *self._flags()]

    def upgrade_args(self) -> list[str]:
        """Render `upgrade --install NAME CHART --output json` followed by the flags."""
        return ["upgrade", "--install", self.name, self.chart, *_OUTPUT_JSON, *self._flags()]


@dataclass(frozen=True, slots=True)
class UninstallArgs:
    """Parameters for `helm uninstall`.

    `ignore_not_found` is not a helm flag: the client checks that the
    release exists before uninstalling it.
    """

    release: str
    namespace: str | None = None
    ignore_not_found: bool = False
    dry_run: bool = False
    timeout: str | None = None

    def with_namespace(self, namespace: str) -> "UninstallArgs":
        return replace(self, namespace=namespace)

    def with_ignore_not_found(self) -> "UninstallArgs":
        return replace(self, ignore_not_found=True)

    def with_dry_run(self) -> "UninstallArgs":
        return replace(self, dry_run=True)

    def with_timeout(self, timeout: str) -> "UninstallArgs":
        return replace(self, timeout=timeout)

    def to_args(self) -> list[str]:
        argv = ["uninstall", self.release]
        if self.namespace is not None:
            argv.extend([_NAMESPACE, self.namespace])
        if self.dry_run:
            argv.append("--dry-run")
        if self.timeout is not None:
            argv.extend(["--timeout", self.timeout])
        return argv


@dataclass(frozen=True, slots=True)
class RepoAddArgs:
    """Parameters for `helm repo add`."""

    name: str
    url: str
    force_update: bool = False
    insecure_skip_tls_verify: bool = False
    no_update: bool = False
    ca_file: str | None = None
    cert_file: str | None = None
    key_file: str | None = None
    password: str | None = None
    username: str | None = None

    def to_args(self) -> list[str]:
        argv = ["repo", "add", self.name, self.url]
        if self.force_update:
            argv.append("--force-update")
        if self.insecure_skip_tls_verify:
            argv.append("--insecure-skip-tls-verify")
        if self.no_update:
            argv.append("--no-update")
        for flag, value in (
            ("--ca-file", self.ca_file),
            ("--cert-file", self.cert_file),
            ("--key-file", self.key_file),
            ("--password", self.password),
            ("--username", self.username),
        ):
            if value is not None:
                argv.extend([flag, value])
        return argv


@dataclass(frozen=True, slots=True)
class RegistryLoginArgs:
    """Parameters for `helm registry login`."""

    host: str
    username: str
    password: str = field(repr=False)

    def to_args(self) -> list[str]:
        return ["registry", "login", self.host, "--username", self.username, "--password", self.password]


@dataclass(frozen=True, slots=True)
class ChartPullArgs:
    """Parameters for `helm chart pull`."""

    chart: str
    version: str

    @property
    def reference(self) -> str:
        """The `chart:version` reference understood by helm."""
        return f"{self.chart}:{self.version}"

    def to_args(self) -> list[str]:
        return ["chart", "pull", self.reference]


@dataclass(frozen=True, slots=True)
class ChartExportArgs:
    """Parameters for `helm chart export`."""

    chart: str
    version: str
    destination: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "destination", str(self.destination))

    @property
    def reference(self) -> str:
        """The `chart:version` reference understood by helm."""
        return f"{self.chart}:{self.version}"

    def to_args(self) -> list[str]:
        return ["chart", "export", self.reference, "--destination", self.destination]


# Boolean switches of `helm list`, in the order they are rendered.
_LIST_SWITCHES: tuple[tuple[str, str], ...] = (
    ("all", "--all"),
    ("all_namespaces", "--all-namespaces"),
    ("date", "--date"),
    ("deployed", "--deployed"),
    ("failed", "--failed"),
    ("pending", "--pending"),
    ("reverse", "--reverse"),
    ("short", "--short"),
    ("superseded", "--superseded"),
    ("uninstalled", "--uninstalled"),
    ("uninstalling", "--uninstalling"),
    ("no_headers", "--no-headers"),
)


@dataclass(frozen=True, slots=True)
class ListInstalledArgs:
    """Filter and format parameters for `helm list`.

    Output is always requested as JSON.
    """

    all: bool = False
    all_namespaces: bool = False
    date: bool = False
    deployed: bool = False
    failed: bool = False
    pending: bool = False
    reverse: bool = False
    short: bool = False
    superseded: bool = False
    uninstalled: bool = False
    uninstalling: bool = False
    no_headers: bool = False
    filter: str | None = None
    selector: str | None = None
    time_format: str | None = None
    namespace: str | None = None
    max: int | None = None
    offset: int | None = None

    def to_args(self) -> list[str]:
        argv = ["list", *_OUTPUT_JSON]
        argv.extend(flag for attr, flag in _LIST_SWITCHES if getattr(self, attr))
        for flag, value in (
            ("--filter", self.filter),
            ("--selector", self.selector),
            ("--time-format", self.time_format),
            (_NAMESPACE, self.namespace),
        ):
            if value is not None:
                argv.extend([flag, value])
        if self.max is not None:
            argv.extend(["--max", str(self.max)])
        if self.offset is not None:
            argv.extend(["--offset", str(self.offset)])
        return argv


def search_repo_args(chart: str, version: str) -> list[str]:
    """Render `search repo CHART --version VERSION --output json`."""
    return ["search", "repo", chart, _VERSION, version, *_OUTPUT_JSON]


def versions_args(chart: str) -> list[str]:
    """Render a search listing every version of a chart, development ones included."""
    return ["search", "repo", "--versions", chart, *_OUTPUT_JSON, "--devel"]


def repo_update_args() -> list[str]:
    return ["repo", "update"]
