#!/usr/bin/env python
"""Command-line interface for helmwrap.

This module provides the CLI entry point, exposing each Helm client
operation as a subcommand with styled output.
"""

import dataclasses
import json
import sys
from collections.abc import Callable, Generator, Iterable
from contextlib import contextmanager
from typing import Any

import click
import questionary
from icecream import ic
from rich.markup import escape

from helmwrap import __version__, console
from helmwrap.args import (
    ChartExportArgs,
    ChartPullArgs,
    InstallArgs,
    ListInstalledArgs,
    RegistryLoginArgs,
    RepoAddArgs,
    UninstallArgs,
)
from helmwrap.client import Helm
from helmwrap.exceptions import ClusterConnectionError, HelmError
from helmwrap.styles import PROMPT_STYLE, QMARK


@contextmanager
def _helm_errors() -> Generator[None, None, None]:
    """Turn helmwrap exceptions into CLI failures."""
    try:
        yield
    except ClusterConnectionError as e:
        console.error(f"Cluster connection failed: {escape(str(e))}")
        sys.exit(1)
    except HelmError as e:
        raise click.ClickException(str(e)) from None


def _client(ctx: click.Context) -> Helm:
    return Helm(binary=ctx.obj["helm_bin"])


def parse_overrides(values: Iterable[str]) -> tuple[tuple[str, str], ...]:
    """Split KEY=VALUE strings into ordered pairs.

    Args:
        values: Raw `--set` option values.

    Returns:
        Ordered (key, value) pairs.

    Raises:
        click.BadParameter: If a value has no '=' or an empty key.

    """
    pairs: list[tuple[str, str]] = []
    for raw in values:
        key, sep, value = raw.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"'{raw}' is not in KEY=VALUE form", param_hint="--set")
        pairs.append((key, value))
    return tuple(pairs)


def _echo_json(records: Iterable[Any]) -> None:
    click.echo(json.dumps([dataclasses.asdict(record) for record in records], indent=2))


def _install_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the options shared by install and upgrade."""
    options = [
        click.argument("name"),
        click.argument("chart"),
        click.option("--version", "chart_version", required=False, help="chart version constraint"),
        click.option("--namespace", "-n", required=False, help="target namespace"),
        click.option("--set", "overrides", multiple=True, help="value override in KEY=VALUE form"),
        click.option("--values", "-f", "values_files", multiple=True, help="values file"),
        click.option("--devel", is_flag=True, help="consider development versions"),
        click.option("--stream", is_flag=True, help="show helm output live"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_install_args(
    name: str,
    chart: str,
    chart_version: str | None,
    namespace: str | None,
    overrides: tuple[str, ...],
    values_files: tuple[str, ...],
    devel: bool,
) -> InstallArgs:
    args = InstallArgs(
        name=name,
        chart=chart,
        version=chart_version,
        namespace=namespace,
        overrides=parse_overrides(overrides),
        values=values_files,
        develop=devel,
    )
    ic(args)
    return args


@click.group(help="Run helm operations with typed results", invoke_without_command=True)
@click.option("--version", "-v", required=False, is_flag=True, help="print version")
@click.option("--debug", required=False, is_flag=True, help="print debug information")
@click.option("--helm-bin", envvar="HELM_BIN", default="helm", show_default=True, help="helm binary to use")
@click.pass_context
def cli(ctx: click.Context, version: bool, debug: bool, helm_bin: str) -> None:
    """Process global options.

    Args:
        ctx: Click context.
        version: Print version and exit.
        debug: Enable debug output.
        helm_bin: Name or path of the helm binary.

    """
    if debug:
        ic.enable()
    else:
        ic.disable()

    if version:
        click.echo(__version__)
        ctx.exit()

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit()

    ctx.obj = {"helm_bin": helm_bin}


@cli.command("version", help="Print the helm client version")
@click.pass_context
def helm_version(ctx: click.Context) -> None:
    with _helm_errors():
        click.echo(_client(ctx).get_version())


@cli.command(help="Install a chart")
@_install_options
@click.pass_context
def install(ctx: click.Context, name: str, chart: str, stream: bool, **options: Any) -> None:
    args = _build_install_args(name, chart, **options)
    with _helm_errors():
        helm = _client(ctx)
        if stream:
            helm.install(args, stream=True)
        else:
            with console.spinner(f"Installing {name}..."):
                helm.install(args)
    console.success(f"Installed {console.highlight(name)} from {escape(chart)}")


@cli.command(help="Upgrade a release, installing it if missing")
@_install_options
@click.pass_context
def upgrade(ctx: click.Context, name: str, chart: str, stream: bool, **options: Any) -> None:
    args = _build_install_args(name, chart, **options)
    with _helm_errors():
        helm = _client(ctx)
        if stream:
            helm.upgrade(args, stream=True)
        else:
            with console.spinner(f"Upgrading {name}..."):
                helm.upgrade(args)
    console.success(f"Upgraded {console.highlight(name)} to {escape(chart)}")


@cli.command(help="Uninstall a release")
@click.argument("release")
@click.option("--namespace", "-n", required=False, help="release namespace")
@click.option("--ignore-not-found", is_flag=True, help="succeed if the release does not exist")
@click.option("--dry-run", is_flag=True, help="simulate the uninstall")
@click.option("--timeout", required=False, help="time to wait for each Kubernetes operation")
@click.option("--yes", "-y", is_flag=True, help="do not ask for confirmation")
@click.option("--stream", is_flag=True, help="show helm output live")
@click.pass_context
def uninstall(
    ctx: click.Context,
    release: str,
    namespace: str | None,
    ignore_not_found: bool,
    dry_run: bool,
    timeout: str | None,
    yes: bool,
    stream: bool,
) -> None:
    if not yes:
        confirmed = questionary.confirm(
            f"Uninstall release {release}?",
            default=False,
            style=PROMPT_STYLE,
            qmark=QMARK,
        ).ask()
        if not confirmed:
            console.warning("Uninstall cancelled.")
            raise click.Abort()

    args = UninstallArgs(
        release=release,
        namespace=namespace,
        ignore_not_found=ignore_not_found,
        dry_run=dry_run,
        timeout=timeout,
    )
    with _helm_errors():
        removed = _client(ctx).uninstall(args, stream=stream)
    if removed:
        console.success(f"Uninstalled {console.highlight(release)}")


@cli.group(help="Manage chart repositories")
def repo() -> None:
    pass


@repo.command("add", help="Add a chart repository")
@click.argument("name")
@click.argument("url")
@click.option("--force-update", is_flag=True, help="replace the repo if it already exists")
@click.option("--insecure-skip-tls-verify", is_flag=True, help="skip TLS certificate checks")
@click.option("--no-update", is_flag=True, help="fail if the repo already exists")
@click.option("--ca-file", required=False, help="CA bundle for the repository")
@click.option("--cert-file", required=False, help="client certificate file")
@click.option("--key-file", required=False, help="client key file")
@click.option("--username", required=False, help="repository username")
@click.option("--password", required=False, help="repository password")
@click.pass_context
def repo_add(ctx: click.Context, name: str, url: str, **options: Any) -> None:
    args = RepoAddArgs(name=name, url=url, **options)
    with _helm_errors():
        _client(ctx).repo_add_with_options(args)
    console.success(f"Added repository {console.highlight(name)}")


@repo.command("update", help="Update the local repository cache")
@click.pass_context
def repo_update(ctx: click.Context) -> None:
    with _helm_errors():
        helm = _client(ctx)
        with console.spinner("Updating repositories..."):
            helm.repo_update()
    console.success("Repositories updated")


@cli.command(help="Search the repositories for a chart version")
@click.argument("chart")
@click.option("--version", "chart_version", required=True, help="chart version or constraint")
@click.option("--json", "as_json", is_flag=True, help="print JSON instead of a table")
@click.pass_context
def search(ctx: click.Context, chart: str, chart_version: str, as_json: bool) -> None:
    with _helm_errors():
        charts = _client(ctx).search_repo(chart, chart_version)
    if as_json:
        _echo_json(charts)
    else:
        console.chart_table(charts)


@cli.command(help="List every available version of a chart")
@click.argument("chart")
@click.option("--json", "as_json", is_flag=True, help="print JSON instead of a table")
@click.pass_context
def versions(ctx: click.Context, chart: str, as_json: bool) -> None:
    with _helm_errors():
        charts = _client(ctx).versions(chart)
    if as_json:
        _echo_json(charts)
    else:
        console.chart_table(charts)


@cli.command(help="Check that an exact chart version exists")
@click.argument("name")
@click.argument("chart_version")
@click.pass_context
def exists(ctx: click.Context, name: str, chart_version: str) -> None:
    with _helm_errors():
        found = _client(ctx).chart_version_exists(name, chart_version)
    if found:
        console.success(f"{console.highlight(name)} {escape(chart_version)} exists")
        return
    console.warning(f"{console.highlight(name)} {escape(chart_version)} not found")
    sys.exit(1)


@cli.command("list", help="List installed releases")
@click.option("--all", "-a", "all_", is_flag=True, help="show releases in every state")
@click.option("--all-namespaces", "-A", is_flag=True, help="list releases across all namespaces")
@click.option("--date", "-d", is_flag=True, help="sort by release date")
@click.option("--deployed", is_flag=True, help="show deployed releases")
@click.option("--failed", is_flag=True, help="show failed releases")
@click.option("--pending", is_flag=True, help="show pending releases")
@click.option("--reverse", "-r", is_flag=True, help="reverse the sort order")
@click.option("--superseded", is_flag=True, help="show superseded releases")
@click.option("--uninstalled", is_flag=True, help="show uninstalled releases")
@click.option("--uninstalling", is_flag=True, help="show releases being uninstalled")
@click.option("--filter", "-f", "filter_", required=False, help="regular expression on release names")
@click.option("--selector", "-l", required=False, help="label selector")
@click.option("--time-format", required=False, help="Go time format for the updated column")
@click.option("--namespace", "-n", required=False, help="namespace to list")
@click.option("--max", "-m", "max_", type=int, required=False, help="maximum number of releases")
@click.option("--offset", type=int, required=False, help="index of the first release")
@click.option("--json", "as_json", is_flag=True, help="print JSON instead of a table")
@click.pass_context
def list_releases(
    ctx: click.Context,
    all_: bool,
    filter_: str | None,
    max_: int | None,
    as_json: bool,
    **options: Any,
) -> None:
    args = ListInstalledArgs(all=all_, filter=filter_, max=max_, **options)
    with _helm_errors():
        releases = _client(ctx).list_installed(args)
    if as_json:
        _echo_json(releases)
    else:
        console.release_table(releases)


@cli.command(help="Show the release with exactly this name")
@click.argument("name")
@click.option("--namespace", "-n", required=False, help="namespace to search, all when omitted")
@click.option("--json", "as_json", is_flag=True, help="print JSON instead of a table")
@click.pass_context
def get(ctx: click.Context, name: str, namespace: str | None, as_json: bool) -> None:
    with _helm_errors():
        releases = _client(ctx).get_installed_by_name(name, namespace)
    if as_json:
        _echo_json(releases)
    elif releases:
        console.release_table(releases)
    else:
        console.warning(f"Release {console.highlight(name)} not found")


@cli.command("registry-login", help="Log in to an OCI registry")
@click.argument("host")
@click.option("--username", "-u", required=True, help="registry username")
@click.option("--password", "-p", prompt=True, hide_input=True, envvar="HELM_REGISTRY_PASSWORD", help="registry password")
@click.pass_context
def registry_login(ctx: click.Context, host: str, username: str, password: str) -> None:
    args = RegistryLoginArgs(host=host, username=username, password=password)
    with _helm_errors():
        _client(ctx).registry_login(args)
    console.success(f"Logged in to {console.highlight(host)}")


@cli.group(help="Pull and export charts from OCI registries")
def chart() -> None:
    pass


@chart.command("pull", help="Pull a chart into the local registry cache")
@click.argument("reference")
@click.argument("chart_version")
@click.pass_context
def chart_pull(ctx: click.Context, reference: str, chart_version: str) -> None:
    args = ChartPullArgs(chart=reference, version=chart_version)
    with _helm_errors():
        _client(ctx).chart_pull(args)
    console.success(f"Pulled {console.highlight(args.reference)}")


@chart.command("export", help="Export a cached chart to a directory")
@click.argument("reference")
@click.argument("chart_version")
@click.option("--destination", "-d", default=".", show_default=True, help="target directory")
@click.pass_context
def chart_export(ctx: click.Context, reference: str, chart_version: str, destination: str) -> None:
    args = ChartExportArgs(chart=reference, version=chart_version, destination=destination)
    with _helm_errors():
        _client(ctx).chart_export(args)
    console.summary_panel(
        "Chart Exported",
        {
            "Chart": args.chart,
            "Version": args.version,
            "Destination": args.destination,
        },
    )


if __name__ == "__main__":
    cli()
