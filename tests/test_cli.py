"""Tests for cli.py module."""

import json
from unittest.mock import patch

import click
import pytest
from click.testing import CliRunner

from helmwrap import __version__
from helmwrap.args import InstallArgs, ListInstalledArgs, RepoAddArgs, UninstallArgs
from helmwrap.cli import cli, parse_overrides
from helmwrap.exceptions import ClusterConnectionError, CommandFailedError
from helmwrap.models import Chart, InstalledRelease

_RELEASE = InstalledRelease(
    name="web",
    chart="nginx-15.4.2",
    app_version="1.25.3",
    revision="3",
    updated="2024-05-01 10:00:00 +0000 UTC",
    status="deployed",
    namespace="prod",
)


class TestCliVersion:
    """Tests for version output."""

    def test_version_flag(self):
        """Test --version flag prints the package version."""
        result = CliRunner().invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_helm_version_command(self, mock_helm_cls):
        """Test the version subcommand prints helm's version."""
        mock_helm_cls.return_value.get_version.return_value = "3.15.4+gfa9efb0"

        result = CliRunner().invoke(cli, ["version"])

        assert result.exit_code == 0
        assert "3.15.4+gfa9efb0" in result.output
        mock_helm_cls.assert_called_once_with(binary="helm")


class TestCliHelp:
    """Tests for help output."""

    def test_help_flag(self):
        """Test --help lists the global options and commands."""
        result = CliRunner().invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "--debug" in result.output
        assert "--helm-bin" in result.output
        for command in ("install", "upgrade", "uninstall", "repo", "search", "list", "chart"):
            assert command in result.output

    def test_no_command_prints_help(self):
        """Test running without a subcommand shows help."""
        result = CliRunner().invoke(cli, [])

        assert result.exit_code == 0
        assert "Usage" in result.output


class TestCliHelmBinary:
    """Tests for binary selection."""

    def test_helm_bin_option(self, mock_helm_cls):
        """Test --helm-bin is passed to the client."""
        result = CliRunner().invoke(cli, ["--helm-bin", "/opt/helm", "repo", "update"])

        assert result.exit_code == 0
        mock_helm_cls.assert_called_once_with(binary="/opt/helm")

    def test_helm_bin_env(self, mock_helm_cls):
        """Test HELM_BIN environment variable."""
        result = CliRunner().invoke(cli, ["repo", "update"], env={"HELM_BIN": "helm3"})

        assert result.exit_code == 0
        mock_helm_cls.assert_called_once_with(binary="helm3")


class TestCliInstall:
    """Tests for install and upgrade commands."""

    def test_install(self, mock_helm_cls):
        """Test install builds InstallArgs from options."""
        result = CliRunner().invoke(
            cli,
            [
                "install",
                "web",
                "bitnami/nginx",
                "--version",
                "15.4.2",
                "-n",
                "prod",
                "--set",
                "replicaCount=2",
                "--set",
                "image.tag=1.25",
                "-f",
                "values.yaml",
                "--devel",
            ],
        )

        assert result.exit_code == 0, result.output
        mock_helm_cls.return_value.install.assert_called_once_with(
            InstallArgs(
                name="web",
                chart="bitnami/nginx",
                version="15.4.2",
                namespace="prod",
                overrides=(("replicaCount", "2"), ("image.tag", "1.25")),
                values=("values.yaml",),
                develop=True,
            )
        )

    def test_upgrade_stream(self, mock_helm_cls):
        """Test --stream is forwarded to the client."""
        result = CliRunner().invoke(cli, ["upgrade", "web", "bitnami/nginx", "--stream"])

        assert result.exit_code == 0, result.output
        mock_helm_cls.return_value.upgrade.assert_called_once_with(
            InstallArgs(name="web", chart="bitnami/nginx"), stream=True
        )

    def test_invalid_override(self, mock_helm_cls):
        """Test a --set value without '=' is a usage error."""
        result = CliRunner().invoke(cli, ["install", "web", "c", "--set", "novalue"])

        assert result.exit_code == 2
        assert "KEY=VALUE" in result.output
        mock_helm_cls.return_value.install.assert_not_called()

    def test_command_failure(self, mock_helm_cls):
        """Test helm failures become CLI errors."""
        mock_helm_cls.return_value.install.side_effect = CommandFailedError(
            ["helm", "install", "web", "c"], 1, "Error: INSTALLATION FAILED"
        )

        result = CliRunner().invoke(cli, ["install", "web", "c"])

        assert result.exit_code == 1
        assert "INSTALLATION FAILED" in result.output

    def test_cluster_unreachable(self, mock_helm_cls):
        """Test connectivity errors exit with status 1."""
        mock_helm_cls.return_value.install.side_effect = ClusterConnectionError("Failed to connect to Kubernetes")

        result = CliRunner().invoke(cli, ["install", "web", "c"])

        assert result.exit_code == 1
        assert "Cluster connection failed" in result.output


class TestParseOverrides:
    """Tests for --set parsing."""

    def test_pairs(self):
        """Test values keep everything after the first '='."""
        assert parse_overrides(["a=1", "b=x=y", "c="]) == (("a", "1"), ("b", "x=y"), ("c", ""))

    @pytest.mark.parametrize("raw", ["novalue", "=value"])
    def test_invalid(self, raw):
        """Test malformed overrides."""
        with pytest.raises(click.BadParameter):
            parse_overrides([raw])


class TestCliUninstall:
    """Tests for the uninstall command."""

    def test_uninstall_with_yes(self, mock_helm_cls):
        """Test --yes skips the confirmation prompt."""
        with patch("questionary.confirm") as mock_confirm:
            result = CliRunner().invoke(
                cli, ["uninstall", "web", "-n", "prod", "--ignore-not-found", "--timeout", "5m", "--yes"]
            )

        assert result.exit_code == 0, result.output
        mock_confirm.assert_not_called()
        mock_helm_cls.return_value.uninstall.assert_called_once_with(
            UninstallArgs(release="web", namespace="prod", ignore_not_found=True, timeout="5m"),
            stream=False,
        )

    def test_uninstall_skipped_prints_no_success(self, mock_helm_cls):
        """Test a skipped uninstall does not report the release as removed."""
        mock_helm_cls.return_value.uninstall.return_value = False

        result = CliRunner().invoke(cli, ["uninstall", "web", "--ignore-not-found", "--yes"])

        assert result.exit_code == 0, result.output
        assert "Uninstalled" not in result.output

    def test_uninstall_confirmed(self, mock_helm_cls):
        """Test the prompt answer 'yes' proceeds."""
        with patch("questionary.confirm") as mock_confirm:
            mock_confirm.return_value.ask.return_value = True
            result = CliRunner().invoke(cli, ["uninstall", "web"])

        assert result.exit_code == 0, result.output
        mock_helm_cls.return_value.uninstall.assert_called_once()

    def test_uninstall_declined(self, mock_helm_cls):
        """Test declining aborts without calling helm."""
        with patch("questionary.confirm") as mock_confirm:
            mock_confirm.return_value.ask.return_value = False
            result = CliRunner().invoke(cli, ["uninstall", "web"])

        assert result.exit_code == 1
        mock_helm_cls.assert_not_called()


class TestCliRepo:
    """Tests for repository commands."""

    def test_repo_add(self, mock_helm_cls):
        """Test repo add forwards every option."""
        result = CliRunner().invoke(
            cli,
            ["repo", "add", "private", "https://charts.example.com", "--force-update", "--username", "admin"],
        )

        assert result.exit_code == 0, result.output
        mock_helm_cls.return_value.repo_add_with_options.assert_called_once_with(
            RepoAddArgs(name="private", url="https://charts.example.com", force_update=True, username="admin")
        )

    def test_repo_update(self, mock_helm_cls):
        """Test repo update."""
        result = CliRunner().invoke(cli, ["repo", "update"])

        assert result.exit_code == 0
        mock_helm_cls.return_value.repo_update.assert_called_once_with()


class TestCliQueries:
    """Tests for read commands."""

    def test_search_json(self, mock_helm_cls):
        """Test search prints JSON records."""
        mock_helm_cls.return_value.search_repo.return_value = [Chart(name="bitnami/nginx", version="15.4.2")]

        result = CliRunner().invoke(cli, ["search", "bitnami/nginx", "--version", "15.4.2", "--json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == [
            {"name": "bitnami/nginx", "version": "15.4.2", "app_version": "", "description": ""}
        ]

    def test_versions_table(self, mock_helm_cls):
        """Test versions prints a table."""
        charts = [Chart(name="bitnami/nginx", version="15.4.2")]
        mock_helm_cls.return_value.versions.return_value = charts

        with patch("helmwrap.cli.console.chart_table") as mock_table:
            result = CliRunner().invoke(cli, ["versions", "bitnami/nginx"])

        assert result.exit_code == 0, result.output
        mock_table.assert_called_once_with(charts)

    def test_list_forwards_filters(self, mock_helm_cls):
        """Test list builds ListInstalledArgs from options."""
        mock_helm_cls.return_value.list_installed.return_value = [_RELEASE]

        result = CliRunner().invoke(cli, ["list", "-A", "--filter", "^web", "--max", "10", "--json"])

        assert result.exit_code == 0, result.output
        mock_helm_cls.return_value.list_installed.assert_called_once_with(
            ListInstalledArgs(all_namespaces=True, filter="^web", max=10)
        )
        assert json.loads(result.output)[0]["chart"] == "nginx-15.4.2"

    def test_get_found(self, mock_helm_cls):
        """Test get renders the release."""
        mock_helm_cls.return_value.get_installed_by_name.return_value = [_RELEASE]

        with patch("helmwrap.cli.console.release_table") as mock_table:
            result = CliRunner().invoke(cli, ["get", "web", "-n", "prod"])

        assert result.exit_code == 0, result.output
        mock_table.assert_called_once_with([_RELEASE])
        mock_helm_cls.return_value.get_installed_by_name.assert_called_once_with("web", "prod")

    def test_get_not_found(self, mock_helm_cls):
        """Test get reports a missing release."""
        mock_helm_cls.return_value.get_installed_by_name.return_value = []

        result = CliRunner().invoke(cli, ["get", "web"])

        assert result.exit_code == 0
        assert "not found" in result.output

    def test_exists(self, mock_helm_cls):
        """Test exists exits 0 when the version exists."""
        mock_helm_cls.return_value.chart_version_exists.return_value = True

        result = CliRunner().invoke(cli, ["exists", "bitnami/nginx", "15.4.2"])

        assert result.exit_code == 0

    def test_exists_missing(self, mock_helm_cls):
        """Test exists exits 1 when the version is missing."""
        mock_helm_cls.return_value.chart_version_exists.return_value = False

        result = CliRunner().invoke(cli, ["exists", "bitnami/nginx", "0.0.1"])

        assert result.exit_code == 1

    def test_query_unreachable(self, mock_helm_cls):
        """Test connectivity errors on reads."""
        mock_helm_cls.return_value.list_installed.side_effect = ClusterConnectionError("Failed to connect")

        result = CliRunner().invoke(cli, ["list"])

        assert result.exit_code == 1
        assert "Cluster connection failed" in result.output


class TestCliRegistryAndCharts:
    """Tests for registry login and chart commands."""

    def test_registry_login_prompts_for_password(self, mock_helm_cls):
        """Test the password is read from a hidden prompt."""
        result = CliRunner().invoke(cli, ["registry-login", "ghcr.io", "-u", "bot"], input="token\n")

        assert result.exit_code == 0, result.output
        args = mock_helm_cls.return_value.registry_login.call_args[0][0]
        assert args.host == "ghcr.io"
        assert args.username == "bot"
        assert args.password == "token"
        assert "token" not in result.output

    def test_chart_pull(self, mock_helm_cls):
        """Test chart pull."""
        result = CliRunner().invoke(cli, ["chart", "pull", "ghcr.io/org/app", "1.0.0"])

        assert result.exit_code == 0, result.output
        args = mock_helm_cls.return_value.chart_pull.call_args[0][0]
        assert args.to_args() == ["chart", "pull", "ghcr.io/org/app:1.0.0"]

    def test_chart_export(self, mock_helm_cls):
        """Test chart export with a destination."""
        result = CliRunner().invoke(cli, ["chart", "export", "ghcr.io/org/app", "1.0.0", "-d", "charts"])

        assert result.exit_code == 0, result.output
        args = mock_helm_cls.return_value.chart_export.call_args[0][0]
        assert args.to_args() == ["chart", "export", "ghcr.io/org/app:1.0.0", "--destination", "charts"]
