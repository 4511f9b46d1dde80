"""Shared test fixtures for helmwrap tests."""

from unittest.mock import MagicMock, patch

import pytest

from helmwrap.client import Helm
from helmwrap.runner import CommandResult

VERSION_OUTPUT = b'version.BuildInfo{Version:"v3.15.4", GitCommit:"fa9efb07d9d8debbb4306d72af76a383895aa8c4", GoVersion:"go1.22.6"}\n'

INSTALLED_RELEASE_JSON = (
    b'[{"name":"test_chart","namespace":"default","revision":"50",'
    b'"updated":"2021-03-17 08:42:54.546347741 +0000 UTC","status":"deployed",'
    b'"chart":"test_chart-1.2.32-rc2","app_version":"1.2.32-rc2"}]'
)

UNREACHABLE_STDERR = (
    b"Error: Kubernetes cluster unreachable: Get \"https://127.0.0.1:6443/version\": "
    b"dial tcp 127.0.0.1:6443: connect: connection refused\n"
)


class FakeRunner:
    """CommandRunner double that records argument vectors.

    Results are matched by the tokens following the binary name; the most
    recently added matching prefix wins. Unmatched commands succeed with
    empty output.
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.streamed: list[list[str]] = []
        self.stream_returncode: int = 0
        self._results: list[tuple[list[str], CommandResult]] = [
            (["version"], CommandResult(returncode=0, stdout=VERSION_OUTPUT)),
        ]

    def add(self, *prefix: str, returncode: int = 0, stdout: bytes = b"", stderr: bytes = b"") -> None:
        self._results.insert(0, (list(prefix), CommandResult(returncode=returncode, stdout=stdout, stderr=stderr)))

    def run(self, argv: list[str]) -> CommandResult:
        self.calls.append(argv)
        for prefix, result in self._results:
            if argv[1 : 1 + len(prefix)] == prefix:
                return result
        return CommandResult(returncode=0)

    def run_streaming(self, argv: list[str]) -> int:
        self.streamed.append(argv)
        return self.stream_returncode

    def commands(self, *prefix: str) -> list[list[str]]:
        """Return the recorded calls whose tokens after the binary start with prefix."""
        return [argv for argv in self.calls if argv[1 : 1 + len(prefix)] == list(prefix)]


@pytest.fixture
def fake_runner():
    """A FakeRunner answering the version probe."""
    return FakeRunner()


@pytest.fixture
def helm(fake_runner):
    """A Helm client wired to the fake runner."""
    return Helm(runner=fake_runner)


@pytest.fixture
def mock_subprocess():
    """Mock subprocess.run for command execution."""
    with patch("subprocess.run") as mock:
        mock.return_value = MagicMock(returncode=0, stdout=b"", stderr=b"")
        yield mock


@pytest.fixture
def mock_helm_cls():
    """Mock the Helm class used by the CLI."""
    with patch("helmwrap.cli.Helm") as mock:
        instance = MagicMock()
        mock.return_value = instance
        yield mock
