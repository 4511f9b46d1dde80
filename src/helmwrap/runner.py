"""Subprocess execution boundary.

The Helm client never calls `subprocess` directly; it goes through a
CommandRunner so tests can substitute a fake that records argument vectors
and returns canned output.
"""

import subprocess
from dataclasses import dataclass
from typing import Protocol

from helmwrap.exceptions import BinaryNotFoundError

# Flags whose following argument must never be printed.
_SECRET_FLAGS = frozenset({"--password"})
_REDACTED = "******"


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured outcome of a finished process.

    Attributes:
        returncode: The process exit status.
        stdout: Raw stdout bytes.
        stderr: Raw stderr bytes.

    """

    returncode: int
    stdout: bytes = b""
    stderr: bytes = b""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner(Protocol):
    """Capability to execute an argument vector."""

    def run(self, argv: list[str]) -> CommandResult:
        """Run a command, capturing stdout and stderr."""
        ...

    def run_streaming(self, argv: list[str]) -> int:
        """Run a command with the caller's stdio attached and return its exit status."""
        ...


class SubprocessRunner:
    """CommandRunner backed by `subprocess.run`."""

    def run(self, argv: list[str]) -> CommandResult:
        """Run a command and capture its output.

        Args:
            argv: The full argument vector, binary first.

        Returns:
            CommandResult with the exit status and raw output.

        Raises:
            BinaryNotFoundError: If the binary cannot be executed.

        """
        try:
            proc = subprocess.run(argv, capture_output=True, check=False)
        except (FileNotFoundError, PermissionError) as err:
            raise BinaryNotFoundError(argv[0]) from err
        return CommandResult(returncode=proc.returncode, stdout=proc.stdout, stderr=proc.stderr)

    def run_streaming(self, argv: list[str]) -> int:
        """Run a command with inherited stdin, stdout and stderr.

        Raises:
            BinaryNotFoundError: If the binary cannot be executed.

        """
        try:
            proc = subprocess.run(argv, check=False)
        except (FileNotFoundError, PermissionError) as err:
            raise BinaryNotFoundError(argv[0]) from err
        return proc.returncode


def redact(argv: list[str]) -> list[str]:
    """Return a copy of argv with secret flag values masked.

    Args:
        argv: An argument vector.

    Returns:
        The same vector with the value after each secret flag replaced.

    """
    redacted: list[str] = []
    hide_next = False
    for token in argv:
        if hide_next:
            redacted.append(_REDACTED)
            hide_next = False
            continue
        if token in _SECRET_FLAGS:
            hide_next = True
        elif token.startswith(tuple(f"{flag}=" for flag in _SECRET_FLAGS)):
            token = f"{token.split('=', 1)[0]}={_REDACTED}"
        redacted.append(token)
    return redacted
