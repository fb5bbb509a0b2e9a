"""Exceptions raised while provisioning a Warp 10 test instance."""

from __future__ import annotations


class Warp10Error(Exception):
    """Base class for all warp10_testcontainer errors."""


class ContainerIOError(Warp10Error, OSError):
    """A file could not be read from or written into the container, or a
    command could not be launched inside it."""


class TokenGenerationError(Warp10Error):
    """The token-minting command exited with a nonzero status."""

    def __init__(self, exit_code: int, stdout: str, stderr: str) -> None:
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        message = f"Warp10 token generation exited with code {exit_code}"
        if stderr:
            message += f"\nstderr: {stderr.strip()}"
        if stdout:
            message += f"\nstdout: {stdout.strip()}"
        super().__init__(message)


class TokenParseError(Warp10Error, ValueError):
    """The token-minting output did not match the expected schema."""


class BootstrapError(Warp10Error):
    """The credential bootstrap was driven out of order."""


class StartupTimeoutError(Warp10Error, TimeoutError):
    """The Warp 10 HTTP endpoint never became ready."""
