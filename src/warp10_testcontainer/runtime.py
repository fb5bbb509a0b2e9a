"""Interface between the credential bootstrap and the running container."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class ExecResult:
    exit_code: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class ContainerRuntime(Protocol):
    """Operations the bootstrap needs from a started container.

    All three raise :class:`~warp10_testcontainer.errors.ContainerIOError`
    when the container cannot service the request.
    """

    def read_file(self, path: str) -> bytes: ...

    def write_file(self, data: bytes, remote_path: str) -> None: ...

    def exec_as(self, command: Sequence[str], user: str | None = None) -> ExecResult: ...
