"""Shared fixtures: an in-memory stand-in for a running Warp 10 container."""

from __future__ import annotations

import json

import pytest

from warp10_testcontainer.errors import ContainerIOError
from warp10_testcontainer.runtime import ExecResult

AES_KEY = "0123456789abcdef" * 4
SIP_APP_KEY = "fedcba9876543210" * 2
SIP_TOKEN_KEY = "00112233445566778899AABBCCDDEEFF"

CONFIG_TEXT = f"""\
// Generated on first start
warp.aes.token = hex:{AES_KEY}
warp.hash.app = hex:{SIP_APP_KEY}
warp.hash.token = hex:{SIP_TOKEN_KEY}
"""

CURRENT_PAYLOAD = json.dumps(
    [
        {"ident": "a1", "id": "ReadToken", "token": "R2"},
        {"ident": "b2", "id": "WriteToken", "token": "W2"},
    ]
)

LEGACY_PAYLOAD = json.dumps(
    {
        "read": {"token": "R1", "tokenIdent": "r1", "ttl": 31536000000},
        "write": {"token": "W1", "tokenIdent": "w1", "ttl": 31536000000},
    }
)


class FakeRuntime:
    """Records calls and answers them from canned files and exec results."""

    def __init__(self, exec_result: ExecResult | None = None, files: dict | None = None):
        self.files: dict[str, bytes] = dict(files or {})
        self.exec_result = exec_result or ExecResult(0, CURRENT_PAYLOAD, "")
        self.written: dict[str, bytes] = {}
        self.calls: list[tuple] = []
        self.fail_writes = False

    def read_file(self, path: str) -> bytes:
        self.calls.append(("read_file", path))
        if path not in self.files:
            raise ContainerIOError(f"Failed to read {path}: No such file or directory")
        return self.files[path]

    def write_file(self, data: bytes, remote_path: str) -> None:
        self.calls.append(("write_file", remote_path))
        if self.fail_writes:
            raise ContainerIOError(f"Could not copy {remote_path} into container")
        self.written[remote_path] = data

    def exec_as(self, command, user=None) -> ExecResult:
        self.calls.append(("exec_as", tuple(command), user))
        return self.exec_result


@pytest.fixture
def runtime():
    """A runtime holding a 3.x config file and answering with current-shape tokens."""
    return FakeRuntime(files={"/opt/warp10/etc/conf.d/99-init.conf": CONFIG_TEXT.encode()})
