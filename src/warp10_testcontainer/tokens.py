"""Parsing of token-minting output into a read-only credential store.

Two payload shapes exist across Warp 10 releases:

* legacy (2.x ``worf``): ``{"read": {"token": ...}, "write": {"token": ...}}``
* current (3.x ``tokengen``): ``[{"id": "ReadToken", "token": ..., "ident": ...}, ...]``

The caller picks the shape from the target version; payloads are never
sniffed.
"""

from __future__ import annotations

import enum
import json
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from .errors import TokenParseError

logger = logging.getLogger(__name__)

READ_ROLES = ("ReadToken", "read")
WRITE_ROLES = ("WriteToken", "write")

_LEGACY_ROLES = ("read", "write")
_EXCERPT_LENGTH = 200


class TokenSchema(enum.Enum):
    LEGACY = "legacy"
    CURRENT = "current"


@dataclass(frozen=True)
class TokenRecord:
    """A minted token and the role it was issued for."""

    role: str
    token: str
    ident: str | None = None

    def has_role(self, role: str) -> bool:
        return self.role.casefold() == role.casefold()

    def __repr__(self) -> str:
        return f"TokenRecord(role={self.role!r}, ident={self.ident!r})"


class TokenSet:
    """Ordered, immutable tokens produced by one minting run."""

    def __init__(self, records: Iterable[TokenRecord] = ()) -> None:
        self._records = tuple(records)

    def __iter__(self) -> Iterator[TokenRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"TokenSet({list(self._records)!r})"

    def find(self, role: str) -> TokenRecord | None:
        """Return the first record whose role matches, ignoring case."""
        for record in self._records:
            if record.has_role(role):
                return record
        return None

    def token_for_role(self, role: str) -> str | None:
        record = self.find(role)
        return record.token if record is not None else None

    def as_mapping(self) -> dict[str, str]:
        """Role (casefolded) to token, keeping the first record per role."""
        mapping: dict[str, str] = {}
        for record in self._records:
            mapping.setdefault(record.role.casefold(), record.token)
        return mapping


class CredentialStore:
    """Role-based lookup over one :class:`TokenSet`."""

    def __init__(self, tokens: TokenSet | None = None) -> None:
        self._tokens = tokens if tokens is not None else TokenSet()

    @property
    def tokens(self) -> TokenSet:
        return self._tokens

    def token_for_role(self, role: str) -> str | None:
        return self._tokens.token_for_role(role)

    def _first_of(self, roles: tuple[str, ...]) -> str | None:
        for role in roles:
            token = self.token_for_role(role)
            if token is not None:
                return token
        return None

    def read_token(self) -> str | None:
        return self._first_of(READ_ROLES)

    def write_token(self) -> str | None:
        return self._first_of(WRITE_ROLES)


def _excerpt(payload: str) -> str:
    text = payload.strip()
    if len(text) > _EXCERPT_LENGTH:
        return text[:_EXCERPT_LENGTH] + "..."
    return text


def _require_token(entry: Any, where: str) -> str:
    if not isinstance(entry, dict):
        raise TokenParseError(f"{where} is not a JSON object")
    token = entry.get("token")
    if not isinstance(token, str):
        raise TokenParseError(f"{where} has no string 'token' field")
    return token


def _parse_legacy(data: Any) -> list[TokenRecord]:
    if not isinstance(data, dict):
        raise TokenParseError(
            f"Expected a JSON object for legacy token output, got {type(data).__name__}"
        )
    records = []
    for role in _LEGACY_ROLES:
        if role not in data:
            raise TokenParseError(f"Legacy token output has no '{role}' entry")
        entry = data[role]
        token = _require_token(entry, f"Legacy '{role}' entry")
        records.append(TokenRecord(role=role, token=token, ident=entry.get("tokenIdent")))
    return records


def _parse_current(data: Any) -> list[TokenRecord]:
    if not isinstance(data, list):
        raise TokenParseError(
            f"Expected a JSON array for token output, got {type(data).__name__}"
        )
    records = []
    for index, entry in enumerate(data):
        token = _require_token(entry, f"Token entry #{index}")
        role = entry.get("id")
        if not isinstance(role, str):
            raise TokenParseError(f"Token entry #{index} has no string 'id' field")
        records.append(TokenRecord(role=role, token=token, ident=entry.get("ident")))
    return records


def parse_token_response(payload: str, schema: TokenSchema) -> TokenSet:
    """Parse minting stdout into a :class:`TokenSet`.

    Args:
        payload: Raw standard output of a successful minting invocation.
        schema: Shape expected from the invocation that produced it.

    Raises:
        TokenParseError: The payload is not JSON or does not match ``schema``.
    """
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise TokenParseError(
            f"Token output is not valid JSON ({e}): {_excerpt(payload)!r}"
        ) from e

    if schema is TokenSchema.LEGACY:
        records = _parse_legacy(data)
    else:
        records = _parse_current(data)

    logger.debug(
        "Parsed %d token(s) with %s schema: %s",
        len(records),
        schema.value,
        ", ".join(r.role for r in records),
    )
    return TokenSet(records)
