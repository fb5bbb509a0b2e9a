"""Extraction of Warp 10 cryptographic keys from its runtime configuration.

Warp 10 3.x writes the keys it generates on first boot into
``/opt/warp10/etc/conf.d/99-init.conf`` as ``name = hex:<digits>`` lines.
Older images never persist them, so extraction is skipped for those.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

WARP10_CONFIG_PATH = "/opt/warp10/etc/conf.d/99-init.conf"

AES_TOKEN_KEY_LENGTH = 64
SIP_HASH_KEY_LENGTH = 32

_KEY_PATTERNS = {
    "warp.aes.token": re.compile(r"warp\.aes\.token\s*=\s*hex:([0-9a-fA-F]+)"),
    "warp.hash.app": re.compile(r"warp\.hash\.app\s*=\s*hex:([0-9a-fA-F]+)"),
    "warp.hash.token": re.compile(r"warp\.hash\.token\s*=\s*hex:([0-9a-fA-F]+)"),
}


def _redacted(value: str | None) -> str:
    return "None" if value is None else f"[REDACTED:{len(value)} chars]"


@dataclass(frozen=True)
class CryptoKeySet:
    """Keys used by Warp 10 to encrypt and hash tokens, as hex strings."""

    aes_token_key: str | None = None
    sip_hash_app: str | None = None
    sip_hash_token: str | None = None

    def is_valid(self) -> bool:
        """True when all three keys are present with their expected lengths."""
        return (
            self.aes_token_key is not None
            and len(self.aes_token_key) == AES_TOKEN_KEY_LENGTH
            and self.sip_hash_app is not None
            and len(self.sip_hash_app) == SIP_HASH_KEY_LENGTH
            and self.sip_hash_token is not None
            and len(self.sip_hash_token) == SIP_HASH_KEY_LENGTH
        )

    def lengths(self) -> tuple[int, int, int]:
        return (
            len(self.aes_token_key or ""),
            len(self.sip_hash_app or ""),
            len(self.sip_hash_token or ""),
        )

    def __repr__(self) -> str:
        return (
            f"CryptoKeySet(aes_token_key={_redacted(self.aes_token_key)}, "
            f"sip_hash_app={_redacted(self.sip_hash_app)}, "
            f"sip_hash_token={_redacted(self.sip_hash_token)})"
        )


def _extract_key(config_text: str, name: str) -> str | None:
    match = _KEY_PATTERNS[name].search(config_text)
    if match is None:
        logger.warning("Could not find %s in Warp10 config", name)
        return None
    return match.group(1)


def extract_crypto_keys(config_text: str) -> CryptoKeySet:
    """Extract the AES and SipHash keys from Warp 10 configuration text.

    Each key is looked up independently; a missing key is logged and left
    as ``None``. No length validation happens here, see
    :meth:`CryptoKeySet.is_valid`.
    """
    return CryptoKeySet(
        aes_token_key=_extract_key(config_text, "warp.aes.token"),
        sip_hash_app=_extract_key(config_text, "warp.hash.app"),
        sip_hash_token=_extract_key(config_text, "warp.hash.token"),
    )
