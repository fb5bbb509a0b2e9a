"""Credential bootstrap for one Warp 10 container lifetime.

The container delivers a single "ready" event; :class:`BootstrapCoordinator`
then extracts the crypto keys (3.x only), mints tokens and exposes them
through read-only accessors. Nothing from a failed run is ever exposed.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass

from .crypto_keys import WARP10_CONFIG_PATH, CryptoKeySet, extract_crypto_keys
from .errors import BootstrapError
from .minting import (
    CliMinting,
    MintingInvocation,
    ScriptMinting,
    TokenMintingInvoker,
    default_token_script,
)
from .runtime import ContainerRuntime
from .tokens import CredentialStore, parse_token_response

logger = logging.getLogger(__name__)

FIRST_SCRIPT_MINTING_MAJOR = 3

_MAJOR_VERSION = re.compile(r"^v?(\d+)")


class BootstrapState(enum.Enum):
    NOT_STARTED = "not_started"
    KEYS_EXTRACTED = "keys_extracted"
    SCRIPT_DEPLOYED = "script_deployed"
    TOKENS_GENERATED = "tokens_generated"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (BootstrapState.TOKENS_GENERATED, BootstrapState.FAILED)


@dataclass(frozen=True)
class TargetProfile:
    """What the bootstrap does for a given Warp 10 release line."""

    extract_keys: bool
    script_minting: bool

    @classmethod
    def for_tag(cls, tag: str) -> TargetProfile:
        """Pick the profile from an image tag such as ``2.7.5`` or ``3.4.1-ubuntu-ci``.

        Tags without a leading version number (``latest``) are treated as current.
        """
        match = _MAJOR_VERSION.match(tag)
        if match is not None and int(match.group(1)) < FIRST_SCRIPT_MINTING_MAJOR:
            return LEGACY_PROFILE
        return CURRENT_PROFILE


LEGACY_PROFILE = TargetProfile(extract_keys=False, script_minting=False)
CURRENT_PROFILE = TargetProfile(extract_keys=True, script_minting=True)


class BootstrapCoordinator:
    """Runs the credential bootstrap exactly once and owns its results."""

    def __init__(
        self,
        runtime: ContainerRuntime,
        profile: TargetProfile,
        token_script: bytes | None = None,
    ) -> None:
        self._runtime = runtime
        self._profile = profile
        self._token_script = token_script
        self._invoker = TokenMintingInvoker(runtime)
        self._state = BootstrapState.NOT_STARTED
        self._crypto_keys: CryptoKeySet | None = None
        self._credentials: CredentialStore | None = None

    @property
    def state(self) -> BootstrapState:
        return self._state

    @property
    def profile(self) -> TargetProfile:
        return self._profile

    def _invocation(self) -> MintingInvocation:
        if self._profile.script_minting:
            script = self._token_script if self._token_script is not None else default_token_script()
            return ScriptMinting(script=script)
        return CliMinting()

    def _extract_keys(self) -> None:
        config_text = self._runtime.read_file(WARP10_CONFIG_PATH).decode("utf-8", errors="replace")
        keys = extract_crypto_keys(config_text)
        if not keys.is_valid():
            logger.warning(
                "Crypto keys may be invalid. AES key length: %d, "
                "SipHash App length: %d, SipHash Token length: %d",
                *keys.lengths(),
            )
        else:
            logger.info("Successfully extracted Warp10 crypto keys")
        self._crypto_keys = keys
        self._state = BootstrapState.KEYS_EXTRACTED

    def on_container_ready(self) -> None:
        """Bootstrap credentials. Any failure is fatal and re-raised."""
        if self._state is not BootstrapState.NOT_STARTED:
            raise BootstrapError(f"Bootstrap already ran (state: {self._state.value})")

        try:
            if self._profile.extract_keys:
                self._extract_keys()

            invocation = self._invocation()
            if isinstance(invocation, ScriptMinting):
                self._invoker.deploy(invocation)
                self._state = BootstrapState.SCRIPT_DEPLOYED

            stdout = self._invoker.mint(invocation)
            tokens = parse_token_response(stdout, invocation.schema)
        except Exception:
            logger.error("Warp10 credential bootstrap failed after state %s", self._state.value)
            self._state = BootstrapState.FAILED
            self._crypto_keys = None
            self._credentials = None
            raise

        self._credentials = CredentialStore(tokens)
        self._state = BootstrapState.TOKENS_GENERATED
        logger.info("Warp10 credentials ready (%d token(s))", len(tokens))

    def _store(self) -> CredentialStore | None:
        if self._state is BootstrapState.TOKENS_GENERATED:
            return self._credentials
        return None

    def read_token(self) -> str | None:
        store = self._store()
        return store.read_token() if store is not None else None

    def write_token(self) -> str | None:
        store = self._store()
        return store.write_token() if store is not None else None

    def token_for_role(self, role: str) -> str | None:
        store = self._store()
        return store.token_for_role(role) if store is not None else None

    def crypto_keys(self) -> CryptoKeySet | None:
        if self._state is BootstrapState.TOKENS_GENERATED:
            return self._crypto_keys
        return None
