"""Warp 10 testcontainer with bootstrapped read/write tokens."""

from .bootstrap import BootstrapCoordinator, BootstrapState, TargetProfile
from .container import Warp10Container
from .crypto_keys import CryptoKeySet, extract_crypto_keys
from .errors import (
    BootstrapError,
    ContainerIOError,
    StartupTimeoutError,
    TokenGenerationError,
    TokenParseError,
    Warp10Error,
)
from .tokens import CredentialStore, TokenRecord, TokenSchema, TokenSet, parse_token_response

__all__ = [
    "BootstrapCoordinator",
    "BootstrapError",
    "BootstrapState",
    "ContainerIOError",
    "CredentialStore",
    "CryptoKeySet",
    "StartupTimeoutError",
    "TargetProfile",
    "TokenGenerationError",
    "TokenParseError",
    "TokenRecord",
    "TokenSchema",
    "TokenSet",
    "Warp10Container",
    "Warp10Error",
    "extract_crypto_keys",
    "parse_token_response",
]
