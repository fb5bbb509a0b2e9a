"""Container settings.

Environment variables:
    WARP10_IMAGE: image repository (default: warp10io/warp10).
    WARP10_TAG: image tag (default: 3.4.1-ubuntu-ci).
    WARP10_STARTUP_TIMEOUT: seconds to wait for the HTTP endpoint (default: 120).
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_IMAGE = "warp10io/warp10"
DEFAULT_TAG = "3.4.1-ubuntu-ci"
DEFAULT_STARTUP_TIMEOUT = 120.0

WARP10_PORT = 8080
WARP10_PROTOCOL = "http"


@dataclass(frozen=True)
class Settings:
    image: str = DEFAULT_IMAGE
    tag: str = DEFAULT_TAG
    startup_timeout: float = DEFAULT_STARTUP_TIMEOUT

    @property
    def image_name(self) -> str:
        return f"{self.image}:{self.tag}"

    @classmethod
    def from_env(
        cls,
        image: str | None = None,
        tag: str | None = None,
        startup_timeout: float | None = None,
    ) -> Settings:
        """Resolve settings; explicit arguments take precedence over the environment."""
        if startup_timeout is None:
            raw = os.environ.get("WARP10_STARTUP_TIMEOUT")
            try:
                startup_timeout = float(raw) if raw else DEFAULT_STARTUP_TIMEOUT
            except ValueError:
                raise ValueError(f"WARP10_STARTUP_TIMEOUT must be a number, got {raw!r}") from None
        return cls(
            image=image or os.environ.get("WARP10_IMAGE", DEFAULT_IMAGE),
            tag=tag or os.environ.get("WARP10_TAG", DEFAULT_TAG),
            startup_timeout=startup_timeout,
        )
