"""Token minting inside a running Warp 10 container."""

from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass
from importlib.resources import files

from .errors import TokenGenerationError
from .runtime import ContainerRuntime
from .tokens import TokenSchema

logger = logging.getLogger(__name__)

WARP10_SERVICE_USER = "warp10"
TOKENGEN_SCRIPT_PATH = "/opt/warp10/tokens/tokengen.mc2"
WARP10_BIN = "/opt/warp10/bin/warp10.sh"
WARP10_STANDALONE_BIN = "/opt/warp10/bin/warp10-standalone.sh"

DEFAULT_APP_NAME = "test"
DEFAULT_VALIDITY_MS = 365 * 24 * 3600 * 1000


def default_token_script() -> bytes:
    """The bundled WarpScript that mints one read and one write token."""
    return files("warp10_testcontainer").joinpath("resources/tokengen.mc2").read_bytes()


@dataclass(frozen=True)
class CliMinting:
    """Warp 10 2.x: ``worf`` with application name and validity as arguments."""

    app_name: str = DEFAULT_APP_NAME
    validity_ms: int = DEFAULT_VALIDITY_MS

    schema = TokenSchema.LEGACY

    def command(self) -> str:
        return shlex.join(
            [WARP10_STANDALONE_BIN, "worf", self.app_name, str(self.validity_ms)]
        )


@dataclass(frozen=True)
class ScriptMinting:
    """Warp 10 3.x: ``tokengen`` fed with a WarpScript deployed in the container."""

    script: bytes
    script_path: str = TOKENGEN_SCRIPT_PATH

    schema = TokenSchema.CURRENT

    def command(self) -> str:
        return f"{WARP10_BIN} tokengen - < {shlex.quote(self.script_path)}"


MintingInvocation = CliMinting | ScriptMinting


class TokenMintingInvoker:
    """Deploys the minting script and runs the minting subcommand."""

    def __init__(self, runtime: ContainerRuntime, user: str = WARP10_SERVICE_USER) -> None:
        self._runtime = runtime
        self._user = user

    def deploy(self, invocation: ScriptMinting) -> None:
        logger.debug(
            "Copying %d byte token script to %s", len(invocation.script), invocation.script_path
        )
        self._runtime.write_file(invocation.script, invocation.script_path)

    def mint(self, invocation: MintingInvocation) -> str:
        """Run the minting command and return its standard output.

        Raises:
            TokenGenerationError: The command exited with a nonzero status.
        """
        command = invocation.command()
        logger.info("Generating Warp10 tokens as %s: %s", self._user, command)
        result = self._runtime.exec_as(["sh", "-c", command], user=self._user)
        if not result.ok:
            logger.error("Warp10 token generation exited with code %d", result.exit_code)
            if result.stdout:
                logger.error("Stdout: %s", result.stdout)
            if result.stderr:
                logger.error("Stderr: %s", result.stderr)
            raise TokenGenerationError(result.exit_code, result.stdout, result.stderr)
        return result.stdout
