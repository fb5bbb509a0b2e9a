"""Warp 10 test container with ready-to-use read/write tokens.

Example:
    with Warp10Container("3.4.1-ubuntu-ci") as warp10:
        requests.post(
            warp10.get_url() + "/api/v0/update",
            data="1// test{} 42",
            headers={"X-Warp10-Token": warp10.write_token()},
        )
"""

from __future__ import annotations

import io
import logging
import posixpath
import tarfile
import time
from collections.abc import Sequence
from pathlib import Path

from docker.errors import APIError
from testcontainers.core.container import DockerContainer
from testcontainers.core.exceptions import ContainerStartException
from testcontainers.core.wait_strategies import HttpWaitStrategy

from .bootstrap import BootstrapCoordinator, BootstrapState, TargetProfile
from .config import WARP10_PORT, WARP10_PROTOCOL, Settings
from .crypto_keys import CryptoKeySet
from .errors import ContainerIOError, StartupTimeoutError
from .runtime import ExecResult

logger = logging.getLogger(__name__)

MACROS_PATH = "/opt/warp10/macros"
EXTRA_CONFIG_PATH = "/config.extra"

# Warp 10 has no handler on "/", so a 404 means Jetty is serving requests.
READY_STATUS_CODE = 404


def _existing_folder(folder: str | Path | None, kind: str) -> Path | None:
    if folder is None:
        return None
    path = Path(folder)
    if not path.is_dir():
        raise ValueError(f"{kind} folder {path} does not exist")
    return path.resolve()


def _decode(stream: bytes | None) -> str:
    return stream.decode("utf-8", errors="replace") if stream else ""


class Warp10Container(DockerContainer):
    """A Warp 10 instance bootstrapped with read/write tokens on start.

    Args:
        tag: Image tag. 2.x tags mint tokens with ``worf``; 3.x and later use
            ``tokengen`` and also expose the instance's crypto keys.
        macros_folder: Server-side macros, mounted at /opt/warp10/macros.
            Macros must live in subfolders, as Warp 10 requires.
        config_folder: ``XX-name.conf.template`` files overriding the
            standalone configuration templates, mounted at /config.extra.
        image: Image repository, defaults to ``WARP10_IMAGE`` or warp10io/warp10.
        token_script: WarpScript fed to ``tokengen``; defaults to the bundled one.
    """

    def __init__(
        self,
        tag: str | None = None,
        macros_folder: str | Path | None = None,
        config_folder: str | Path | None = None,
        image: str | None = None,
        token_script: bytes | None = None,
        **kwargs,
    ) -> None:
        self._settings = Settings.from_env(image=image, tag=tag)
        super().__init__(self._settings.image_name, **kwargs)
        self._profile = TargetProfile.for_tag(self._settings.tag)
        self._token_script = token_script
        self._coordinator: BootstrapCoordinator | None = None

        self.with_exposed_ports(WARP10_PORT)
        self.waiting_for(
            HttpWaitStrategy(WARP10_PORT)
            .for_status_code(READY_STATUS_CODE)
            .with_startup_timeout(self._settings.startup_timeout)
        )
        macros = _existing_folder(macros_folder, "Macro")
        if macros is not None:
            self.with_volume_mapping(str(macros), MACROS_PATH, "ro")
        config = _existing_folder(config_folder, "Config")
        if config is not None:
            self.with_volume_mapping(str(config), EXTRA_CONFIG_PATH, "ro")

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def profile(self) -> TargetProfile:
        return self._profile

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> Warp10Container:
        logger.info("Starting a Warp10 container using [%s]", self._settings.image_name)
        self._coordinator = None
        try:
            super().start()
        except TimeoutError as e:
            raise StartupTimeoutError(
                f"Warp10 not ready on port {WARP10_PORT} "
                f"after {self._settings.startup_timeout}s: {e}"
            ) from e
        self._coordinator = BootstrapCoordinator(self, self._profile, self._token_script)
        self._coordinator.on_container_ready()
        return self

    def stop(self, *args, **kwargs) -> None:
        self._coordinator = None
        super().stop(*args, **kwargs)

    # ------------------------------------------------------------------
    # Runtime operations used by the bootstrap
    # ------------------------------------------------------------------

    def _running_container(self):
        try:
            return self.get_wrapped_container()
        except ContainerStartException as e:
            raise ContainerIOError("Container is not running") from e

    def _exec_raw(
        self, command: Sequence[str] | str, user: str | None = None
    ) -> tuple[int, bytes, bytes]:
        container = self._running_container()
        try:
            exit_code, output = container.exec_run(command, user=user or "", demux=True)
        except APIError as e:
            raise ContainerIOError(f"Could not run {command!r} in container: {e}") from e
        stdout, stderr = output if output is not None else (None, None)
        return exit_code, stdout or b"", stderr or b""

    def exec_as(self, command: Sequence[str] | str, user: str | None = None) -> ExecResult:
        """Run ``command`` as ``user`` and capture both streams as text."""
        exit_code, stdout, stderr = self._exec_raw(command, user)
        return ExecResult(exit_code=exit_code, stdout=_decode(stdout), stderr=_decode(stderr))

    def read_file(self, path: str) -> bytes:
        exit_code, content, stderr = self._exec_raw(["cat", path])
        if exit_code != 0:
            error = _decode(stderr)
            logger.error("Failed to read Warp10 file: %s", path)
            if error:
                logger.error("Stderr: %s", error)
            raise ContainerIOError(f"Failed to read {path} (exit code {exit_code}): {error.strip()}")
        return content

    def write_file(self, data: bytes, remote_path: str) -> None:
        directory, name = posixpath.split(remote_path)
        archive = io.BytesIO()
        with tarfile.open(fileobj=archive, mode="w") as tar:
            info = tarfile.TarInfo(name=name)
            info.size = len(data)
            info.mode = 0o644
            info.mtime = int(time.time())
            tar.addfile(info, io.BytesIO(data))

        container = self._running_container()
        try:
            copied = container.put_archive(directory, archive.getvalue())
        except APIError as e:
            raise ContainerIOError(f"Could not copy {remote_path} into container: {e}") from e
        if not copied:
            raise ContainerIOError(f"Could not copy {remote_path} into container")

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def protocol(self) -> str:
        return WARP10_PROTOCOL

    @property
    def bootstrap_state(self) -> BootstrapState:
        if self._coordinator is None:
            return BootstrapState.NOT_STARTED
        return self._coordinator.state

    def get_http_host(self) -> str:
        return self.get_container_host_ip()

    def get_http_port(self) -> int:
        return int(self.get_exposed_port(WARP10_PORT))

    def get_http_host_address(self) -> str:
        return f"{self.get_http_host()}:{self.get_http_port()}"

    def get_url(self) -> str:
        return f"{WARP10_PROTOCOL}://{self.get_http_host_address()}"

    def read_token(self) -> str | None:
        return self._coordinator.read_token() if self._coordinator is not None else None

    def write_token(self) -> str | None:
        return self._coordinator.write_token() if self._coordinator is not None else None

    def crypto_keys(self) -> CryptoKeySet | None:
        return self._coordinator.crypto_keys() if self._coordinator is not None else None

    def aes_token_key(self) -> str | None:
        keys = self.crypto_keys()
        return keys.aes_token_key if keys is not None else None

    def sip_hash_app(self) -> str | None:
        keys = self.crypto_keys()
        return keys.sip_hash_app if keys is not None else None

    def sip_hash_token(self) -> str | None:
        keys = self.crypto_keys()
        return keys.sip_hash_token if keys is not None else None
