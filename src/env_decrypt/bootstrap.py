"""
Startup orchestration: decrypt the environment file and load it into the process.
"""

from __future__ import annotations

import enum
import os
import shutil
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Mapping, Tuple

from .commands import CommandRegistry, default_registry
from .config import LoaderConfig
from .context import EnvironmentContext
from .env import ConfigurationStore, EnvironStore, apply_env_pairs, parse_env_file


Emitter = Callable[[str], None]


def stderr_emitter(message: str) -> None:
    print(message, file=sys.stderr)


def default_scratch_path() -> Path:
    """Writable scratch directory private to the current process."""

    return Path(tempfile.gettempdir()) / f"env-decrypt-{os.getpid()}"


class DecryptStatus(enum.Enum):
    LOADED = "loaded"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class DecryptResult:
    """Outcome of one startup decryption attempt."""

    status: DecryptStatus
    environment: str
    reason: str | None = None
    loaded: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.status is not DecryptStatus.FAILED


def check_preconditions(
    context: EnvironmentContext,
    environ: Mapping[str, str],
    registry: CommandRegistry,
    base_path: Path,
    config: LoaderConfig,
    emit: Emitter = stderr_emitter,
) -> bool:
    """
    Return ``True`` when decryption can proceed; otherwise emit why and return ``False``.

    Checks run cheapest first and stop at the first failure: the key variable,
    the decrypt command, then the encrypted file on disk. An empty key variable
    counts as unset.
    """

    if not environ.get(config.key_variable):
        emit("No decryption key set.")
        return False
    if not registry.has(config.decrypt_command):
        emit("Decrypt command not available.")
        return False
    encrypted = base_path / context.encrypted_file_name
    if not encrypted.is_file():
        emit(f"Encrypted environment file not found at {encrypted}.")
        return False
    return True


def stage_encrypted_file(context: EnvironmentContext, source_path: Path, scratch_path: Path) -> Path:
    """Copy the encrypted file byte for byte into the scratch directory."""

    scratch_path.mkdir(parents=True, exist_ok=True)
    target = scratch_path / context.encrypted_file_name
    shutil.copyfile(source_path / context.encrypted_file_name, target)
    return target


def decrypt_and_load(
    context: EnvironmentContext,
    scratch_path: Path,
    key: str,
    registry: CommandRegistry,
    store: ConfigurationStore,
    command: str = "env:decrypt",
    emit: Emitter = stderr_emitter,
) -> List[str]:
    """Decrypt the staged file inside ``scratch_path`` and apply it to ``store``."""

    emit("Decrypting environment variables.")
    registry.call(
        command,
        base_path=scratch_path,
        environment=context.environment_name,
        key=key,
        force=True,
    )

    emit("Loading decrypted environment variables.")
    pairs = parse_env_file(scratch_path / context.plain_file_name)
    return apply_env_pairs(pairs, store)


class EnvironmentDecrypter:
    """Runs locate, check, stage and decrypt-and-load for one process start."""

    def __init__(
        self,
        base_path: str | Path,
        store: ConfigurationStore | None = None,
        environ: Mapping[str, str] | None = None,
        registry: CommandRegistry | None = None,
        config: LoaderConfig | None = None,
        emit: Emitter = stderr_emitter,
    ):
        self.base_path = Path(base_path)
        self.store = store or EnvironStore()
        self.environ = dict(os.environ) if environ is None else dict(environ)
        self.registry = registry or default_registry()
        self.config = config or LoaderConfig()
        self.emit = emit
        self.context = EnvironmentContext.from_environ(
            self.environ,
            env_var=self.config.environment_variable,
            default=self.config.default_environment,
        )

    @property
    def scratch_path(self) -> Path:
        if self.config.scratch_path:
            return Path(self.config.scratch_path)
        return default_scratch_path()

    def run(self) -> DecryptResult:
        """Attempt the decryption; failures are reported in the result, never raised."""

        name = self.context.environment_name
        skipped: List[str] = []

        def record(message: str) -> None:
            skipped.append(message)
            self.emit(message)

        scratch = self.scratch_path
        try:
            if not check_preconditions(
                self.context, self.environ, self.registry, self.base_path, self.config, record
            ):
                return DecryptResult(DecryptStatus.SKIPPED, name, reason=skipped[-1] if skipped else None)
            stage_encrypted_file(self.context, self.base_path, scratch)
            loaded = decrypt_and_load(
                self.context,
                scratch,
                self.environ[self.config.key_variable],
                self.registry,
                self.store,
                command=self.config.decrypt_command,
                emit=self.emit,
            )
        except Exception as exc:  # noqa: BLE001 - startup must continue without secrets
            return DecryptResult(DecryptStatus.FAILED, name, reason=str(exc) or exc.__class__.__name__)
        return DecryptResult(DecryptStatus.LOADED, name, loaded=tuple(loaded))


def decrypt_environment(
    base_path: str | Path,
    store: ConfigurationStore | None = None,
    environ: Mapping[str, str] | None = None,
    registry: CommandRegistry | None = None,
    config: LoaderConfig | None = None,
    emit: Emitter = stderr_emitter,
) -> DecryptResult:
    """Entry point for a host bootstrap: run the decrypter and report any failure on one line."""

    result = EnvironmentDecrypter(
        base_path, store=store, environ=environ, registry=registry, config=config, emit=emit
    ).run()
    if result.status is DecryptStatus.FAILED:
        emit(result.reason or "Environment decryption failed.")
    return result


__all__ = [
    "DecryptResult",
    "DecryptStatus",
    "EnvironmentDecrypter",
    "check_preconditions",
    "decrypt_and_load",
    "decrypt_environment",
    "default_scratch_path",
    "stage_encrypted_file",
    "stderr_emitter",
]
