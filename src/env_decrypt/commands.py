"""Named commands available to the startup sequence, including ``env:decrypt``."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List

from cryptography.fernet import Fernet, InvalidToken


class CommandNotFound(RuntimeError):
    """Raised when a command name is not registered."""


class DecryptionError(RuntimeError):
    """Raised when an encrypted environment file cannot be decrypted."""


Command = Callable[..., Any]


class CommandRegistry:
    """Maps command names to callables invoked with keyword options."""

    def __init__(self, commands: Dict[str, Command] | None = None):
        self._commands: Dict[str, Command] = dict(commands or {})

    def register(self, name: str, command: Command) -> None:
        self._commands[name] = command

    def has(self, name: str) -> bool:
        return name in self._commands

    def names(self) -> List[str]:
        return sorted(self._commands)

    def call(self, name: str, **options: Any) -> Any:
        if name not in self._commands:
            raise CommandNotFound(f"Command not registered: {name}")
        return self._commands[name](**options)


def _build_cipher(key: str) -> Fernet:
    if not key:
        raise DecryptionError("A decryption key is required.")
    if key.startswith("base64:"):
        key = key[len("base64:") :]
    try:
        return Fernet(key.encode("utf-8"))
    except ValueError as exc:
        raise DecryptionError("The decryption key is not a valid Fernet key.") from exc


class DecryptEnvironmentCommand:
    """
    Decrypts ``.env.<environment>.encrypted`` into ``.env.<environment>``.

    Both files are resolved against ``base_path`` unless ``path`` or ``filename``
    override where the plaintext is written.
    """

    def __call__(
        self,
        base_path: str | Path,
        key: str,
        environment: str | None = None,
        force: bool = False,
        filename: str | None = None,
        path: str | Path | None = None,
    ) -> Path:
        plain_name = f".env.{environment}" if environment else ".env"
        encrypted_file = Path(base_path) / f"{plain_name}.encrypted"
        output_file = Path(path or base_path) / (filename or plain_name)

        if not encrypted_file.is_file():
            raise DecryptionError(f"Encrypted environment file not found: {encrypted_file}")
        if output_file.exists() and not force:
            raise DecryptionError(f"Environment file already exists: {output_file}")

        cipher = _build_cipher(key)
        try:
            plaintext = cipher.decrypt(encrypted_file.read_bytes())
        except InvalidToken as exc:
            raise DecryptionError("The environment file could not be decrypted; the key or payload is invalid.") from exc

        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_bytes(plaintext)
        return output_file


def default_registry() -> CommandRegistry:
    """Registry with the built-in ``env:decrypt`` command."""

    return CommandRegistry({"env:decrypt": DecryptEnvironmentCommand()})


__all__ = [
    "Command",
    "CommandNotFound",
    "CommandRegistry",
    "DecryptEnvironmentCommand",
    "DecryptionError",
    "default_registry",
]
