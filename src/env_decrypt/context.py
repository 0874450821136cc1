"""
Resolution of the active environment and its ``.env`` file names.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping


DEFAULT_ENVIRONMENT = "production"


@dataclass(frozen=True)
class EnvironmentContext:
    """Environment name plus the plaintext and encrypted file names derived from it."""

    environment_name: str

    @property
    def plain_file_name(self) -> str:
        return f".env.{self.environment_name}"

    @property
    def encrypted_file_name(self) -> str:
        return f"{self.plain_file_name}.encrypted"

    @classmethod
    def from_environ(
        cls,
        environ: Mapping[str, str],
        env_var: str = "APP_ENV",
        default: str = DEFAULT_ENVIRONMENT,
    ) -> "EnvironmentContext":
        return cls(environ.get(env_var) or default)


__all__ = ["DEFAULT_ENVIRONMENT", "EnvironmentContext"]
