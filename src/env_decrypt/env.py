"""
Helpers to parse ``.env`` files and apply them to a configuration store.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Iterable, List, MutableMapping, Protocol, Tuple


_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*$")
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "\\": "\\"}
_INLINE_COMMENT = re.compile(r"\s#")


class EnvFileError(RuntimeError):
    """Raised when a ``.env`` file contains a line that cannot be parsed."""

    def __init__(self, message: str, line_number: int):
        super().__init__(f"{message} (line {line_number})")
        self.line_number = line_number


class ConfigurationStore(Protocol):
    def get(self, name: str) -> str | None:
        ...

    def set_if_absent(self, name: str, value: str) -> bool:
        ...


class EnvironStore:
    """
    Write-if-absent view over ``os.environ`` (or any mutable mapping).

    A name that is already present is never overwritten, even when its value is
    empty, so shell exports and CI secrets always win over file entries.
    """

    def __init__(self, mapping: MutableMapping[str, str] | None = None):
        self._mapping = os.environ if mapping is None else mapping

    def get(self, name: str) -> str | None:
        return self._mapping.get(name)

    def set_if_absent(self, name: str, value: str) -> bool:
        if name in self._mapping:
            return False
        self._mapping[name] = value
        return True


def _scan_double_quoted(value: str, line_number: int) -> Tuple[str, str]:
    """Return the unescaped body of a double-quoted value and whatever follows it."""

    chars: List[str] = []
    index = 1
    while index < len(value):
        char = value[index]
        if char == "\\" and index + 1 < len(value):
            nxt = value[index + 1]
            chars.append(_ESCAPES.get(nxt, "\\" + nxt))
            index += 2
            continue
        if char == '"':
            return "".join(chars), value[index + 1 :]
        chars.append(char)
        index += 1
    raise EnvFileError("Unterminated quoted value", line_number)


def _parse_value(raw: str, line_number: int) -> str:
    value = raw.strip()
    if not value:
        return ""

    if value[0] in ("'", '"'):
        if value[0] == '"':
            body, rest = _scan_double_quoted(value, line_number)
        else:
            closing = value.find("'", 1)
            if closing == -1:
                raise EnvFileError("Unterminated quoted value", line_number)
            body, rest = value[1:closing], value[closing + 1 :]
        rest = rest.strip()
        if rest and not rest.startswith("#"):
            raise EnvFileError("Unexpected characters after quoted value", line_number)
        return body

    comment = _INLINE_COMMENT.search(value)
    if comment:
        value = value[: comment.start()]
    return value.strip()


def parse_env_lines(lines: Iterable[str]) -> List[Tuple[str, str]]:
    """
    Parse ``KEY=value`` lines into ordered ``(name, value)`` pairs.

    Blank lines and ``#`` comments are ignored, an optional ``export`` prefix is
    accepted, single-quoted values are literal and double-quoted values support
    backslash escapes. Multi-line values are not supported.
    """

    pairs: List[Tuple[str, str]] = []
    for line_number, raw_line in enumerate(lines, start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].lstrip()
        if "=" not in line:
            raise EnvFileError("Expected KEY=value", line_number)
        key, value = line.split("=", 1)
        key = key.strip()
        if not _NAME_PATTERN.match(key):
            raise EnvFileError(f"Invalid variable name: {key!r}", line_number)
        pairs.append((key, _parse_value(value, line_number)))
    return pairs


def parse_env_file(dotenv_path: str | Path) -> List[Tuple[str, str]]:
    """Read ``dotenv_path`` and return its ``(name, value)`` pairs in file order."""

    path = Path(dotenv_path)
    return parse_env_lines(path.read_text(encoding="utf-8").splitlines())


def apply_env_pairs(pairs: Iterable[Tuple[str, str]], store: ConfigurationStore) -> List[str]:
    """Apply pairs with write-if-absent semantics and return the names that were set."""

    applied: List[str] = []
    for key, value in pairs:
        if store.set_if_absent(key, value):
            applied.append(key)
    return applied


def load_env_file(dotenv_path: str | Path = ".env", store: ConfigurationStore | None = None) -> List[str]:
    """
    Populate ``store`` (``os.environ`` by default) from ``dotenv_path`` if it exists.

    Existing variables always win so shell exports or CI secrets are never
    overwritten by accidental entries in the file.
    """

    path = Path(dotenv_path)
    if not path.exists():
        return []
    return apply_env_pairs(parse_env_file(path), store or EnvironStore())


__all__ = [
    "ConfigurationStore",
    "EnvFileError",
    "EnvironStore",
    "apply_env_pairs",
    "load_env_file",
    "parse_env_file",
    "parse_env_lines",
]
