from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Iterable, Mapping, MutableMapping

# KEY=value, optionally prefixed with ``export``; ``#`` and ``//`` start comments
_ASSIGNMENT = re.compile(r"^(?:export\s+)?(?P<key>[A-Za-z_][A-Za-z0-9_.]*)\s*=\s*(?P<value>.*)$")
_COMMENT = re.compile(r"^(#|//)")


class MissingEnvError(RuntimeError):
    """Raised when required environment variables are absent or empty."""

    def __init__(self, names: Iterable[str]) -> None:
        self.names = list(names)
        super().__init__(
            "Missing required environment variables: " + ", ".join(self.names)
        )


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def parse_env_lines(content: str) -> dict[str, str]:
    """Parse the assignments of a dotenv file; later duplicates win."""

    parsed: dict[str, str] = {}
    for line in (raw.strip() for raw in content.splitlines()):
        if not line or _COMMENT.match(line):
            continue
        match = _ASSIGNMENT.match(line)
        if match is not None:
            parsed[match["key"]] = _unquote(match["value"].strip())
    return parsed


def load_env_file(
    path: str | Path = ".env",
    environ: MutableMapping[str, str] | None = None,
) -> bool:
    """Populate ``environ`` (``os.environ`` by default) from ``path``.

    Existing environment variables are never overwritten. Returns ``True``
    when a file was read.
    """

    target = os.environ if environ is None else environ
    env_path = Path(path)
    if not env_path.is_file():
        return False
    try:
        content = env_path.read_text(encoding="utf-8")
    except OSError:
        return False

    for key, value in parse_env_lines(content).items():
        target.setdefault(key, value)
    return True


def get_optional_env(
    name: str, default: str, environ: Mapping[str, str] | None = None
) -> str:
    source = os.environ if environ is None else environ
    value = source.get(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def validate_required_env_vars(
    names: Iterable[str], environ: Mapping[str, str] | None = None
) -> None:
    source = os.environ if environ is None else environ
    missing = [name for name in names if not (source.get(name) or "").strip()]
    if missing:
        raise MissingEnvError(missing)


__all__ = [
    "MissingEnvError",
    "get_optional_env",
    "load_env_file",
    "parse_env_lines",
    "validate_required_env_vars",
]
