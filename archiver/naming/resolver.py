"""Archival filenames: ``<title>_<identity1>_<identity2><ext>``.

Inside a field, whitespace and underscores become ``-`` so that ``_`` only ever
separates fields.
"""

import re
from pathlib import Path

from archiver.logging.logger import Log

MAX_NAME_LENGTH = 200
# Filesystem NAME_MAX, in encoded bytes; room is kept for a "_<n>" collision suffix.
MAX_NAME_BYTES = 255
COLLISION_SUFFIX_RESERVE = 8
MAX_EXTENSION_BYTES = 32
FIELD_SEPARATOR = "_"
WORD_SEPARATOR = "-"
TITLE_PLACEHOLDER = "untitled"
IDENTITY_PLACEHOLDER = "unknown"

_ILLEGAL_CHARS = re.compile(r'[/\\:*?"<>|\x00-\x08\x0e-\x1f\x7f]')
_WHITESPACE = re.compile(r"\s+")


def sanitize_component(value: str) -> str:
    """Make one name field path-safe; applying it twice changes nothing."""
    cleaned = _ILLEGAL_CHARS.sub("", value).strip()
    cleaned = _WHITESPACE.sub(WORD_SEPARATOR, cleaned)
    return cleaned.replace(FIELD_SEPARATOR, WORD_SEPARATOR)


def _field(value: str | None, placeholder: str) -> str:
    return sanitize_component(value or "") or placeholder


def fit_bytes(value: str, max_bytes: int) -> str:
    """Cut ``value`` so its UTF-8 encoding fits ``max_bytes`` without splitting a character."""
    encoded = value.encode("utf-8")
    if len(encoded) <= max_bytes:
        return value
    return encoded[:max_bytes].decode("utf-8", errors="ignore")


def build_name(identity1: str | None, identity2: str | None, title: str | None) -> str:
    parts = [
        _field(title, TITLE_PLACEHOLDER),
        _field(identity1, IDENTITY_PLACEHOLDER),
        _field(identity2, IDENTITY_PLACEHOLDER),
    ]
    return FIELD_SEPARATOR.join(parts)[:MAX_NAME_LENGTH]


def archive_filename(
    identity1: str | None,
    identity2: str | None,
    title: str | None,
    original_filename: str | None,
) -> str:
    """Build the archival name and keep the extension of the submitted file."""
    suffix = Path(original_filename or "").suffix
    extension = _ILLEGAL_CHARS.sub("", _WHITESPACE.sub("", suffix))
    if extension == ".":
        extension = ""
    extension = fit_bytes(extension, MAX_EXTENSION_BYTES)
    budget = MAX_NAME_BYTES - COLLISION_SUFFIX_RESERVE - len(extension.encode("utf-8"))
    return fit_bytes(build_name(identity1, identity2, title), budget) + extension


def resolve_collision(directory: Path, candidate: str) -> str:
    """Return ``candidate`` or the first free ``<stem>_<n><ext>`` with n >= 1."""
    if not (directory / candidate).exists():
        return candidate
    path = Path(candidate)
    stem, extension = path.stem, path.suffix
    counter = 1
    while True:
        name = f"{stem}{FIELD_SEPARATOR}{counter}{extension}"
        if not (directory / name).exists():
            Log.info(f"Archive name taken, using {name}")
            return name
        counter += 1
