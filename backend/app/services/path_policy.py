"""Path containment and normalization for catalogued files.

Every path written to the catalog goes through ``resolve_path`` first, so a
stored ``file_path`` always sits beneath the storage root. Canonicalization is
lexical (``os.path.abspath``); symlinks are not followed.
"""
import os
from typing import Optional

from app.errors import PathRejectedError

SEPARATOR = "/"
DEFAULT_FILE_TYPE = ".file"


def normalize_separators(path: str) -> str:
    """Convert any backslash separators to forward slashes."""
    return path.replace("\\", SEPARATOR)


def normalize_extension(file_type: Optional[str]) -> str:
    """Return the extension with exactly one leading dot, or '' if empty."""
    if not file_type:
        return ""
    file_type = file_type.strip()
    if not file_type:
        return ""
    return "." + file_type.lstrip(".")


def canonical_root(root: str) -> str:
    return normalize_separators(os.path.abspath(os.path.expanduser(normalize_separators(root))))


def is_directory_path(candidate: str) -> bool:
    return candidate.endswith(("/", "\\"))


def compose_path(directory: str, name: str, file_type: str) -> str:
    """Build ``{directory}/{name}{file_type}`` with forward slashes."""
    directory = normalize_separators(directory).rstrip(SEPARATOR)
    return f"{directory}{SEPARATOR}{name}{normalize_extension(file_type)}"


def is_within_root(path: str, root: str) -> bool:
    """Case-insensitive, component-aware prefix check on canonical paths."""
    root = root.rstrip(SEPARATOR)
    return (
        path[: len(root)].casefold() == root.casefold()
        and path[len(root) : len(root) + 1] == SEPARATOR
        and len(path) > len(root) + 1
    )


def resolve_path(candidate: str, root: str) -> str:
    """Canonicalize ``candidate`` against ``root`` and enforce containment.

    Relative candidates are taken relative to the root, not the working
    directory. Returns the absolute path with forward slashes, spelled with
    the root's own casing so a case-folded match cannot land outside it.

    Raises:
        PathRejectedError: if the canonical path is not below the root.
    """
    root_abs = canonical_root(root)
    normalized = normalize_separators(os.path.expanduser(normalize_separators(candidate)))
    resolved = normalize_separators(os.path.abspath(os.path.join(root_abs, normalized)))
    if not is_within_root(resolved, root_abs):
        raise PathRejectedError(candidate, root_abs)
    root_prefix = root_abs.rstrip(SEPARATOR)
    return root_prefix + resolved[len(root_prefix):]


def derive_name_and_type(path: str) -> tuple[str, str]:
    """Split a file path into (stem, extension); extension defaults to '.file'."""
    base = os.path.basename(normalize_separators(path).rstrip(SEPARATOR))
    stem, ext = os.path.splitext(base)
    return stem or base, ext or DEFAULT_FILE_TYPE
