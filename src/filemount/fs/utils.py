"""Path utilities: joining, validation, mount-prefix stripping."""

from __future__ import annotations

import mimetypes
import posixpath
import re

from .exceptions import InvalidPathError

DELIMITER = "/"
MAX_PATH_LENGTH = 1024

_MULTIPLE_DELIMITERS = re.compile(r"/+")


# =============================================================================
# Joining
# =============================================================================


def normalize_delimiters(path: str) -> str:
    """Collapse runs of the delimiter into one.

    Examples:
        normalize_delimiters("//a///b/") -> "/a/b/"
    """
    return _MULTIPLE_DELIMITERS.sub(DELIMITER, path)


def join(*parts: str) -> str:
    """Join path parts into an absolute path.

    The result always starts with the delimiter. Repeated delimiters where
    parts meet are collapsed, so ``join("public", "/img/a.png")`` and
    ``join("public", "img/a.png")`` both give ``/public/img/a.png``.

    Examples:
        join("mount", "/x.json") -> "/mount/x.json"
        join("", "/x.json") -> "/x.json"
        join("mount", "/") -> "/mount/"
    """
    return normalize_delimiters(DELIMITER + DELIMITER.join(parts))


# =============================================================================
# Validation
# =============================================================================


def _has_control_character(path: str) -> bool:
    return any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in path)


def validate_path(path: str) -> None:
    """Raise ``InvalidPathError`` unless *path* is a safe absolute path.

    Rejects empty and relative paths, ``..`` segments, empty inner segments
    (``/a//b``), control characters and overlong paths. A single trailing
    delimiter is allowed and denotes a folder.
    """
    if not path:
        raise InvalidPathError("Path is empty")

    if _has_control_character(path):
        raise InvalidPathError(f"Path contains control characters: {path!r}")

    if len(path) > MAX_PATH_LENGTH:
        raise InvalidPathError(f"Path too long (max {MAX_PATH_LENGTH} characters)")

    if not path.startswith(DELIMITER):
        raise InvalidPathError(f"Path must be absolute: {path}")

    if path == DELIMITER:
        return

    segments = path[1:].split(DELIMITER)
    if segments[-1] == "":
        segments.pop()

    for segment in segments:
        if segment == "":
            raise InvalidPathError(f"Path contains an empty segment: {path}")
        if segment == "..":
            raise InvalidPathError(f"Path traversal is not allowed: {path}")


# =============================================================================
# Mount prefixes
# =============================================================================


def strip_mount_prefix(path: str, mount_name: str) -> str:
    """Return the backend-local part of a unified *path* under *mount_name*.

    ``/mount``, ``/mount/``, ``mount`` and ``/`` all map to the root
    delimiter so backends never receive an empty path.

    Examples:
        strip_mount_prefix("/mount/a/b.txt", "mount") -> "/a/b.txt"
        strip_mount_prefix("/mount/dir/", "mount") -> "/dir/"
        strip_mount_prefix("/mount", "mount") -> "/"
    """
    trimmed = path[len(DELIMITER):] if path.startswith(DELIMITER) else path
    if trimmed in ("", mount_name):
        return DELIMITER

    if not trimmed.startswith(mount_name + DELIMITER):
        raise ValueError(f"Path {path!r} is not under mount {mount_name!r}")

    rest = trimmed[len(mount_name):]
    if rest == DELIMITER:
        return DELIMITER
    return rest


def belongs_to_mount(path: str, mount_name: str) -> bool:
    """True if *path* names *mount_name* itself or anything below it."""
    prefix = DELIMITER + mount_name
    return path in (mount_name, prefix) or path.startswith(prefix + DELIMITER)


# =============================================================================
# Backend helpers
# =============================================================================


def split_path(path: str) -> tuple[str, str]:
    """Split path into (parent_dir, name).

    Examples:
        split_path("/foo/bar.txt") -> ("/foo", "bar.txt")
        split_path("/foo.txt") -> ("/", "foo.txt")
        split_path("/foo/") -> ("/", "foo")
        split_path("/") -> ("/", "")
    """
    path = path.rstrip(DELIMITER) or DELIMITER
    if path == DELIMITER:
        return DELIMITER, ""
    return posixpath.split(path)


def folder_path(path: str) -> str:
    """Normalize a folder path to have no trailing delimiter (except root)."""
    return path.rstrip(DELIMITER) or DELIMITER


def parent_path(path: str) -> str:
    """Parent folder of *path*."""
    return split_path(path)[0]


def guess_mime_type(filename: str) -> str:
    """Guess the MIME type of a file based on its name."""
    mime_type, _ = mimetypes.guess_type(filename)
    return mime_type or "application/octet-stream"
