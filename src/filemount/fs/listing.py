"""Listing helpers shared by the concrete backends.

Backends collect their entries with backend-local paths; these helpers
select the children of a folder, apply list filters, and cut pages.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, TypeVar

from .types import ListFilesResponse
from .utils import DELIMITER, folder_path, parent_path

if TYPE_CHECKING:
    from .types import File, FileMetadata, ListOptions, Paging

T = TypeVar("T", bound="FileMetadata")


def folder_prefix(folder: str) -> str:
    """``/a/b`` -> ``/a/b/``; root stays ``/``."""
    folder = folder_path(folder)
    return folder if folder == DELIMITER else folder + DELIMITER


def is_within(path: str, folder: str, *, recursive: bool) -> bool:
    """True if *path* is a child (or any descendant when recursive) of *folder*."""
    prefix = folder_prefix(folder)
    if not path.startswith(prefix) or path == prefix:
        return False
    if recursive:
        return True
    return DELIMITER not in path[len(prefix):]


def ancestor_folders(path: str) -> list[str]:
    """All folders above *path*, nearest first, excluding root."""
    folders: list[str] = []
    current = parent_path(path)
    while current != DELIMITER:
        folders.append(current)
        current = parent_path(current)
    return folders


def select_children(
    entries: Iterable[T], folder: str, options: ListOptions | None
) -> list[T]:
    """Children of *folder* that pass the option filters, sorted by path."""
    recursive = options.recursive if options is not None else False
    filters = options.path_filters if options is not None else None
    selected = [
        entry
        for entry in entries
        if is_within(entry.full_path, folder, recursive=recursive)
        and (filters is None or filters.is_allowed(entry.full_path))
    ]
    selected.sort(key=lambda entry: entry.full_path)
    return selected


def paginate(files: list[File], paging: Paging | None) -> ListFilesResponse:
    """Cut one page out of path-sorted *files*.

    ``paging.after`` is exclusive; the response's ``last_path`` is the
    cursor for the next page.
    """
    if paging is None:
        return ListFilesResponse(
            files=files,
            has_more=False,
            last_path=files[-1].full_path if files else "",
        )

    remaining = [f for f in files if f.full_path > paging.after] if paging.after else files
    page = remaining[: paging.first]
    return ListFilesResponse(
        files=page,
        has_more=len(remaining) > paging.first,
        last_path=page[-1].full_path if page else "",
    )
