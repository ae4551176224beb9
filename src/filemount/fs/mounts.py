"""MountRegistry — the immutable mount-name to backend table."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from .exceptions import DuplicateMountNameError, InvalidMountNameError
from .utils import DELIMITER, belongs_to_mount

if TYPE_CHECKING:
    from .protocol import StorageBackend


def validate_mount_name(name: str) -> None:
    """Raise ``InvalidMountNameError`` unless *name* is usable as one path segment."""
    if not name:
        raise InvalidMountNameError("Mount name is empty")
    if DELIMITER in name:
        raise InvalidMountNameError(f"Mount name contains the delimiter: {name!r}")
    if name in (".", ".."):
        raise InvalidMountNameError(f"Mount name is reserved: {name!r}")
    if any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in name):
        raise InvalidMountNameError(f"Mount name contains control characters: {name!r}")


class MountRegistry(Mapping[str, "StorageBackend"]):
    """Registry of mounted backends, fixed at construction.

    Lookup order is insertion order. Matching is per path segment, so a
    mount named ``db`` never captures ``/db2/...``; two mounts can only
    collide by having the same name, which construction rejects.
    """

    def __init__(
        self,
        mounts: Mapping[str, StorageBackend] | Iterable[tuple[str, StorageBackend]] = (),
    ) -> None:
        pairs = mounts.items() if isinstance(mounts, Mapping) else mounts
        backends: dict[str, StorageBackend] = {}
        for name, backend in pairs:
            validate_mount_name(name)
            if name in backends:
                raise DuplicateMountNameError(f"Duplicate backend name {name}")
            backends[name] = backend
        self._backends = MappingProxyType(backends)

    def __getitem__(self, name: str) -> StorageBackend:
        return self._backends[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._backends)

    def __len__(self) -> int:
        return len(self._backends)

    def __repr__(self) -> str:
        return f"MountRegistry({list(self._backends)!r})"

    def has_mount(self, name: str) -> bool:
        """Check if a mount exists with the given name."""
        return name in self._backends

    def match(self, path: str) -> tuple[str, StorageBackend] | None:
        """First mount that owns *path*, or ``None``."""
        for name, backend in self._backends.items():
            if belongs_to_mount(path, name):
                return name, backend
        return None
