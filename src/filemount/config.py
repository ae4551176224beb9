"""BackendConfig and FileStorageConfig — descriptors for mounted backends."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from filemount.fs.filters import PathFilters
from filemount.fs.mounts import validate_mount_name
from filemount.fs.types import ALL_OPERATIONS, READ_OPERATIONS, Operation


class BackendKind(str, Enum):
    """Storage behind a mount."""

    FS = "fs"
    MEMORY = "memory"
    DB = "db"


@dataclass
class BackendConfig:
    """Configuration for a single mounted backend."""

    name: str
    """Mount name, the first segment of every path on this backend."""

    path: str = ""
    """Storage location: a directory for ``fs``, a database URL for ``db``."""

    kind: BackendKind = BackendKind.FS

    allowed_prefixes: list[str] | None = None
    """Backend-local prefixes the mount exposes. ``None`` exposes everything."""

    supported_operations: frozenset[Operation] = field(default=ALL_OPERATIONS)

    def __post_init__(self) -> None:
        validate_mount_name(self.name)
        self.kind = BackendKind(self.kind)
        self.supported_operations = frozenset(
            Operation(op) for op in self.supported_operations
        )
        if self.kind is not BackendKind.MEMORY and not self.path:
            msg = f"Backend {self.name!r} of kind {self.kind.value!r} needs a path"
            raise ValueError(msg)

    @property
    def path_filters(self) -> PathFilters:
        return PathFilters(allowed_prefixes=self.allowed_prefixes)


@dataclass
class FileStorageConfig:
    """All backends served by one router."""

    backends: list[BackendConfig] = field(default_factory=list)


PUBLIC_ALLOWED_PREFIXES = ["/img/icons/", "/img/bg/", "/gazetteer/", "/maps/"]


def default_config(static_root_path: str) -> FileStorageConfig:
    """The stock setup: the static assets folder mounted read-only as ``public``."""
    return FileStorageConfig(
        backends=[
            BackendConfig(
                name="public",
                path=static_root_path,
                kind=BackendKind.FS,
                allowed_prefixes=list(PUBLIC_ALLOWED_PREFIXES),
                supported_operations=READ_OPERATIONS,
            )
        ]
    )
