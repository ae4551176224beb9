"""PathFilters — allow/deny evaluation of backend-local paths."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .utils import DELIMITER


def _freeze(values: Iterable[str] | None) -> tuple[str, ...] | None:
    return None if values is None else tuple(values)


@dataclass(frozen=True)
class PathFilters:
    """Prefix and exact-path filters for one backend.

    ``None`` means "no constraint" for that list, while an empty list
    constrains to nothing. A filter with ``allowed_prefixes=[]`` therefore
    denies every path.

    Disallow rules win over allow rules.
    """

    allowed_prefixes: tuple[str, ...] | None = None
    disallowed_prefixes: tuple[str, ...] | None = None
    allowed_paths: tuple[str, ...] | None = None
    disallowed_paths: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        for name in (
            "allowed_prefixes",
            "disallowed_prefixes",
            "allowed_paths",
            "disallowed_paths",
        ):
            object.__setattr__(self, name, _freeze(getattr(self, name)))

    @classmethod
    def allow_all(cls) -> PathFilters:
        return cls()

    @classmethod
    def deny_all(cls) -> PathFilters:
        return cls(allowed_prefixes=())

    @property
    def _unrestricted(self) -> bool:
        return self.allowed_prefixes is None and self.allowed_paths is None

    def is_allowed(self, path: str) -> bool:
        """True if *path* passes the filters."""
        if self.disallowed_paths and path in self.disallowed_paths:
            return False

        if self.disallowed_prefixes and any(
            path.startswith(prefix) for prefix in self.disallowed_prefixes
        ):
            return False

        if self._unrestricted:
            return True

        if self.allowed_paths and path in self.allowed_paths:
            return True

        return bool(
            self.allowed_prefixes
            and any(path.startswith(prefix) for prefix in self.allowed_prefixes)
        )

    def may_contain_allowed(self, folder: str) -> bool:
        """True if anything below *folder* could pass the filters.

        Used to decide whether listing a folder is worth delegating at all:
        with ``allowed_prefixes=["/img/icons/"]`` the folders ``/`` and
        ``/img`` lead to allowed files even though they are not allowed
        themselves.
        """
        folder_prefix = folder if folder.endswith(DELIMITER) else folder + DELIMITER
        if self.disallowed_prefixes and any(
            folder_prefix.startswith(prefix) for prefix in self.disallowed_prefixes
        ):
            return False

        if self.is_allowed(folder):
            return True

        if self._unrestricted:
            return True

        candidates = (*(self.allowed_prefixes or ()), *(self.allowed_paths or ()))
        return any(
            candidate.startswith(folder_prefix) or folder_prefix.startswith(candidate)
            for candidate in candidates
        )
