"""SQLModel tables used by the database backend."""

from filemount.models.files import StoredFile, StoredFileBase

__all__ = ["StoredFile", "StoredFileBase"]
