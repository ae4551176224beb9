"""Behavior shared by MemoryBackend, LocalDiskBackend and DatabaseBackend."""

from __future__ import annotations

import pytest

from filemount.fs.exceptions import InvalidPathError, StorageError
from filemount.fs.filters import PathFilters
from filemount.fs.protocol import StorageBackend
from filemount.fs.types import ListOptions, Paging, UpsertFileCommand


async def _put(backend, path: str, contents: bytes = b"data", **kwargs) -> None:
    await backend.upsert(UpsertFileCommand(path=path, contents=contents, **kwargs))


async def test_implements_protocol(backend):
    assert isinstance(backend, StorageBackend)


# ---------------------------------------------------------------------------
# get / upsert
# ---------------------------------------------------------------------------


class TestUpsertAndGet:
    async def test_round_trip(self, backend):
        await _put(backend, "/a/b.json", b'{"k": 1}', properties={"owner": "me"})

        file = await backend.get("/a/b.json")
        assert file is not None
        assert file.full_path == "/a/b.json"
        assert file.name == "b.json"
        assert file.contents == b'{"k": 1}'
        assert file.size == 8
        assert file.mime_type == "application/json"
        assert file.properties == {"owner": "me"}
        assert not file.is_folder

    async def test_missing_is_none(self, backend):
        assert await backend.get("/nope.txt") is None

    async def test_root_is_not_a_file(self, backend):
        assert await backend.get("/") is None

    async def test_explicit_mime_type(self, backend):
        await _put(backend, "/blob", mime_type="text/plain")
        file = await backend.get("/blob")
        assert file is not None
        assert file.mime_type == "text/plain"

    async def test_replace_contents(self, backend):
        await _put(backend, "/f.txt", b"one")
        await _put(backend, "/f.txt", b"two!")
        file = await backend.get("/f.txt")
        assert file is not None
        assert file.contents == b"two!"
        assert file.size == 4

    async def test_replace_keeps_created(self, backend):
        await _put(backend, "/f.txt", b"one")
        before = await backend.get("/f.txt")
        await _put(backend, "/f.txt", b"two")
        after = await backend.get("/f.txt")
        assert before is not None and after is not None
        assert after.created == before.created

    async def test_metadata_only_update_keeps_contents(self, backend):
        await _put(backend, "/f.txt", b"keep me", properties={"a": "1"})
        await backend.upsert(UpsertFileCommand(path="/f.txt", properties={"b": "2"}))

        file = await backend.get("/f.txt")
        assert file is not None
        assert file.contents == b"keep me"
        assert file.properties == {"b": "2"}

    async def test_contents_only_update_keeps_properties(self, backend):
        await _put(backend, "/f.txt", b"v1", properties={"a": "1"})
        await _put(backend, "/f.txt", b"v2")

        file = await backend.get("/f.txt")
        assert file is not None
        assert file.properties == {"a": "1"}

    async def test_new_file_without_contents_is_empty(self, backend):
        await backend.upsert(UpsertFileCommand(path="/empty.txt"))
        file = await backend.get("/empty.txt")
        assert file is not None
        assert file.contents == b""
        assert file.size == 0

    @pytest.mark.parametrize(
        "path",
        [pytest.param("/", id="root"), pytest.param("/dir/", id="trailing-slash")],
    )
    async def test_not_a_file_path(self, backend, path: str):
        with pytest.raises(InvalidPathError):
            await _put(backend, path)

    async def test_upsert_over_folder(self, backend):
        await backend.create_folder("/taken")
        with pytest.raises(StorageError):
            await _put(backend, "/taken")


# ---------------------------------------------------------------------------
# delete
# ---------------------------------------------------------------------------


class TestDelete:
    async def test_delete(self, backend):
        await _put(backend, "/gone.txt")
        await backend.delete("/gone.txt")
        assert await backend.get("/gone.txt") is None

    async def test_delete_missing_is_noop(self, backend):
        await backend.delete("/never.txt")

    async def test_delete_keeps_parent_folder(self, backend):
        await _put(backend, "/dir/f.txt")
        await backend.delete("/dir/f.txt")
        folders = await backend.list_folders("/")
        assert [f.full_path for f in folders] == ["/dir"]


# ---------------------------------------------------------------------------
# list_files
# ---------------------------------------------------------------------------


class TestListFiles:
    @pytest.fixture
    async def tree(self, backend):
        for path in ("/a.txt", "/b.txt", "/dir/c.txt", "/dir/sub/d.txt", "/other/e.txt"):
            await _put(backend, path, path.encode())
        return backend

    async def test_direct_children_sorted(self, tree):
        response = await tree.list_files("/")
        assert [f.full_path for f in response.files] == ["/a.txt", "/b.txt"]
        assert not response.has_more

    async def test_subfolder(self, tree):
        response = await tree.list_files("/dir")
        assert [f.full_path for f in response.files] == ["/dir/c.txt"]

    async def test_subfolder_trailing_slash(self, tree):
        response = await tree.list_files("/dir/")
        assert [f.full_path for f in response.files] == ["/dir/c.txt"]

    async def test_recursive(self, tree):
        response = await tree.list_files("/dir", options=ListOptions(recursive=True))
        assert [f.full_path for f in response.files] == ["/dir/c.txt", "/dir/sub/d.txt"]

    async def test_contents_omitted_by_default(self, tree):
        response = await tree.list_files("/")
        assert all(f.contents is None for f in response.files)

    async def test_with_contents(self, tree):
        response = await tree.list_files("/", options=ListOptions(with_contents=True))
        assert [f.contents for f in response.files] == [b"/a.txt", b"/b.txt"]

    async def test_option_filters(self, tree):
        options = ListOptions(
            recursive=True,
            path_filters=PathFilters(allowed_prefixes=["/dir/sub/", "/other/"]),
        )
        response = await tree.list_files("/", options=options)
        assert [f.full_path for f in response.files] == ["/dir/sub/d.txt", "/other/e.txt"]

    async def test_pagination(self, tree):
        options = ListOptions(recursive=True)
        first = await tree.list_files("/", Paging(first=2), options)
        assert [f.full_path for f in first.files] == ["/a.txt", "/b.txt"]
        assert first.has_more
        assert first.last_path == "/b.txt"

        second = await tree.list_files("/", Paging(after=first.last_path, first=2), options)
        assert [f.full_path for f in second.files] == ["/dir/c.txt", "/dir/sub/d.txt"]
        assert second.has_more

        third = await tree.list_files("/", Paging(after=second.last_path, first=2), options)
        assert [f.full_path for f in third.files] == ["/other/e.txt"]
        assert not third.has_more

    async def test_missing_folder_is_empty(self, tree):
        response = await tree.list_files("/nowhere")
        assert response.files == []
        assert not response.has_more


# ---------------------------------------------------------------------------
# Folders
# ---------------------------------------------------------------------------


class TestFolders:
    async def test_upsert_creates_ancestors(self, backend):
        await _put(backend, "/x/y/z.txt")
        top = await backend.list_folders("/")
        assert [f.full_path for f in top] == ["/x"]
        assert top[0].is_folder
        assert top[0].name == "x"

        nested = await backend.list_folders("/", ListOptions(recursive=True))
        assert [f.full_path for f in nested] == ["/x", "/x/y"]

    async def test_create_folder(self, backend):
        await backend.create_folder("/new/inner")
        folders = await backend.list_folders("/new")
        assert [f.full_path for f in folders] == ["/new/inner"]

    async def test_create_existing_folder(self, backend):
        await backend.create_folder("/again")
        await backend.create_folder("/again/")
        folders = await backend.list_folders("/")
        assert [f.full_path for f in folders] == ["/again"]

    async def test_create_folder_over_file(self, backend):
        await _put(backend, "/file")
        with pytest.raises(StorageError):
            await backend.create_folder("/file")

    async def test_file_under_file(self, backend):
        await _put(backend, "/a")
        with pytest.raises(StorageError):
            await _put(backend, "/a/b")
        assert [f.full_path for f in await backend.list_folders("/")] == []

    async def test_folder_under_file(self, backend):
        await _put(backend, "/a")
        with pytest.raises(StorageError):
            await backend.create_folder("/a/b")
        assert [f.full_path for f in (await backend.list_files("/")).files] == ["/a"]
        assert await backend.list_folders("/") == []

    async def test_folders_not_listed_as_files(self, backend):
        await backend.create_folder("/only-folder")
        response = await backend.list_files("/")
        assert response.files == []

    async def test_delete_empty_folder(self, backend):
        await backend.create_folder("/empty")
        await backend.delete_folder("/empty")
        assert await backend.list_folders("/") == []

    async def test_delete_missing_folder_is_noop(self, backend):
        await backend.delete_folder("/missing")

    async def test_delete_non_empty_folder(self, backend):
        await _put(backend, "/full/f.txt")
        with pytest.raises(StorageError, match="not empty"):
            await backend.delete_folder("/full")
        assert await backend.get("/full/f.txt") is not None

    async def test_delete_root(self, backend):
        with pytest.raises(StorageError):
            await backend.delete_folder("/")
