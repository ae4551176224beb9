"""Tests for fs/types.py value types."""

from __future__ import annotations

import pytest

from filemount.fs.listing import paginate
from filemount.fs.types import DIRECTORY_MIME_TYPE, File, FileMetadata, Paging


class TestPaging:
    def test_defaults(self):
        paging = Paging()
        assert paging.after == ""
        assert paging.first == 100

    @pytest.mark.parametrize(
        "first",
        [pytest.param(0, id="zero"), pytest.param(-1, id="negative")],
    )
    def test_page_size_must_be_positive(self, first: int):
        with pytest.raises(ValueError, match="at least 1"):
            Paging(first=first)

    def test_single_item_pages_terminate(self):
        files = [File(full_path=f"/{name}", name=name) for name in ("a", "b", "c")]
        seen: list[str] = []
        paging = Paging(first=1)
        while True:
            response = paginate(files, paging)
            seen.extend(f.full_path for f in response.files)
            if not response.has_more:
                break
            paging = Paging(after=response.last_path, first=1)
        assert seen == ["/a", "/b", "/c"]


class TestFileMetadata:
    def test_is_folder(self):
        assert FileMetadata(full_path="/d", name="d", mime_type=DIRECTORY_MIME_TYPE).is_folder
        assert not FileMetadata(full_path="/f", name="f").is_folder
