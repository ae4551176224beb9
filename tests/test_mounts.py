"""Tests for MountRegistry and mount-name validation."""

from __future__ import annotations

import pytest

from filemount.fs.exceptions import DuplicateMountNameError, InvalidMountNameError
from filemount.fs.memory import MemoryBackend
from filemount.fs.mounts import MountRegistry, validate_mount_name


class TestValidateMountName:
    @pytest.mark.parametrize("name", ["public", "db", "my-mount_2", "with.dot"])
    def test_valid(self, name: str):
        validate_mount_name(name)

    @pytest.mark.parametrize(
        "name",
        [
            pytest.param("", id="empty"),
            pytest.param("a/b", id="delimiter"),
            pytest.param("/public", id="leading-slash"),
            pytest.param(".", id="dot"),
            pytest.param("..", id="dotdot"),
            pytest.param("tab\there", id="control"),
        ],
    )
    def test_invalid(self, name: str):
        with pytest.raises(InvalidMountNameError):
            validate_mount_name(name)


class TestMountRegistry:
    def test_from_pairs_keeps_order(self):
        a, b = MemoryBackend(), MemoryBackend()
        registry = MountRegistry([("b", b), ("a", a)])
        assert list(registry) == ["b", "a"]
        assert registry["a"] is a
        assert len(registry) == 2

    def test_from_mapping(self):
        backend = MemoryBackend()
        registry = MountRegistry({"x": backend})
        assert registry.has_mount("x")
        assert not registry.has_mount("y")

    def test_duplicate_name(self):
        with pytest.raises(DuplicateMountNameError, match="Duplicate backend name x"):
            MountRegistry([("x", MemoryBackend()), ("x", MemoryBackend())])

    def test_invalid_name(self):
        with pytest.raises(InvalidMountNameError):
            MountRegistry([("a/b", MemoryBackend())])

    def test_read_only(self):
        registry = MountRegistry([("x", MemoryBackend())])
        with pytest.raises(TypeError):
            registry["y"] = MemoryBackend()  # type: ignore[index]
        with pytest.raises(TypeError):
            registry._backends["y"] = MemoryBackend()  # type: ignore[index]

    def test_caller_mapping_not_shared(self):
        source = {"x": MemoryBackend()}
        registry = MountRegistry(source)
        source["y"] = MemoryBackend()
        assert not registry.has_mount("y")


class TestMatch:
    @pytest.fixture
    def registry(self) -> MountRegistry:
        return MountRegistry([("db", MemoryBackend()), ("db2", MemoryBackend())])

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            pytest.param("/db/x.txt", "db", id="db"),
            pytest.param("/db", "db", id="bare"),
            pytest.param("/db2/x.txt", "db2", id="longer-name"),
            pytest.param("db2", "db2", id="name-only"),
        ],
    )
    def test_match(self, registry: MountRegistry, path: str, expected: str):
        matched = registry.match(path)
        assert matched is not None
        assert matched[0] == expected
        assert matched[1] is registry[expected]

    @pytest.mark.parametrize("path", ["/", "/dbx/y", "/other/db/x"])
    def test_no_match(self, registry: MountRegistry, path: str):
        assert registry.match(path) is None
