"""Tests for the remote lister."""

from unittest.mock import Mock

import pytest

from pyremsync.exceptions import (
    RemsyncListingError,
    RemsyncRemoteNotFoundError,
    RemsyncTransportError,
)
from pyremsync.sync.lister import (
    RemoteLister,
    iter_paginated_files,
    walk_directory_tree,
)
from pyremsync.sync.models import ListPage, ObjectSummary, RemoteDirEntry


def _page(keys, next_token=None):
    return ListPage(
        objects=[ObjectSummary(key=k, size=1) for k in keys],
        next_token=next_token,
    )


class TestIterPaginatedFiles:
    """Tests for paginated object listings."""

    def test_three_pages_of_two_keys(self):
        pages = {
            None: _page(["p/1", "p/2"], "t1"),
            "t1": _page(["p/3", "p/4"], "t2"),
            "t2": _page(["p/5", "p/6"]),
        }
        fetch = Mock(side_effect=lambda prefix, token: pages[token])

        files = list(iter_paginated_files(fetch, "p/"))

        assert [f.relative_path for f in files] == ["1", "2", "3", "4", "5", "6"]
        assert fetch.call_count == 3
        assert [c.args[1] for c in fetch.call_args_list] == [None, "t1", "t2"]

    def test_single_page(self):
        fetch = Mock(return_value=_page(["a.txt"]))
        files = list(iter_paginated_files(fetch, ""))
        assert [f.relative_path for f in files] == ["a.txt"]
        fetch.assert_called_once_with("", None)

    def test_skips_prefix_placeholder_and_directory_markers(self):
        fetch = Mock(return_value=_page(["site/", "site/css/", "site/css/a.css"]))
        files = list(iter_paginated_files(fetch, "site/"))
        assert [f.relative_path for f in files] == ["css/a.css"]

    def test_keeps_size(self):
        fetch = Mock(
            return_value=ListPage(objects=[ObjectSummary(key="x/a", size=42)])
        )
        (remote_file,) = iter_paginated_files(fetch, "x/")
        assert remote_file.size == 42

    def test_empty_listing(self):
        fetch = Mock(return_value=_page([]))
        assert list(iter_paginated_files(fetch, "nothing/")) == []

    def test_double_slash_keys_stay_distinct(self):
        fetch = Mock(return_value=_page(["site//x", "site/x"]))
        files = list(iter_paginated_files(fetch, "site/"))
        assert sorted(f.relative_path for f in files) == ["/x", "x"]


def _dir(name):
    return RemoteDirEntry(name=name, is_dir=True)


def _file(name, size=1):
    return RemoteDirEntry(name=name, is_file=True, size=size)


class TestWalkDirectoryTree:
    """Tests for the depth-first directory walk."""

    def test_walks_nested_directories(self):
        tree = {
            "/srv/www/": [_dir("."), _dir(".."), _file("index.html"), _dir("css")],
            "/srv/www/css": [_file("main.css"), _dir("vendor")],
            "/srv/www/css/vendor": [_file("lib.css")],
        }
        read_dir = Mock(side_effect=lambda path: tree[path])

        files = list(walk_directory_tree(read_dir, "/srv/www/"))

        assert sorted(f.relative_path for f in files) == [
            "css/main.css",
            "css/vendor/lib.css",
            "index.html",
        ]

    def test_skips_dot_entries(self):
        read_dir = Mock(return_value=[_dir("."), _dir("..")])
        assert list(walk_directory_tree(read_dir, "/root/")) == []
        read_dir.assert_called_once_with("/root/")

    def test_empty_root_reads_working_directory(self):
        read_dir = Mock(return_value=[_file("a.txt")])
        files = list(walk_directory_tree(read_dir, ""))
        assert [f.relative_path for f in files] == ["a.txt"]
        read_dir.assert_called_once_with(".")

    def test_missing_root_yields_nothing(self):
        read_dir = Mock(side_effect=RemsyncRemoteNotFoundError("missing"))
        assert list(walk_directory_tree(read_dir, "/nope/")) == []

    def test_vanished_subdirectory_is_skipped(self):
        def read_dir(path):
            if path == "/r/":
                return [_dir("gone"), _file("kept.txt")]
            raise RemsyncRemoteNotFoundError(path)

        files = list(walk_directory_tree(read_dir, "/r/"))
        assert [f.relative_path for f in files] == ["kept.txt"]

    def test_entries_neither_file_nor_dir_are_ignored(self):
        read_dir = Mock(return_value=[RemoteDirEntry(name="fifo"), _file("a")])
        files = list(walk_directory_tree(read_dir, "/r/"))
        assert [f.relative_path for f in files] == ["a"]

    def test_deep_tree_does_not_recurse(self):
        """A chain deeper than the recursion limit is walked iteratively."""
        depth = 2000

        def read_dir(path):
            level = path.count("/") - 1
            if level < depth:
                return [_dir("d")]
            return [_file("leaf.txt")]

        files = list(walk_directory_tree(read_dir, "/r/"))
        assert len(files) == 1
        assert files[0].relative_path.endswith("d/leaf.txt")


class TestRemoteLister:
    """Tests for RemoteLister."""

    def test_builds_map(self, memory_transport):
        memory_transport.objects = {"site/a": b"1", "site/b/c": b"22", "x": b""}
        files = RemoteLister(memory_transport).list_files("site/")
        assert set(files) == {"a", "b/c"}
        assert files["b/c"].size == 2

    def test_pagination_through_transport(self, memory_transport):
        memory_transport.objects = {f"p/{i}": b"" for i in range(6)}
        memory_transport.page_size = 2
        files = RemoteLister(memory_transport).list_files("p/")
        assert len(files) == 6

    def test_missing_prefix_is_empty(self):
        transport = Mock()
        transport.iter_files.side_effect = RemsyncRemoteNotFoundError("no such dir")
        assert RemoteLister(transport).list_files("gone/") == {}

    def test_transport_error_becomes_listing_error(self):
        transport = Mock()
        transport.iter_files.side_effect = RemsyncTransportError("denied")
        with pytest.raises(RemsyncListingError, match="denied"):
            RemoteLister(transport).list_files("site/")

    def test_failure_mid_listing(self):
        def iter_files(prefix):
            yield from iter_paginated_files(fetch, prefix)

        fetch = Mock(
            side_effect=[_page(["a"], "t1"), RemsyncTransportError("timeout")]
        )
        transport = Mock()
        transport.iter_files.side_effect = iter_files

        with pytest.raises(RemsyncListingError):
            RemoteLister(transport).list_files("")
