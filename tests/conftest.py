"""Shared fixtures for pyremsync tests."""

from pathlib import Path
from typing import Optional

import pytest

from pyremsync.sync.models import ListPage, ObjectSummary
from pyremsync.transports.base import PaginatedTransport


class InMemoryTransport(PaginatedTransport):
    """Object store kept in a dict, listed in small pages."""

    kind = "memory"

    def __init__(self, objects: Optional[dict[str, bytes]] = None, page_size: int = 2):
        self.objects: dict[str, bytes] = dict(objects or {})
        self.page_size = page_size
        self.fail_keys: set[str] = set()
        self.calls: list[tuple[str, str]] = []
        self.closed = False

    def list_page(self, prefix, continuation_token=None):
        keys = sorted(k for k in self.objects if k.startswith(prefix))
        start = int(continuation_token or 0)
        end = start + self.page_size
        return ListPage(
            objects=[
                ObjectSummary(key=k, size=len(self.objects[k]))
                for k in keys[start:end]
            ],
            next_token=str(end) if end < len(keys) else None,
        )

    def put(self, local_path, remote_key, content_type=None):
        self.calls.append(("put", remote_key))
        if remote_key in self.fail_keys:
            raise OSError(f"simulated failure for {remote_key}")
        self.objects[remote_key] = Path(local_path).read_bytes()

    def delete(self, remote_key):
        self.calls.append(("delete", remote_key))
        if remote_key in self.fail_keys:
            raise OSError(f"simulated failure for {remote_key}")
        self.objects.pop(remote_key, None)

    def close(self):
        self.closed = True

    def __repr__(self):
        return "InMemoryTransport()"


@pytest.fixture
def memory_transport():
    """Provide an empty in-memory transport."""
    return InMemoryTransport()


@pytest.fixture
def local_tree(tmp_path):
    """Create a local directory tree and return its root."""
    root = tmp_path / "local"
    (root / "css").mkdir(parents=True)
    (root / "index.html").write_text("<html></html>")
    (root / "css" / "main.css").write_text("body {}")
    (root / ".well-known").mkdir()
    (root / ".well-known" / "security.txt").write_text("contact")
    return root
