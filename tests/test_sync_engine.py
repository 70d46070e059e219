"""Tests for the sync engine."""

from unittest.mock import Mock

import pytest

from pyremsync.exceptions import (
    RemsyncInvalidInputError,
    RemsyncListingError,
    RemsyncOperationError,
)
from pyremsync.output import OutputFormatter
from pyremsync.sync import SyncAction, SyncEngine, SyncProgressTracker
from pyremsync.transports.base import RemoteTransport


class TestSyncEngine:
    """Test SyncEngine functionality."""

    @pytest.fixture
    def mock_output(self):
        """Create a mock output formatter."""
        output = Mock(spec=OutputFormatter)
        output.quiet = True  # Suppress output during tests
        output.json_output = False
        output.console = None
        return output

    @pytest.fixture
    def sink(self):
        return Mock()

    @pytest.fixture
    def engine(self, memory_transport, mock_output, sink):
        """Create a sync engine over the in-memory transport."""
        return SyncEngine(memory_transport, mock_output, SyncProgressTracker(sink))

    def _messages(self, sink):
        return [c.args[0].message for c in sink.call_args_list]

    def test_create_sync_engine(self, memory_transport, mock_output):
        engine = SyncEngine(memory_transport, mock_output)
        assert engine.transport is memory_transport
        assert engine.output is mock_output
        assert engine.progress is not None

    def test_sync_into_empty_remote(self, engine, memory_transport, local_tree):
        stats = engine.sync(local_tree, "site")

        assert stats == {"uploads": 3, "overwrites": 0, "deletes": 0, "total": 3}
        assert memory_transport.objects == {
            "site/index.html": b"<html></html>",
            "site/css/main.css": b"body {}",
            "site/.well-known/security.txt": b"contact",
        }

    def test_completeness_and_cleanup(self, engine, memory_transport, local_tree):
        memory_transport.objects = {
            "site/index.html": b"stale",
            "site/old/page.html": b"old",
            "other/keep.txt": b"outside prefix",
        }

        stats = engine.sync(local_tree, "site/")

        assert stats == {"uploads": 2, "overwrites": 1, "deletes": 1, "total": 4}
        assert memory_transport.objects["site/index.html"] == b"<html></html>"
        assert "site/old/page.html" not in memory_transport.objects
        # Keys outside the prefix are never touched
        assert memory_transport.objects["other/keep.txt"] == b"outside prefix"

    def test_second_run_only_overwrites(self, engine, memory_transport, local_tree):
        engine.sync(local_tree, "site")
        after_first = dict(memory_transport.objects)

        stats = engine.sync(local_tree, "site")

        assert stats == {"uploads": 0, "overwrites": 3, "deletes": 0, "total": 3}
        assert memory_transport.objects == after_first

    def test_deletes_run_after_transfers(self, engine, memory_transport, local_tree):
        memory_transport.objects = {"site/a-old.txt": b"", "site/zz.txt": b""}

        engine.sync(local_tree, "site")

        kinds = [kind for kind, _ in memory_transport.calls]
        assert kinds == ["put", "put", "put", "delete", "delete"]

    def test_progress_sequence(self, engine, sink, memory_transport, local_tree):
        memory_transport.objects = {"site/index.html": b"", "site/gone.txt": b""}

        engine.sync(local_tree, "site")

        assert self._messages(sink) == [
            "scanning local files",
            "listing remote files",
            "4 operations planned",
            "uploading: site/.well-known/security.txt",
            "uploading: site/css/main.css",
            "overwriting: site/index.html",
            "deleting: site/gone.txt",
            "sync complete",
        ]

    def test_empty_local_and_remote(self, engine, sink, memory_transport, tmp_path):
        stats = engine.sync(tmp_path, "site")

        assert stats["total"] == 0
        assert memory_transport.calls == []
        assert self._messages(sink)[-2:] == ["0 operations planned", "already in sync"]

    def test_empty_local_deletes_remote(self, engine, memory_transport, tmp_path):
        memory_transport.objects = {"site/a": b"", "site/b/c": b""}

        stats = engine.sync(tmp_path, "site")

        assert stats["deletes"] == 2
        assert memory_transport.objects == {}

    def test_double_slash_keys_are_deleted_exactly(
        self, engine, memory_transport, tmp_path
    ):
        memory_transport.objects = {"site//stale.txt": b"x", "site/stale.txt": b"y"}

        stats = engine.sync(tmp_path, "site")

        assert stats["deletes"] == 2
        assert memory_transport.objects == {}
        assert sorted(key for _, key in memory_transport.calls) == [
            "site//stale.txt",
            "site/stale.txt",
        ]
        assert engine.sync(tmp_path, "site")["total"] == 0

    def test_dry_run_changes_nothing(self, engine, sink, memory_transport, local_tree):
        memory_transport.objects = {"site/gone.txt": b""}

        stats = engine.sync(local_tree, "site", dry_run=True)

        assert stats == {"uploads": 3, "overwrites": 0, "deletes": 1, "total": 4}
        assert memory_transport.calls == []
        assert memory_transport.objects == {"site/gone.txt": b""}
        assert "sync complete" not in self._messages(sink)

    def test_exclude_patterns(self, engine, memory_transport, local_tree):
        engine.sync(
            local_tree, "site", ignore_patterns=["*.css"], exclude_dot_files=True
        )
        assert set(memory_transport.objects) == {"site/index.html"}

    def test_root_prefix(self, engine, memory_transport, local_tree):
        engine.sync(local_tree, "")
        assert "index.html" in memory_transport.objects

    def test_missing_local_dir(self, engine, memory_transport, tmp_path):
        with pytest.raises(RemsyncInvalidInputError, match="does not exist"):
            engine.sync(tmp_path / "missing", "site")
        assert memory_transport.calls == []

    def test_local_path_is_file(self, engine, tmp_path):
        file_path = tmp_path / "file.txt"
        file_path.write_text("x")
        with pytest.raises(RemsyncInvalidInputError, match="not a directory"):
            engine.sync(file_path, "site")

    def test_invalid_remote_root(self, engine, local_tree):
        with pytest.raises(RemsyncInvalidInputError):
            engine.sync(local_tree, "site/../etc")

    def test_listing_failure_stops_before_operations(self, mock_output, local_tree):
        transport = Mock(spec=RemoteTransport)
        transport.normalize_root.return_value = "site/"
        transport.iter_files.side_effect = OSError("network down")

        with pytest.raises(RemsyncListingError):
            SyncEngine(transport, mock_output).sync(local_tree, "site")

        transport.put.assert_not_called()
        transport.delete.assert_not_called()

    def test_operation_failure_aborts(self, engine, memory_transport, local_tree):
        memory_transport.objects = {"site/gone.txt": b""}
        memory_transport.fail_keys = {"site/css/main.css"}

        with pytest.raises(RemsyncOperationError) as exc_info:
            engine.sync(local_tree, "site")

        assert exc_info.value.operation.action == SyncAction.UPLOAD
        assert exc_info.value.operation.remote_key == "site/css/main.css"
        # Applied before the failure, not rolled back
        assert "site/.well-known/security.txt" in memory_transport.objects
        # Never attempted
        assert ("delete", "site/gone.txt") not in memory_transport.calls
        assert "site/gone.txt" in memory_transport.objects

    def test_failing_progress_sink(self, mock_output, memory_transport, local_tree):
        sink = Mock(side_effect=RuntimeError("display closed"))
        engine = SyncEngine(memory_transport, mock_output, SyncProgressTracker(sink))

        stats = engine.sync(local_tree, "site")

        assert stats["uploads"] == 3
        assert sink.call_count > 0

    def test_directory_remote_root_is_ensured(self, mock_output, local_tree):
        transport = Mock(spec=RemoteTransport)
        transport.absolute_paths = True
        transport.supports_content_type = False
        transport.normalize_root.return_value = "/srv/www/"
        transport.iter_files.return_value = iter([])

        SyncEngine(transport, mock_output).sync(local_tree, "/srv/www")

        transport.ensure_directory.assert_called_once_with("/srv/www/")
        assert transport.put.call_count == 3

    def test_object_store_root_not_ensured(self, mock_output, local_tree):
        transport = Mock(spec=RemoteTransport)
        transport.absolute_paths = False
        transport.supports_content_type = True
        transport.normalize_root.return_value = "site/"
        transport.iter_files.return_value = iter([])

        SyncEngine(transport, mock_output).sync(local_tree, "site")

        transport.ensure_directory.assert_not_called()


class TestSyncEngineOutput:
    """Tests for plan and summary display."""

    def test_plan_and_summary_shown(self, memory_transport, local_tree):
        output = Mock(spec=OutputFormatter)
        output.quiet = False
        output.json_output = True  # keeps the spinner off
        output.console = None

        SyncEngine(memory_transport, output).sync(local_tree, "site")

        info_lines = [c.args[0] for c in output.info.call_args_list]
        assert "Sync plan:" in info_lines
        assert "  Uploaded: 3" in info_lines
        output.success.assert_called_once_with("Sync complete!")

    def test_in_sync_message(self, memory_transport, tmp_path):
        output = Mock(spec=OutputFormatter)
        output.quiet = False
        output.json_output = True
        output.console = None

        SyncEngine(memory_transport, output).sync(tmp_path, "site")

        output.info.assert_any_call("No changes needed - everything is in sync!")
