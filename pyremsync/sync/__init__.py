"""Synchronization of a local directory to a remote directory."""

from .engine import SyncEngine
from .executor import OperationExecutor
from .lister import RemoteLister, iter_paginated_files, walk_directory_tree
from .models import ListPage, LocalFile, ObjectSummary, RemoteDirEntry, RemoteFile
from .planner import SyncAction, SyncOperation, SyncPlan, plan_sync
from .progress import SyncProgressEvent, SyncProgressInfo, SyncProgressTracker
from .scanner import DirectoryScanner
from .target import RemoteTarget, SyncJob, load_sync_jobs_from_json

__all__ = [
    "SyncEngine",
    "OperationExecutor",
    "RemoteLister",
    "iter_paginated_files",
    "walk_directory_tree",
    "DirectoryScanner",
    "LocalFile",
    "RemoteFile",
    "ObjectSummary",
    "ListPage",
    "RemoteDirEntry",
    "SyncAction",
    "SyncOperation",
    "SyncPlan",
    "plan_sync",
    "SyncProgressEvent",
    "SyncProgressInfo",
    "SyncProgressTracker",
    "RemoteTarget",
    "SyncJob",
    "load_sync_jobs_from_json",
]
