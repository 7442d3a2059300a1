"""
Services module
"""

from qrmenu.services.data_store import DataStore, MutationRecord, MutationStatus, SnapshotSource
from qrmenu.services.feedback_store import FeedbackStore
from qrmenu.services.local_cache import FileLocalCache, LocalCache, MemoryLocalCache, open_local_cache
from qrmenu.services.memory_remote_store import MemoryRemoteStore
from qrmenu.services.remote_store import RemoteStore
from qrmenu.services.rest_remote_store import RestRemoteStore
from qrmenu.services.sql_remote_store import SQLRemoteStore
from qrmenu.services.theme import ThemeProjection, ThemeSettings

__all__ = [
    "DataStore",
    "FeedbackStore",
    "FileLocalCache",
    "LocalCache",
    "MemoryLocalCache",
    "MemoryRemoteStore",
    "MutationRecord",
    "MutationStatus",
    "RemoteStore",
    "RestRemoteStore",
    "SQLRemoteStore",
    "SnapshotSource",
    "ThemeProjection",
    "ThemeSettings",
    "open_local_cache",
]
