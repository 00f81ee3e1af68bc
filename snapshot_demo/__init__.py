# coding: utf-8
"""Map Snapshot Demo: show a map, follow the user, snapshot it, text it."""

from snapshot_demo.model import (
    PermissionState, MapType, SendOutcome, Coordinate, Span, Region,
    CacheFile, Attachment, MessageDraft,
    SnapshotError, ImageEncodingError, CacheIOError, CaptureInProgressError,
    DEFAULT_CENTER, DEFAULT_SPAN, DEFAULT_REGION,
)
from snapshot_demo.cache import SnapshotCache, default_cache_dir, encode_png
from snapshot_demo.controller import ScreenController

__version__ = '1.0.0'
