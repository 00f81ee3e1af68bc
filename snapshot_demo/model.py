# coding: utf-8
# Value types shared by the controller, the cache and the platform adapters.

import enum
from dataclasses import dataclass, field, replace
from typing import List, Optional

SNAPSHOT_FILENAME = 'mapSnapshot.png'
PNG_MIME_TYPE = 'image/png'


class PermissionState(enum.Enum):
    NOT_DETERMINED = 'not_determined'
    AUTHORIZED = 'authorized'
    DENIED = 'denied'
    RESTRICTED = 'restricted'


class MapType(enum.Enum):
    STANDARD = 'standard'
    SATELLITE = 'satellite'
    HYBRID = 'hybrid'


class SendOutcome(enum.Enum):
    SENT = 'sent'
    CANCELLED = 'cancelled'
    FAILED = 'failed'
    UNKNOWN = 'unknown'


# ===== Geometry =====
@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Span:
    lat_delta: float
    lon_delta: float


@dataclass(frozen=True)
class Region:
    center: Coordinate
    span: Span

    def recentered(self, coordinate):
        """Same span, new center."""
        return replace(self, center=coordinate)


DEFAULT_CENTER = Coordinate(52.0, 0.0)
DEFAULT_SPAN = Span(0.01, 0.01)
DEFAULT_REGION = Region(DEFAULT_CENTER, DEFAULT_SPAN)


# ===== Files & messages =====
@dataclass(frozen=True)
class CacheFile:
    path: str
    data: bytes = field(repr=False)


@dataclass(frozen=True)
class Attachment:
    data: bytes = field(repr=False)
    mime_type: str = PNG_MIME_TYPE
    filename: str = SNAPSHOT_FILENAME


@dataclass
class MessageDraft:
    body: str
    recipients: List[str] = field(default_factory=list)
    attachment: Optional[Attachment] = None


# ===== Errors =====
class SnapshotError(Exception):
    """Base class for capture and cache failures."""


class ImageEncodingError(SnapshotError):
    pass


class CacheIOError(SnapshotError, OSError):
    pass


class CaptureInProgressError(SnapshotError):
    def __init__(self, message='capture already in progress'):
        super().__init__(message)
