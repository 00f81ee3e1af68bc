# coding: utf-8
# Snapshot persistence: one PNG in the app's cache directory, replaced atomically.

import io
import logging
import os
import tempfile

from PIL import Image
from platformdirs import PlatformDirs

from snapshot_demo.model import (
    CacheFile, CacheIOError, ImageEncodingError, SNAPSHOT_FILENAME,
)

logger = logging.getLogger(__name__)

APP_NAME = 'MapSnapshot'


def default_cache_dir():
    """Per-user, non-backed-up cache directory (Library/Caches on iOS)."""
    return PlatformDirs(APP_NAME, appauthor=False, ensure_exists=True).user_cache_dir


def encode_png(image):
    if image is None:
        raise ImageEncodingError('nothing was rendered')
    buf = io.BytesIO()
    try:
        image.save(buf, format='PNG')
    except (OSError, ValueError) as e:
        raise ImageEncodingError(f'unable to create PNG representation: {e}') from e
    return buf.getvalue()


class SnapshotCache:
    """Owns the single cached snapshot file.

    Every write replaces the previous snapshot; nothing is versioned and
    nothing is ever deleted here.
    """

    def __init__(self, cache_dir=None, filename=SNAPSHOT_FILENAME):
        self.cache_dir = cache_dir or default_cache_dir()
        self.filename = filename

    @property
    def path(self):
        return os.path.join(self.cache_dir, self.filename)

    def exists(self):
        return os.path.isfile(self.path)

    def write(self, data):
        path = self.path
        tmp_name = None
        try:
            os.makedirs(self.cache_dir, exist_ok=True)
            tmp = tempfile.NamedTemporaryFile(
                dir=self.cache_dir, prefix='.' + self.filename, suffix='.tmp', delete=False)
            tmp_name = tmp.name
            with tmp:
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                try:
                    os.remove(tmp_name)
                except OSError:
                    logger.warning(f'Could not remove temp file {tmp_name}')
            raise CacheIOError(f'error saving {path}: {e}') from e
        logger.debug(f'Wrote {len(data)} bytes to {path}')
        return CacheFile(path=path, data=bytes(data))

    def read(self):
        """Raw bytes of the cached snapshot, or None when there is none yet."""
        try:
            with open(self.path, 'rb') as f:
                return f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise CacheIOError(f'error reading {self.path}: {e}') from e

    def load_image(self):
        data = self.read()
        if data is None:
            return None
        try:
            img = Image.open(io.BytesIO(data))
            img.load()
        except OSError as e:
            raise CacheIOError(f'cached snapshot is unreadable: {e}') from e
        return img
