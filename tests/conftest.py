"""
Shared pytest fixtures: fake location, map-display and messaging services
that record every call so tests can assert on the controller's wiring.
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from PIL import Image

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from snapshot_demo.cache import SnapshotCache
from snapshot_demo.controller import ScreenController
from snapshot_demo.model import PermissionState


class FakeLocationService:
    def __init__(self, status=PermissionState.NOT_DETERMINED):
        self.status = status
        self.requests = 0
        self.handler = None

    def set_permission_handler(self, fn):
        self.handler = fn

    def current_permission_status(self):
        return self.status

    def request_permission(self):
        self.requests += 1

    def grant(self, state=PermissionState.AUTHORIZED):
        self.status = state
        self.handler(state)


class FakeMapDisplay:
    def __init__(self, size=(40, 30), color=(30, 120, 200)):
        self.size = size
        self.color = color
        self.show_user_location = False
        self.map_type = None
        self.region = None
        self.animated = None
        self.handler = None
        self.regions_set = []
        self.renders = 0

    def set_show_user_location(self, flag):
        self.show_user_location = flag

    def set_map_type(self, map_type):
        self.map_type = map_type

    def set_region(self, region, animated=False):
        self.region = region
        self.animated = animated
        self.regions_set.append(region)

    def set_update_handler(self, fn):
        self.handler = fn

    def render_current_view_to_image(self):
        self.renders += 1
        return Image.new('RGB', self.size, self.color)


class FakeMessenger:
    def __init__(self, text=True, attachments=True):
        self.text = text
        self.attachments = attachments
        self.drafts = []
        self.completion = None

    def can_send_text(self):
        return self.text

    def can_send_attachments(self):
        return self.attachments

    def compose_and_present(self, draft, completion):
        self.drafts.append(draft)
        self.completion = completion


@pytest.fixture
def location_service():
    return FakeLocationService()


@pytest.fixture
def map_display():
    return FakeMapDisplay()


@pytest.fixture
def messenger():
    return FakeMessenger()


@pytest.fixture
def cache(tmp_path):
    return SnapshotCache(cache_dir=str(tmp_path / "cache"))


@pytest.fixture
def alert():
    return MagicMock()


@pytest.fixture
def controller(location_service, map_display, messenger, cache, alert):
    return ScreenController(location_service, map_display, messenger, cache, alert)
