"""Tests for the value types."""

import dataclasses

import pytest

from snapshot_demo.model import (
    Coordinate, DEFAULT_REGION, MessageDraft, Region, Span,
)


def test_default_region():
    assert DEFAULT_REGION == Region(Coordinate(52.0, 0.0), Span(0.01, 0.01))


def test_recentered_keeps_span():
    moved = DEFAULT_REGION.recentered(Coordinate(52.05, -0.01))
    assert moved.center == Coordinate(52.05, -0.01)
    assert moved.span == DEFAULT_REGION.span
    assert DEFAULT_REGION.center == Coordinate(52.0, 0.0)


def test_coordinate_is_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        Coordinate(1.0, 2.0).latitude = 3.0


def test_message_draft_defaults():
    a, b = MessageDraft(body="x"), MessageDraft(body="y")
    a.recipients.append("555-0100")
    assert b.recipients == []
    assert a.attachment is None
