"""Tests for the live window registry."""

from __future__ import annotations

import pytest

from classlens.services.settings import WindowBounds
from classlens.session.windows import NEW_FRAME_OFFSET, WindowHandle, WindowRegistry


def test_next_and_previous_cycle_in_creation_order() -> None:
    registry = WindowRegistry()
    first, second, third = registry.create(), registry.create(), registry.create()

    assert registry.next(first) is second
    assert registry.next(third) is first
    assert registry.previous(first) is third
    assert registry.previous(second) is first


def test_single_window_cycles_to_itself() -> None:
    registry = WindowRegistry()
    only = registry.create()

    assert registry.next(only) is only
    assert not registry.has_multiple()


def test_unregister_keeps_remaining_order() -> None:
    registry = WindowRegistry()
    first, second, third = registry.create(), registry.create(), registry.create()

    registry.unregister(second)

    assert registry.handles() == (first, third)
    assert registry.next(first) is third
    with pytest.raises(KeyError):
        registry.next(second)


def test_register_rejects_out_of_order_sequence() -> None:
    registry = WindowRegistry()
    registry.register(WindowHandle(sequence=5))

    with pytest.raises(ValueError):
        registry.register(WindowHandle(sequence=2))


def test_active_window_tracks_activation_and_removal() -> None:
    registry = WindowRegistry()
    first, second = registry.create(), registry.create()

    assert registry.active is first
    registry.activate(second)
    assert registry.active is second
    registry.unregister(second)
    assert registry.active is first
    registry.unregister(first)
    assert registry.active is None
    assert len(registry) == 0


def test_offset_bounds_cascades_new_frames() -> None:
    bounds = WindowBounds(x=10, y=20, width=640, height=480)

    shifted = WindowRegistry.offset_bounds(bounds)

    assert (shifted.x, shifted.y) == (10 + NEW_FRAME_OFFSET, 20 + NEW_FRAME_OFFSET)
    assert (shifted.width, shifted.height) == (640, 480)
    assert bounds.x == 10


def test_create_after_register_continues_sequence() -> None:
    registry = WindowRegistry()
    adopted = WindowHandle(sequence=5)
    registry.register(adopted)

    created = registry.create()

    assert created.sequence == 6
    assert registry.handles() == (adopted, created)
    assert registry.next(created) is adopted
