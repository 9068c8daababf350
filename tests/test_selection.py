from __future__ import annotations

import pytest

from core.selection import HighlightStyle, SelectionCoordinator, compute_highlight, is_in_focus


def test_selection_starts_empty():
    assert SelectionCoordinator().current() is None


def test_toggle_selects_then_deselects():
    coordinator = SelectionCoordinator()
    assert coordinator.toggle("Selangor") == "Selangor"
    assert coordinator.current() == "Selangor"
    assert coordinator.toggle("Selangor") is None
    assert coordinator.current() is None


def test_toggle_other_state_switches_selection():
    coordinator = SelectionCoordinator()
    coordinator.toggle("Selangor")
    assert coordinator.toggle("Perlis") == "Perlis"


def test_toggle_none_clears_and_is_noop_when_empty():
    coordinator = SelectionCoordinator()
    assert coordinator.toggle(None) is None
    coordinator.toggle("Johor")
    assert coordinator.toggle(None) is None


def test_clear():
    coordinator = SelectionCoordinator()
    assert coordinator.clear() is None
    coordinator.toggle("Sabah")
    assert coordinator.clear() is None
    assert coordinator.current() is None


def test_listeners_are_told_about_changes_only():
    coordinator = SelectionCoordinator()
    seen = []
    unsubscribe = coordinator.subscribe(seen.append)

    coordinator.toggle("Kedah")
    coordinator.toggle(None)
    coordinator.toggle(None)  # already empty, no change
    unsubscribe()
    coordinator.toggle("Pahang")

    assert seen == ["Kedah", None]


@pytest.mark.parametrize("state", ["Kuala Lumpur", "Kelantan"])
def test_default_highlights_without_selection(state):
    assert compute_highlight(state, None) is HighlightStyle.DEFAULT


def test_other_states_unhighlighted_without_selection():
    assert compute_highlight("Johor", None) is HighlightStyle.NONE


def test_selection_replaces_default_highlights():
    assert compute_highlight("Johor", "Johor") is HighlightStyle.SELECTED
    assert compute_highlight("Kuala Lumpur", "Johor") is HighlightStyle.NONE
    assert compute_highlight("Kelantan", "Johor") is HighlightStyle.NONE


def test_is_in_focus():
    assert is_in_focus("Johor", None)
    assert is_in_focus("Johor", "Johor")
    assert not is_in_focus("Perak", "Johor")
