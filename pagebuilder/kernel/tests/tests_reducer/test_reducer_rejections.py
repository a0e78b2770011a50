"""
Page Builder Reducer -- Rejection & Determinism Tests

Nothing in the reducer raises. Every failure degrades to "state unchanged":
the caller's state object comes back as-is, with no patches and an error
string of the form CODE: detail.

Replaying the same events always yields the same state.
"""

import json

import pytest

from pagebuilder.kernel.events import make_event
from pagebuilder.kernel.reducer import empty_state, reduce, replay


def snap_json(snap):
    return json.dumps(snap, sort_keys=True)


REJECTED = [
    ("field.erase", {"field": "name"}, "UNKNOWN_EVENT"),
    ("field.input", {"value": "x"}, "INVALID_PAYLOAD"),
    ("field.input", {"field": "ghost", "value": "x"}, "UNKNOWN_FIELD"),
    ("field.input", {"field": "bg_color", "value": "#fff"}, "WRONG_FIELD_KIND"),
    ("image.link", {"field": "univ_logo", "url": "ftp://x.png"}, "INVALID_IMAGE_URL"),
    ("style.set", {"field": "univ", "size": -1}, "INVALID_SIZE"),
    ("visibility.toggle", {"toggle": "nope"}, "UNKNOWN_TOGGLE"),
    ("background.set", {"color": "blue"}, "INVALID_COLOR"),
    ("background.set", {"opacity": 150}, "INVALID_OPACITY"),
    ("border.style", {"style": "zigzag"}, "INVALID_BORDER_STYLE"),
    ("border.color", {"color": "#12"}, "INVALID_COLOR"),
    ("viewport.resize", {"width": -1}, "INVALID_WIDTH"),
]


# ============================================================================
# Rejections
# ============================================================================


class TestRejections:
    @pytest.mark.parametrize("type,payload,code", REJECTED)
    def test_rejected_without_raising(self, type, payload, code):
        snap = empty_state()
        before = snap_json(snap)
        r = reduce(snap, make_event(seq=1, type=type, payload=payload))
        assert not r.applied
        assert r.error.startswith(code)
        assert r.patches == []
        assert r.state is snap
        assert snap_json(snap) == before

    def test_non_dict_payload_rejected(self):
        r = reduce(empty_state(), make_event(seq=1, type="arc.set", payload=None))
        assert not r.applied
        assert r.error.startswith("INVALID_PAYLOAD")


# ============================================================================
# Determinism
# ============================================================================


def session_events():
    payloads = [
        ("field.input", {"field": "name", "value": "Asha Rao"}),
        ("field.input", {"field": "univ", "value": "University of Calcutta"}),
        ("style.set", {"field": "coll", "color": "#003366", "size": 26}),
        ("arc.set", {"depth": 80}),
        ("visibility.toggle", {"toggle": "row_reg"}),
        ("image.link", {"field": "univ_logo", "url": "ftp://rejected.png"}),
        ("background.set", {"color": "#fdf6e3", "opacity": 90}),
        ("position.set", {"field": "coll_logo_offset", "offset": 12}),
        ("border.style", {"style": "ornate"}),
    ]
    return [
        make_event(seq=i, type=t, payload=p, timestamp="2026-10-01T09:00:00Z")
        for i, (t, p) in enumerate(payloads, start=1)
    ]


class TestDeterminism:
    def test_replay_is_stable(self):
        results = {snap_json(replay(session_events())) for _ in range(20)}
        assert len(results) == 1

    def test_replay_equals_manual_reduce(self):
        snap = empty_state()
        for ev in session_events():
            r = reduce(snap, ev)
            if r.applied:
                snap = r.state
        assert snap_json(snap) == snap_json(replay(session_events()))

    def test_rejected_event_skipped_in_replay(self):
        snap = replay(session_events())
        assert "univ_logo" not in snap["images"]
        assert snap["visibility"]["row_reg"] is False
        assert snap["arc"] == {"depth": 80, "font_size": 24}


class TestEmptyState:
    def test_top_level_sections(self):
        assert set(empty_state()) == {
            "values",
            "images",
            "styles",
            "positions",
            "visibility",
            "arc",
            "background",
            "border",
            "viewport",
        }
