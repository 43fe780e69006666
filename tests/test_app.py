"""Tests for the Streamlit front-end helpers.

The ``st`` module used by the app is swapped for a small recorder so the
helpers can run outside a Streamlit session.
"""

from typing import Dict, List, Tuple

import pytest

from meshscout.errors import OverpassQueryError
from meshscout.openmaps.models import Center, Run
from meshscout.siting.search import SiteSearch
from meshscout.streamlit_app import app
from meshscout.streamlit_app.app import format_candidate

from builders import ORIGIN, node


class RecordingPlaceholder:
    def __init__(self, events: List[Tuple[str, str]]) -> None:
        self.events = events

    def info(self, message: str) -> None:
        self.events.append(("info", message))

    def empty(self) -> None:
        self.events.append(("cleared", ""))


class RecordingStreamlit:
    def __init__(self) -> None:
        self.session_state: Dict[str, object] = {}
        self.events: List[Tuple[str, str]] = []

    def empty(self) -> RecordingPlaceholder:
        return RecordingPlaceholder(self.events)

    def caption(self, message: str) -> None:
        self.events.append(("caption", message))


@pytest.fixture()
def fake_st(monkeypatch: pytest.MonkeyPatch) -> RecordingStreamlit:
    recorder = RecordingStreamlit()
    monkeypatch.setattr(app, "st", recorder)
    return recorder


def _search(query_error=None) -> SiteSearch:
    def query(_: str):
        if query_error:
            raise query_error
        return [node(1, ORIGIN, {"man_made": "mast"})]

    return SiteSearch(geocoder=lambda code: Center(position=ORIGIN, label="Austin, TX"), element_source=query)


class TestFormatCandidate:
    def test_with_nearest_site(self, sample_run: Run) -> None:
        text = format_candidate(1, sample_run.candidates[0])
        assert text.startswith('**#1 [Tower "North", Block A](https://www.openstreetmap.org/way/42)**')
        assert "Score 120.5" in text
        assert "Height 40.0 m" in text
        assert "Nearest critical: St. Mary's (0.50 km)" in text
        assert "within 1km: 1" in text
        assert "`man_made=tower`" in text

    def test_without_nearest_site(self, sample_run: Run) -> None:
        text = format_candidate(2, sample_run.candidates[1])
        assert "Nearest critical: n/a" in text
        assert "within 3km: 0" in text


class TestHandleSearch:
    def test_progress_is_shown_while_running(self, fake_st: RecordingStreamlit) -> None:
        app.handle_search(_search(), "78701", 3.0, 5)

        assert fake_st.events == [
            ("info", "Looking up ZIP..."),
            ("info", "Querying OpenStreetMap around Austin, TX..."),
            ("info", "Found 1 candidates >= 9m and 0 critical sites. Showing top 1."),
            ("cleared", ""),
        ]
        assert fake_st.session_state[app.SESSION_STATUS_KEY] == (
            "Found 1 candidates >= 9m and 0 critical sites. Showing top 1.",
            False,
        )

    def test_failure_becomes_error_status(self, fake_st: RecordingStreamlit) -> None:
        app.handle_search(_search(OverpassQueryError("Overpass error: 504")), "78701", 3.0, 5)

        assert fake_st.events[-1] == ("cleared", "")
        assert fake_st.session_state[app.SESSION_STATUS_KEY] == ("Error: Overpass error: 504", True)

    def test_validation_failure_becomes_error_status(self, fake_st: RecordingStreamlit) -> None:
        app.handle_search(_search(), "abc", 3.0, 5)
        assert fake_st.session_state[app.SESSION_STATUS_KEY] == ("Error: Enter a valid 5-digit ZIP.", True)


class TestRenderDownloads:
    def test_prompts_before_first_run(self, fake_st: RecordingStreamlit) -> None:
        app.render_downloads(_search())
        assert fake_st.events == [("caption", "Run a search first to export.")]
