"""Unit tests: state rendering."""
from __future__ import annotations
from sessionctl.models.types import State
from sessionctl.presentation import StateView, render_state


class TestRenderState:
    def test_prefixed_during_first_run(self):
        assert render_state(State.JOINED, first_run_complete=False) == "[TUTORIAL] Joined"

    def test_plain_after_first_run(self):
        assert render_state(State.EXITING_SESSION, first_run_complete=True) == "ExitingSession"


class TestStateView:
    def test_follows_guided_on_each_render(self):
        guided = [True]
        echoed = []
        view = StateView(lambda: guided[0], echo=echoed.append)
        view(State.LEAVING)
        guided[0] = False
        view(State.IN_SESSION)
        assert view.lines == ["[TUTORIAL] Leaving", "InSession"]
        assert echoed == view.lines
        assert view.text == "InSession"

    def test_empty_text(self):
        assert StateView(lambda: False).text == ""
