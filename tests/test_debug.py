"""
Tests for the rich console dumps (debug.py).
"""
from rich.console import Console

from schorm_runtime.debug import dump_attempt, dump_media_state, dump_session, media_state_table


def _console():
    return Console(record=True, width=120, color_system=None)


class TestMediaDump:
    def test_table_rows(self, live_session):
        media = live_session.media
        media.register(["intro", "outro"])
        media.mark_completed("intro")
        table = media_state_table(media)
        assert table.row_count == 2
        assert table.caption == "All completed: False"

    def test_dump_lists_ids(self, live_session):
        media = live_session.media
        media.register(["intro"])
        console = _console()
        dump_media_state(media, console=console)
        text = console.export_text()
        assert "Tracked IDs: intro" in text
        assert "Media completion" in text


class TestAttemptDump:
    def test_before_submit(self, live_session, two_question_quiz):
        console = _console()
        dump_attempt(live_session.quiz(two_question_quiz), console=console)
        assert "Quiz module-1-check state: not_submitted" in console.export_text()

    def test_after_submit(self, live_session, two_question_quiz):
        attempt = live_session.quiz(two_question_quiz)
        attempt.submit({"q1": "a", "q2": True})
        console = _console()
        dump_attempt(attempt, console=console)
        text = console.export_text()
        assert "state: submitted" in text
        assert "q1" in text and "q2" in text
        assert "FAILED" in text


class TestSessionDump:
    def test_live(self, live_session):
        console = _console()
        dump_session(live_session, console=console)
        text = console.export_text()
        assert "live (API_1484_11 at hop 1)" in text
        assert "Storage: In-memory" in text

    def test_preview(self, preview_session):
        console = _console()
        dump_session(preview_session, console=console)
        assert "mode: preview" in console.export_text()
