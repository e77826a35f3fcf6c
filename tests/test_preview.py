"""
Tests for the in-process preview tracking API (preview.py).
"""
import logging

from schorm_runtime.bridge import DataModelBridge
from schorm_runtime.fields import DataModelField
from schorm_runtime.session import open_session
from schorm_runtime.preview import PreviewTrackingHandle


class TestPreviewHandle:
    def test_defaults(self):
        api = PreviewTrackingHandle()
        assert api.get_value("cmi.completion_status") == "unknown"
        assert api.get_value("cmi.entry") == "ab-initio"
        assert api.get_value("cmi.score.raw") == ""

    def test_lifecycle(self):
        api = PreviewTrackingHandle()
        assert api.initialize() == "true"
        assert api.active
        api.terminate()
        assert not api.active

    def test_records_calls(self, caplog):
        api = PreviewTrackingHandle()
        with caplog.at_level(logging.INFO):
            api.set_value("cmi.score.raw", "3")
        assert api.values == {"cmi.score.raw": "3"}
        assert api.calls == [("set_value", ("cmi.score.raw", "3"))]
        assert "[preview API]" in caplog.text

    def test_works_behind_bridge(self):
        api = PreviewTrackingHandle()
        bridge = DataModelBridge(api)
        assert bridge.set_value(DataModelField.SCORE_RAW, 2)
        assert bridge.commit()
        assert bridge.get_value(DataModelField.SCORE_RAW) == "2"
        assert api.commits == 1

    def test_session_with_preview_handle(self, settings, store, two_question_quiz):
        api = PreviewTrackingHandle()
        session = open_session([{"API_1484_11": api}], settings=settings, store=store)
        session.quiz(two_question_quiz).submit({"q1": "a", "q2": False})
        assert api.values["cmi.success_status"] == "passed"
        assert api.values["cmi.completion_status"] == "completed"
