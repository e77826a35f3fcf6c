"""
Tests for DataModelBridge (bridge.py).
The bridge must never raise for host failures and must degrade to
no-ops when there is no handle.
"""
import logging

import pytest
from factories import RecordingHandle

from schorm_runtime.bridge import DataModelBridge, TrackingHandle
from schorm_runtime.fields import DataModelField, SuccessStatus
from schorm_runtime.preview import PreviewTrackingHandle


class TestNoHandle:
    def setup_method(self):
        self.bridge = DataModelBridge(None)

    def test_has_no_handle(self):
        assert not self.bridge.has_handle

    def test_reads_return_none(self):
        assert self.bridge.get_value(DataModelField.COMPLETION_STATUS) is None

    def test_writes_succeed_as_noop(self):
        assert self.bridge.set_value(DataModelField.SCORE_RAW, 3) is True

    def test_commit_succeeds(self):
        assert self.bridge.commit() is True

    def test_lifecycle_succeeds(self):
        assert self.bridge.initialize() is True
        assert self.bridge.terminate() is True


class TestDelegation:
    def test_set_value_stringifies(self):
        handle = RecordingHandle()
        bridge = DataModelBridge(handle)
        bridge.set_value(DataModelField.SCORE_RAW, 1.0)
        bridge.set_value(DataModelField.SCORE_SCALED, 0.5)
        bridge.set_value(DataModelField.SUCCESS_STATUS, SuccessStatus.PASSED)
        assert handle.values == {
            "cmi.score.raw": "1",
            "cmi.score.scaled": "0.5",
            "cmi.success_status": "passed",
        }

    def test_get_value_delegates(self):
        handle = RecordingHandle()
        handle.values["cmi.entry"] = "resume"
        assert DataModelBridge(handle).get_value("cmi.entry") == "resume"

    def test_string_field_names_must_be_known(self):
        bridge = DataModelBridge(RecordingHandle())
        with pytest.raises(ValueError):
            bridge.set_value("cmi.score.rwa", 1)

    def test_string_success_convention(self):
        handle = RecordingHandle(return_style="string")
        bridge = DataModelBridge(handle)
        assert bridge.set_value(DataModelField.SCORE_MAX, 2) is True
        assert bridge.commit() is True

    def test_handle_satisfies_protocol(self):
        assert isinstance(RecordingHandle(), TrackingHandle)
        assert isinstance(PreviewTrackingHandle(), TrackingHandle)


class TestFailures:
    def test_exception_becomes_false(self, caplog):
        bridge = DataModelBridge(RecordingHandle(raise_on={"set_value"}))
        with caplog.at_level(logging.WARNING):
            assert bridge.set_value(DataModelField.SCORE_RAW, 1) is False
        assert "raised" in caplog.text

    def test_falsy_return_becomes_false(self):
        bridge = DataModelBridge(RecordingHandle(fail_on={"commit"}))
        assert bridge.commit() is False

    def test_string_false_becomes_false(self, caplog):
        handle = RecordingHandle(fail_on={"set_value"}, return_style="string")
        with caplog.at_level(logging.WARNING):
            assert DataModelBridge(handle).set_value(DataModelField.SCORE_RAW, 1) is False
        assert "101" in caplog.text  # last error code is logged

    def test_get_value_exception_returns_none(self):
        bridge = DataModelBridge(RecordingHandle(raise_on={"get_value"}))
        assert bridge.get_value(DataModelField.ENTRY) is None

    def test_failed_call_not_retried(self):
        handle = RecordingHandle(fail_on={"commit"})
        DataModelBridge(handle).commit()
        assert handle.calls.count("commit") == 1


class TestLifecycleOnce:
    def test_initialize_calls_host_once(self):
        handle = RecordingHandle()
        bridge = DataModelBridge(handle)
        assert bridge.initialize() and bridge.initialize()
        assert handle.calls.count("initialize") == 1

    def test_failed_initialize_is_remembered(self):
        handle = RecordingHandle(fail_on={"initialize"})
        bridge = DataModelBridge(handle)
        assert bridge.initialize() is False
        assert bridge.initialize() is False
        assert handle.calls.count("initialize") == 1
        assert not bridge.initialized

    def test_terminate_calls_host_once(self):
        handle = RecordingHandle()
        bridge = DataModelBridge(handle)
        bridge.terminate()
        bridge.terminate()
        assert handle.calls.count("terminate") == 1
        assert bridge.terminated
