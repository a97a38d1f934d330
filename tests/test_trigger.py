import pytest
import requests

from defect_portal.config import TRANSPORT_ASYNC, TRANSPORT_NAVIGATE, PortalConfig
from defect_portal.trigger import (
    DefectTriggerClient,
    DialogMessage,
    render_trigger_script,
    resolve_handler_url,
)


class _FakeResponse:
    def __init__(self, payload=None, error=None):
        self._payload = payload
        self._error = error

    def json(self):
        if self._error is not None:
            raise self._error
        return self._payload


class _FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, json=None, timeout=None):
        self.calls.append((url, json, timeout))
        if self.error is not None:
            raise self.error
        return self.response


ASYNC = PortalConfig(trigger_transport=TRANSPORT_ASYNC)


def test_resolve_handler_url():
    assert resolve_handler_url("/handler") == "/handler"
    assert resolve_handler_url("/handler", "123") == "/handler?poId=123"
    assert resolve_handler_url("/app?script=7", "123", "http://erp") == "http://erp/app?script=7&poId=123"


def test_navigate_transport_returns_target():
    client = DefectTriggerClient("http://erp/", PortalConfig(trigger_transport=TRANSPORT_NAVIGATE))
    outcome = client.activate("123")
    assert outcome.navigate_to == "http://erp/handler?poId=123"
    assert outcome.dialog is None


def test_missing_po_id_shows_error_dialog():
    session = _FakeSession()
    outcome = DefectTriggerClient("http://erp", ASYNC, session=session).activate(None)
    assert outcome.dialog == DialogMessage(
        title="Error", message="Unexpected error: Could not get the Purchase Order ID."
    )
    assert session.calls == []


def test_async_success_dialog():
    session = _FakeSession(_FakeResponse({"success": True, "recordId": "77"}))
    outcome = DefectTriggerClient("http://erp", ASYNC, session=session).activate("123")
    assert session.calls == [("http://erp/handler", {"poId": "123"}, 30)]
    assert outcome.dialog.title == "Defect Reported"
    assert "77" in outcome.dialog.message


def test_async_failure_dialog_uses_server_message():
    session = _FakeSession(_FakeResponse({"success": False, "message": "That record does not exist."}))
    outcome = DefectTriggerClient("http://erp", ASYNC, session=session).activate("123")
    assert outcome.dialog == DialogMessage(title="Error", message="That record does not exist.")


@pytest.mark.parametrize(
    "session",
    [
        _FakeSession(error=requests.ConnectionError("connection refused")),
        _FakeSession(_FakeResponse(error=ValueError("Expecting value"))),
        _FakeSession(_FakeResponse({"recordId": "1"})),
    ],
)
def test_async_transport_or_parse_errors_are_unexpected(session):
    outcome = DefectTriggerClient("http://erp", ASYNC, session=session).activate("123")
    assert outcome.dialog.title == "Error"
    assert outcome.dialog.message.startswith("Unexpected error: ")


def test_trigger_script_carries_transport_and_po_id():
    script = render_trigger_script(ASYNC, "123")
    assert "window.onReportDefectClick" in script
    assert 'const TRANSPORT = "async";' in script
    assert 'const PO_ID = "123";' in script
    assert 'const HANDLER_URL = "/handler";' in script
