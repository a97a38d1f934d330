"""The "Report Defect" trigger.

Two transports reach the handler:

* ``navigate`` sends the browser to ``GET <handler>?poId=<id>`` and lets the
  handler render the selection form.
* ``async`` posts ``{"poId": <id>}`` as JSON and reports the handler's
  ``{success, recordId, message}`` acknowledgement in a dialog.

``render_trigger_script`` produces the browser side of the button;
``DefectTriggerClient`` drives the same two transports from Python.
"""

import logging
from dataclasses import dataclass
from urllib.parse import urlencode

import requests

from defect_portal.config import TRANSPORT_ASYNC, TRANSPORT_NAVIGATE, PortalConfig
from defect_portal.contracts import DefectAck
from defect_portal.rendering import template_env

logger = logging.getLogger(__name__)

TRIGGER_FUNCTION = "onReportDefectClick"
MISSING_PO_ID = "Could not get the Purchase Order ID."
SUCCESS_TITLE = "Defect Reported"


@dataclass(frozen=True)
class DialogMessage:
    title: str
    message: str


@dataclass(frozen=True)
class TriggerOutcome:
    navigate_to: str | None = None
    dialog: DialogMessage | None = None


def unexpected_error(exc: Exception) -> DialogMessage:
    return DialogMessage(title="Error", message=f"Unexpected error: {exc}")


def resolve_handler_url(handler_path: str, po_id: str | None = None, base_url: str = "") -> str:
    url = base_url.rstrip("/") + handler_path
    if po_id:
        sep = "&" if "?" in url else "?"
        url = f"{url}{sep}{urlencode({'poId': po_id})}"
    return url


def render_trigger_script(config: PortalConfig, po_id: str | None) -> str:
    return template_env().get_template("trigger.js").render(
        handler_url=config.handler_path,
        transport=config.trigger_transport,
        po_id=po_id or "",
        function_name=TRIGGER_FUNCTION,
        success_title=SUCCESS_TITLE,
    )


def dialog_for_ack(ack: DefectAck) -> DialogMessage:
    if ack.success:
        return DialogMessage(
            title=SUCCESS_TITLE,
            message=f"Manufacturing Defect record created (ID: {ack.record_id}).",
        )
    return DialogMessage(title="Error", message=ack.message or "Could not create the defect record.")


class DefectTriggerClient:
    def __init__(
        self,
        base_url: str,
        config: PortalConfig,
        session: requests.Session | None = None,
        timeout: float = 30,
    ):
        self._base_url = base_url
        self._config = config
        self._session = session or requests.Session()
        self._timeout = timeout

    def activate(self, po_id: str | None) -> TriggerOutcome:
        try:
            if not po_id:
                raise ValueError(MISSING_PO_ID)
            if self._config.trigger_transport == TRANSPORT_NAVIGATE:
                return TriggerOutcome(
                    navigate_to=resolve_handler_url(self._config.handler_path, po_id, self._base_url)
                )
            if self._config.trigger_transport == TRANSPORT_ASYNC:
                return TriggerOutcome(dialog=self._submit(po_id))
            raise ValueError(f"Unsupported trigger transport: {self._config.trigger_transport!r}")
        except Exception as exc:
            logger.error("Report defect trigger failed: %s", exc)
            return TriggerOutcome(dialog=unexpected_error(exc))

    def _submit(self, po_id: str) -> DialogMessage:
        url = resolve_handler_url(self._config.handler_path, base_url=self._base_url)
        resp = self._session.post(url, json={"poId": po_id}, timeout=self._timeout)
        ack = DefectAck.model_validate(resp.json())
        logger.debug("Handler acknowledged poId=%s: %s", po_id, ack)
        return dialog_for_ack(ack)
