import logging
from dataclasses import dataclass, field
from typing import Mapping

from defect_portal.config import PortalConfig
from defect_portal.trigger import TRIGGER_FUNCTION, render_trigger_script

logger = logging.getLogger(__name__)

MODE_VIEW = "view"
MODE_EDIT = "edit"
CONTEXT_USER_INTERFACE = "userinterface"

SAVED_PARAM = "custpage_defect_saved"
NEW_ID_PARAM = "new_defect_id"
BANNER_DURATION_MS = 10000


@dataclass(frozen=True)
class PageButton:
    id: str
    label: str
    function_name: str


@dataclass(frozen=True)
class PageMessage:
    type: str
    title: str
    message: str
    duration: int = BANNER_DURATION_MS


@dataclass
class OrderPageExtras:
    buttons: list[PageButton] = field(default_factory=list)
    messages: list[PageMessage] = field(default_factory=list)
    client_script: str = ""


def success_banner(params: Mapping[str, str]) -> PageMessage | None:
    if params.get(SAVED_PARAM) != "T":
        return None
    new_id = params.get(NEW_ID_PARAM)
    if not new_id:
        return None
    logger.debug("Defect success signal received, id=%s", new_id)
    return PageMessage(
        type="confirmation",
        title="Success!",
        message=f"Successfully created Manufacturing Defect record (ID: {new_id}).",
    )


def before_load(
    mode: str,
    execution_context: str,
    po_id: str | None,
    params: Mapping[str, str],
    config: PortalConfig,
) -> OrderPageExtras:
    """Decorate the purchase order page: Report Defect button plus the saved banner."""
    extras = OrderPageExtras()
    if mode != MODE_VIEW or execution_context != CONTEXT_USER_INTERFACE:
        return extras

    extras.client_script = render_trigger_script(config, po_id)
    extras.buttons.append(
        PageButton(id="custpage_report_defect", label="Report Defect", function_name=TRIGGER_FUNCTION)
    )

    try:
        banner = success_banner(params)
        if banner is not None:
            extras.messages.append(banner)
    except Exception as exc:
        # the order page must still load
        logger.error("Order page defect message failed: %s", exc)

    return extras
