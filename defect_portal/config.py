import os
from dataclasses import dataclass

TRANSPORT_NAVIGATE = "navigate"
TRANSPORT_ASYNC = "async"

_TRANSPORTS = (TRANSPORT_NAVIGATE, TRANSPORT_ASYNC)
_TRUTHY = {"1", "true", "t", "yes", "y", "on"}


@dataclass(frozen=True)
class PortalConfig:
    handler_path: str = "/handler"
    trigger_transport: str = TRANSPORT_NAVIGATE
    redirect_edit_mode: bool = False
    success_signal: bool = True
    fault_issue_list: str = "customlist2123"


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUTHY


def load_portal_config() -> PortalConfig:
    transport = os.environ.get("DEFECT_TRIGGER_TRANSPORT", TRANSPORT_NAVIGATE).strip().lower()
    if transport not in _TRANSPORTS:
        raise ValueError(
            f"Unsupported DEFECT_TRIGGER_TRANSPORT: {transport!r}. Supported: {', '.join(_TRANSPORTS)}"
        )
    return PortalConfig(
        handler_path=os.environ.get("DEFECT_HANDLER_PATH", "/handler"),
        trigger_transport=transport,
        redirect_edit_mode=_env_flag("DEFECT_REDIRECT_EDIT_MODE", False),
        success_signal=_env_flag("DEFECT_SUCCESS_SIGNAL", True),
        fault_issue_list=os.environ.get("DEFECT_FAULT_ISSUE_LIST", "customlist2123"),
    )
