import logging
from typing import Generator, Optional
from urllib.parse import urlencode

from fastapi import Depends, FastAPI, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from defect_portal.config import PortalConfig, load_portal_config
from defect_portal.contracts import DefectAck, TriggerRequest
from defect_portal.db import build_engine, build_session_factory, init_db, load_db_config
from defect_portal.logging_config import setup_logging
from defect_portal.page_hooks import (
    CONTEXT_USER_INTERFACE,
    MODE_EDIT,
    MODE_VIEW,
    NEW_ID_PARAM,
    SAVED_PARAM,
    before_load,
)
from defect_portal.record_store import RecordStore, SqlRecordStore
from defect_portal.rendering import render_defect_form, render_error, render_order_page
from defect_portal.workflow import CollaboratorFailure, DefectWorkflow, Ok, ValidationFailure

setup_logging()
logger = logging.getLogger(__name__)

# --- DB setup ---
_config = load_db_config()
_engine = build_engine(_config)
_session_factory = build_session_factory(_engine)
init_db(_engine)

# --- Portal settings ---
_portal_config = load_portal_config()
HANDLER_PATH = _portal_config.handler_path

# --- FastAPI app ---
app = FastAPI(title="Manufacturing Defect Portal")


def get_session() -> Generator[Session, None, None]:
    with _session_factory() as session:
        yield session


def get_config() -> PortalConfig:
    return _portal_config


def get_store(session: Session = Depends(get_session)) -> RecordStore:
    return SqlRecordStore(session)


def get_workflow(
    store: RecordStore = Depends(get_store),
    config: PortalConfig = Depends(get_config),
) -> DefectWorkflow:
    return DefectWorkflow(store, config)


def _failure_status(failure) -> int:
    if isinstance(failure, ValidationFailure):
        return 400
    if isinstance(failure, CollaboratorFailure) and failure.not_found:
        return 404
    return 500


def order_url(po_id: str, config: PortalConfig, new_defect_id: str | None = None) -> str:
    params = {}
    if config.redirect_edit_mode:
        params["e"] = "T"
    if new_defect_id and config.success_signal:
        params[SAVED_PARAM] = "T"
        params[NEW_ID_PARAM] = new_defect_id
    url = f"/purchase-orders/{po_id}"
    return f"{url}?{urlencode(params)}" if params else url


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get(HANDLER_PATH, response_class=HTMLResponse)
def handler_read(
    request: Request,
    poId: Optional[str] = Query(None),
    workflow: DefectWorkflow = Depends(get_workflow),
):
    logger.debug("GET %s parameters=%s", request.url.path, dict(request.query_params))
    result = workflow.assemble_form(poId)
    if not isinstance(result, Ok):
        return HTMLResponse(
            render_error(f"Could not load the defect creation form: {result.message}"),
            status_code=_failure_status(result),
        )
    return HTMLResponse(render_defect_form(result.value, action=str(request.url.path)))


@app.post(HANDLER_PATH)
async def handler_write(
    request: Request,
    workflow: DefectWorkflow = Depends(get_workflow),
    config: PortalConfig = Depends(get_config),
):
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        return await _write_json(request, workflow)

    form = await request.form()
    params = {key: value for key, value in form.items() if isinstance(value, str)}
    logger.debug("POST received parameters=%s", params)

    result = await run_in_threadpool(workflow.submit, params)
    if not isinstance(result, Ok):
        return HTMLResponse(
            render_error(f"Could not save the new defect record: {result.message}", go_back=True),
            status_code=_failure_status(result),
        )
    submission, new_id = result.value
    return RedirectResponse(order_url(submission.po_id, config, new_id), status_code=303)


async def _write_json(request: Request, workflow: DefectWorkflow) -> JSONResponse:
    try:
        payload = TriggerRequest.model_validate(await request.json())
    except (ValueError, ValidationError) as exc:
        # ValueError covers JSONDecodeError and UnicodeDecodeError
        logger.info("POST(json): unreadable body: %s", exc)
        ack = DefectAck(success=False, message=f"Request body was not valid: {exc}")
        return JSONResponse(ack.model_dump(by_alias=True, exclude_none=True), status_code=400)

    result = await run_in_threadpool(workflow.quick_report, payload)
    if not isinstance(result, Ok):
        ack = DefectAck(success=False, message=result.message)
        return JSONResponse(
            ack.model_dump(by_alias=True, exclude_none=True), status_code=_failure_status(result)
        )
    ack = DefectAck(success=True, record_id=result.value)
    return JSONResponse(ack.model_dump(by_alias=True, exclude_none=True))


def _unsupported_response(request: Request) -> PlainTextResponse:
    logger.info("Unsupported method %s on %s", request.method, request.url.path)
    return PlainTextResponse(
        "This handler only supports GET and POST requests.",
        status_code=405,
        headers={"Allow": "GET, POST"},
    )


@app.api_route(
    HANDLER_PATH,
    methods=["PUT", "PATCH", "DELETE", "OPTIONS", "TRACE"],
    include_in_schema=False,
)
def handler_unsupported(request: Request):
    return _unsupported_response(request)


@app.exception_handler(StarletteHTTPException)
async def handler_method_not_allowed(request: Request, exc: StarletteHTTPException):
    # methods with no route of their own (PROPFIND etc.) surface as a router 405
    if exc.status_code == 405 and request.url.path == HANDLER_PATH:
        return _unsupported_response(request)
    return await http_exception_handler(request, exc)


@app.get("/purchase-orders/{po_id}", response_class=HTMLResponse)
def purchase_order_page(
    po_id: str,
    request: Request,
    workflow: DefectWorkflow = Depends(get_workflow),
    config: PortalConfig = Depends(get_config),
):
    result = workflow.read_source_order(po_id)
    if not isinstance(result, Ok):
        return HTMLResponse(render_error(result.message), status_code=_failure_status(result))

    params = dict(request.query_params)
    edit_mode = params.get("e") == "T"
    extras = before_load(
        MODE_EDIT if edit_mode else MODE_VIEW,
        CONTEXT_USER_INTERFACE,
        po_id,
        params,
        config,
    )
    return HTMLResponse(render_order_page(result.value, extras, edit_mode=edit_mode))
