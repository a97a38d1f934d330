import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Generic, Mapping, TypeVar, Union

from pydantic import ValidationError

from defect_portal.config import PortalConfig
from defect_portal.contracts import (
    DefectForm,
    DefectRecord,
    DefectSubmission,
    FaultIssueOption,
    HeaderField,
    ItemSelection,
    LineItem,
    SourceOrderView,
    TriggerRequest,
)
from defect_portal.models import PurchaseOrder
from defect_portal.record_store import RecordNotFoundError, RecordStore, RecordStoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")

MISSING_PO_ID = "Purchase Order ID (poId) was not provided as a URL parameter."
MISSING_PO_ID_BODY = "Purchase Order ID (poId) was not provided."
MISSING_ITEM = "You must select a defective item to continue."
MALFORMED_ITEM = "The selected item data was malformed. Please go back and try again."
MISSING_FAULT_ISSUE = "You must select a fault issue to continue."

_NULL_SENTINEL = "null"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class ValidationFailure:
    message: str


@dataclass(frozen=True)
class CollaboratorFailure:
    message: str
    not_found: bool = False


Failure = Union[ValidationFailure, CollaboratorFailure]


@dataclass(frozen=True)
class FormContext:
    order: SourceOrderView
    fault_issues: list[FaultIssueOption] = field(default_factory=list)


def as_text(value, default: str = "") -> str:
    """Render a field value as text, using ``default`` for blanks."""
    if value is None or value == "":
        return default
    if isinstance(value, Decimal):
        return format(value.normalize(), "f")
    return str(value)


def optional_id(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if not value or value.lower() == _NULL_SENTINEL:
        return None
    return value


def parse_item_selection(raw: str) -> Ok[tuple[ItemSelection, bool]] | ValidationFailure:
    """Decode ``custpage_selected_item``.

    A JSON object carries the full selection struct; anything else is taken as
    a bare item id. The bool says whether quantities came along.
    """
    raw = (raw or "").strip()
    if not raw:
        return ValidationFailure(MISSING_ITEM)

    if raw[0] not in "{[":
        return Ok((ItemSelection(item_id=raw), False))

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse selected item JSON: %s", exc)
        return ValidationFailure(MALFORMED_ITEM)
    if not isinstance(data, dict):
        logger.error("Selected item JSON is not an object: %r", data)
        return ValidationFailure(MALFORMED_ITEM)
    try:
        selection = ItemSelection.model_validate(data)
    except ValidationError as exc:
        logger.error("Selected item JSON has unexpected fields: %s", exc)
        return ValidationFailure(MALFORMED_ITEM)

    if not selection.item_id:
        return ValidationFailure(MISSING_ITEM)
    return Ok((selection, True))


class DefectWorkflow:
    def __init__(self, store: RecordStore, config: PortalConfig):
        self._store = store
        self._config = config

    # --- READ ----------------------------------------------------------------

    def assemble_form(self, po_id: str | None) -> Ok[FormContext] | Failure:
        if not po_id:
            logger.info("GET: missing parameter, poId was not provided")
            return ValidationFailure(MISSING_PO_ID)

        loaded = self.read_source_order(po_id)
        if not isinstance(loaded, Ok):
            return loaded

        return Ok(FormContext(order=loaded.value, fault_issues=self.load_fault_issues()))

    def read_source_order(self, po_id: str) -> Ok[SourceOrderView] | CollaboratorFailure:
        logger.debug("GET: loading purchase order id=%s", po_id)
        try:
            po = self._store.load_purchase_order(po_id)
        except RecordStoreError as exc:
            logger.error("GET: purchase order load failed: %s", exc)
            return CollaboratorFailure(str(exc), not_found=isinstance(exc, RecordNotFoundError))

        view = SourceOrderView(
            po_id=str(po_id),
            tran_id=as_text(po.tranid),
            supplier=self._supplier_header(po),
            plot=HeaderField(id=as_text(po.cseg_sf_plot), text=po.plot.name if po.plot else ""),
            department=HeaderField(
                id=as_text(po.department),
                text=po.department_rec.name if po.department_rec else "",
            ),
            location=HeaderField(
                id=as_text(po.location),
                text=po.location_rec.name if po.location_rec else "",
            ),
            items=[self._line_item(index, line) for index, line in enumerate(po.lines)],
        )
        logger.debug("GET: header info %s", view.model_dump(exclude={"items"}))
        logger.debug("GET: %d item line(s)", len(view.items))
        return Ok(view)

    def load_fault_issues(self) -> list[FaultIssueOption]:
        list_id = self._config.fault_issue_list
        try:
            options = self._store.search_active_list_values(list_id)
        except Exception as exc:
            logger.error("GET: failed to get fault issue options from %s: %s", list_id, exc)
            return []
        logger.debug("GET: loaded %d fault issue option(s)", len(options))
        return options

    def _supplier_header(self, po: PurchaseOrder) -> HeaderField:
        supplier_id = as_text(po.entity)
        supplier_text = po.vendor.entityid if po.vendor else ""
        if not supplier_id:
            return HeaderField(id="", text=supplier_text)

        try:
            company_name = self._store.lookup_vendor_company_name(supplier_id)
        except Exception as exc:
            logger.error("GET: supplier company name lookup failed, using %r: %s", supplier_text, exc)
            return HeaderField(id=supplier_id, text=supplier_text)

        if company_name:
            return HeaderField(id=supplier_id, text=company_name)
        logger.debug("GET: company name empty, using %r", supplier_text)
        return HeaderField(id=supplier_id, text=supplier_text)

    @staticmethod
    def _line_item(index: int, line) -> LineItem:
        return LineItem(
            line=index,
            item_id=as_text(line.item),
            item_name=line.item_rec.itemid if line.item_rec else "",
            quantity=as_text(line.quantity, "0"),
            description=as_text(line.description),
            width=as_text(line.custcol_sf_width),
            length=as_text(line.custcol_sf_length),
            amount=as_text(line.amount, "0"),
        )

    # --- WRITE ---------------------------------------------------------------

    def parse_submission(self, params: Mapping[str, str]) -> Ok[DefectSubmission] | ValidationFailure:
        form = DefectForm.model_validate(dict(params))

        parsed = parse_item_selection(form.selected_item)
        if not isinstance(parsed, Ok):
            logger.info("POST: validation failed: %s", parsed.message)
            return parsed
        selection, has_details = parsed.value

        if not form.fault_issue.strip():
            logger.info("POST: validation failed: no fault issue was selected")
            return ValidationFailure(MISSING_FAULT_ISSUE)
        if not form.po_id.strip():
            logger.info("POST: validation failed: no purchase order id")
            return ValidationFailure(MISSING_PO_ID_BODY)

        return Ok(
            DefectSubmission(
                po_id=form.po_id.strip(),
                supplier_id=form.supplier_id.strip(),
                plot_id=form.plot_id,
                department_id=form.department_id,
                location_id=form.location_id,
                fault_issue_id=form.fault_issue.strip(),
                item=selection,
                item_details=has_details,
            )
        )

    @staticmethod
    def build_record(submission: DefectSubmission) -> DefectRecord:
        record = DefectRecord(purchase_order_id=submission.po_id)
        record.supplier_id = submission.supplier_id or None
        record.fault_issue_id = submission.fault_issue_id or None

        if submission.item is not None:
            record.item_id = submission.item.item_id
            if submission.item_details:
                record.quantity = submission.item.quantity or None
                record.width = submission.item.width or None
                record.length = submission.item.length or None
                record.cost = submission.item.amount or None

        record.plot_id = optional_id(submission.plot_id)
        record.department_id = optional_id(submission.department_id)
        record.location_id = optional_id(submission.location_id)
        return record

    def create_defect(self, submission: DefectSubmission) -> Ok[str] | CollaboratorFailure:
        record = self.build_record(submission)
        logger.debug("POST: data for new defect record %s", record.model_dump(exclude_none=True))
        try:
            new_id = self._store.create_defect(record)
        except RecordStoreError as exc:
            logger.error("POST: defect save failed: %s", exc)
            return CollaboratorFailure(str(exc))
        logger.info("POST: created manufacturing defect id=%s for purchase order %s", new_id, submission.po_id)
        return Ok(new_id)

    def submit(self, params: Mapping[str, str]) -> Ok[tuple[DefectSubmission, str]] | Failure:
        parsed = self.parse_submission(params)
        if not isinstance(parsed, Ok):
            return parsed
        created = self.create_defect(parsed.value)
        if not isinstance(created, Ok):
            return created
        return Ok((parsed.value, created.value))

    # --- JSON transport --------------------------------------------------------

    def quick_report(self, request: TriggerRequest) -> Ok[str] | Failure:
        """Create a defect straight from a purchase order id.

        Header ids come from the loaded order; an item and fault issue are
        assigned only when the request carries them.
        """
        po_id = request.po_id.strip()
        if not po_id:
            logger.info("POST(json): validation failed: no poId")
            return ValidationFailure(MISSING_PO_ID_BODY)

        loaded = self.read_source_order(po_id)
        if not isinstance(loaded, Ok):
            return loaded
        order = loaded.value

        item = request.selected_item
        submission = DefectSubmission(
            po_id=order.po_id,
            supplier_id=order.supplier.id,
            plot_id=order.plot.id,
            department_id=order.department.id,
            location_id=order.location.id,
            fault_issue_id=request.fault_issue.strip(),
            item=item if item is not None and item.item_id else None,
            item_details=True,
        )
        return self.create_defect(submission)
