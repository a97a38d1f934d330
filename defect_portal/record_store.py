import logging
from abc import ABC, abstractmethod

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from defect_portal.contracts import DefectRecord, FaultIssueOption
from defect_portal.models import (
    CustomListValue,
    ManufacturingDefect,
    PurchaseOrder,
    PurchaseOrderLine,
    Vendor,
)

logger = logging.getLogger(__name__)


class RecordStoreError(Exception):
    pass


class RecordNotFoundError(RecordStoreError):
    def __init__(self, record_type: str, record_id):
        super().__init__(f"That record does not exist. (type={record_type!r}, id={record_id!r})")
        self.record_type = record_type
        self.record_id = record_id


class RecordStore(ABC):
    """The slice of the ERP record store the defect workflow needs."""

    @abstractmethod
    def load_purchase_order(self, po_id: str) -> PurchaseOrder:
        ...

    @abstractmethod
    def lookup_vendor_company_name(self, vendor_id: str) -> str | None:
        ...

    @abstractmethod
    def search_active_list_values(self, list_script_id: str) -> list[FaultIssueOption]:
        ...

    @abstractmethod
    def create_defect(self, record: DefectRecord) -> str:
        ...


def _parse_internal_id(record_type: str, raw) -> int:
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        raise RecordNotFoundError(record_type, raw) from None


class SqlRecordStore(RecordStore):
    def __init__(self, session: Session):
        self._session = session

    def load_purchase_order(self, po_id: str) -> PurchaseOrder:
        internal_id = _parse_internal_id("purchaseorder", po_id)
        stmt = (
            select(PurchaseOrder)
            .where(PurchaseOrder.id == internal_id)
            .options(
                selectinload(PurchaseOrder.vendor),
                selectinload(PurchaseOrder.plot),
                selectinload(PurchaseOrder.department_rec),
                selectinload(PurchaseOrder.location_rec),
                selectinload(PurchaseOrder.lines).selectinload(PurchaseOrderLine.item_rec),
            )
        )
        try:
            row = self._session.execute(stmt).scalars().first()
        except SQLAlchemyError as exc:
            raise RecordStoreError(f"Failed to load purchase order {po_id!r}: {exc}") from exc
        if row is None:
            raise RecordNotFoundError("purchaseorder", po_id)
        return row

    def lookup_vendor_company_name(self, vendor_id: str) -> str | None:
        internal_id = _parse_internal_id("vendor", vendor_id)
        stmt = select(Vendor.companyname).where(Vendor.id == internal_id)
        try:
            return self._session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise RecordStoreError(f"Vendor lookup failed for {vendor_id!r}: {exc}") from exc

    def search_active_list_values(self, list_script_id: str) -> list[FaultIssueOption]:
        stmt = (
            select(CustomListValue)
            .where(
                CustomListValue.list_script_id == list_script_id,
                CustomListValue.isinactive.is_(False),
            )
            .order_by(CustomListValue.name)
        )
        try:
            rows = self._session.execute(stmt).scalars().all()
        except SQLAlchemyError as exc:
            raise RecordStoreError(f"Search on {list_script_id!r} failed: {exc}") from exc
        return [FaultIssueOption(value=str(r.id), text=r.name) for r in rows]

    def create_defect(self, record: DefectRecord) -> str:
        row = ManufacturingDefect(**record.model_dump())
        self._session.add(row)
        try:
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise RecordStoreError(f"Could not save customrecord_manufacturing_defect: {exc}") from exc
        logger.debug("Saved customrecord_manufacturing_defect id=%s", row.id)
        return str(row.id)
