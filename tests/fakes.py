"""In-memory and failure-injecting record stores for workflow tests."""

from decimal import Decimal

from defect_portal.contracts import DefectRecord, FaultIssueOption
from defect_portal.models import (
    Department,
    Item,
    Location,
    Plot,
    PurchaseOrder,
    PurchaseOrderLine,
    Vendor,
)
from defect_portal.record_store import RecordNotFoundError, RecordStore, RecordStoreError, SqlRecordStore


def build_order(company_name="Acme Timber Ltd", vendor_text="V7 Acme") -> PurchaseOrder:
    vendor = Vendor(id=7, entityid=vendor_text, companyname=company_name)
    return PurchaseOrder(
        id=123,
        tranid="PO-000123",
        entity=7,
        vendor=vendor,
        cseg_sf_plot=3,
        plot=Plot(id=3, name="Plot 3"),
        department=4,
        department_rec=Department(id=4, name="Joinery"),
        location=5,
        location_rec=Location(id=5, name="Main Workshop"),
        lines=[
            PurchaseOrderLine(
                line=0,
                item=501,
                item_rec=Item(id=501, itemid="OAK-PANEL-18"),
                quantity=Decimal("12"),
                description="Oak panel 18mm",
                custcol_sf_width="600",
                custcol_sf_length="2400",
                amount=Decimal("480.50"),
            ),
            PurchaseOrderLine(
                line=1,
                item=502,
                item_rec=Item(id=502, itemid="PINE-BEAM-90"),
            ),
        ],
    )


class FakeRecordStore(RecordStore):
    def __init__(self, orders=None, options=None):
        self.orders = {str(o.id): o for o in (orders or [])}
        self.options = options if options is not None else [
            FaultIssueOption(value="9", text="Surface damage"),
        ]
        self.created: list[DefectRecord] = []
        self.fail_vendor_lookup = False
        self.fail_list_search = False
        self.fail_create = False

    def load_purchase_order(self, po_id: str) -> PurchaseOrder:
        if po_id not in self.orders:
            raise RecordNotFoundError("purchaseorder", po_id)
        return self.orders[po_id]

    def lookup_vendor_company_name(self, vendor_id: str) -> str | None:
        if self.fail_vendor_lookup:
            raise RecordStoreError("vendor lookup unavailable")
        for order in self.orders.values():
            if order.vendor is not None and str(order.vendor.id) == vendor_id:
                return order.vendor.companyname
        return None

    def search_active_list_values(self, list_script_id: str) -> list[FaultIssueOption]:
        if self.fail_list_search:
            raise RecordStoreError("search unavailable")
        return list(self.options)

    def create_defect(self, record: DefectRecord) -> str:
        if self.fail_create:
            raise RecordStoreError("INSUFFICIENT_PERMISSION")
        self.created.append(record)
        return str(len(self.created))


class FailingListStore(SqlRecordStore):
    def search_active_list_values(self, list_script_id: str) -> list[FaultIssueOption]:
        raise RecordStoreError(f"Search on {list_script_id!r} failed")
