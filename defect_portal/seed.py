import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from defect_portal.config import load_portal_config
from defect_portal.db import build_engine, build_session_factory, init_db, load_db_config
from defect_portal.logging_config import setup_logging
from defect_portal.models import (
    CustomListValue,
    Department,
    Item,
    Location,
    Plot,
    PurchaseOrder,
    PurchaseOrderLine,
    Vendor,
)

logger = logging.getLogger(__name__)

FAULT_ISSUES = [
    ("Dimensions out of tolerance", False),
    ("Surface damage", False),
    ("Wrong material", False),
    ("Warping", False),
    ("Legacy: misc", True),
]


def _get_or_create(session: Session, model, counts: dict, **lookup):
    existing = session.query(model).filter_by(**lookup).first()
    if existing:
        return existing
    row = model(**lookup)
    session.add(row)
    session.flush()
    counts[model.__tablename__] = counts.get(model.__tablename__, 0) + 1
    return row


def seed(session: Session, fault_issue_list: str = "customlist2123") -> dict:
    counts: dict[str, int] = {}

    vendor = _get_or_create(session, Vendor, counts, entityid="V1001 Northern Timber")
    if not vendor.companyname:
        vendor.companyname = "Northern Timber Supplies Ltd"
    plot = _get_or_create(session, Plot, counts, name="Plot 7")
    department = _get_or_create(session, Department, counts, name="Joinery")
    location = _get_or_create(session, Location, counts, name="Main Workshop")

    panel = _get_or_create(session, Item, counts, itemid="OAK-PANEL-18")
    beam = _get_or_create(session, Item, counts, itemid="PINE-BEAM-90")

    for name, inactive in FAULT_ISSUES:
        _get_or_create(
            session,
            CustomListValue,
            counts,
            list_script_id=fault_issue_list,
            name=name,
            isinactive=inactive,
        )

    po = session.query(PurchaseOrder).filter_by(tranid="PO-000123").first()
    if po is None:
        po = PurchaseOrder(
            tranid="PO-000123",
            entity=vendor.id,
            cseg_sf_plot=plot.id,
            department=department.id,
            location=location.id,
        )
        po.lines = [
            PurchaseOrderLine(
                line=0,
                item=panel.id,
                quantity=Decimal("12"),
                description="Oak panel 18mm",
                custcol_sf_width="600",
                custcol_sf_length="2400",
                amount=Decimal("480.00"),
            ),
            PurchaseOrderLine(
                line=1,
                item=beam.id,
                quantity=Decimal("4"),
                description="Pine beam 90x45",
                amount=Decimal("96.50"),
            ),
        ]
        session.add(po)
        counts[PurchaseOrder.__tablename__] = counts.get(PurchaseOrder.__tablename__, 0) + 1

    session.commit()
    return counts


def main() -> None:
    setup_logging()
    config = load_db_config()
    engine = build_engine(config)
    init_db(engine)
    session_factory = build_session_factory(engine)
    with session_factory() as session:
        counts = seed(session, load_portal_config().fault_issue_list)
    logger.info("Seed complete: %s", counts)


if __name__ == "__main__":
    main()
