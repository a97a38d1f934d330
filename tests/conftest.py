import os

# app import builds its engine from env; keep it off the filesystem
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from decimal import Decimal

import pytest

from defect_portal.db import DBConfig, build_engine, build_session_factory, init_db
from defect_portal.models import (
    Base,
    CustomListValue,
    Department,
    Item,
    Location,
    Plot,
    PurchaseOrder,
    PurchaseOrderLine,
    Vendor,
)

FAULT_LIST = "customlist2123"


@pytest.fixture(scope="function")
def engine():
    """A private in-memory record store, separate from the one main.py builds."""
    eng = build_engine(DBConfig(url="sqlite:///:memory:"))
    init_db(eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture(scope="function")
def session(session_factory):
    with session_factory() as sess:
        yield sess


def seed_order(session, company_name="Acme Timber Ltd") -> None:
    """Purchase order 123 with two item lines and a small fault-issue list."""
    session.add_all(
        [
            Vendor(id=7, entityid="V7 Acme", companyname=company_name),
            Plot(id=3, name="Plot 3"),
            Department(id=4, name="Joinery"),
            Location(id=5, name="Main Workshop"),
            Item(id=501, itemid="OAK-PANEL-18"),
            Item(id=502, itemid="PINE-BEAM-90"),
            CustomListValue(id=9, list_script_id=FAULT_LIST, name="Surface damage"),
            CustomListValue(id=10, list_script_id=FAULT_LIST, name="Warping"),
            CustomListValue(id=11, list_script_id=FAULT_LIST, name="Retired reason", isinactive=True),
            CustomListValue(id=12, list_script_id="customlist_other", name="Unrelated"),
        ]
    )
    session.flush()
    session.add(
        PurchaseOrder(
            id=123,
            tranid="PO-000123",
            entity=7,
            cseg_sf_plot=3,
            department=4,
            location=5,
            lines=[
                PurchaseOrderLine(
                    line=0,
                    item=501,
                    quantity=Decimal("12"),
                    description="Oak panel 18mm",
                    custcol_sf_width="600",
                    custcol_sf_length="2400",
                    amount=Decimal("480.50"),
                ),
                PurchaseOrderLine(line=1, item=502, quantity=None, description=None, amount=None),
            ],
        )
    )
    session.commit()


@pytest.fixture(scope="function")
def seeded_session(session):
    seed_order(session)
    yield session


@pytest.fixture(scope="function")
def client(session_factory):
    from fastapi.testclient import TestClient

    from defect_portal.main import app, get_session

    with session_factory() as s:
        seed_order(s)

    def _get_test_session():
        with session_factory() as s:
            yield s

    app.dependency_overrides[get_session] = _get_test_session
    yield TestClient(app)
    app.dependency_overrides.clear()
