from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class Vendor(Base):
    __tablename__ = "vendor"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    entityid: Mapped[str] = mapped_column(String(120), nullable=False)
    companyname: Mapped[str | None] = mapped_column(String(200), nullable=True)
    isinactive: Mapped[bool] = mapped_column(Boolean, default=False)

    purchase_orders: Mapped[list["PurchaseOrder"]] = relationship(back_populates="vendor")


class Plot(Base):
    """Values of the ``cseg_sf_plot`` custom segment."""

    __tablename__ = "cseg_sf_plot"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)


class Department(Base):
    __tablename__ = "department"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)


class Location(Base):
    __tablename__ = "location"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)


class Item(Base):
    __tablename__ = "item"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    itemid: Mapped[str] = mapped_column(String(120), nullable=False)
    displayname: Mapped[str | None] = mapped_column(String(250), nullable=True)


class PurchaseOrder(Base):
    __tablename__ = "purchase_order"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tranid: Mapped[str] = mapped_column(String(50), nullable=False)
    entity: Mapped[int | None] = mapped_column(Integer, ForeignKey("vendor.id"), nullable=True)
    cseg_sf_plot: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("cseg_sf_plot.id"), nullable=True
    )
    department: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("department.id"), nullable=True
    )
    location: Mapped[int | None] = mapped_column(Integer, ForeignKey("location.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())

    vendor: Mapped[Optional["Vendor"]] = relationship(back_populates="purchase_orders")
    plot: Mapped[Optional["Plot"]] = relationship()
    department_rec: Mapped[Optional["Department"]] = relationship()
    location_rec: Mapped[Optional["Location"]] = relationship()
    lines: Mapped[list["PurchaseOrderLine"]] = relationship(
        back_populates="purchase_order",
        order_by="PurchaseOrderLine.line",
        cascade="all, delete-orphan",
    )

    __table_args__ = (Index("ix_purchase_order_tranid", "tranid"),)


class PurchaseOrderLine(Base):
    """One row of a purchase order's ``item`` sublist."""

    __tablename__ = "purchase_order_line"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    purchase_order_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("purchase_order.id"), nullable=False
    )
    line: Mapped[int] = mapped_column(Integer, nullable=False)
    item: Mapped[int] = mapped_column(Integer, ForeignKey("item.id"), nullable=False)
    quantity: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    custcol_sf_width: Mapped[str | None] = mapped_column(String(50), nullable=True)
    custcol_sf_length: Mapped[str | None] = mapped_column(String(50), nullable=True)
    amount: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)

    purchase_order: Mapped["PurchaseOrder"] = relationship(back_populates="lines")
    item_rec: Mapped["Item"] = relationship()

    __table_args__ = (
        UniqueConstraint("purchase_order_id", "line", name="uq_po_line"),
    )


class CustomListValue(Base):
    """Entries of custom lists such as the fault-issue list."""

    __tablename__ = "custom_list_value"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    list_script_id: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    isinactive: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (Index("ix_custom_list_lookup", "list_script_id", "isinactive"),)


class ManufacturingDefect(Base):
    """The ``customrecord_manufacturing_defect`` record type.

    Column names are the record's field ids; attribute names are what the
    portal calls them.
    """

    __tablename__ = "customrecord_manufacturing_defect"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    purchase_order_id: Mapped[str] = mapped_column(
        "custrecordman_defect_purchaseorder", String(50), nullable=False
    )
    supplier_id: Mapped[str | None] = mapped_column(
        "custrecordman_defect_supplier", String(50), nullable=True
    )
    item_id: Mapped[str | None] = mapped_column(
        "custrecord_man_defect_item", String(50), nullable=True
    )
    plot_id: Mapped[str | None] = mapped_column(
        "custrecord_man_defect_plot", String(50), nullable=True
    )
    department_id: Mapped[str | None] = mapped_column(
        "custrecord_man_defect_department", String(50), nullable=True
    )
    location_id: Mapped[str | None] = mapped_column(
        "custrecord_man_defect_location", String(50), nullable=True
    )
    fault_issue_id: Mapped[str | None] = mapped_column(
        "custrecord_man_defect_issue", String(50), nullable=True
    )
    width: Mapped[str | None] = mapped_column("custrecord_man_defect_width", String(50), nullable=True)
    length: Mapped[str | None] = mapped_column(
        "custrecord_man_defect_length", String(50), nullable=True
    )
    quantity: Mapped[str | None] = mapped_column(
        "custrecord_man_defect_quantity", String(50), nullable=True
    )
    cost: Mapped[str | None] = mapped_column("custrecord_man_defect_cost", String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())

    __table_args__ = (Index("ix_defect_purchase_order", "custrecordman_defect_purchaseorder"),)
