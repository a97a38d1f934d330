from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class HeaderField(BaseModel):
    id: str = ""
    text: str = ""


class LineItem(BaseModel):
    line: int
    item_id: str
    item_name: str = ""
    quantity: str = "0"
    description: str = ""
    width: str = ""
    length: str = ""
    amount: str = "0"


class SourceOrderView(BaseModel):
    po_id: str
    tran_id: str = ""
    supplier: HeaderField
    plot: HeaderField
    department: HeaderField
    location: HeaderField
    items: list[LineItem] = []


class FaultIssueOption(BaseModel):
    value: str
    text: str


class ItemSelection(BaseModel):
    """What a radio control carries for one line item."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    item_id: str = Field("", alias="itemId")
    quantity: str = ""
    width: str = ""
    length: str = ""
    amount: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _none_as_blank(cls, value):
        return "" if value is None else value

    @classmethod
    def from_line(cls, item: LineItem) -> "ItemSelection":
        return cls(
            item_id=item.item_id,
            quantity=item.quantity,
            width=item.width,
            length=item.length,
            amount=item.amount,
        )


class DefectForm(BaseModel):
    """Raw POST body of the defect form."""

    model_config = ConfigDict(populate_by_name=True)

    po_id: str = Field("", alias="custpage_po_id")
    supplier_id: str = Field("", alias="custpage_supplier_id")
    plot_id: str = Field("", alias="custpage_plot_id")
    department_id: str = Field(
        "", validation_alias=AliasChoices("custpage_department_id", "custpage_dept_id")
    )
    location_id: str = Field(
        "", validation_alias=AliasChoices("custpage_location_id", "custpage_loc_id")
    )
    fault_issue: str = Field("", alias="custpage_fault_issue")
    selected_item: str = Field("", alias="custpage_selected_item")


class DefectSubmission(BaseModel):
    po_id: str
    supplier_id: str = ""
    plot_id: str = ""
    department_id: str = ""
    location_id: str = ""
    fault_issue_id: str = ""
    item: ItemSelection | None = None
    # Bare item ids carry no quantities; only the JSON struct does.
    item_details: bool = False


class DefectRecord(BaseModel):
    """Field map of a new ``customrecord_manufacturing_defect``."""

    purchase_order_id: str
    supplier_id: str | None = None
    item_id: str | None = None
    plot_id: str | None = None
    department_id: str | None = None
    location_id: str | None = None
    fault_issue_id: str | None = None
    width: str | None = None
    length: str | None = None
    quantity: str | None = None
    cost: str | None = None


class TriggerRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    po_id: str = Field("", alias="poId")
    selected_item: ItemSelection | None = Field(None, alias="selectedItem")
    fault_issue: str = Field("", alias="faultIssue")


class DefectAck(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    record_id: str | None = Field(None, alias="recordId")
    message: str | None = None
