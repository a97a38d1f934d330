from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from defect_portal.contracts import ItemSelection, SourceOrderView
from defect_portal.workflow import FormContext

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(enabled_extensions=("html",)),
    trim_blocks=True,
    lstrip_blocks=True,
)


def template_env() -> Environment:
    return _env


def item_payload(item) -> str:
    """JSON carried in a line item's radio value."""
    return ItemSelection.from_line(item).model_dump_json(by_alias=True)


def render_defect_form(context: FormContext, action: str = "") -> str:
    items = [{"item": item, "payload": item_payload(item)} for item in context.order.items]
    return _env.get_template("defect_form.html").render(
        order=context.order,
        fault_issues=context.fault_issues,
        items=items,
        action=action,
    )


def render_error(message: str, go_back: bool = False) -> str:
    return _env.get_template("error.html").render(message=message, go_back=go_back)


def render_order_page(order: SourceOrderView, extras, edit_mode: bool = False) -> str:
    return _env.get_template("order_page.html").render(order=order, extras=extras, edit_mode=edit_mode)
