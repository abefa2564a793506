"""
Typed updates for the quote breakdown.

Each function returns an updated copy instead of reaching into the form
state by path. Subtotals written here are the live per-line values shown
while editing; totals are only refreshed by the aggregator.
"""

from typing import Any, Optional, get_args

from state import coats_text, to_number
from nodes.pricer import price_for, subtotal_for


def change_selector(line, **selectors):
    """
    Sets a pricing selector (dormer complexity, window type/coats, shutter type).
    The looked-up unit price is written first, then the subtotal is recomputed
    from the current quantity and that new price.
    """
    updated = line.model_copy(update=selectors)
    if "coats" in selectors and selectors["coats"] is not None:
        updated.coats = coats_text(selectors["coats"])

    price = price_for(updated)
    if price is not None:
        updated.price = price
    updated.subtotal = subtotal_for(updated)
    return updated


def change_quantity(item, quantity: Any):
    """Recomputes the subtotal from the new quantity and the stored price."""
    updated = item.model_copy(update={"quantity": to_number(quantity)})
    updated.subtotal = subtotal_for(updated)
    return updated


def change_price(item, price: Any):
    updated = item.model_copy(update={"price": to_number(price)})
    updated.subtotal = subtotal_for(updated)
    return updated


def set_enabled(item, enabled: bool):
    # Stored subtotal is kept so re-enabling restores the last numbers
    return item.model_copy(update={"enabled": bool(enabled)})


def add_line(module, line: Optional[Any] = None):
    """Appends a line; a blank line of the module's line type by default."""
    if line is None:
        line_type = get_args(type(module).model_fields["lines"].annotation)[0]
        line = line_type()
    return module.model_copy(update={"lines": [*module.lines, line]})


def remove_line(module, index: int):
    """Removes the line at index; later lines shift down by one."""
    if index < 0 or index >= len(module.lines):
        raise IndexError(f"line index {index} out of range for {len(module.lines)} lines")
    lines = module.lines[:index] + module.lines[index + 1:]
    return module.model_copy(update={"lines": lines})
