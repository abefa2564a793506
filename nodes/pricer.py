import logging
from typing import Any, Dict, Optional

from state import (
    DormerLine,
    MiscLine,
    QuoteBreakdown,
    QuoteState,
    ShutterLine,
    WindowLine,
    to_number,
)

logger = logging.getLogger(__name__)

# Unit prices driven by a selector rather than typed in
DORMER_PRICES: Dict[str, float] = {
    "simple": 300.0,
    "complex": 400.0,
}

# (window type, coats) -> price per window
WINDOW_PRICES: Dict[tuple, float] = {
    ("plastic-pvc", "1"): 40.0,
    ("plastic-pvc", "2"): 60.0,
    ("wood", "1"): 80.0,
    ("wood", "2"): 120.0,
    ("casement", "1"): 70.0,
    ("casement", "2"): 100.0,
}

SHUTTER_PRICES: Dict[str, float] = {
    "panel": 25.0,
    "louver": 35.0,
}


def line_subtotal(quantity: Any, price: Any, factor: float = 1.0) -> float:
    """(quantity x factor) x price, with unparseable inputs counted as zero."""
    return (to_number(quantity) * factor) * to_number(price)


def subtotal_for(item) -> float:
    """Subtotal of a single line, component or boxes module."""
    if isinstance(item, MiscLine):
        return to_number(item.price)
    return line_subtotal(item.quantity, item.price, getattr(item, "factor", 1.0))


def price_for(line) -> Optional[float]:
    """
    Looks up the unit price for selector-priced lines.
    Returns None when the line has no selector or the selection is unknown,
    in which case the stored price stands.
    """
    if isinstance(line, DormerLine):
        return DORMER_PRICES.get(line.complexity)
    if isinstance(line, WindowLine):
        return WINDOW_PRICES.get((line.type, str(line.coats)))
    if isinstance(line, ShutterLine):
        return SHUTTER_PRICES.get(line.type)
    return None


def apply_selector_prices(breakdown: QuoteBreakdown) -> QuoteBreakdown:
    """Returns a copy with dormer, window and shutter prices taken from the tables."""
    priced = breakdown.model_copy(deep=True)
    exterior = priced.exterior_breakdown

    for module in (exterior.dormer, exterior.windows, exterior.shutters):
        for line in module.lines:
            price = price_for(line)
            if price is not None:
                line.price = price

    return priced


def pricer_node(state: QuoteState) -> Dict[str, Any]:
    logger.info("--- PRICER NODE ---")
    quote = state.get("breakdown") or state["quote"]

    priced = apply_selector_prices(quote)

    return {"breakdown": priced}
