import logging
from typing import Any, Dict

from state import (
    EXTERIOR_MODULES,
    INTERIOR_MODULES,
    BoxesModule,
    LineModule,
    PorchModule,
    QuoteBreakdown,
    QuoteState,
    RoomModule,
)
from nodes.pricer import subtotal_for

logger = logging.getLogger(__name__)


def _sum_components(module) -> float:
    total = 0.0
    for _, component in module.components():
        if not component.enabled:
            continue
        component.subtotal = subtotal_for(component)
        total += component.subtotal
    return total


def aggregate_module(module) -> float:
    """
    Recomputes an enabled module in place and returns its subtotal.
    Disabled modules, lines and components count as 0 and keep whatever
    subtotal they last stored.
    """
    if not module.enabled:
        return 0.0

    if isinstance(module, BoxesModule):
        module.subtotal = subtotal_for(module)
    elif isinstance(module, (RoomModule, PorchModule)):
        module.subtotal = _sum_components(module)
    elif isinstance(module, LineModule):
        total = 0.0
        for line in module.lines:
            if not line.enabled:
                continue
            if isinstance(line, RoomModule):
                line.subtotal = _sum_components(line)
            else:
                line.subtotal = subtotal_for(line)
            total += line.subtotal
        module.subtotal = total
    else:
        raise TypeError(f"Unknown breakdown module {type(module).__name__}")

    return module.subtotal


def aggregate(breakdown: QuoteBreakdown) -> QuoteBreakdown:
    """
    The "Calculate Total" action.

    Returns a copy in which every enabled leaf, every enabled module and
    total_estimate agree. total_estimate is overwritten, including any value
    typed in by hand.
    """
    result = breakdown.model_copy(deep=True)
    total = 0.0

    for name, _ in EXTERIOR_MODULES:
        total += aggregate_module(getattr(result.exterior_breakdown, name))
    for name, _ in INTERIOR_MODULES:
        total += aggregate_module(getattr(result.interior_breakdown, name))

    result.total_estimate = total
    return result


def aggregator_node(state: QuoteState) -> Dict[str, Any]:
    logger.info("--- AGGREGATOR NODE ---")
    breakdown = state.get("breakdown") or state["quote"]

    aggregated = aggregate(breakdown)
    logger.info("Total estimate: $%.2f", aggregated.total_estimate)

    return {"breakdown": aggregated}
