import logging
from typing import Any, Dict, List

from state import (
    EXTERIOR_MODULES,
    INTERIOR_MODULES,
    LineModule,
    MiscLine,
    QuoteState,
)
from nodes.formatter import money

logger = logging.getLogger(__name__)


def _leaves(module):
    """Yields every enabled priced leaf of a module (lines, components, boxes)."""
    if isinstance(module, LineModule):
        for line in module.lines:
            if not line.enabled:
                continue
            if hasattr(line, "components"):
                for _, component in line.components():
                    if component.enabled:
                        yield component
            else:
                yield line
    elif hasattr(module, "components"):
        for _, component in module.components():
            if component.enabled:
                yield component
    else:
        yield module


def _modules(breakdown):
    for name, label in EXTERIOR_MODULES:
        yield f"Exterior {label}", getattr(breakdown.exterior_breakdown, name)
    for name, label in INTERIOR_MODULES:
        yield f"Interior {label}", getattr(breakdown.interior_breakdown, name)


def validator_node(state: QuoteState) -> Dict[str, Any]:
    logger.info("--- VALIDATOR NODE ---")

    errors: List[str] = []

    submitted = state.get("quote")
    breakdown = state.get("breakdown")
    if breakdown is None:
        return {"validation_errors": ["Error: No breakdown was calculated."]}

    # 1. Manually entered total replaced by the calculation
    if submitted is not None:
        previous = submitted.total_estimate
        if previous != 0 and previous != breakdown.total_estimate:
            errors.append(
                f"Warning: Total estimate {money(previous)} was replaced by the calculated "
                f"{money(breakdown.total_estimate)}."
            )

    enabled_modules = 0
    for label, module in _modules(breakdown):
        # 2. Disabled modules keep their last subtotal but are excluded
        if not module.enabled:
            if module.subtotal != 0:
                errors.append(
                    f"Warning: {label} is disabled but still stores a subtotal of "
                    f"{money(module.subtotal)}; it was not counted."
                )
            continue
        enabled_modules += 1

        # 3. Negative inputs are accepted but almost always a typo
        for leaf in _leaves(module):
            quantity = 0.0 if isinstance(leaf, MiscLine) else leaf.quantity
            if quantity < 0 or leaf.price < 0:
                errors.append(f"Warning: {label} has a negative quantity or price.")
                break

    # 4. Check Zero Total
    if enabled_modules > 0 and breakdown.total_estimate == 0:
        errors.append("Error: Total estimate is $0.00 despite enabled breakdown modules.")

    if errors:
        logger.warning("Validation Issues Found:")
        for err in errors:
            logger.warning(" - %s", err)

    return {"validation_errors": errors}
