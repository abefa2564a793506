import logging
from typing import Any, Dict, List

from state import (
    EXTERIOR_MODULES,
    INTERIOR_MODULES,
    BoxesModule,
    LineModule,
    MiscLine,
    QuoteBreakdown,
    QuoteState,
)

logger = logging.getLogger(__name__)

BREAKDOWN_MARKER = "Project Breakdown:"
BOXES_ATTRIBUTE = "Soffit, Facia, Gutters"

# Canned sentences for the optional comment checkboxes, in display order
ADDITIONAL_SERVICES = [
    ("prep", "Prep: Power washing as needed, scraping and sanding, removing old caulk and re-caulking gaps."),
    ("primer", "Prime: Apply high-quality primer to all surfaces to ensure proper paint adhesion."),
    ("protection", "Protection: Cover and protect all landscaping, walkways, and adjacent surfaces."),
    ("cleanup", "Clean-up: Complete site clean-up and proper disposal of all materials."),
    ("warranty", "Warranty: 2-year warranty on workmanship and materials against defects."),
]


def money(amount: float) -> str:
    return f"${amount:.2f}"


def _bullet(label: str, attribute: str, amount: float) -> str:
    name = f"{label} ({attribute})" if attribute else label
    return f"• {name}: {money(amount)}"


def module_bullets(label: str, module) -> List[str]:
    """Bullets for one enabled module; lines with a zero subtotal are left out."""
    if not module.enabled:
        return []

    if isinstance(module, LineModule):
        bullets = []
        for index, line in enumerate(module.lines):
            if not line.enabled or line.subtotal == 0:
                continue
            if isinstance(line, MiscLine):
                name = line.description.strip() or f"{label} (Line #{index + 1})"
                bullets.append(f"• {name}: {money(line.subtotal)}")
            else:
                attribute = line.attribute() or f"Line #{index + 1}"
                bullets.append(_bullet(label, attribute, line.subtotal))
        return bullets

    if module.subtotal == 0:
        return []
    if isinstance(module, BoxesModule):
        return [_bullet(label, BOXES_ATTRIBUTE, module.subtotal)]
    # Fixed modules only show their total
    return [_bullet(label, "", module.subtotal)]


def build_summary(breakdown: QuoteBreakdown) -> str:
    summary = f"{BREAKDOWN_MARKER}\n\n"

    for name, label in EXTERIOR_MODULES:
        for bullet in module_bullets(label, getattr(breakdown.exterior_breakdown, name)):
            summary += bullet + "\n"
    for name, label in INTERIOR_MODULES:
        for bullet in module_bullets(label, getattr(breakdown.interior_breakdown, name)):
            summary += bullet + "\n"

    summary += f"\nTOTAL PROJECT COST: {money(breakdown.total_estimate)}"

    comments = breakdown.optional_comments
    services = "".join(
        f"\n• {text}" for key, text in ADDITIONAL_SERVICES if getattr(comments, key)
    )
    if services:
        summary += "\n\nAdditional Services:" + services

    return summary


def merge_scope_of_work(current: str, summary: str) -> str:
    """
    Replaces a previous breakdown (everything from the marker on) or appends
    the new one after a blank line.
    """
    current = current or ""
    if BREAKDOWN_MARKER in current:
        before = current.split(BREAKDOWN_MARKER)[0].strip()
        return f"{before}\n\n{summary}" if before else summary
    return f"{current}\n\n{summary}" if current else summary


def formatter_node(state: QuoteState) -> Dict[str, Any]:
    logger.info("--- FORMATTER NODE ---")
    breakdown = state.get("breakdown") or state["quote"]

    summary = build_summary(breakdown)
    merged = breakdown.model_copy(
        update={"scope_of_work": merge_scope_of_work(breakdown.scope_of_work, summary)}
    )
    logger.debug("Breakdown summary:\n%s", summary)

    return {"summary": summary, "breakdown": merged}
