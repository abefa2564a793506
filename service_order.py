"""
Quote -> service order conversion.

Service orders go to the crew, so every dollar amount is stripped out of the
text carried over from the quote.
"""

import re
from typing import Any, Dict, List, Optional

from state import (
    EXTERIOR_MODULES,
    INTERIOR_MODULES,
    BoxesModule,
    LineModule,
    MiscLine,
    SimpleQuote,
)
from nodes.formatter import BOXES_ATTRIBUTE

INCLUDED_SERVICES = [
    "Prep: Power washing as needed, scraping and sanding, removing old caulk and re-caulking gaps",
    "Protection: Cover and protect all landscaping, walkways, and adjacent surfaces",
    "Clean-up: Complete site clean-up and proper disposal of all materials",
]

PRICE_PATTERNS = [
    (re.compile(r".*\$[\d,]+\.?\d*.*\n?"), ""),
    (re.compile(r".*TOTAL PROJECT COST.*\n?"), ""),
    (re.compile(r"Project Breakdown:\s*\n"), ""),
    (re.compile(r"• .*\$[\d,]+\.?\d*.*"), ""),
    (re.compile(r"\n\s*\n"), "\n"),
]


def strip_price_info(text: str) -> str:
    for pattern, replacement in PRICE_PATTERNS:
        text = pattern.sub(replacement, text)
    return text.strip()


def _qty(value: float) -> str:
    return f"{value:g}"


def exterior_work_lines(quote: SimpleQuote) -> List[str]:
    lines = []
    for name, label in EXTERIOR_MODULES:
        module = getattr(quote.exterior_breakdown, name)
        if not module.enabled or module.subtotal <= 0:
            continue

        if isinstance(module, BoxesModule):
            lines.append(f"• {label} ({BOXES_ATTRIBUTE}) - Quantity: {_qty(module.quantity)} {module.unit}")
        elif isinstance(module, LineModule):
            for line in module.lines:
                if not line.enabled:
                    continue
                if isinstance(line, MiscLine):
                    if line.description:
                        lines.append(f"• {line.description}")
                elif line.quantity > 0:
                    attribute = line.attribute()
                    if getattr(line, "coats", ""):
                        attribute = f"{attribute}, {line.coats} coat{'s' if line.coats != '1' else ''}"
                    name_part = f"{label} ({attribute})" if attribute else label
                    lines.append(f"• {name_part} - Quantity: {_qty(line.quantity)} {line.unit}")
        else:
            for part, component in module.components():
                if component.enabled and component.quantity > 0:
                    unit = module.units.get(part, "ea")
                    lines.append(f"• {label} {part} - Quantity: {_qty(component.quantity)} {unit}")
    return lines


def interior_work_lines(quote: SimpleQuote) -> List[str]:
    lines = []
    for name, label in INTERIOR_MODULES:
        module = getattr(quote.interior_breakdown, name)
        if not module.enabled or module.subtotal <= 0:
            continue

        if isinstance(module, LineModule):
            for index, line in enumerate(module.lines):
                if not line.enabled:
                    continue
                if isinstance(line, MiscLine):
                    if line.description:
                        lines.append(f"• {line.description}")
                    continue
                parts = [part for part, c in line.components() if c.enabled]
                if parts:
                    room = line.name or f"#{index + 1}"
                    lines.append(f"• {label} {room} - {', '.join(parts)}")
        else:
            parts = [part for part, c in module.components() if c.enabled]
            if parts:
                lines.append(f"• {label} - {', '.join(parts)}")
    return lines


def build_service_order_details(quote: SimpleQuote, project: Optional[Dict[str, Any]] = None) -> str:
    details = ""

    if project:
        details += f"PROJECT: {project.get('title')}\n"
        details += f"SERVICE TYPE: {project.get('service_type')}\n"
        if project.get("description"):
            details += f"DESCRIPTION: {project['description']}\n\n"

    details += "WORK TO BE PERFORMED:\n\n"

    exterior = exterior_work_lines(quote)
    if exterior:
        details += "EXTERIOR WORK DETAILS:\n" + "\n".join(exterior) + "\n\n"

    interior = interior_work_lines(quote)
    if interior:
        details += "INTERIOR WORK DETAILS:\n" + "\n".join(interior) + "\n\n"

    if quote.scope_of_work:
        scope = strip_price_info(quote.scope_of_work)
        if scope:
            details += f"ADDITIONAL WORK DETAILS:\n{scope}\n\n"

    details += "INCLUDED SERVICES:\n"
    details += "".join(f"• {service}\n" for service in INCLUDED_SERVICES)
    details += "\n"

    if quote.notes:
        notes = strip_price_info(quote.notes)
        if notes:
            details += f"ADDITIONAL NOTES:\n{notes}\n\n"

    return details.strip()
