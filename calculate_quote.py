import json
import logging
import os
import sys

from dotenv import load_dotenv
from pydantic import ValidationError

from graph import calculate_total
from nodes.formatter import money
from state import EXTERIOR_MODULES, INTERIOR_MODULES, SimpleQuote

load_dotenv()


def print_modules(title, tree, modules):
    enabled = [(label, getattr(tree, name)) for name, label in modules if getattr(tree, name).enabled]
    if not enabled:
        return
    print(f"\n{title}:")
    for label, module in enabled:
        print(f"  - {label}: {money(module.subtotal)}")


def calculate_quote():
    if len(sys.argv) < 2:
        print("Usage: python calculate_quote.py <quote.json> [--write]")
        print("Example: python calculate_quote.py samples/example_quote.json --write")
        return 1

    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))

    path = sys.argv[1]
    write_back = "--write" in sys.argv[2:]

    if not os.path.exists(path):
        print(f"File not found: {path}")
        return 1

    try:
        with open(path, "r") as f:
            quote = SimpleQuote.model_validate(json.load(f))
    except (json.JSONDecodeError, ValidationError) as e:
        print(f"Could not read quote from {path}: {e}")
        return 1

    breakdown, summary, warnings = calculate_total(quote)

    print("\n--- RESULTS ---")
    print_modules("Exterior", breakdown.exterior_breakdown, EXTERIOR_MODULES)
    print_modules("Interior", breakdown.interior_breakdown, INTERIOR_MODULES)

    print(f"\n💰 TOTAL ESTIMATE: {money(breakdown.total_estimate)}")
    print(f"\n{summary}")

    if warnings:
        print(f"\n⚠️  WARNINGS ({len(warnings)}):")
        for warning in warnings:
            print(f"  - {warning}")

    if write_back:
        with open(path, "w") as f:
            json.dump(breakdown.model_dump(mode="json", by_alias=True), f, indent=2)
        print(f"\n✅ Updated quote written to {path}")

    print("\n-------------------------------------------")
    return 0


if __name__ == "__main__":
    sys.exit(calculate_quote())
