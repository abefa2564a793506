from graph import calculate_total
from service_order import build_service_order_details, strip_price_info
from state import (
    Component,
    LineModule,
    MiscLine,
    RoomInstance,
    RoomModule,
    ShutterLine,
    SimpleQuote,
    WindowLine,
)

PROJECT = {
    "id": 1,
    "title": "Smith House Exterior",
    "service_type": "Exterior Painting",
    "description": "Two-storey colonial",
}


def test_strip_price_info_removes_breakdown():
    text = (
        "Paint all trim white.\n\n"
        "Project Breakdown:\n\n"
        "• Siding (vinyl): $250.00\n"
        "• Boxes (Soffit, Facia, Gutters): $1,540.00\n\n"
        "TOTAL PROJECT COST: $1790.00\n\n"
        "Additional Services:\n"
        "• Prep: Power washing as needed."
    )
    assert strip_price_info(text) == (
        "Paint all trim white.\n"
        "Additional Services:\n"
        "• Prep: Power washing as needed."
    )


def test_strip_price_info_without_prices():
    assert strip_price_info("  Two coats on the door.  ") == "Two coats on the door."


def test_details_from_calculated_quote(siding_and_boxes):
    siding_and_boxes.scope_of_work = "Match existing colours."
    siding_and_boxes.notes = "Gate code 1234, budget $5,000"
    quote, _, _ = calculate_total(siding_and_boxes)

    details = build_service_order_details(quote, PROJECT)

    assert details.startswith(
        "PROJECT: Smith House Exterior\n"
        "SERVICE TYPE: Exterior Painting\n"
        "DESCRIPTION: Two-storey colonial\n\n"
        "WORK TO BE PERFORMED:"
    )
    assert "EXTERIOR WORK DETAILS:\n" in details
    assert "• Siding (vinyl) - Quantity: 100 sqft" in details
    assert "• Boxes (Soffit, Facia, Gutters) - Quantity: 10 lft" in details
    assert "ADDITIONAL WORK DETAILS:\nMatch existing colours." in details
    assert "INCLUDED SERVICES:\n• Prep:" in details
    assert "$" not in details
    assert "TOTAL PROJECT COST" not in details
    # the notes line carried a price so it is dropped entirely
    assert "ADDITIONAL NOTES" not in details


def test_details_list_selector_lines_and_rooms():
    quote = SimpleQuote(project_id=1)
    exterior = quote.exterior_breakdown
    exterior.windows = LineModule[WindowLine](enabled=True, lines=[WindowLine(type="wood", coats="2", quantity=3)])
    exterior.shutters = LineModule[ShutterLine](enabled=True, lines=[
        ShutterLine(type="panel", quantity=4),
        ShutterLine(type="louver", quantity=0),
    ])
    exterior.miscellaneous = LineModule[MiscLine](enabled=True, lines=[MiscLine(description="Power wash deck", price=80)])
    interior = quote.interior_breakdown
    interior.kitchen = RoomModule(enabled=True, walls=Component(enabled=True, quantity=100, price=1),
                                  trim=Component(enabled=True, quantity=10, price=2))
    interior.bathrooms = LineModule[RoomInstance](enabled=True, lines=[
        RoomInstance(ceiling=Component(enabled=True, quantity=40, price=1)),
    ])
    quote, _, _ = calculate_total(quote)

    details = build_service_order_details(quote)

    assert not details.startswith("PROJECT:")
    assert "• Windows (wood, 2 coats) - Quantity: 3 ea" in details
    assert "• Shutters (panel) - Quantity: 4 ea" in details
    assert "louver" not in details
    assert "• Power wash deck" in details
    assert "INTERIOR WORK DETAILS:\n• Kitchen - walls, trim\n• Bathroom #1 - ceiling" in details


def test_details_skip_disabled_modules(siding_and_boxes):
    quote, _, _ = calculate_total(siding_and_boxes)
    quote.exterior_breakdown.boxes.enabled = False
    details = build_service_order_details(quote, PROJECT)
    assert "Boxes" not in details
