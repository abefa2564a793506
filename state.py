import math
from datetime import datetime
from typing import Annotated, Any, ClassVar, Generic, List, Optional, Tuple, TypedDict, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def to_number(value: Any) -> float:
    """Coerce a form value to a float, falling back to 0 for blanks and junk."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


Amount = Annotated[float, BeforeValidator(to_number)]


# Pydantic models for the quote breakdown tree (camelCase on the wire)
class BreakdownModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Component(BreakdownModel):
    """Fixed sub-component of a room or porch (walls, ceiling, trim...)."""
    enabled: bool = False
    quantity: Amount = 0.0
    price: Amount = 0.0
    subtotal: Amount = 0.0

    factor: ClassVar[float] = 1.0


class Line(BreakdownModel):
    enabled: bool = True
    quantity: Amount = 0.0
    price: Amount = 0.0
    subtotal: Amount = 0.0

    factor: ClassVar[float] = 1.0
    unit: ClassVar[str] = "ea"

    def attribute(self) -> str:
        """Distinguishing attribute shown in summaries, empty if none."""
        return ""


class SidingLine(Line):
    material: str = ""

    unit: ClassVar[str] = "sqft"

    def attribute(self) -> str:
        return self.material


class DormerLine(Line):
    complexity: str = ""  # simple | complex

    def attribute(self) -> str:
        return self.complexity


class ChimneyLine(Line):
    description: str = ""

    def attribute(self) -> str:
        return self.description


def coats_text(value: Any) -> str:
    """Window coats as the table key: 2, 2.0 and "2" all become "2"."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


class WindowLine(Line):
    type: str = ""  # plastic-pvc | wood | casement
    coats: str = ""

    @field_validator("coats", mode="before")
    @classmethod
    def _coats_as_text(cls, value: Any) -> str:
        return coats_text(value)

    def attribute(self) -> str:
        return self.type


class ShutterLine(Line):
    type: str = ""  # panel | louver

    def attribute(self) -> str:
        return self.type


class DeckLine(Line):
    material: str = ""

    unit: ClassVar[str] = "sqft"

    def attribute(self) -> str:
        return self.material


class MiscLine(BreakdownModel):
    """Flat-priced expense line; has no quantity."""
    enabled: bool = True
    description: str = ""
    price: Amount = 0.0
    subtotal: Amount = 0.0


LineT = TypeVar("LineT")


class LineModule(BreakdownModel, Generic[LineT]):
    enabled: bool = False
    lines: List[LineT] = Field(default_factory=list)
    subtotal: Amount = 0.0


class BoxesModule(BreakdownModel):
    """Soffit, fascia and gutters priced as one combined quantity."""
    enabled: bool = False
    quantity: Amount = 0.0
    price: Amount = 0.0
    subtotal: Amount = 0.0

    factor: ClassVar[float] = 3.0
    unit: ClassVar[str] = "lft"


class PorchModule(BreakdownModel):
    enabled: bool = False
    floor: Component = Field(default_factory=Component)
    ceiling: Component = Field(default_factory=Component)
    railing: Component = Field(default_factory=Component)
    subtotal: Amount = 0.0

    units: ClassVar[dict] = {"floor": "sqft", "ceiling": "sqft", "railing": "lft"}

    def components(self) -> List[Tuple[str, Component]]:
        return [("floor", self.floor), ("ceiling", self.ceiling), ("railing", self.railing)]


class RoomModule(BreakdownModel):
    enabled: bool = False
    walls: Component = Field(default_factory=Component)
    ceiling: Component = Field(default_factory=Component)
    trim: Component = Field(default_factory=Component)
    subtotal: Amount = 0.0

    def components(self) -> List[Tuple[str, Component]]:
        return [("walls", self.walls), ("ceiling", self.ceiling), ("trim", self.trim)]


class RoomInstance(RoomModule):
    """One room of a multi-instance category (bedroom #2, hallway...)."""
    enabled: bool = True
    name: str = ""

    def attribute(self) -> str:
        return self.name


class ExteriorBreakdown(BreakdownModel):
    siding: LineModule[SidingLine] = Field(default_factory=LineModule[SidingLine])
    boxes: BoxesModule = Field(default_factory=BoxesModule)
    dormer: LineModule[DormerLine] = Field(default_factory=LineModule[DormerLine])
    chimney: LineModule[ChimneyLine] = Field(default_factory=LineModule[ChimneyLine])
    windows: LineModule[WindowLine] = Field(default_factory=LineModule[WindowLine])
    shutters: LineModule[ShutterLine] = Field(default_factory=LineModule[ShutterLine])
    deck: LineModule[DeckLine] = Field(default_factory=LineModule[DeckLine])
    porch: PorchModule = Field(default_factory=PorchModule)
    miscellaneous: LineModule[MiscLine] = Field(default_factory=LineModule[MiscLine])


class InteriorBreakdown(BreakdownModel):
    living_room: RoomModule = Field(default_factory=RoomModule)
    dining_room: RoomModule = Field(default_factory=RoomModule)
    kitchen: RoomModule = Field(default_factory=RoomModule)
    bedrooms: LineModule[RoomInstance] = Field(default_factory=LineModule[RoomInstance])
    bathrooms: LineModule[RoomInstance] = Field(default_factory=LineModule[RoomInstance])
    hallways: LineModule[RoomInstance] = Field(default_factory=LineModule[RoomInstance])
    stairways: LineModule[RoomInstance] = Field(default_factory=LineModule[RoomInstance])
    miscellaneous: LineModule[MiscLine] = Field(default_factory=LineModule[MiscLine])


# Display names, in summary order
EXTERIOR_MODULES = [
    ("siding", "Siding"),
    ("boxes", "Boxes"),
    ("dormer", "Dormer"),
    ("chimney", "Chimney"),
    ("windows", "Windows"),
    ("shutters", "Shutters"),
    ("deck", "Deck"),
    ("porch", "Porch"),
    ("miscellaneous", "Miscellaneous"),
]

INTERIOR_MODULES = [
    ("living_room", "Living Room"),
    ("dining_room", "Dining Room"),
    ("kitchen", "Kitchen"),
    ("bedrooms", "Bedroom"),
    ("bathrooms", "Bathroom"),
    ("hallways", "Hallway"),
    ("stairways", "Stairway"),
    ("miscellaneous", "Miscellaneous"),
]


class OptionalComments(BreakdownModel):
    prep: bool = False
    primer: bool = False
    protection: bool = False
    cleanup: bool = False
    warranty: bool = False


class QuoteBreakdown(BreakdownModel):
    exterior_breakdown: ExteriorBreakdown = Field(default_factory=ExteriorBreakdown)
    interior_breakdown: InteriorBreakdown = Field(default_factory=InteriorBreakdown)
    optional_comments: OptionalComments = Field(default_factory=OptionalComments)
    total_estimate: Amount = 0.0
    scope_of_work: str = ""

    @field_validator("exterior_breakdown", "interior_breakdown", "optional_comments", mode="before")
    @classmethod
    def _missing_tree(cls, value: Any) -> Any:
        # Older records store NULL for trees they never used
        return {} if value is None else value

    @field_validator("scope_of_work", mode="before")
    @classmethod
    def _missing_text(cls, value: Any) -> Any:
        return "" if value is None else value


QUOTE_STATUSES = ("draft", "sent", "approved", "rejected", "converted")


class SimpleQuote(QuoteBreakdown):
    id: Optional[int] = None  # DB ID once saved
    project_id: int = 0
    project_type: str = "residential"
    is_interior: bool = False
    is_exterior: bool = False
    is_special_requirements: bool = False
    status: str = "draft"
    notes: Optional[str] = None
    valid_until: Optional[datetime] = None
    sent_date: Optional[datetime] = None
    approved_date: Optional[datetime] = None
    rejected_date: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @field_validator("status")
    @classmethod
    def _known_status(cls, value: str) -> str:
        if value not in QUOTE_STATUSES:
            raise ValueError(f"status must be one of {', '.join(QUOTE_STATUSES)}")
        return value


# LangGraph State
class QuoteState(TypedDict, total=False):
    # Input
    quote: QuoteBreakdown  # form state as submitted

    # Processing
    breakdown: QuoteBreakdown  # working copy, priced then aggregated

    # Output
    summary: str
    validation_errors: List[str]
