from __future__ import annotations

from dataclasses import dataclass, field, replace

"""Element and Particular domain models.

An Element is one deliverable (a stage, a backdrop, ...) declared by a header
row of the materials sheet; each Particular is a material line attached to it
by that row or by the continuation rows that follow.
"""

__all__ = [
    "Dimensions",
    "Particular",
    "Element",
]


@dataclass(frozen=True)
class Dimensions:
    """Element dimensions in meters (0 when not supplied)."""
    width: float = 0.0
    length: float = 0.0
    height: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {"width": self.width, "length": self.length, "height": self.height}


@dataclass(frozen=True)
class Particular:
    """A single material line belonging to an Element."""
    description: str
    unit: str
    quantity: float
    included: bool = True
    notes: str = ""
    source_row: int = 0

    def to_dict(self) -> dict[str, object]:
        return {
            "description": self.description,
            "unit": self.unit,
            "quantity": self.quantity,
            "included": self.included,
            "notes": self.notes,
            "row_number": self.source_row,
        }


@dataclass(frozen=True)
class Element:
    """A deliverable item grouping one or more particulars.

    type and category are stored exactly as typed in the sheet (case preserved).
    An Element without particulars is never retained in an ImportReport.
    """
    id: str
    type: str
    name: str
    category: str
    dimensions: Dimensions = field(default_factory=Dimensions)
    particulars: tuple[Particular, ...] = ()
    source_row: int = 0

    def with_particular(self, particular: Particular) -> Element:
        return replace(self, particulars=self.particulars + (particular,))

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "type": self.type,
            "name": self.name,
            "category": self.category,
            "dimensions": self.dimensions.to_dict(),
            "particulars": [p.to_dict() for p in self.particulars],
            "row_number": self.source_row,
        }
