"""Sort specifications parsed from `field[:asc|desc]` query strings."""

from __future__ import annotations

from dataclasses import dataclass, field as dataclass_field, replace
from typing import Any

ASC = "asc"
DESC = "desc"


def _normalize_direction(direction: str | None) -> str:
    return ASC if (direction or "").strip().lower() == ASC else DESC


@dataclass
class SortSpec:
    """One sort key.

    ``alias`` names the real query column when it differs from the public
    ``field``. ``available_fields`` is an allow-list; empty means unrestricted.
    Lower ``priority`` sorts first when several specs are combined.
    """

    field: str = ""
    direction: str = DESC
    priority: int = 0
    available_fields: list[str] = dataclass_field(default_factory=list)
    alias: str | None = None
    custom: bool = False
    description: str | None = None

    def __post_init__(self) -> None:
        self.direction = (self.direction or DESC).lower()

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_string(
        cls, sort_string: str, priority: int = 0, available_fields: list[str] | None = None
    ) -> SortSpec:
        parts = sort_string.split(":", 1)
        direction = parts[1].strip() if len(parts) > 1 else DESC
        return cls(
            field=parts[0].strip(),
            direction=_normalize_direction(direction),
            priority=priority,
            available_fields=list(available_fields or []),
        )

    @classmethod
    def parse_many(cls, sort_string: str, available_fields: list[str] | None = None) -> list[SortSpec]:
        """Parse ``"a:asc,b"`` into specs with ascending priorities."""
        chunks = [c for c in (sort_string or "").split(",") if c.strip()]
        return [cls.from_string(c, i, available_fields) for i, c in enumerate(chunks)]

    @classmethod
    def asc(cls, field_name: str, priority: int = 0, available_fields: list[str] | None = None) -> SortSpec:
        return cls(field_name, ASC, priority, list(available_fields or []))

    @classmethod
    def desc(cls, field_name: str, priority: int = 0, available_fields: list[str] | None = None) -> SortSpec:
        return cls(field_name, DESC, priority, list(available_fields or []))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SortSpec:
        spec = cls(
            field=data.get("field", ""),
            direction=data.get("direction", DESC),
            priority=data.get("priority", 0),
            available_fields=[f for f in data.get("availableFields", []) if isinstance(f, str)],
        )
        if data.get("alias") is not None:
            spec.alias = data["alias"].strip()
        if data.get("custom") is not None:
            spec.custom = bool(data["custom"])
        if data.get("description") is not None:
            spec.description = data["description"].strip()
        return spec

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def actual_field(self) -> str:
        return self.alias or self.field

    @property
    def is_asc(self) -> bool:
        return self.direction == ASC

    @property
    def is_desc(self) -> bool:
        return self.direction == DESC

    def is_field_valid(self) -> bool:
        if not self.available_fields:
            return True
        return self.field in self.available_fields or (
            self.alias is not None and self.alias in self.available_fields
        )

    def to_query_string(self) -> str:
        # Custom specs carry a caller-supplied expression used verbatim
        if self.custom:
            return self.actual_field
        return f"{self.actual_field} {self.direction.upper()}"

    def validate(self) -> dict[str, str]:
        errors: dict[str, str] = {}
        if not self.field:
            errors["field"] = "Sort field must not be empty"
        if self.direction not in (ASC, DESC):
            errors["direction"] = "Sort direction must be asc or desc"
        if not self.is_field_valid():
            errors["field"] = f'Sort field "{self.field}" is not one of the available fields'
        return errors

    # ------------------------------------------------------------------
    # Copies
    # ------------------------------------------------------------------

    def with_field(self, new_field: str) -> SortSpec:
        return replace(self, field=new_field.strip(), available_fields=list(self.available_fields))

    def with_direction(self, new_direction: str) -> SortSpec:
        return replace(
            self,
            direction=_normalize_direction(new_direction),
            available_fields=list(self.available_fields),
        )

    def with_priority(self, new_priority: int) -> SortSpec:
        return replace(self, priority=max(0, new_priority), available_fields=list(self.available_fields))

    def reversed(self) -> SortSpec:
        return self.with_direction(DESC if self.is_asc else ASC)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "direction": self.direction,
            "priority": self.priority,
            "alias": self.alias,
            "custom": self.custom,
            "description": self.description,
            "availableFields": list(self.available_fields),
            "actualField": self.actual_field,
            "isAsc": self.is_asc,
            "isDesc": self.is_desc,
            "queryString": self.to_query_string(),
        }

    def summary(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "direction": self.direction,
            "priority": self.priority,
            "description": self.description
            or f"Sort by {self.field} {'ascending' if self.is_asc else 'descending'}",
            "custom": self.custom,
        }

    def __str__(self) -> str:
        return self.to_query_string()
