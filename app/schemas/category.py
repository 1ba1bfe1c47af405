"""Category request DTOs and response models."""

from __future__ import annotations

from typing import Any, ClassVar, Mapping, Optional

from pydantic import field_validator

from app.core.response import register_serialization_group
from app.domain.category import Category
from app.schemas.common import CamelModel
from app.schemas.request import RequestDto
from app.schemas.rules import MaxLength, NotBlank, Rule

_CATEGORY_FIELDS = ("code", "name", "creator")


class CreateCategoryRequest(RequestDto):
    code: str = ""
    name: str = ""
    creator: str = ""

    RULES: ClassVar[dict[str, list[Rule]]] = {
        **RequestDto.RULES,
        "code": [NotBlank("Category code must not be blank"), MaxLength(255, "Category code must not exceed 255 characters")],
        "name": [NotBlank("Category name must not be blank"), MaxLength(255, "Category name must not exceed 255 characters")],
        "creator": [MaxLength(255, "Creator must not exceed 255 characters")],
    }

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "code": self.code, "name": self.name, "creator": self.creator}


class UpdateCategoryRequest(RequestDto):
    """Partial update. Empty strings count as "not supplied"."""

    code: Optional[str] = None
    name: Optional[str] = None
    creator: Optional[str] = None

    RULES: ClassVar[dict[str, list[Rule]]] = {
        **RequestDto.RULES,
        "code": [MaxLength(255, "Category code must not exceed 255 characters")],
        "name": [MaxLength(255, "Category name must not exceed 255 characters")],
        "creator": [MaxLength(255, "Creator must not exceed 255 characters")],
    }

    @field_validator("code", "name", "creator", mode="after")
    @classmethod
    def _empty_to_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    def updated_fields(self) -> dict[str, str]:
        return {name: getattr(self, name) for name in _CATEGORY_FIELDS if getattr(self, name)}

    def has_updates(self) -> bool:
        return bool(self.updated_fields())

    def validate_business_rules(self) -> dict[str, str]:
        if not self.has_updates():
            return {"noUpdates": "No fields to update were provided"}
        return {}

    def differences(self, original: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
        """Fields whose new value differs from ``original``, as ``{old, new}`` pairs."""
        changes: dict[str, dict[str, Any]] = {}
        for name in _CATEGORY_FIELDS:
            new = getattr(self, name)
            if original.get(name) is not None and new is not None and new != original[name]:
                changes[name] = {"old": original[name], "new": new}
        return changes

    def apply_to(self, original: Mapping[str, Any]) -> dict[str, Any]:
        merged = dict(original)
        merged.update(self.updated_fields())
        return merged

    def update_summary(self) -> dict[str, Any]:
        return {
            "updatedFields": self.updated_fields(),
            "hasUpdates": self.has_updates(),
            "requestSummary": self.request_summary(),
        }

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "code": self.code, "name": self.name, "creator": self.creator}


class CategoryOut(CamelModel):
    id: int
    code: str
    name: str
    creator: str


register_serialization_group(Category, CategoryOut)
