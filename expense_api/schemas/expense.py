"""Expense resource schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import (
    Schema,
    ValidationError,
    fields,
    post_load,
    pre_load,
    validate,
    validates_schema,
)

from expense_api.models.expense import CATEGORY_MAX_LENGTH, DESCRIPTION_MAX_LENGTH

from .common import PaginationQuerySchema


class ExpenseCreateSchema(Schema):
    """Payload for recording a new expense."""

    amount = fields.Float(required=True, allow_nan=False, validate=validate.Range(min=0))
    category = fields.String(
        required=True, validate=validate.Length(min=1, max=CATEGORY_MAX_LENGTH)
    )
    description = fields.String(
        load_default=None, allow_none=True, validate=validate.Length(max=DESCRIPTION_MAX_LENGTH)
    )
    date = fields.Date(load_default=None, allow_none=True)

    @pre_load
    def strip_text(self, data: Any, **_: Any) -> Any:
        if not isinstance(data, dict):
            return data
        cleaned = dict(data)
        for key in ("category", "description"):
            if isinstance(cleaned.get(key), str):
                cleaned[key] = cleaned[key].strip()
        return cleaned

    @post_load
    def blank_description(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        if data.get("description") == "":
            data["description"] = None
        return data


class ExpenseUpdateSchema(ExpenseCreateSchema):
    """Partial update: any subset of the create fields, but at least one."""

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("partial", True)
        super().__init__(**kwargs)

    date = fields.Date(allow_none=False)
    description = fields.String(
        allow_none=True, validate=validate.Length(max=DESCRIPTION_MAX_LENGTH)
    )

    @validates_schema
    def require_some_field(self, data: dict[str, Any], **_: Any) -> None:
        if not data:
            raise ValidationError("Provide at least one field to update.")


class ExpenseListQuerySchema(PaginationQuerySchema):
    """Pagination plus an optional exact ``category`` filter."""

    category = fields.String(
        load_default=None, validate=validate.Length(min=1, max=CATEGORY_MAX_LENGTH)
    )


class ExpenseSchema(Schema):
    """Representation of the expense entity."""

    id = fields.Integer(required=True)
    amount = fields.Float(required=True)
    category = fields.String(required=True)
    description = fields.String(allow_none=True)
    date = fields.Date(required=True)
