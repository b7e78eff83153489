"""Common Marshmallow schemas shared across resources."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, ValidationError, fields, validate, validates_schema

MIN_REPORT_YEAR = 2000
MAX_REPORT_YEAR = 9998


class PaginationQuerySchema(Schema):
    """Validate ``page``/``limit`` query parameters."""

    class Meta:
        unknown = EXCLUDE

    page = fields.Integer(load_default=1, validate=validate.Range(min=1))
    limit = fields.Integer(load_default=10, validate=validate.Range(min=1, max=100))


class YearQuerySchema(Schema):
    """A calendar year between ``MIN_REPORT_YEAR`` and ``MAX_REPORT_YEAR``."""

    class Meta:
        unknown = EXCLUDE

    year = fields.Integer(
        required=True, validate=validate.Range(min=MIN_REPORT_YEAR, max=MAX_REPORT_YEAR)
    )


class MonthYearQuerySchema(YearQuerySchema):
    """A ``month``/``year`` pair selecting one calendar month."""

    month = fields.Integer(required=True, validate=validate.Range(min=1, max=12))


class DateRangeQuerySchema(Schema):
    """Inclusive ``start``/``end`` ISO dates with ``start <= end``."""

    class Meta:
        unknown = EXCLUDE

    start = fields.Date(required=True)
    end = fields.Date(required=True)

    @validates_schema
    def check_order(self, data: dict[str, Any], **_: Any) -> None:
        start, end = data.get("start"), data.get("end")
        if start and end and start > end:
            raise ValidationError("start must be on or before end", field_name="start")


class MetaSchema(Schema):
    """Metadata block for paginated responses."""

    total = fields.Integer(required=True)
    page = fields.Integer(required=True)
    limit = fields.Integer(required=True)
    total_pages = fields.Integer(required=True)
    has_next = fields.Boolean(required=True)
    has_prev = fields.Boolean(required=True)
