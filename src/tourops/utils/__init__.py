"""Utility functions for tourops."""

from tourops.utils.date_parser import parse_date, days_between
from tourops.utils.money import parse_money, parse_percent, parse_quantity
from tourops.utils.resolvers import resolve_record, display_name

__all__ = [
    "parse_date",
    "days_between",
    "parse_money",
    "parse_percent",
    "parse_quantity",
    "resolve_record",
    "display_name",
]
