"""Utility functions for ledgerhealth."""

from ledgerhealth.utils.date_parser import parse_date
from ledgerhealth.utils.amount_parser import parse_amount

__all__ = ["parse_date", "parse_amount"]
