"""Utility functions for finport."""

from finport.utils.date_parser import parse_date_cell, parse_date_text
from finport.utils.amount_parser import parse_amount, parse_amount_cell
from finport.utils.fingerprint import compute_fingerprint

__all__ = [
    "parse_date_cell",
    "parse_date_text",
    "parse_amount",
    "parse_amount_cell",
    "compute_fingerprint",
]
