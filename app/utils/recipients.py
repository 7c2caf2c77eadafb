"""Recipient id normalisation shared by the suppression ledger and the scheduler."""

from __future__ import annotations

import re


def normalize_recipient_id(value: str) -> str:
    """
    Canonical form of a contact identifier. E-mail addresses are lower-cased;
    phone numbers lose spaces, dashes, dots and parentheses.
    """
    trimmed = value.strip()
    if "@" in trimmed:
        return trimmed.lower()
    return re.sub(r"[\s\-().]", "", trimmed)
