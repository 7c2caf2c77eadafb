"""Identifier kinds captured for visitors."""

from enum import StrEnum


class IdentifierKind(StrEnum):
    """Durable contact identifier kinds."""

    EMAIL = "email"
    PHONE = "phone"
    ACCOUNT = "account"


# Higher is more specific; a newer attach never replaces a more specific kind
IDENTIFIER_SPECIFICITY: dict[IdentifierKind, int] = {
    IdentifierKind.EMAIL: 1,
    IdentifierKind.PHONE: 1,
    IdentifierKind.ACCOUNT: 2,
}

SUBSCRIBE_CHANNEL_KINDS: dict[str, IdentifierKind] = {
    "email": IdentifierKind.EMAIL,
    "sms": IdentifierKind.PHONE,
}

# Kinds that address a recipient directly and can be suppressed by address
CONTACT_KINDS = frozenset({IdentifierKind.EMAIL, IdentifierKind.PHONE})
