"""Suppression reasons."""

from enum import StrEnum

GLOBAL_SCOPE = "global"


class SuppressionReason(StrEnum):
    """Why a recipient is on the suppression ledger."""

    MANUAL = "manual"
    UNSUBSCRIBE = "unsubscribe"
    BOUNCE = "bounce"
    COMPLAINT = "complaint"


# Recipient- or provider-initiated entries; removing them needs an explicit override
AUTOMATIC_REASONS = frozenset(
    {
        SuppressionReason.UNSUBSCRIBE,
        SuppressionReason.BOUNCE,
        SuppressionReason.COMPLAINT,
    }
)
