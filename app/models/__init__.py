from app.models.event import Event
from app.models.scheduled_action import ScheduledAction
from app.models.suppression import SuppressionEntry
from app.models.variant_assignment import VariantAssignment
from app.models.visitor_identity import VisitorIdentity

__all__ = [
    "Event",
    "ScheduledAction",
    "SuppressionEntry",
    "VariantAssignment",
    "VisitorIdentity",
]
