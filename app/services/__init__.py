from app.services.automation_scheduler import AutomationScheduler
from app.services.event_log_service import EventLogService
from app.services.identity_service import IdentityService
from app.services.suppression_service import SuppressionService
from app.services.variant_assignment_service import VariantAssignmentService

__all__ = [
    "AutomationScheduler",
    "EventLogService",
    "IdentityService",
    "SuppressionService",
    "VariantAssignmentService",
]
