"""Prometheus metrics for event ingestion, suppression and automation."""

from prometheus_client import Counter, Histogram

EVENTS_APPENDED_TOTAL = Counter(
    "fanflow_events_appended_total",
    "Events appended to the event log",
    ["type"],
)

EVENTS_REJECTED_TOTAL = Counter(
    "fanflow_events_rejected_total",
    "Events rejected by validation",
    ["field"],
)

SUPPRESSION_CHECKS_TOTAL = Counter(
    "fanflow_suppression_checks_total",
    "Suppression checks by stage and result",
    ["stage", "result"],
)

SCHEDULED_ACTIONS_TOTAL = Counter(
    "fanflow_scheduled_actions_total",
    "Scheduled action transitions",
    ["action_type", "status"],
)

DELIVERY_ATTEMPTS_TOTAL = Counter(
    "fanflow_delivery_attempts_total",
    "Delivery attempts by outcome",
    ["action_type", "outcome"],
)

DELIVERY_LATENCY_SECONDS = Histogram(
    "fanflow_delivery_latency_seconds",
    "Delivery provider call latency",
    ["action_type"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10),
)
