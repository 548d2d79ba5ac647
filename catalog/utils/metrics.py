"""
Prometheus metrics for the catalog service.

Metric registration goes through ``_get_or_create_*`` so that re-importing
this module (uvicorn --reload, test collection) does not raise duplicate
registration errors.
"""

from prometheus_client import REGISTRY, Counter, Gauge


def _get_or_create_counter(
    name: str, doc: str, labels: list[str] | None = None
) -> Counter:
    """
    Get existing counter or create new one.

    Args:
        name: Metric name.
        doc: Metric documentation.
        labels: Optional list of label names.

    Returns:
        Counter instance.
    """
    try:
        return Counter(name, doc, labels or [])
    except ValueError:
        # Metric already exists, retrieve it from registry
        return REGISTRY._names_to_collectors[name]


def _get_or_create_gauge(
    name: str, doc: str, labels: list[str] | None = None
) -> Gauge:
    """
    Get existing gauge or create new one.

    Args:
        name: Metric name.
        doc: Metric documentation.
        labels: Optional list of label names.

    Returns:
        Gauge instance.
    """
    try:
        return Gauge(name, doc, labels or [])
    except ValueError:
        return REGISTRY._names_to_collectors[name]


# Mutation Metrics
mutations_total = _get_or_create_counter(
    "catalog_mutations_total",
    "Total catalog mutations",
    ["operation", "status"],  # status: success, error
)

# Authentication Metrics
auth_attempts_total = _get_or_create_counter(
    "catalog_auth_attempts_total",
    "Total login attempts",
    ["status"],  # success, failure
)

auth_token_validations_total = _get_or_create_counter(
    "catalog_auth_token_validations_total",
    "Total bearer token validations",
    ["status"],  # valid, invalid, unknown_user
)

# Event Fanout Metrics
events_published_total = _get_or_create_counter(
    "catalog_events_published_total",
    "Total events published on the event bus",
    ["event"],
)

events_dropped_total = _get_or_create_counter(
    "catalog_events_dropped_total",
    "Total events dropped because a subscriber queue was full",
    ["event"],
)

subscribers_active = _get_or_create_gauge(
    "catalog_subscribers_active",
    "Number of active event subscribers",
    ["event"],
)
