"""Prometheus metrics for parking discovery."""

from prometheus_client import Counter, Gauge, Histogram, CollectorRegistry, generate_latest

# Create a custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

# Completed fetches by outcome (succeeded / failed)
FETCHES = Counter(
    "parking_fetches_total",
    "Completed Overpass fetches by outcome",
    ["outcome"],
    registry=REGISTRY,
)

# Position updates that did not lead to a fetch
FETCHES_SKIPPED = Counter(
    "parking_fetches_skipped_total",
    "Position updates that did not trigger a fetch",
    ["reason"],
    registry=REGISTRY,
)

# Fetch latency histogram (in seconds)
FETCH_LATENCY = Histogram(
    "parking_fetch_latency_seconds",
    "Time taken to fetch and normalize parking data",
    buckets=(0.25, 0.5, 1.0, 2.0, 3.0, 5.0, 10.0, 20.0, 30.0),
    registry=REGISTRY,
)

RECORDS_DROPPED = Counter(
    "parking_records_dropped_total",
    "Overpass elements dropped for lacking a coordinate",
    registry=REGISTRY,
)

SPOTS_PUBLISHED = Gauge(
    "parking_spots_published",
    "Number of parking spots in the current result set",
    registry=REGISTRY,
)

LOCATION_FIXES = Counter(
    "parking_location_fixes_total",
    "Position fixes received from the location source",
    ["result"],
    registry=REGISTRY,
)


def record_fetch(outcome: str, latency_seconds: float) -> None:
    """Record a finished fetch."""
    FETCHES.labels(outcome=outcome).inc()
    FETCH_LATENCY.observe(latency_seconds)


def record_fetch_skipped(reason: str) -> None:
    """Record a position update that was not acted upon."""
    FETCHES_SKIPPED.labels(reason=reason).inc()


def record_dropped_records(count: int) -> None:
    """Record elements dropped during normalization."""
    if count:
        RECORDS_DROPPED.inc(count)


def update_spot_count(total: int) -> None:
    """Update published spot count gauge."""
    SPOTS_PUBLISHED.set(total)


def record_location_fix(result: str) -> None:
    """Record an accepted or rejected position fix."""
    LOCATION_FIXES.labels(result=result).inc()


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest(REGISTRY)
