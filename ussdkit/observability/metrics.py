"""Prometheus metrics for ussdkit."""

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "ussdkit_request_count_total",
    "Total number of inbound messages handled",
    labelnames=["outcome"],
)

REQUEST_LATENCY = Histogram(
    "ussdkit_request_latency_seconds",
    "Time spent handling one inbound message",
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

SESSIONS_STARTED = Counter(
    "ussdkit_sessions_started_total",
    "Number of sessions created",
)

INPUTS_RECEIVED = Counter(
    "ussdkit_inputs_received_total",
    "Input values stored",
    labelnames=["screen"],
)

INVALID_SELECTIONS = Counter(
    "ussdkit_invalid_selections_total",
    "Option selections rejected as non-numeric or out of range",
    labelnames=["screen"],
)

SCREEN_TRANSITIONS = Counter(
    "ussdkit_screen_transitions_total",
    "Moves from one screen to another",
    labelnames=["from_screen", "to_screen"],
)
