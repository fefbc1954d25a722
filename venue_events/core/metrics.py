"""
Metrics instrumentation for observability.
Counters live in the default prometheus_client registry so a host app can expose them.
"""

from prometheus_client import Counter, Histogram

# Gateway metrics
gateway_requests = Counter(
    'venue_events_gateway_requests_total',
    'Total requests sent to the LocationEvent API',
    ['operation', 'outcome']  # success, not_found, error
)

gateway_latency = Histogram(
    'venue_events_gateway_latency_seconds',
    'LocationEvent API request latency',
    ['operation'],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# Lifecycle metrics
status_transitions = Counter(
    'venue_events_status_transitions_total',
    'Event status change attempts',
    ['target', 'result']  # changed, rejected, noop, aborted, error
)

application_responses = Counter(
    'venue_events_application_responses_total',
    'Owner responses to photographer applications',
    ['decision', 'result']  # sent, rejected, error
)

stale_responses = Counter(
    'venue_events_stale_responses_total',
    'Gateway responses discarded because a newer request was issued',
    ['operation']
)


# Convenience functions for instrumentation
def record_gateway_request(operation: str, outcome: str, duration: float):
    """Record one gateway round-trip. Outcome: success, not_found, error"""
    gateway_requests.labels(operation=operation, outcome=outcome).inc()
    gateway_latency.labels(operation=operation).observe(duration)

def record_status_transition(target: str, result: str):
    status_transitions.labels(target=target, result=result).inc()

def record_application_response(decision: str, result: str):
    application_responses.labels(decision=decision, result=result).inc()

def record_stale_response(operation: str):
    stale_responses.labels(operation=operation).inc()
