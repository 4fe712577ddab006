"""Prometheus metrics for the HypershiftDeployment Operator."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "hypershift_deployment_operator_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "hypershift_deployment_operator_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
)

error_total = Counter(
    "hypershift_deployment_operator_error_total",
    "Total number of reconciliation errors",
    ["kind", "error_type"],
)

resource_status_total = Counter(
    "hypershift_deployment_operator_resource_status_total",
    "Resource status observations",
    ["kind", "status"],
)

# ManifestWork metrics
manifestwork_operations_total = Counter(
    "hypershift_deployment_operator_manifestwork_operations_total",
    "Total number of ManifestWork operations",
    ["operation", "result"],
)

manifestwork_payload_size = Histogram(
    "hypershift_deployment_operator_manifestwork_payload_size",
    "Number of manifests carried by a ManifestWork",
    buckets=[1, 5, 10, 20, 50, 100],
)

# Secret resolution metrics
secret_resolution_total = Counter(
    "hypershift_deployment_operator_secret_resolution_total",
    "Encryption secret resolutions by slot and source",
    ["slot", "source"],
)

# Status feedback metrics
condition_updates_total = Counter(
    "hypershift_deployment_operator_condition_updates_total",
    "Condition writes by outcome",
    ["result"],
)

# Teardown metrics
cleanup_wait_total = Counter(
    "hypershift_deployment_operator_cleanup_wait_total",
    "Deletion requeues while waiting for remote objects to disappear",
    ["kind"],
)

# API call metrics
api_call_total = Counter(
    "hypershift_deployment_operator_api_call_total",
    "Total number of API calls",
    ["api_type", "operation", "result"],
)

api_call_duration_seconds = Histogram(
    "hypershift_deployment_operator_api_call_duration_seconds",
    "Duration of API calls in seconds",
    ["api_type", "operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)

rate_limit_hits_total = Counter(
    "hypershift_deployment_operator_rate_limit_hits_total",
    "Total number of rate limit hits",
    ["api_type"],
)
