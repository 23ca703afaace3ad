from prometheus_client import Counter, Histogram

api_request_latency_seconds = Histogram(
    "api_request_latency_seconds",
    "API request latency in seconds",
    ["route", "method", "status"],
)

tickets_created_total = Counter(
    "tickets_created_total",
    "Total support tickets created",
    ["category"],
)

tickets_archived_total = Counter(
    "tickets_archived_total",
    "Total support tickets moved to the archive",
    ["source"],
)

archive_runs_total = Counter(
    "archive_runs_total",
    "Total archive sweeps",
    ["source", "outcome"],
)

customer_validations_total = Counter(
    "customer_validations_total",
    "Customer number lookups",
    ["result"],
)

wizard_transitions_total = Counter(
    "wizard_transitions_total",
    "Support wizard step transitions",
    ["from_step", "to_step"],
)

rma_generation_latency_seconds = Histogram(
    "rma_generation_latency_seconds",
    "Latency of issuing a unique RMA number",
)
