from prometheus_client import Counter, Histogram

# Business Metrics
invoicing_intake_total = Counter(
    "invoicing_intake_total",
    "Orders submitted for invoicing",
    ["outcome"] # Labels: 'accepted', or the OrderError code that rejected it
)

invoicing_intake_duration_seconds = Histogram(
    "invoicing_intake_duration_seconds",
    "Order intake duration in seconds"
)

invoicing_stock_guard_rejections_total = Counter(
    "invoicing_stock_guard_rejections_total",
    "Conditional stock decrements that matched no row"
)

invoicing_transaction_retries_total = Counter(
    "invoicing_transaction_retries_total",
    "Units of work retried after a lock or serialization failure",
    ["name"]
)
