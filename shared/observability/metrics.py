from prometheus_client import Counter, Histogram

# Business Metrics
bookstore_checkout_total = Counter(
    "bookstore_checkout_total",
    "Total checkouts processed",
    ["status"]  # Labels: 'success', 'rejected', 'failed'
)

bookstore_checkout_duration_seconds = Histogram(
    "bookstore_checkout_duration_seconds",
    "Checkout duration in seconds"
)
