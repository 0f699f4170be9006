from .setup import setup_observability
from .metrics import (
    bookstore_checkout_total,
    bookstore_checkout_duration_seconds,
)
