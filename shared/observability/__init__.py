from .setup import setup_observability
from .metrics import (
    invoicing_intake_total,
    invoicing_intake_duration_seconds,
    invoicing_stock_guard_rejections_total,
    invoicing_transaction_retries_total
)
