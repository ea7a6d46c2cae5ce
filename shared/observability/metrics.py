from prometheus_client import Counter, Histogram

# Business Metrics
ecomm_checkout_total = Counter(
    "ecomm_checkout_total",
    "Total checkouts processed",
    ["payment_method", "status"] # status: 'success' or the failing error code
)

ecomm_checkout_duration_seconds = Histogram(
    "ecomm_checkout_duration_seconds",
    "Checkout duration in seconds",
    ["payment_method"]
)

ecomm_saga_compensation_total = Counter(
    "ecomm_saga_compensation_total",
    "Total saga compensations triggered",
    ["step_name"] # Labels: 'settle_online_payment'
)

ecomm_order_transitions_total = Counter(
    "ecomm_order_transitions_total",
    "Order status changes applied",
    ["status"] # target status, including 'cancelled' and 'return_*'
)

ecomm_wallet_operations_total = Counter(
    "ecomm_wallet_operations_total",
    "Wallet ledger operations",
    ["operation"] # Labels: 'credit', 'debit'
)
