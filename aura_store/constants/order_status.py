PAYMENT_PENDING = "Payment Pending"
ORDER_PLACED = "Order Placed"
PROCESSING = "Processing"
SHIPPED = "Shipped"
DELIVERED = "Delivered"
CANCELLED = "Cancelled"

ALLOWED_TRANSITIONS = {
    PAYMENT_PENDING: [ORDER_PLACED, CANCELLED],
    ORDER_PLACED: [PROCESSING, CANCELLED],
    PROCESSING: [SHIPPED, CANCELLED],
    SHIPPED: [DELIVERED, CANCELLED],
    DELIVERED: [],
    CANCELLED: [],
}

TERMINAL_STATUSES = {DELIVERED, CANCELLED}


def can_transition(current: str, new: str) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, [])
