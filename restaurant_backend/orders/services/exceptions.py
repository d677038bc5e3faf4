# orders/services/exceptions.py

"""
ORDER & PAYMENT SERVICE ERRORS

Two families:
- OrderError:   tab / item / status rules
- PaymentError: payment-session rules

NoOpenRegisterError lives with the till (cash_register.services.exceptions).
"""


class OrderError(Exception):
    """Base exception for order failures."""

    code = "ORDER_ERROR"


class OrderLockedError(OrderError):
    """Raised when mutating items of a paid or finished order."""

    code = "ORDER_LOCKED"


class InvalidOrderTransitionError(OrderError):
    code = "INVALID_ORDER_TRANSITION"


class InvalidQuantityError(OrderError):
    code = "INVALID_QUANTITY"


class OrderItemNotFoundError(OrderError):
    code = "ITEM_NOT_FOUND"


class ProductUnavailableError(OrderError):
    """Product (or extra) inactive or from another restaurant."""

    code = "PRODUCT_UNAVAILABLE"


class PaymentError(Exception):
    """Base exception for payment-session failures."""

    code = "PAYMENT_ERROR"


class ExceedsRemainingError(PaymentError):
    """Allocation would push the allocated total past the payable total."""

    code = "EXCEEDS_REMAINING"


class IncompletePaymentError(PaymentError):
    code = "INCOMPLETE_PAYMENT"


class OrderAlreadyPaidError(PaymentError):
    code = "ORDER_ALREADY_PAID"


class PaymentSessionClosedError(PaymentError):
    """Session was completed or abandoned; it accepts no more changes."""

    code = "PAYMENT_SESSION_CLOSED"


class InvalidPaymentAmountError(PaymentError):
    code = "INVALID_AMOUNT"


class OrderChangedError(PaymentError):
    """Order totals changed after the session was started."""

    code = "ORDER_CHANGED"


class UnknownPaymentMethodError(PaymentError):
    code = "INVALID_PAYMENT_METHOD"


class NoActiveOrderError(OrderError):
    """The table has no active or pending order."""

    code = "NO_ACTIVE_ORDER"
