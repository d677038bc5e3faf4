# backend/errors.py

"""
API ERROR NORMALIZATION

Every domain failure leaves the API as:

    {"error": {"code": "<CODE>", "message": "<human message>"}}

- 400: the request itself is invalid (bad amounts, bad movement types)
- 409: a precondition on current state failed (till closed, order paid...)
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.response import Response

# codes that describe a malformed request rather than a state conflict
VALIDATION_CODES = {
    "INVALID_AMOUNT",
    "INVALID_MOVEMENT_TYPE",
    "INVALID_QUANTITY",
    "INVALID_PAYMENT_METHOD",
    "PRODUCT_UNAVAILABLE",
}

NOT_FOUND_CODES = {
    "ITEM_NOT_FOUND",
}


def error_response(*, code: str, message: str, http_status: int):
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


def domain_error_response(exc: Exception):
    code = getattr(exc, "code", "DOMAIN_ERROR")
    if code in VALIDATION_CODES:
        http_status = status.HTTP_400_BAD_REQUEST
    elif code in NOT_FOUND_CODES:
        http_status = status.HTTP_404_NOT_FOUND
    else:
        http_status = status.HTTP_409_CONFLICT
    return error_response(code=code, message=str(exc), http_status=http_status)
