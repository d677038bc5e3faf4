# printing/services/dispatch.py

"""
======================================================
PATH: printing/services/dispatch.py
======================================================
PRINT DISPATCH (fire-and-forget)

Talks to the local print daemon:

    POST <base><endpoint>
    {"printerName": "...", "text": "...", "options": {...}}

GUARANTEES:
- dispatch() never raises on transport or address failure; it logs and
  returns False (a malformed printer host is a failure like any other)
- printed_at is stamped only for items a kitchen printer accepted
- a failed print never touches order state

LATENCY:
- printers are tried one after another, each bounded by
  PRINT_TIMEOUT_SECONDS, so a call costs at most
  PRINT_TIMEOUT_SECONDS x number of kitchen printers
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from http.client import HTTPException
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from django.conf import settings
from django.utils import timezone

from orders.models import Order, OrderItem
from printing.models import PrinterConfig
from printing.services.formatting import format_kitchen_ticket

logger = logging.getLogger("printing")

DEFAULT_ENDPOINT = "/print"

KITCHEN_OPTIONS = {
    "align": "left",
    "font": "A",
    "doubleSize": False,
    "bold": True,
    "beep": True,
}


@dataclass(frozen=True)
class PrintOutcome:
    printed_items: int
    printers: int
    failed_printers: int

    @property
    def ok(self) -> bool:
        return self.printed_items > 0 and self.failed_printers == 0


def _base_url(printer: PrinterConfig | None) -> str:
    host = (getattr(printer, "host", "") or "").strip().rstrip("/")
    if not host:
        return getattr(settings, "PRINT_SERVER_URL", "") or ""
    if "://" in host:
        return host
    return f"https://{host}"


def print_url(printer: PrinterConfig | None = None) -> str:
    base = _base_url(printer)
    if not base:
        return ""
    endpoint = (getattr(printer, "endpoint", "") or DEFAULT_ENDPOINT).strip()
    if not endpoint.startswith("/"):
        endpoint = f"/{endpoint}"
    return f"{base}{endpoint}"


def dispatch(printer: PrinterConfig, text: str, options: dict | None = None) -> bool:
    url = print_url(printer)
    if not url:
        logger.warning(
            "No print server configured",
            extra={"printer": printer.display_name},
        )
        return False

    body = {
        "printerName": printer.printer_name,
        "text": text,
        "options": options if options is not None else dict(KITCHEN_OPTIONS),
    }
    req = Request(
        url,
        data=json.dumps(body, ensure_ascii=False).encode("utf-8"),
        headers={
            "Content-Type": "application/json",
            "Accept": "application/json",
        },
        method="POST",
    )
    timeout = float(getattr(settings, "PRINT_TIMEOUT_SECONDS", 5.0))

    try:
        with urlopen(req, timeout=timeout) as resp:
            status_code = getattr(resp, "status", 200)
    except HTTPError as exc:
        logger.error(
            "Print server rejected job",
            extra={"printer": printer.display_name, "url": url, "status_code": exc.code},
        )
        return False
    except (URLError, OSError) as exc:
        logger.error(
            "Print server unreachable",
            extra={"printer": printer.display_name, "url": url, "reason": str(exc)},
        )
        return False
    except (ValueError, HTTPException) as exc:
        # InvalidURL from a malformed host, or a garbled daemon response
        logger.error(
            "Print job could not be sent",
            extra={"printer": printer.display_name, "url": url, "reason": repr(exc)},
        )
        return False

    logger.info(
        "Print job sent",
        extra={"printer": printer.display_name, "url": url, "status_code": status_code},
    )
    return True


def kitchen_printers(restaurant_id):
    return PrinterConfig.objects.filter(
        restaurant_id=restaurant_id,
        is_kitchen=True,
        is_active=True,
    )


def pending_items(order: Order):
    return OrderItem.objects.filter(order=order, printed_at__isnull=True).order_by("created_at")


def print_pending_items(order: Order) -> PrintOutcome:
    """
    Send every not-yet-printed line of the order to the kitchen printers.
    """
    items = list(pending_items(order))
    if not items:
        return PrintOutcome(printed_items=0, printers=0, failed_printers=0)

    printers = list(kitchen_printers(order.restaurant_id))
    if not printers:
        logger.warning("No kitchen printer configured", extra={"order_id": str(order.pk)})
        return PrintOutcome(printed_items=0, printers=0, failed_printers=0)

    now = timezone.now()
    text = format_kitchen_ticket(order, items, printed_at=now)

    failed = 0
    for printer in printers:
        if not dispatch(printer, text):
            failed += 1

    if failed == len(printers):
        return PrintOutcome(printed_items=0, printers=len(printers), failed_printers=failed)

    OrderItem.objects.filter(pk__in=[i.pk for i in items], printed_at__isnull=True).update(printed_at=now)

    logger.info(
        "Kitchen ticket printed",
        extra={"order_id": str(order.pk), "items": len(items), "printers": len(printers), "failed": failed},
    )
    return PrintOutcome(printed_items=len(items), printers=len(printers), failed_printers=failed)
