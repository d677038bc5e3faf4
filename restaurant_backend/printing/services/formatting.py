# printing/services/formatting.py

"""
======================================================
PATH: printing/services/formatting.py
======================================================
KITCHEN TICKET TEXT

Plain monospaced text for 48-column thermal printers:

    ================================================
    PEDIDO PARA COZINHA
    Pedido #1a2b3c4d
    ================================================
    Data: 19/10/2026 20:15  Mesa: 4
    Cliente: Ana
    ITENS DO PEDIDO:
    ------------------------------------------------
    2x X-Burger                             R$ 50,00
       + Bacon                              R$ 10,00
       OBS: sem cebola
    ------------------------------------------------
    SUBTOTAL:                               R$ 60,00
    TAXA DE SERVICO (10%):                   R$ 6,00
    TOTAL:                                  R$ 66,00

Item prices print as the base line (product price x qty) followed by one
line per extra (extra price x qty); together they equal the line total.
Fee lines print only when the order carries a service fee.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.utils import timezone

from cash_register.services.money import ZERO, money
from orders.services.pricing import compute_totals, parse_extras, service_fee_percent

WIDTH = 48
RULE = "=" * WIDTH
DASHES = "-" * WIDTH


def format_money(value) -> str:
    """12.5 -> 'R$ 12,50' (comma decimals, dot thousands)."""
    symbol = getattr(settings, "CURRENCY_SYMBOL", "R$")
    amount = money(value)
    sign = "-" if amount < 0 else ""
    whole, frac = f"{abs(amount):,.2f}".split(".")
    whole = whole.replace(",", ".")
    return f"{sign}{symbol} {whole},{frac}"


def _line(left: str, right: str = "") -> str:
    if not right:
        return left
    gap = max(WIDTH - len(left) - len(right), 1)
    return f"{left}{' ' * gap}{right}"


def _percent_label(pct: Decimal) -> str:
    pct = pct.normalize()
    return f"{pct:f}".replace(".", ",")


def format_kitchen_ticket(order, items=None, table=None, *, printed_at=None) -> str:
    """
    Build the ticket for `items` (defaults to every line of the order).
    """
    if items is None:
        items = list(order.items.all().order_by("created_at"))
    else:
        items = list(items)

    when = timezone.localtime(printed_at or timezone.now())
    table = table or order.table

    lines = [
        RULE,
        "PEDIDO PARA COZINHA",
        f"Pedido #{str(order.pk)[:8]}",
        RULE,
        f"Data: {when:%d/%m/%Y %H:%M}  Mesa: {table.number}",
    ]
    if order.customer_name:
        lines.append(f"Cliente: {order.customer_name}")

    lines.append("ITENS DO PEDIDO:")
    lines.append(DASHES)

    for item in items:
        qty = int(item.quantity)
        extras = parse_extras(item.extras)
        extras_unit = sum((e["price"] for e in extras), ZERO)
        base = (money(item.unit_price) - extras_unit) * qty

        lines.append(_line(f"{qty}x {item.name}", format_money(base)))
        for extra in extras:
            lines.append(_line(f"   + {extra['name']}", format_money(extra["price"] * qty)))
        if item.observation:
            lines.append(f"   OBS: {item.observation}")

    lines.append(DASHES)

    totals = compute_totals(items)
    lines.append(_line("SUBTOTAL:", format_money(totals.subtotal)))

    if order.service_fee and money(order.service_fee) > ZERO:
        label = f"TAXA DE SERVICO ({_percent_label(service_fee_percent())}%):"
        lines.append(_line(label, format_money(totals.service_fee)))
        lines.append(_line("TOTAL:", format_money(totals.total)))

    return "\n".join(lines) + "\n"
