# orders/signals.py

"""
Order notifications.

order_status_changed is sent after an order's status is saved.

kwargs:
- order            the Order instance (already saved)
- previous_status  status before the change
- status           status after the change
- actor            user who made the change (may be None)

Receivers must not raise into the order flow; see printing.receivers.
"""

from django.dispatch import Signal

order_status_changed = Signal()
