"""Custom signals for the merchandise app.

Signals:
    merch_order_approved: Sent after an order is approved and committed.
        Sender: The ``MerchOrder`` class.
        Kwargs:
            order: The approved ``MerchOrder``.
            registration: The buyer's ``Registration`` for the event.
"""

from django.dispatch import Signal

merch_order_approved = Signal()
