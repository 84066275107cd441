"""Read-only query selectors."""

from property_kernel.selectors.base import BaseSelector
from property_kernel.selectors.payment_record_selector import PaymentRecordSelector

__all__ = [
    "BaseSelector",
    "PaymentRecordSelector",
]
