"""ORM models for the property kernel."""

from property_kernel.models.apartment import Apartment
from property_kernel.models.house import House
from property_kernel.models.payment_record import PaymentRecord
from property_kernel.models.tenant import Tenant

__all__ = [
    "House",
    "Apartment",
    "Tenant",
    "PaymentRecord",
]
