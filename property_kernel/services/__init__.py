"""
Kernel services.

Flush-only: every service works inside the caller's transaction and never
commits or rolls back on its own.
"""

from property_kernel.services.apartment_service import ApartmentService
from property_kernel.services.base import BaseService
from property_kernel.services.house_service import HouseService
from property_kernel.services.payment_generation_service import (
    PaymentGenerationService,
)
from property_kernel.services.payment_record_service import PaymentRecordService
from property_kernel.services.tenant_service import TenantService

__all__ = [
    "BaseService",
    "HouseService",
    "ApartmentService",
    "TenantService",
    "PaymentRecordService",
    "PaymentGenerationService",
]
