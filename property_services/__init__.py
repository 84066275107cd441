"""
property_services -- Application facade over the property kernel.

Dependency direction:
    property_services/ -> property_kernel/  (allowed)
    property_services/ -> property_config/  (allowed)
    property_kernel/   -> property_services/ (FORBIDDEN)
"""

from property_services.app import PropertyManagementApp

__all__ = ["PropertyManagementApp"]
