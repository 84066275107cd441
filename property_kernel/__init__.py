"""
Property Kernel

Persistence and business rules for a small property-management application:
- Houses, apartments and tenants
- Monthly payment records per tenant
- Back-fill of missing months from move-in to move-out (or now)
- Lock guard on reviewed payment records
"""

__version__ = "0.4.0"
