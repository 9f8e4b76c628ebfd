from registration_fees.services.allocation_gate import AllocationGate
from registration_fees.services.catalog_service import FeeCatalogService, FeeInput, FeeRemoval
from registration_fees.services.clock import Clock, SystemClock
from registration_fees.services.projection_service import FeeProjectionService
from registration_fees.services.usage_counter import UsageCounter

__all__ = [
    "AllocationGate",
    "FeeCatalogService",
    "FeeInput",
    "FeeRemoval",
    "FeeProjectionService",
    "UsageCounter",
    "Clock",
    "SystemClock",
]
