"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability import AvailabilityService, ShopDataSourceProtocol, ShopSnapshot

__all__ = ["AvailabilityService", "ShopDataSourceProtocol", "ShopSnapshot"]
