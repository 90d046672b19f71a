"""
Adapters layer - Data sources feeding the availability service.
"""

from .yaml_source import YamlShopDataSource

__all__ = ["YamlShopDataSource"]
