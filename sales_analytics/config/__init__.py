"""
Sales Analytics Reporting
Configuration Module
"""
from .settings import Settings, SegmentationSettings, get_settings

__all__ = ["Settings", "SegmentationSettings", "get_settings"]
