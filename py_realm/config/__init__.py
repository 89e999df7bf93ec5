"""
Configuration for world-data locations, logging and the API.
"""

from .config import Settings, settings

__all__ = ['Settings', 'settings']
