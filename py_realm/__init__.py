"""
py-realm: derived statistics for world-building regions.
"""

__version__ = "0.1.0"
