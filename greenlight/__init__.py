"""
Greenlight - GO/NO-GO release decision log
"""

__version__ = "0.1.0"
