"""SOHO School Transport API"""

__version__ = "1.0.0"
