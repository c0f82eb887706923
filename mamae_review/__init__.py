"""Mamãe Review - product review service"""

__version__ = "1.0.0"
