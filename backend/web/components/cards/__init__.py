"""
Card components for SIAKAD.
"""

from .card import Card, StatCard

__all__ = ["Card", "StatCard"]
