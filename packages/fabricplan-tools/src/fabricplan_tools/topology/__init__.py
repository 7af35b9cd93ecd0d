"""Topology sizing tools."""

from .calculator import compute_derived

__all__ = ["compute_derived"]
