"""Utility helpers for sqlinclude."""

from sqlinclude.utils import logging

__all__ = ("logging",)
