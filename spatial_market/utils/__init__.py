"""Utility helpers for the spatial market simulation."""

from .logger import setup_logger

__all__ = ['setup_logger']
