"""Utility helpers for the API."""

from .responses import err, error_response

__all__ = ["err", "error_response"]
