# backend/evenlyo/routes/__init__.py
"""
API routes

All booking marketplace endpoints are mounted under /api by main.py.
"""

from . import admin_tracking, bookings, listings, notifications, stock, support

__all__ = [
    "admin_tracking",
    "bookings",
    "listings",
    "notifications",
    "stock",
    "support",
]
