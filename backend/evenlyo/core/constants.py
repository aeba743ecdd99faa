"""Application-wide constants for the Evenlyo booking platform."""

from __future__ import annotations

import os

BRAND_NAME = "Evenlyo"
API_TITLE = f"{BRAND_NAME} Booking API"
API_VERSION = "1.0.0"
API_DESCRIPTION = (
    "Booking lifecycle, availability and pricing engine for the "
    f"{BRAND_NAME} event and equipment marketplace."
)

ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

# Supported content languages for multilingual fields
SUPPORTED_LANGUAGES = ("en", "nl")
DEFAULT_LANGUAGE = "en"

# Day of week codes used by listing availability
DAY_CODES = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")

# Text constraints
MIN_TICKET_DETAILS_LENGTH = 10
MAX_REASON_LENGTH = 1000

# Tracking identifiers
TRACKING_ID_PREFIX = "TRK"
TRACKING_ID_RANDOM_LENGTH = 9
TICKET_ID_PREFIX = "TICKET-"

# Support ticket categories
SUPPORT_ISSUE_CATEGORIES = (
    "Account Issues",
    "Booking Problems",
    "Payment Issues",
    "Technical Support",
    "Service Quality",
    "Refund Request",
    "General Inquiry",
    "Other",
)

DEFAULT_REJECTION_REASON = "No reason provided"
