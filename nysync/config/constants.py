"""
Application-wide constants.

API endpoints, lookup tables, and other magic numbers live here.
"""
from datetime import datetime

# API Base URLs
NYS_API_BASE_URL = "https://legislation.nysenate.gov/api/3"
NYS_SITE_BASE_URL = "https://www.nysenate.gov/legislation"

# Session years - NY sessions span two years and are named by the odd year
def current_session_year() -> int:
    """Return the session year (odd) for today's date."""
    return normalize_session_year(datetime.now().year)


def normalize_session_year(year: int) -> int:
    """Map any year to its session year (2026 -> 2025, 2025 -> 2025)."""
    return year if year % 2 == 1 else year - 1


# Collection Names
COLLECTION_BILLS = "bills"
COLLECTION_SPONSORS = "sponsors"
COLLECTION_HISTORY = "history"
COLLECTION_ROLL_CALLS = "roll_calls"
COLLECTION_VOTES = "votes"
COLLECTION_PEOPLE = "people"

# Paging and batching
LISTING_PAGE_SIZE = 100
UPDATES_LIMIT = 1000
UPDATE_WINDOW_HOURS = 24
INSERT_BATCH_SIZE = 100
MAX_ERROR_DETAILS = 10

# Surrogate keys
BILL_ID_SESSION_MULTIPLIER = 1_000_000
ASSEMBLY_BILL_ID_OFFSET = 500_000
ROLL_CALL_ID_MULTIPLIER = 100

# Diagnostics probes
DIAGNOSTIC_KNOWN_BILL = "S1"
DIAGNOSTIC_HIGH_BILL = "S8616"
DIAGNOSTIC_PRIOR_SESSION = 2023

# NYS status types -> numeric status codes
BILL_STATUS_CODES = {
    "INTRODUCED": 1,
    "IN_ASSEMBLY_COMM": 2,
    "IN_SENATE_COMM": 2,
    "ASSEMBLY_FLOOR": 3,
    "SENATE_FLOOR": 3,
    "PASSED_ASSEMBLY": 4,
    "PASSED_SENATE": 4,
    "DELIVERED_TO_GOV": 5,
    "SIGNED_BY_GOV": 6,
    "ADOPTED": 6,
    "VETOED": 7,
    "SUBSTITUTED": 8,
    "STRICKEN": 9,
}

# Upstream vote type -> (vote code, vote description)
VOTE_TYPE_CODES = {
    "AYE": (1, "Yea"),
    "AYEWR": (1, "Yea"),
    "NAY": (2, "Nay"),
    "ABSENT": (3, "Absent"),
    "ABD": (3, "Absent"),
    "EXC": (4, "NV"),
    "NV": (4, "NV"),
}

# Upstream chamber enum -> display name
CHAMBER_DISPLAY_NAMES = {
    "SENATE": "Senate",
    "ASSEMBLY": "Assembly",
}

# District prefixes used by the people collection (SD-008 / HD-075)
SENATE_DISTRICT_PREFIX = "SD"
ASSEMBLY_DISTRICT_PREFIX = "HD"

# Name suffixes dropped before comparing names
GENERATIONAL_SUFFIXES = ("jr", "sr", "ii", "iii", "iv")
