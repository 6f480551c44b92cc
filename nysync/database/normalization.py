"""
Data Normalization Module

Centralized functions to transform raw NYS API values into our standardized
database format. All ingestion code should use these functions so that bill
numbers, names, districts and status codes are compared the same way
everywhere.

Usage:
    from nysync.database.normalization import normalize_bill_number, derive_bill_id

    number = normalize_bill_number("S00256A")   # "S256A"
    bill_id = derive_bill_id(number, 2025)      # 2025000256
"""
import re
import unicodedata
from typing import Optional, Tuple

from nysync.config.constants import (
    ASSEMBLY_BILL_ID_OFFSET,
    ASSEMBLY_DISTRICT_PREFIX,
    BILL_ID_SESSION_MULTIPLIER,
    BILL_STATUS_CODES,
    CHAMBER_DISPLAY_NAMES,
    GENERATIONAL_SUFFIXES,
    NYS_API_BASE_URL,
    NYS_SITE_BASE_URL,
    SENATE_DISTRICT_PREFIX,
    VOTE_TYPE_CODES,
)


# ============================================================================
# Bill Number Normalization
# ============================================================================

_BILL_NUMBER_RE = re.compile(r"^([A-Z])(\d+)([A-Z]?)$")


def split_bill_number(bill_number: Optional[str]) -> Optional[Tuple[str, str, str]]:
    """
    Split a bill number into (prefix, digits, amendment suffix).

    Returns None when the value does not look like a bill number.
    """
    if not bill_number:
        return None
    match = _BILL_NUMBER_RE.match(bill_number.strip().upper())
    if not match:
        return None
    return match.group(1), match.group(2), match.group(3)


def normalize_bill_number(bill_number: Optional[str]) -> str:
    """
    Normalize a bill number to its canonical stored form.

    Upper-cases, strips leading zeros from the numeric part and keeps the
    amendment letter. Values that don't match the letter/digits/letter shape
    are returned upper-cased. Never raises.

    Examples:
        >>> normalize_bill_number("S00256")
        "S256"
        >>> normalize_bill_number("A0100B")
        "A100B"
        >>> normalize_bill_number("s256")
        "S256"
        >>> normalize_bill_number("S0000")
        "S0"
    """
    if not bill_number:
        return ""

    parts = split_bill_number(bill_number)
    if parts is None:
        return bill_number.upper()

    prefix, digits, suffix = parts
    return f"{prefix}{digits.lstrip('0') or '0'}{suffix}"


def derive_bill_id(bill_number: str, session_year: int) -> int:
    """
    Compute the surrogate bill_id for a bill that has no stored row yet.

    session * 1,000,000 + chamber offset + numeric part. Assembly bills
    ("A" prefix) are shifted by 500,000 so they never collide with Senate
    bills of the same number.

    Examples:
        >>> derive_bill_id("S256", 2025)
        2025000256
        >>> derive_bill_id("A100", 2025)
        2025500100
    """
    parts = split_bill_number(bill_number)
    prefix, numeric_part = "", 0
    if parts is not None:
        prefix, digits, _ = parts
        numeric_part = int(digits)

    chamber_offset = ASSEMBLY_BILL_ID_OFFSET if prefix == "A" else 0
    return session_year * BILL_ID_SESSION_MULTIPLIER + chamber_offset + numeric_part


def bill_api_url(bill_number: str, session_year: int) -> str:
    """Canonical API URL for a bill."""
    return f"{NYS_API_BASE_URL}/bills/{session_year}/{bill_number}"


def bill_site_url(bill_number: str, session_year: int) -> str:
    """Public nysenate.gov page for a bill."""
    return f"{NYS_SITE_BASE_URL}/bills/{session_year}/{bill_number}"


def committee_slug(name: Optional[str]) -> Optional[str]:
    """'Codes Committee' -> 'codes-committee'"""
    if not name:
        return None
    return re.sub(r"\s+", "-", name.strip().lower())


# ============================================================================
# Status Normalization
# ============================================================================

def map_status_to_code(status_type: Optional[str]) -> int:
    """
    Map an NYS status type to our numeric status code.

    Unknown or missing statuses map to 0.

    Examples:
        >>> map_status_to_code("INTRODUCED")
        1
        >>> map_status_to_code("SIGNED_BY_GOV")
        6
        >>> map_status_to_code("SOMETHING_NEW")
        0
    """
    if not status_type:
        return 0
    return BILL_STATUS_CODES.get(status_type, 0)


def map_vote_type(vote_type: str) -> Tuple[int, str]:
    """
    Map an upstream vote type key to (vote code, description).

    Unrecognized types get code 0 and keep their raw label.
    """
    return VOTE_TYPE_CODES.get(vote_type.upper(), (0, vote_type))


# ============================================================================
# Chamber Normalization
# ============================================================================

def normalize_chamber(chamber: Optional[str]) -> Optional[str]:
    """
    Convert the API chamber enum to its display name.

    Examples:
        >>> normalize_chamber("SENATE")
        "Senate"
        >>> normalize_chamber("ASSEMBLY")
        "Assembly"
        >>> normalize_chamber("JOINT")
        "JOINT"
    """
    if not chamber:
        return None
    return CHAMBER_DISPLAY_NAMES.get(chamber, chamber)


def api_district_to_db(district_code, chamber: Optional[str]) -> Optional[str]:
    """
    Convert an API districtCode + chamber to the stored district format.

    Examples:
        >>> api_district_to_db(8, "SENATE")
        "SD-008"
        >>> api_district_to_db("75", "ASSEMBLY")
        "HD-075"
    """
    if not district_code or not chamber:
        return None
    try:
        number = int(district_code)
    except (TypeError, ValueError):
        return None

    prefix = SENATE_DISTRICT_PREFIX if "SENATE" in chamber.upper() else ASSEMBLY_DISTRICT_PREFIX
    return f"{prefix}-{number:03d}"


# ============================================================================
# Name Normalization
# ============================================================================

_SUFFIX_RE = re.compile(r"\s+(?:%s)$" % "|".join(GENERATIONAL_SUFFIXES), re.IGNORECASE)
_MIDDLE_INITIAL_RE = re.compile(r"\s+[a-z](?=\s)")
_WHITESPACE_RE = re.compile(r"\s+")


def strip_accents(value: str) -> str:
    """'Sepúlveda' -> 'Sepulveda'"""
    decomposed = unicodedata.normalize("NFD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def fold_name(value: Optional[str]) -> str:
    """Accent-insensitive, case-insensitive comparison key for a name field."""
    if not value:
        return ""
    return strip_accents(value).lower().strip()


def normalize_name(name: Optional[str]) -> str:
    """
    Normalize a full name for loose comparison.

    Strips accents, periods and commas, drops a trailing generational
    suffix, removes single-letter middle initials and collapses whitespace.

    Examples:
        >>> normalize_name("John A. Smith Jr.")
        "john smith"
        >>> normalize_name("José  Peralta")
        "jose peralta"
    """
    if not name:
        return ""
    value = strip_accents(name).lower().replace(".", "").replace(",", "")
    value = _WHITESPACE_RE.sub(" ", value).strip()
    value = _SUFFIX_RE.sub("", value)
    value = _MIDDLE_INITIAL_RE.sub("", value)
    return _WHITESPACE_RE.sub(" ", value).strip()
