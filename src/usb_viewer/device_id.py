"""
Parse vendor and product IDs out of Windows device identifiers.

Device identifiers look like ``USB\\VID_046D&PID_C52B\\5&2A1F0B&0&2``:
bus, hardware ID and instance segments separated by backslashes. The
convention is loosely enforced (virtual, composite and vendor-specific
devices all bend it), so parsing never raises; anything unexpected just
leaves the corresponding ID unset.

See https://learn.microsoft.com/windows-hardware/drivers/install/hardware-ids
"""

from __future__ import annotations
from typing import Optional

from .models import ParsedIds

PATH_SEPARATOR = "\\"
TOKEN_SEPARATOR = "&"
VENDOR_MARKER = "VID_"
PRODUCT_MARKER = "PID_"

_NO_IDS = ParsedIds()


def split_segments(raw_id: Optional[str]) -> list[str]:
    """Split an identifier into its backslash-separated segments."""
    if not raw_id:
        return []
    return raw_id.split(PATH_SEPARATOR)


def hardware_segment(segments: list[str]) -> Optional[str]:
    """Return the second segment if it carries both VID_ and PID_ markers."""
    if len(segments) < 2:
        return None
    segment = segments[1]
    if VENDOR_MARKER not in segment or PRODUCT_MARKER not in segment:
        return None
    return segment


def id_candidates(segment: str) -> tuple[Optional[str], Optional[str]]:
    """Return the (vendor, product) candidate tokens of a hardware segment.

    Candidates are positional: the first '&' token is the vendor candidate
    and the second the product candidate. Identifiers listing the tokens in
    another order yield no ID for the misplaced token.
    """
    tokens = segment.split(TOKEN_SEPARATOR)
    vendor = tokens[0]
    product = tokens[1] if len(tokens) > 1 else None
    return vendor, product


def extract_id(token: Optional[str], marker: str) -> Optional[str]:
    """Return everything after the first '_' of a token carrying ``marker``.

    A bare marker such as 'VID_' carries no ID and gives None.
    """
    if not token or marker not in token:
        return None
    return token.split("_", 1)[1] or None


def parse_device_id(raw_id: Optional[str]) -> ParsedIds:
    """Parse a device identifier into vendor and product IDs."""
    segment = hardware_segment(split_segments(raw_id))
    if segment is None:
        return _NO_IDS

    vendor, product = id_candidates(segment)
    return ParsedIds(
        vendor_id=extract_id(vendor, VENDOR_MARKER),
        product_id=extract_id(product, PRODUCT_MARKER),
    )
