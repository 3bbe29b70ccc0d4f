from __future__ import annotations

from dataclasses import dataclass
import re
import secrets
import string

from toiletcheck.core.errors import QrCodeError


CODE_SUFFIX_LENGTH = 7
# Alphanumeric only: a hyphen in the suffix would break parsing.
_SUFFIX_ALPHABET = string.ascii_letters + string.digits

_LOCATION_URL_RE = re.compile(r"locations/([0-9a-f-]{36})", re.IGNORECASE)
_UUID4_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class LocationCode:
    organization_code: str
    building_code: str
    location_code: str | None
    unique_id: str


def build_location_qr_payload(location_id: str, base_url: str) -> str:
    # Printed into the sticker; scanning opens the location page.
    return f"{base_url.rstrip('/')}/locations/{location_id}"


def resolve_location_id(qr_data: str) -> str:
    """Extract a location id from decoded QR text.

    Accepts a URL containing ``/locations/<uuid>`` or a bare UUIDv4.
    """
    data = (qr_data or "").strip()
    if "/locations/" in data:
        match = _LOCATION_URL_RE.search(data)
        if match is None:
            raise QrCodeError("QR URL does not contain a location id")
        return match.group(1)
    if _UUID4_RE.match(data):
        return data
    raise QrCodeError("Unrecognised QR code format")


def _random_suffix(length: int = CODE_SUFFIX_LENGTH) -> str:
    return "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(length))


def generate_location_code(
    organization_code: str,
    building_code: str,
    location_code: str | None = None,
) -> str:
    # ORG-BLD[-LOC]-xxxxxxx; short codes are upper-cased, the suffix is not.
    parts = [organization_code.upper(), building_code.upper()]
    if location_code:
        parts.append(location_code.upper())
    parts.append(_random_suffix())
    return "-".join(part for part in parts if part)


def parse_location_code(code: str) -> LocationCode | None:
    parts = code.split("-")
    if len(parts) < 3:
        return None
    return LocationCode(
        organization_code=parts[0],
        building_code=parts[1],
        location_code=parts[2] if len(parts) == 4 else None,
        unique_id=parts[-1],
    )


def is_valid_location_code(code: str) -> bool:
    parsed = parse_location_code(code)
    return parsed is not None and len(parsed.unique_id) == CODE_SUFFIX_LENGTH


def format_location_code(code: str) -> str:
    return code.replace("-", " - ")


def generate_bulk_location_codes(
    count: int,
    organization_code: str,
    building_code: str,
    location_prefix: str | None = None,
    existing_codes: list[str] | None = None,
) -> list[str]:
    """Generate ``count`` codes that collide neither with each other nor ``existing_codes``."""
    codes: list[str] = []
    seen = set(existing_codes or [])
    while len(codes) < count:
        location_code = f"{location_prefix}{len(codes) + 1:02d}" if location_prefix else None
        code = generate_location_code(organization_code, building_code, location_code)
        if code in seen:
            continue
        codes.append(code)
        seen.add(code)
    return codes
