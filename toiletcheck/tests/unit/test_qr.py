from __future__ import annotations

import pytest

from toiletcheck.core.errors import QrCodeError
from toiletcheck.services.qr import (
    CODE_SUFFIX_LENGTH,
    build_location_qr_payload,
    format_location_code,
    generate_bulk_location_codes,
    generate_location_code,
    is_valid_location_code,
    parse_location_code,
    resolve_location_id,
)


LOCATION_ID = "3f2b8c1e-9d4a-4b7e-8a21-6c5d4e3f2a10"


def test_qr_payload_round_trips_through_scan() -> None:
    payload = build_location_qr_payload(LOCATION_ID, "https://app.test/")
    assert payload == f"https://app.test/locations/{LOCATION_ID}"
    assert resolve_location_id(payload) == LOCATION_ID


def test_scan_accepts_bare_uuid4() -> None:
    assert resolve_location_id(f"  {LOCATION_ID} ") == LOCATION_ID


@pytest.mark.parametrize(
    "data",
    [
        "",
        "hello",
        "https://app.test/locations/not-a-uuid",
        # Version 1 UUIDs are not issued for locations.
        "3f2b8c1e-9d4a-1b7e-8a21-6c5d4e3f2a10",
    ],
)
def test_scan_rejects_unknown_formats(data: str) -> None:
    with pytest.raises(QrCodeError):
        resolve_location_id(data)


def test_location_code_shape() -> None:
    code = generate_location_code("org", "bld", "t01")
    parsed = parse_location_code(code)
    assert parsed is not None
    assert (parsed.organization_code, parsed.building_code, parsed.location_code) == ("ORG", "BLD", "T01")
    assert len(parsed.unique_id) == CODE_SUFFIX_LENGTH
    assert is_valid_location_code(code)


def test_location_code_without_location_part() -> None:
    parsed = parse_location_code(generate_location_code("ORG", "BLD"))
    assert parsed is not None
    assert parsed.location_code is None


def test_invalid_and_formatted_codes() -> None:
    assert parse_location_code("ORG-BLD") is None
    assert not is_valid_location_code("ORG-BLD-abc")
    assert format_location_code("ORG-BLD-abc1234") == "ORG - BLD - abc1234"


def test_bulk_codes_are_unique_and_skip_existing() -> None:
    codes = generate_bulk_location_codes(5, "ORG", "BLD", location_prefix="T")
    assert len(set(codes)) == 5
    assert [parse_location_code(code).location_code for code in codes] == ["T01", "T02", "T03", "T04", "T05"]

    more = generate_bulk_location_codes(3, "ORG", "BLD", existing_codes=codes)
    assert not set(more) & set(codes)
