from __future__ import annotations

import calendar
import csv
from datetime import date
import io
import json
import re
from typing import Any

from toiletcheck.services.scoring import average_score, calculate_score, round_half_up, status_bucket


_MONTH_RE = re.compile(r"^\d{4}-\d{2}$")
TREND_THRESHOLD = 2
LOCATION_RANKING_SIZE = 3
STATUS_BUCKETS = ("excellent", "good", "fair", "poor")
CSV_HEADERS = (
    "Inspection ID",
    "Date",
    "Time",
    "Submitted At",
    "Status",
    "Notes",
    "Inspector Name",
    "Email",
    "Phone",
    "Position",
    "Location",
    "Building",
    "Organization",
    "Floor",
    "Area",
    "Section",
    "Photo URLs",
    "Inspection Details",
)


def parse_month(month: str | None) -> tuple[date, date]:
    """Return the first and last day of a ``yyyy-MM`` month string.

    Raises ValueError for anything else, including month numbers outside 1-12.
    """
    if not month or not _MONTH_RE.match(month):
        raise ValueError("Invalid month format. Must be yyyy-MM (e.g., 2024-11)")
    year, month_num = (int(part) for part in month.split("-"))
    if not 1 <= month_num <= 12 or year < 1:
        raise ValueError("Invalid month format. Must be yyyy-MM (e.g., 2024-11)")
    last_day = calendar.monthrange(year, month_num)[1]
    return date(year, month_num, 1), date(year, month_num, last_day)


def previous_month(start: date) -> tuple[date, date]:
    if start.month == 1:
        year, month_num = start.year - 1, 12
    else:
        year, month_num = start.year, start.month - 1
    return date(year, month_num, 1), date(year, month_num, calendar.monthrange(year, month_num)[1])


def serialize_inspection_detail(detail: dict[str, Any]) -> dict[str, Any]:
    record = detail["record"]
    return {
        "id": record.id,
        "inspection_date": record.inspection_date.isoformat(),
        "inspection_time": record.inspection_time.isoformat() if record.inspection_time else None,
        "overall_status": record.overall_status,
        "responses": record.responses,
        "location": detail["location"],
        "user": detail["user"],
        "photo_urls": record.photo_urls or [],
        "notes": record.notes,
    }


def group_by_date(inspections: list[dict[str, Any]]) -> list[dict[str, Any]]:
    # Keeps first-seen date order, which is newest first for ordered input.
    groups: dict[str, list[dict[str, Any]]] = {}
    for inspection in inspections:
        groups.setdefault(inspection["inspection_date"], []).append(inspection)
    return [
        {
            "date": day,
            "inspections": items,
            "averageScore": average_score([calculate_score(item["responses"]) for item in items]),
            "count": len(items),
        }
        for day, items in groups.items()
    ]


def _percentage(count: int, total: int) -> int:
    return round_half_up(count / total * 100) if total else 0


def _location_rankings(details: list[dict[str, Any]]) -> list[dict[str, Any]]:
    by_location: dict[str, dict[str, Any]] = {}
    for detail in details:
        location = detail.get("location") or {}
        location_id = location.get("id")
        if not location_id:
            continue
        entry = by_location.setdefault(
            location_id,
            {
                "name": location.get("name") or "Unknown",
                "building": location.get("building"),
                "floor": location.get("floor"),
                "scores": [],
            },
        )
        entry["scores"].append(calculate_score(detail["record"].responses))
    ranked = [
        {
            "name": entry["name"],
            "building": entry["building"],
            "floor": entry["floor"],
            "avgScore": average_score(entry["scores"]),
            "inspectionCount": len(entry["scores"]),
        }
        for entry in by_location.values()
    ]
    return sorted(ranked, key=lambda item: item["avgScore"], reverse=True)


def build_analytics(
    details: list[dict[str, Any]],
    previous_details: list[dict[str, Any]],
) -> dict[str, Any]:
    """Summarize one month of inspections against the month before it."""
    scores = [calculate_score(detail["record"].responses) for detail in details]
    previous_scores = [calculate_score(detail["record"].responses) for detail in previous_details]
    total = len(scores)
    avg = average_score(scores)
    previous_avg = average_score(previous_scores)

    diff = avg - previous_avg
    if diff > TREND_THRESHOLD:
        trend = "up"
    elif diff < -TREND_THRESHOLD:
        trend = "down"
    else:
        trend = "stable"
    trend_percentage = round_half_up(diff / previous_avg * 100) if previous_avg > 0 else 0

    counts = dict.fromkeys(STATUS_BUCKETS, 0)
    for score in scores:
        counts[status_bucket(score)] += 1

    rankings = _location_rankings(details)
    return {
        "totalInspections": total,
        "avgScore": avg,
        "trend": trend,
        "trendPercentage": trend_percentage,
        "statusBreakdown": {
            bucket: {"count": count, "percentage": _percentage(count, total)}
            for bucket, count in counts.items()
        },
        "topLocations": rankings[:LOCATION_RANKING_SIZE],
        "worstLocations": list(reversed(rankings[-LOCATION_RANKING_SIZE:])),
    }


def build_inspections_csv(details: list[dict[str, Any]]) -> str:
    """Render inspection details as CSV, one row per inspection.

    Photo URLs are comma-joined in a single cell and responses are kept as JSON.
    """
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(CSV_HEADERS)
    for detail in details:
        record = detail["record"]
        location = detail.get("location") or {}
        user = detail.get("user") or {}
        writer.writerow(
            [
                record.id,
                record.inspection_date.isoformat(),
                record.inspection_time.isoformat() if record.inspection_time else "",
                record.submitted_at.isoformat() if record.submitted_at else "",
                record.overall_status,
                record.notes or "",
                user.get("full_name") or "",
                user.get("email") or "",
                user.get("phone") or "",
                user.get("occupation_id") or "",
                location.get("name") or "",
                location.get("building") or "",
                location.get("organization") or "",
                location.get("floor") or "",
                location.get("area") or "",
                location.get("section") or "",
                ", ".join(record.photo_urls or []),
                json.dumps(record.responses or {}, sort_keys=True),
            ]
        )
    return output.getvalue()
