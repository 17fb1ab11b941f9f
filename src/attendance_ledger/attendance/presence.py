"""Presence-type vocabulary and the one mapping from type to family.

Statuses are free text (manual entries are accepted as-is), so the mapping
falls back to keyword rules and finally to UNRECOGNIZED.
"""
from __future__ import annotations

from typing import Optional

from ..core.enums import PresenceFamily

THUMB_MACHINE = "ThumbMachine"
MANUAL = "Manual"
PRESENT = "Present"
ABSENT = "Absent"
ON_LEAVE = "On leave"
HOLIDAY = "Holiday"
WEEK_OFF = "Week Off"
WEEKOFF_SPECIAL_ALLOWANCE = "Weekoff - special allowance"
PRESENT_OUTSTATION = "Present - outstation"

HOLIDAY_TYPES = frozenset({HOLIDAY, WEEK_OFF, WEEKOFF_SPECIAL_ALLOWANCE})

PRESENT_TYPES = frozenset(
    {
        THUMB_MACHINE,
        MANUAL,
        "Remote",
        PRESENT,
        "Present - in office",
        "Present - client place",
        "Present - weekoff",
        "WFH - weekdays",
        "WFH - weekoff",
        "OHD",
        "Official Holiday Duty (OHD)",
        "Weekly Off - Present (WO-Present)",
        "Work From Home (WFH)",
        "Weekly Off - Work From Home (WO-WFH)",
        "Onsite Presence (OS-P)",
    }
)


def family_of(presence_type: Optional[str]) -> PresenceFamily:
    """Classify a presence type; priority: half day, leave, holiday, outstation, present."""
    label = (presence_type or "").strip()
    lowered = label.lower()
    if not label:
        return PresenceFamily.UNRECOGNIZED
    if "half day" in lowered:
        return PresenceFamily.HALF_DAY
    if "leave" in lowered or "absent" in lowered:
        return PresenceFamily.LEAVE
    if label in HOLIDAY_TYPES:
        return PresenceFamily.HOLIDAY
    if "outstation" in lowered:
        return PresenceFamily.OUTSTATION
    if label in PRESENT_TYPES:
        return PresenceFamily.PRESENT
    return PresenceFamily.UNRECOGNIZED


def is_leave_type(presence_type: Optional[str]) -> bool:
    return family_of(presence_type) is PresenceFamily.LEAVE
