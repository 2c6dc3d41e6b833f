"""Overlap detection between sessions of the same therapist."""

from typing import Iterable, Optional

from clinic_scheduler.schemas.session_schema import Session
from clinic_scheduler.scheduling.availability import parse_time, ranges_overlap


def find_conflict(
    sessions: Iterable[Session],
    therapist_id: str,
    date: str,
    start_time: str,
    end_time: str,
    exclude_session_id: Optional[str] = None,
) -> Optional[Session]:
    """Return the first non-cancelled session that overlaps the range, if any.

    Ranges are half-open, so back-to-back sessions (10:00-11:00 then
    11:00-12:00) do not conflict.
    """
    start, end = parse_time(start_time), parse_time(end_time)
    for session in sessions:
        if exclude_session_id and session.id == exclude_session_id:
            continue
        if session.is_cancelled:
            continue
        if session.therapist_id != therapist_id or session.date != date:
            continue
        if ranges_overlap(start, end, parse_time(session.start_time), parse_time(session.end_time)):
            return session
    return None
