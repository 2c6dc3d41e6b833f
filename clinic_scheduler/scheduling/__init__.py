from clinic_scheduler.scheduling.availability import (
    TimeRange,
    day_of_week,
    enumerate_open_slots,
    is_slot_open,
    parse_time,
)
from clinic_scheduler.scheduling.balance import PackageBalanceTracker
from clinic_scheduler.scheduling.booking_engine import BookingEngine
from clinic_scheduler.scheduling.lifecycle import SessionLifecycleManager, StatusChange
from clinic_scheduler.scheduling.patients import PatientRegistry
from clinic_scheduler.scheduling.roster import RosterService

__all__ = [
    "TimeRange",
    "day_of_week",
    "enumerate_open_slots",
    "is_slot_open",
    "parse_time",
    "PackageBalanceTracker",
    "BookingEngine",
    "SessionLifecycleManager",
    "StatusChange",
    "PatientRegistry",
    "RosterService",
]
