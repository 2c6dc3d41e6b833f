"""
Clinic scheduler entry point.

Runs the offline console demo, or prints a therapist's open slots for a
date from the seeded default roster.

Usage:
    Console mode: python main.py console [--scenario booking]
    Open slots:   python main.py slots Waldemar 2025-03-13
"""

import asyncio
import logging
import sys

from clinic_scheduler.config import settings

logger = logging.getLogger(__name__)


async def _print_open_slots(therapist_name: str, date: str) -> int:
    """Seed an in-memory clinic and list the named therapist's open slots."""
    from clinic_scheduler.scheduling.booking_engine import BookingEngine
    from clinic_scheduler.scheduling.errors import SchedulingError
    from clinic_scheduler.seed import bootstrap
    from clinic_scheduler.stores.memory import in_memory_stores

    stores = in_memory_stores()
    await bootstrap(stores)
    matches = [t for t in await stores.therapists.list_all() if therapist_name in t.name]
    if not matches:
        print(f"No therapist matching '{therapist_name}'")
        return 1

    engine = BookingEngine(stores)
    for therapist in matches:
        try:
            slots = await engine.open_slots(therapist.id, date)
        except SchedulingError as exc:
            print(f"{therapist.name}: {exc}")
            return 1
        rendered = ", ".join(f"{s.start_time}-{s.end_time}" for s in slots) or "none"
        print(f"{therapist.name} on {date}: {rendered}")
    return 0


def _run_console_mode() -> None:
    """Start the offline console demo (no database required)."""
    import console_demo

    sys.argv = [sys.argv[0]] + sys.argv[2:]
    console_demo.main()


if __name__ == "__main__":
    logger.debug("Starting %s", settings.clinic.name)
    if len(sys.argv) > 1 and sys.argv[1] == "console":
        _run_console_mode()
    elif len(sys.argv) == 4 and sys.argv[1] == "slots":
        sys.exit(asyncio.run(_print_open_slots(sys.argv[2], sys.argv[3])))
    else:
        print(__doc__)
        sys.exit(2)
