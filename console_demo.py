"""
Offline console demo — exercises the booking core on in-memory stores.

Seeds the default roster, then either auto-plays a scripted scenario or
accepts staff commands at a prompt. No database, no network calls.

Usage:
    python console_demo.py
    python console_demo.py --scenario conflict
    python console_demo.py --scenario exhausted
"""

import argparse
import asyncio
import shlex
from datetime import date, timedelta
from typing import Optional

from clinic_scheduler.config import settings
from clinic_scheduler.identity import AdminRole, PatientRole, Role
from clinic_scheduler.schemas.session_schema import BookingRequest
from clinic_scheduler.schemas.therapist_schema import Therapist
from clinic_scheduler.scheduling.availability import day_of_week
from clinic_scheduler.scheduling.booking_engine import BookingEngine
from clinic_scheduler.scheduling.errors import SchedulingError
from clinic_scheduler.scheduling.lifecycle import SessionLifecycleManager
from clinic_scheduler.scheduling.patients import PatientRegistry
from clinic_scheduler.scheduling.roster import RosterService
from clinic_scheduler.seed import DAY_NAMES, bootstrap
from clinic_scheduler.stores.memory import in_memory_stores

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

STAFF = AdminRole()

HELP = """Commands:
  therapists                              list the roster and weekly windows
  patients                                list patients and package balances
  slots <therapist#> <YYYY-MM-DD>         open slots for a therapist
  book <therapist#> <patient#> <YYYY-MM-DD> <HH:MM> <HH:MM>
  status <ref> <scheduled|completed|cancelled|no-show>
  delete <ref>
  quit"""


def next_date_for(weekday: int, after: Optional[date] = None) -> str:
    """First date strictly after ``after`` falling on ``weekday`` (0=Sunday)."""
    day = (after or date.today()) + timedelta(days=1)
    while day_of_week(day.isoformat()) != weekday:
        day += timedelta(days=1)
    return day.isoformat()


class ConsoleSession:
    """Drives the scheduling services from the terminal."""

    def __init__(self) -> None:
        self.stores = in_memory_stores()
        self.roster = RosterService(self.stores)
        self.patients = PatientRegistry(self.stores.patients)
        self.engine = BookingEngine(self.stores)
        self.lifecycle = SessionLifecycleManager(self.stores)
        self._sessions_by_ref: dict[str, str] = {}

    def say(self, text: str) -> None:
        print(f"{GREEN}{text}{RESET}")

    def fail(self, text: str) -> None:
        print(f"{RED}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    async def setup(self) -> None:
        report = await bootstrap(self.stores)
        self.system_log(
            f"Seeded {len(report.therapists_created)} therapists, "
            f"{len(report.windows_created)} availability windows"
        )
        await self.patients.create_patient("Jan Kowalski", email="jan@example.com")
        await self.patients.create_patient("Anna Nowak", total_sessions=5)

    async def therapist(self, index: int) -> Therapist:
        return (await self.roster.list_therapists())[index - 1]

    # ------------------------------------------------------------------ #
    # Scripted scenarios
    # ------------------------------------------------------------------ #

    async def scenario_booking(self) -> None:
        waldemar = await self.therapist(3)
        jan = (await self.patients.list_patients())[1]
        thursday = next_date_for(4)
        await self.show_slots(waldemar, thursday)
        session = await self.book(waldemar.id, jan.id, thursday, "09:00", "10:00", STAFF)
        if session:
            change = await self.lifecycle.complete(session)
            self.say(f"Completed; {jan.name} has used {change.patient.used_sessions} sessions")

    async def scenario_conflict(self) -> None:
        waldemar = await self.therapist(3)
        anna, jan = await self.patients.list_patients()
        thursday = next_date_for(4)
        await self.book(waldemar.id, jan.id, thursday, "09:30", "10:30", STAFF)
        await self.book(waldemar.id, anna.id, thursday, "09:00", "10:00", STAFF)

    async def scenario_exhausted(self) -> None:
        natalia = await self.therapist(2)
        anna = (await self.patients.list_patients())[0]
        monday = next_date_for(1)
        for week in range(6):
            day = next_date_for(1, date.fromisoformat(monday) + timedelta(weeks=week - 1))
            session = await self.book(
                natalia.id, anna.id, day, "18:30", "19:30", role=PatientRole(anna.id)
            )
            if session is None:
                break
            await self.lifecycle.complete(session)

    SCENARIOS = {
        "booking": scenario_booking,
        "conflict": scenario_conflict,
        "exhausted": scenario_exhausted,
    }

    async def run_scenario(self, scenario: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  CLINIC SCHEDULER - Scenario: {scenario}{RESET}")
        print(f"{BOLD}  Clinic: {settings.clinic.name}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        await self.setup()
        await self.SCENARIOS[scenario](self)
        print(f"{BOLD}{'=' * 60}{RESET}")

    # ------------------------------------------------------------------ #
    # Interactive mode
    # ------------------------------------------------------------------ #

    async def run(self) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  CLINIC SCHEDULER - Console Demo{RESET}")
        print(f"{BOLD}  Clinic: {settings.clinic.name}{RESET}")
        print(f"{BOLD}  Type 'help' for commands, 'quit' to exit{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        await self.setup()

        while True:
            line = input(f"\n{BLUE}[staff] {RESET}").strip()
            if not line:
                continue
            if line.lower() in ("quit", "exit", "q"):
                print(f"\n{DIM}Session ended.{RESET}")
                return
            try:
                await self.dispatch(shlex.split(line))
            except (IndexError, ValueError) as exc:
                self.fail(f"Bad command: {exc}")

    async def dispatch(self, args: list[str]) -> None:
        command, rest = args[0].lower(), args[1:]
        if command == "help":
            print(HELP)
        elif command == "therapists":
            await self.show_therapists()
        elif command == "patients":
            await self.show_patients()
        elif command == "slots":
            await self.show_slots(await self.therapist(int(rest[0])), rest[1])
        elif command == "book":
            therapist = await self.therapist(int(rest[0]))
            patient = (await self.patients.list_patients())[int(rest[1]) - 1]
            await self.book(therapist.id, patient.id, rest[2], rest[3], rest[4], STAFF)
        elif command == "status":
            await self.set_status(rest[0], rest[1])
        elif command == "delete":
            await self.delete(rest[0])
        else:
            self.fail(f"Unknown command '{command}'. Type 'help'.")

    # ------------------------------------------------------------------ #
    # Operations
    # ------------------------------------------------------------------ #

    async def show_therapists(self) -> None:
        for idx, therapist in enumerate(await self.roster.list_therapists(), start=1):
            print(f"{BOLD}{idx}. {therapist.name}{RESET} {DIM}({therapist.specialization}){RESET}")
            for window in await self.roster.list_windows(therapist.id):
                state = "" if window.is_active else " [inactive]"
                print(f"     {DAY_NAMES[window.day_of_week]:<10} "
                      f"{window.start_time}-{window.end_time}{state}")

    async def show_patients(self) -> None:
        for idx, patient in enumerate(await self.patients.list_patients(), start=1):
            colour = RED if patient.package_exhausted else GREEN
            print(f"{idx}. {patient.name:<20} {colour}{patient.used_sessions}/"
                  f"{patient.total_sessions} used{RESET}")

    async def show_slots(self, therapist: Therapist, day: str) -> None:
        try:
            slots = await self.engine.open_slots(therapist.id, day)
        except SchedulingError as exc:
            self.fail(str(exc))
            return
        if not slots:
            self.say(f"{therapist.name} has no open slots on {day}")
            return
        rendered = ", ".join(f"{s.start_time}-{s.end_time}" for s in slots)
        self.say(f"{therapist.name} on {day}: {rendered}")

    async def book(
        self,
        therapist_id: str,
        patient_id: str,
        day: str,
        start: str,
        end: str,
        role: Role,
    ) -> Optional[str]:
        request = BookingRequest(
            patient_id=patient_id, therapist_id=therapist_id,
            date=day, start_time=start, end_time=end,
        )
        self.system_log(f"book {day} {start}-{end}")
        try:
            session = await self.engine.book(request, role=role)
        except SchedulingError as exc:
            self.fail(f"{type(exc).__name__}: {exc}")
            return None
        self._sessions_by_ref[session.reference] = session.id
        self.say(f"Booked {session.reference}: {session.patient_name} with "
                 f"{session.therapist_name} on {session.date} {session.start_time}")
        return session.id

    async def set_status(self, reference: str, status: str) -> None:
        session_id = self._sessions_by_ref.get(reference.upper(), reference)
        try:
            change = await self.lifecycle.change_status(session_id, status)
        except SchedulingError as exc:
            self.fail(f"{type(exc).__name__}: {exc}")
            return
        self.say(f"{change.session.reference}: {change.previous_status.value} -> "
                 f"{change.session.status.value}")
        if change.patient is not None:
            self.system_log(f"balance {change.patient.used_sessions}/{change.patient.total_sessions}")

    async def delete(self, reference: str) -> None:
        session_id = self._sessions_by_ref.pop(reference.upper(), reference)
        try:
            session = await self.lifecycle.delete_session(session_id)
        except SchedulingError as exc:
            self.fail(f"{type(exc).__name__}: {exc}")
            return
        self.say(f"Deleted {session.reference}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline console demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    args = parser.parse_args()

    session = ConsoleSession()
    if args.scenario:
        asyncio.run(session.run_scenario(args.scenario))
    else:
        asyncio.run(session.run())


if __name__ == "__main__":
    main()
