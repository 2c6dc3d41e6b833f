"""
Default roster and weekly schedules, passed explicitly to ``bootstrap``.

A fresh deployment gets the clinic's standing therapists, and any
therapist observed without availability gets the default schedule that
matches their name. Both steps are no-ops once data exists.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from clinic_scheduler.schemas.therapist_schema import AvailabilityWindow, Therapist
from clinic_scheduler.stores.base import AvailabilityStore, ClinicStores

logger = logging.getLogger(__name__)

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


@dataclass(frozen=True)
class WindowSeed:
    day_of_week: int
    start_time: str
    end_time: str


@dataclass(frozen=True)
class TherapistSeed:
    name: str
    specialization: str
    color: str
    aliases: tuple[str, ...] = ()
    schedule: tuple[WindowSeed, ...] = ()

    def matches(self, therapist_name: str) -> bool:
        """True if any alias (or the first name) appears in ``therapist_name``."""
        keys = self.aliases or (self.name.split()[0],)
        return any(key in therapist_name for key in keys)


@dataclass(frozen=True)
class SeedConfig:
    therapists: tuple[TherapistSeed, ...] = ()

    def schedule_for(self, therapist_name: str) -> tuple[WindowSeed, ...]:
        for seed in self.therapists:
            if seed.matches(therapist_name):
                return seed.schedule
        return ()


DEFAULT_SEED = SeedConfig(
    therapists=(
        TherapistSeed(
            name="Krystian Nagaba",
            specialization="Addiction therapist",
            color="#0f766e",
            aliases=("Krystian",),
            schedule=(WindowSeed(4, "19:30", "21:00"),),
        ),
        TherapistSeed(
            name="Natalia Pucz",
            specialization="Therapist",
            color="#7c3aed",
            aliases=("Natalia",),
            schedule=(
                WindowSeed(1, "18:30", "19:30"),
                WindowSeed(4, "16:30", "17:30"),
            ),
        ),
        TherapistSeed(
            name="Waldemar Sikorski",
            specialization="Addiction therapist",
            color="#ea580c",
            aliases=("Waldemar", "Waldek"),
            schedule=(
                WindowSeed(3, "10:00", "16:00"),
                WindowSeed(4, "08:00", "13:00"),
                WindowSeed(5, "08:00", "13:00"),
            ),
        ),
    )
)


@dataclass
class BootstrapReport:
    therapists_created: list[Therapist] = field(default_factory=list)
    windows_created: list[AvailabilityWindow] = field(default_factory=list)


async def seed_default_availability(
    availability: AvailabilityStore,
    therapist: Therapist,
    seed: SeedConfig = DEFAULT_SEED,
) -> list[AvailabilityWindow]:
    """Give ``therapist`` its default schedule if it has no windows yet."""
    if await availability.list_windows(therapist.id):
        return []
    created = []
    for entry in seed.schedule_for(therapist.name):
        window = AvailabilityWindow(
            therapist_id=therapist.id,
            day_of_week=entry.day_of_week,
            start_time=entry.start_time,
            end_time=entry.end_time,
        )
        created.append(await availability.create_window(window))
    if created:
        logger.info("Seeded %d default windows for %s", len(created), therapist.name)
    return created


async def bootstrap(stores: ClinicStores, seed: Optional[SeedConfig] = None) -> BootstrapReport:
    """Seed the roster when empty, then fill in missing schedules."""
    seed = seed or DEFAULT_SEED
    report = BootstrapReport()

    therapists = await stores.therapists.list_all()
    if not therapists:
        for entry in seed.therapists:
            therapist = await stores.therapists.create(
                Therapist(name=entry.name, specialization=entry.specialization, color=entry.color)
            )
            report.therapists_created.append(therapist)
        therapists = await stores.therapists.list_all()
        logger.info("Seeded default roster with %d therapists", len(report.therapists_created))

    for therapist in therapists:
        report.windows_created.extend(
            await seed_default_availability(stores.availability, therapist, seed)
        )
    return report
