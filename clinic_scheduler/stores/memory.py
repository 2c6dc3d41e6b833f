"""Factory for a fully in-memory clinic backend (tests, demos)."""

from clinic_scheduler.stores.availability_store import InMemoryAvailabilityStore
from clinic_scheduler.stores.base import ClinicStores
from clinic_scheduler.stores.patient_store import InMemoryPatientStore
from clinic_scheduler.stores.session_store import InMemorySessionStore
from clinic_scheduler.stores.therapist_store import InMemoryTherapistStore
from clinic_scheduler.stores.user_store import InMemoryUserStore


def in_memory_stores() -> ClinicStores:
    """Build an empty set of in-memory stores."""
    return ClinicStores(
        therapists=InMemoryTherapistStore(),
        availability=InMemoryAvailabilityStore(),
        sessions=InMemorySessionStore(),
        patients=InMemoryPatientStore(),
        users=InMemoryUserStore(),
    )
