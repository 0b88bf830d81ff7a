"""Status transition tables. Every status write goes through check_transition."""
from typing import Dict, Set

from telemed.models.enums import AppointmentStatus, PrescriptionStatus


class InvalidTransition(Exception):
    def __init__(self, entity: str, current: str, target: str):
        self.entity = entity
        self.current = current
        self.target = target
        super().__init__(f"Cannot move {entity} from {current} to {target}")


APPOINTMENT_TRANSITIONS: Dict[str, Set[str]] = {
    AppointmentStatus.PENDING.value: {AppointmentStatus.CONFIRMED.value, AppointmentStatus.CANCELLED.value},
    AppointmentStatus.CONFIRMED.value: {AppointmentStatus.COMPLETED.value, AppointmentStatus.CANCELLED.value},
    AppointmentStatus.COMPLETED.value: set(),
    AppointmentStatus.CANCELLED.value: set(),
}

PRESCRIPTION_TRANSITIONS: Dict[str, Set[str]] = {
    PrescriptionStatus.PENDING.value: {PrescriptionStatus.DISPENSED.value},
    PrescriptionStatus.DISPENSED.value: set(),
}


def check_transition(table: Dict[str, Set[str]], entity: str, current: str, target: str) -> None:
    if target not in table.get(current, set()):
        raise InvalidTransition(entity, current, target)
