"""Appointment status enumeration and the legal transition graph.

Status changes go through ``AppointmentLifecycleService.change_status``,
which consults :func:`check_transition`. Undo restores the recorded
previous status and does not consult the graph.
"""
from enum import Enum
from typing import Dict, FrozenSet, Optional, Union

from app.exceptions import InvalidTransitionError, ValidationError


class AppointmentStatus(str, Enum):
    REQUESTED = "Requested"
    WAIT_LIST = "WaitList"
    SCHEDULED = "Scheduled"
    CHECKED_IN = "CheckedIn"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    MISSED = "Missed"

    @classmethod
    def parse(cls, value: Union["AppointmentStatus", str]) -> "AppointmentStatus":
        """Accept a member, its value ("CheckedIn") or its name ("CHECKED_IN"), case-insensitively."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            wanted = value.strip().lower()
            for status in cls:
                if wanted in (status.value.lower(), status.name.lower()):
                    return status
        raise ValidationError(f"Unknown appointment status: {value!r}")


INITIAL_STATUS = AppointmentStatus.SCHEDULED

TERMINAL_STATUSES: FrozenSet[AppointmentStatus] = frozenset({
    AppointmentStatus.COMPLETED,
    AppointmentStatus.CANCELLED,
    AppointmentStatus.MISSED,
})

ALLOWED_TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    AppointmentStatus.REQUESTED: frozenset({
        AppointmentStatus.SCHEDULED,
        AppointmentStatus.WAIT_LIST,
        AppointmentStatus.CANCELLED,
    }),
    AppointmentStatus.WAIT_LIST: frozenset({
        AppointmentStatus.SCHEDULED,
        AppointmentStatus.CANCELLED,
    }),
    AppointmentStatus.SCHEDULED: frozenset({
        AppointmentStatus.CHECKED_IN,
        AppointmentStatus.COMPLETED,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.MISSED,
    }),
    AppointmentStatus.CHECKED_IN: frozenset({
        AppointmentStatus.COMPLETED,
        AppointmentStatus.CANCELLED,
    }),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.MISSED: frozenset(),
}


def can_transition(current: Optional[AppointmentStatus], target: AppointmentStatus) -> bool:
    current = current or INITIAL_STATUS
    return target in ALLOWED_TRANSITIONS[current]


def check_transition(current: Optional[AppointmentStatus], target: AppointmentStatus) -> None:
    current = current or INITIAL_STATUS
    if not can_transition(current, target):
        if current in TERMINAL_STATUSES:
            raise InvalidTransitionError(
                f"Appointment is {current.value}; no further status changes are allowed"
            )
        raise InvalidTransitionError(
            f"Cannot change appointment status from {current.value} to {target.value}"
        )
