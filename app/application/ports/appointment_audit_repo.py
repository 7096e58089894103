from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Protocol

from ..appointment_status import AppointmentStatus


@dataclass
class AppointmentAuditDto:
    id: int
    appointment_id: int
    from_status: AppointmentStatus
    to_status: AppointmentStatus
    date_recorded: datetime
    actor_id: Optional[str]
    is_undo: bool
    undone: bool


class AppointmentAuditRepository(Protocol):
    """Status history for appointments.

    ``pop_last_change`` marks the most recent change that is neither an undo
    entry nor already undone as undone, and returns the status it moved away
    from. It returns None when no such change exists.

    ``record`` and ``pop_last_change`` stage their writes in the caller's
    unit of work.
    """

    def record(
        self,
        appointment_id: int,
        from_status: AppointmentStatus,
        to_status: AppointmentStatus,
        date_recorded: datetime,
        actor_id: Optional[str],
        is_undo: bool = False,
    ) -> None:
        ...

    def pop_last_change(self, appointment_id: int) -> Optional[AppointmentStatus]:
        ...

    def history(self, appointment_id: int) -> List[AppointmentAuditDto]:
        ...
