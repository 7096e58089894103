from datetime import datetime
from typing import List, Optional
from sqlmodel import Session, select

from .....db.models import AppointmentAudit
from .....application.appointment_status import AppointmentStatus
from .....application.ports.appointment_audit_repo import (
    AppointmentAuditRepository,
    AppointmentAuditDto,
)


class SqlAppointmentAuditRepository(AppointmentAuditRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, rec: AppointmentAudit) -> AppointmentAuditDto:
        return AppointmentAuditDto(
            id=rec.id,
            appointment_id=rec.appointment_id,
            from_status=AppointmentStatus(rec.from_status),
            to_status=AppointmentStatus(rec.to_status),
            date_recorded=rec.date_recorded,
            actor_id=rec.actor_id,
            is_undo=rec.is_undo,
            undone=rec.undone,
        )

    def record(
        self,
        appointment_id: int,
        from_status: AppointmentStatus,
        to_status: AppointmentStatus,
        date_recorded: datetime,
        actor_id: Optional[str],
        is_undo: bool = False,
    ) -> None:
        rec = AppointmentAudit(
            appointment_id=appointment_id,
            actor_id=actor_id,
            from_status=AppointmentStatus(from_status).value,
            to_status=AppointmentStatus(to_status).value,
            date_recorded=date_recorded,
            is_undo=is_undo,
        )
        self.session.add(rec)
        self.session.flush()

    def pop_last_change(self, appointment_id: int) -> Optional[AppointmentStatus]:
        # Ordered by id: on_date may back-date an entry
        rec = self.session.exec(
            select(AppointmentAudit)
            .where(AppointmentAudit.appointment_id == appointment_id)
            .where(AppointmentAudit.is_undo == False)  # noqa: E712
            .where(AppointmentAudit.undone == False)  # noqa: E712
            .order_by(AppointmentAudit.id.desc())
        ).first()
        if not rec:
            return None
        rec.undone = True
        self.session.add(rec)
        self.session.flush()
        return AppointmentStatus(rec.from_status)

    def history(self, appointment_id: int) -> List[AppointmentAuditDto]:
        rows = self.session.exec(
            select(AppointmentAudit)
            .where(AppointmentAudit.appointment_id == appointment_id)
            .order_by(AppointmentAudit.id)
        ).all()
        return [self._to_dto(r) for r in rows]
