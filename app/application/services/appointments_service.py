from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, List, Optional, Sequence, Union
import logging

from app.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from app.utils import to_naive_utc
from ..appointment_status import AppointmentStatus, INITIAL_STATUS, check_transition
from ..ports.appointments_repo import (
    AppointmentDto,
    AppointmentKind,
    AppointmentSearchCriteria,
    AppointmentsRepository,
    ServiceDefinitionDto,
    ServiceTypeDto,
)
from ..ports.appointment_audit_repo import AppointmentAuditRepository
from ..ports.audit_logger import AuditLogger
from ..ports.unit_of_work import UnitOfWork
from ..ports.authorization import Principal, Privilege

logger = logging.getLogger(__name__)


@dataclass
class AppointmentLifecycleService:
    """Privilege-gated operations over appointments.

    Every public method takes the calling principal first and checks the
    required privilege before any validation or lookup, so a caller without
    it learns nothing about the data.
    """

    repo: AppointmentsRepository
    audit: AppointmentAuditRepository
    uow: UnitOfWork
    audit_logger: Optional[AuditLogger] = None
    clock: Callable[[], datetime] = datetime.utcnow

    # ------------------------------------------------------------------
    # authorization
    # ------------------------------------------------------------------
    def _require(self, principal: Optional[Principal], privilege: Privilege, operation: str) -> None:
        if principal is not None and principal.has_privilege(privilege):
            return
        actor_id = getattr(principal, "user_id", None)
        logger.warning(f"Denied {operation} for {actor_id or 'anonymous'}: missing '{privilege.value}'")
        self._log(operation, actor_id, success=False, details={"missing_privilege": privilege.value})
        raise AuthorizationError(f"Privileges required: {privilege.value}")

    def _log(self, action: str, actor_id: Optional[str], success: bool = True, details: Optional[dict] = None) -> None:
        if self.audit_logger is not None:
            self.audit_logger.log(action, actor_id, success=success, details=details)

    # ------------------------------------------------------------------
    # writes
    # ------------------------------------------------------------------
    def validate_and_save(self, principal: Principal, appointment: AppointmentDto) -> AppointmentDto:
        self._require(principal, Privilege.MANAGE, "save_appointment")

        appt = replace(
            appointment,
            start_date_time=to_naive_utc(appointment.start_date_time),
            end_date_time=to_naive_utc(appointment.end_date_time),
            providers=list(appointment.providers),
        )
        self._validate(appt)

        if appt.id is not None:
            existing = self.repo.get_by_id(appt.id)
            if existing is None:
                raise NotFoundError(f"Appointment {appt.id} not found")
            if appt.status is not None and appt.status != existing.status:
                raise ValidationError("Appointment status can only be modified through a status change")
            appt.status = existing.status
            appt.uuid = existing.uuid
        else:
            appt.status = appt.status or INITIAL_STATUS

        appt.appointment_kind = appt.appointment_kind or AppointmentKind.SCHEDULED
        saved = self.repo.save(appt)
        logger.info(f"Saved appointment {saved.uuid} (id={saved.id})")
        self._log("save_appointment", principal.user_id, details={"appointment_id": saved.id, "uuid": saved.uuid})
        return saved

    def _validate(self, appt: AppointmentDto) -> None:
        if appt.patient_id is None:
            raise ValidationError("Appointment cannot be saved without a patient")
        if appt.service_id is None:
            raise ValidationError("Appointment cannot be saved without a service")
        if appt.start_date_time is None or appt.end_date_time is None:
            raise ValidationError("Appointment cannot be saved without start and end time")
        if appt.start_date_time >= appt.end_date_time:
            raise ValidationError("Appointment start time must be before its end time")

        if not self.repo.get_patient(appt.patient_id):
            raise ValidationError(f"Patient {appt.patient_id} does not exist")
        for provider in appt.providers:
            if not self.repo.get_provider(provider.provider_id):
                raise ValidationError(f"Provider {provider.provider_id} does not exist")

        if not self.repo.get_service_definition(appt.service_id):
            raise ValidationError(f"Appointment service {appt.service_id} does not exist")
        if appt.service_type_id is not None:
            service_type = self.repo.get_service_type(appt.service_type_id)
            if not service_type:
                raise ValidationError(f"Appointment service type {appt.service_type_id} does not exist")
            if service_type.service_id != appt.service_id:
                raise ValidationError("Appointment service type does not belong to the appointment service")

    def change_status(
        self,
        principal: Principal,
        appointment: AppointmentDto,
        status: Union[AppointmentStatus, str],
        on_date: Optional[datetime] = None,
    ) -> AppointmentDto:
        self._require(principal, Privilege.MANAGE, "change_status")
        target = AppointmentStatus.parse(status)

        if appointment.id is None:
            # Nothing persisted yet: apply to the draft, no history to record
            check_transition(appointment.status, target)
            appointment.status = target
            return appointment

        stored = self.repo.get_by_id(appointment.id)
        if stored is None:
            raise NotFoundError(f"Appointment {appointment.id} not found")
        current = stored.status or INITIAL_STATUS
        check_transition(current, target)

        now = self.clock()
        # Status and its audit entry commit together or not at all
        try:
            updated = self.repo.update_status(stored.id, target, now)
            if updated is None:
                raise NotFoundError(f"Appointment {stored.id} not found")
            self.audit.record(
                stored.id,
                current,
                target,
                to_naive_utc(on_date) or now,
                principal.user_id,
            )
            self.uow.commit()
        except Exception:
            self.uow.rollback()
            raise
        logger.info(f"Appointment {stored.uuid} status {current.value} -> {target.value}")
        self._log("change_status", principal.user_id, details={
            "appointment_id": stored.id,
            "from_status": current.value,
            "to_status": target.value,
        })
        return updated

    def undo_status_change(self, principal: Principal, appointment: AppointmentDto) -> AppointmentDto:
        self._require(principal, Privilege.MANAGE, "undo_status_change")

        if appointment.id is None:
            raise ConflictError("No status change actions to undo")
        stored = self.repo.get_by_id(appointment.id)
        if stored is None:
            raise NotFoundError(f"Appointment {appointment.id} not found")

        now = self.clock()
        current = stored.status or INITIAL_STATUS
        try:
            previous = self.audit.pop_last_change(stored.id)
            if previous is None:
                raise ConflictError("No status change actions to undo")
            updated = self.repo.update_status(stored.id, previous, now)
            if updated is None:
                raise NotFoundError(f"Appointment {stored.id} not found")
            self.audit.record(stored.id, current, previous, now, principal.user_id, is_undo=True)
            self.uow.commit()
        except Exception:
            self.uow.rollback()
            raise
        logger.info(f"Appointment {stored.uuid} status change undone: {current.value} -> {previous.value}")
        self._log("undo_status_change", principal.user_id, details={
            "appointment_id": stored.id,
            "from_status": current.value,
            "to_status": previous.value,
        })
        return updated

    def get_appointment_for_update(self, principal: Principal, uuid: str) -> AppointmentDto:
        """Load an appointment a manager is about to change; missing is an error here."""
        self._require(principal, Privilege.MANAGE, "get_appointment_for_update")
        appt = self.repo.get_by_uuid(uuid)
        if appt is None:
            raise NotFoundError(f"Appointment {uuid} not found")
        return appt

    def void_appointment(self, principal: Principal, appointment: AppointmentDto, reason: str) -> AppointmentDto:
        self._require(principal, Privilege.MANAGE, "void_appointment")
        if not reason or not reason.strip():
            raise ValidationError("A reason is required to void an appointment")
        if appointment.id is None:
            raise NotFoundError("Appointment has not been saved")

        voided = self.repo.void(appointment.id, reason.strip(), self.clock())
        if voided is None:
            raise NotFoundError(f"Appointment {appointment.id} not found")
        self._log("void_appointment", principal.user_id, details={"appointment_id": appointment.id, "reason": reason})
        return voided

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------
    def get_all_appointments(self, principal: Principal, for_date: Optional[datetime] = None) -> List[AppointmentDto]:
        self._require(principal, Privilege.READ, "get_all_appointments")
        return self.repo.list_appointments(start_from=to_naive_utc(for_date))

    def search(self, principal: Principal, criteria: AppointmentSearchCriteria) -> List[AppointmentDto]:
        self._require(principal, Privilege.READ, "search")
        return self.repo.search(criteria)

    def get_all_future_appointments_for_service(self, principal: Principal, service: ServiceDefinitionDto) -> List[AppointmentDto]:
        self._require(principal, Privilege.READ, "get_all_future_appointments_for_service")
        if service.id is None or not self.repo.get_service_definition(service.id):
            raise NotFoundError(f"Appointment service {service.id} not found")
        return self.repo.list_appointments(start_from=self.clock(), service_id=service.id)

    def get_all_future_appointments_for_service_type(self, principal: Principal, service_type: ServiceTypeDto) -> List[AppointmentDto]:
        self._require(principal, Privilege.READ, "get_all_future_appointments_for_service_type")
        if service_type.id is None or not self.repo.get_service_type(service_type.id):
            raise NotFoundError(f"Appointment service type {service_type.id} not found")
        return self.repo.list_appointments(start_from=self.clock(), service_type_id=service_type.id)

    def get_appointments_for_service(
        self,
        principal: Principal,
        service: ServiceDefinitionDto,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        statuses: Optional[Sequence[Union[AppointmentStatus, str]]] = None,
    ) -> List[AppointmentDto]:
        self._require(principal, Privilege.READ, "get_appointments_for_service")
        if service is None or service.id is None:
            raise ValidationError("An appointment service is required")
        parsed = [AppointmentStatus.parse(s) for s in statuses] if statuses else None
        return self.repo.list_appointments(
            start_from=to_naive_utc(start_date),
            end_until=to_naive_utc(end_date),
            service_id=service.id,
            statuses=parsed,
        )

    def get_appointment_by_uuid(self, principal: Principal, uuid: str) -> Optional[AppointmentDto]:
        self._require(principal, Privilege.READ, "get_appointment_by_uuid")
        return self.repo.get_by_uuid(uuid)

    def get_all_appointments_in_date_range(
        self,
        principal: Principal,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[AppointmentDto]:
        self._require(principal, Privilege.READ, "get_all_appointments_in_date_range")
        return self.repo.list_appointments(start_from=to_naive_utc(start), end_until=to_naive_utc(end))
