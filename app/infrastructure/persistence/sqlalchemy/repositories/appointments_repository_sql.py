from datetime import datetime
from typing import List, Optional, Sequence
from sqlmodel import Session, select

from .....db.models import (
    Appointment,
    AppointmentProvider,
    AppointmentServiceDefinition,
    AppointmentServiceType,
    Patient,
    Provider,
)
from .....application.appointment_status import AppointmentStatus
from .....application.ports.appointments_repo import (
    AppointmentsRepository,
    AppointmentDto,
    AppointmentKind,
    AppointmentProviderDto,
    AppointmentSearchCriteria,
    PatientDto,
    ProviderDto,
    ProviderResponse,
    ServiceDefinitionDto,
    ServiceTypeDto,
)


class SqlAppointmentsRepository(AppointmentsRepository):
    def __init__(self, session: Session):
        self.session = session

    def _appt_to_dto(self, a: Appointment) -> AppointmentDto:
        return AppointmentDto(
            id=a.id,
            uuid=a.uuid,
            patient_id=a.patient_id,
            service_id=a.service_id,
            service_type_id=a.service_type_id,
            location=a.location,
            start_date_time=a.start_date_time,
            end_date_time=a.end_date_time,
            appointment_kind=AppointmentKind(a.appointment_kind),
            status=AppointmentStatus(a.status),
            comments=a.comments,
            voided=a.voided,
            void_reason=a.void_reason,
            date_created=a.date_created,
            date_changed=a.date_changed,
            providers=[
                AppointmentProviderDto(
                    id=p.id,
                    provider_id=p.provider_id,
                    response=ProviderResponse(p.response),
                    provider_name=p.provider.name if p.provider else None,
                )
                for p in a.providers
            ],
        )

    def _active(self):
        return (
            select(Appointment)
            .where(Appointment.voided == False)  # noqa: E712
            .order_by(Appointment.start_date_time, Appointment.id)
        )

    def save(self, appointment: AppointmentDto) -> AppointmentDto:
        if appointment.id is not None:
            appt = self.session.get(Appointment, appointment.id)
            appt.date_changed = datetime.utcnow()
        else:
            appt = Appointment(
                patient_id=appointment.patient_id,
                service_id=appointment.service_id,
                start_date_time=appointment.start_date_time,
                end_date_time=appointment.end_date_time,
            )
            if appointment.uuid:
                appt.uuid = appointment.uuid

        appt.patient_id = appointment.patient_id
        appt.service_id = appointment.service_id
        appt.service_type_id = appointment.service_type_id
        appt.location = appointment.location
        appt.start_date_time = appointment.start_date_time
        appt.end_date_time = appointment.end_date_time
        appt.appointment_kind = AppointmentKind(appointment.appointment_kind).value
        appt.status = AppointmentStatus(appointment.status).value
        appt.comments = appointment.comments
        # Duplicate provider entries are kept as given
        appt.providers = [
            AppointmentProvider(provider_id=p.provider_id, response=ProviderResponse(p.response).value)
            for p in appointment.providers
        ]

        self.session.add(appt)
        self.session.commit()
        self.session.refresh(appt)
        return self._appt_to_dto(appt)

    def get_by_id(self, appointment_id: int) -> Optional[AppointmentDto]:
        a = self.session.exec(
            select(Appointment)
            .where(Appointment.id == appointment_id)
            .where(Appointment.voided == False)  # noqa: E712
        ).first()
        return self._appt_to_dto(a) if a else None

    def get_by_uuid(self, uuid: str) -> Optional[AppointmentDto]:
        a = self.session.exec(
            select(Appointment)
            .where(Appointment.uuid == uuid)
            .where(Appointment.voided == False)  # noqa: E712
        ).first()
        return self._appt_to_dto(a) if a else None

    def list_appointments(
        self,
        start_from: Optional[datetime] = None,
        end_until: Optional[datetime] = None,
        service_id: Optional[int] = None,
        service_type_id: Optional[int] = None,
        statuses: Optional[Sequence[AppointmentStatus]] = None,
    ) -> List[AppointmentDto]:
        stmt = self._active()
        if start_from is not None:
            stmt = stmt.where(Appointment.start_date_time >= start_from)
        if end_until is not None:
            stmt = stmt.where(Appointment.end_date_time <= end_until)
        if service_id is not None:
            stmt = stmt.where(Appointment.service_id == service_id)
        if service_type_id is not None:
            stmt = stmt.where(Appointment.service_type_id == service_type_id)
        if statuses:
            stmt = stmt.where(Appointment.status.in_([AppointmentStatus(s).value for s in statuses]))
        rows = self.session.exec(stmt).all()
        return [self._appt_to_dto(r) for r in rows]

    def search(self, criteria: AppointmentSearchCriteria) -> List[AppointmentDto]:
        stmt = self._active()
        if criteria.uuid is not None:
            stmt = stmt.where(Appointment.uuid == criteria.uuid)
        if criteria.patient_id is not None:
            stmt = stmt.where(Appointment.patient_id == criteria.patient_id)
        if criteria.service_id is not None:
            stmt = stmt.where(Appointment.service_id == criteria.service_id)
        if criteria.service_type_id is not None:
            stmt = stmt.where(Appointment.service_type_id == criteria.service_type_id)
        if criteria.status is not None:
            stmt = stmt.where(Appointment.status == AppointmentStatus(criteria.status).value)
        if criteria.appointment_kind is not None:
            stmt = stmt.where(Appointment.appointment_kind == AppointmentKind(criteria.appointment_kind).value)
        if criteria.location is not None:
            stmt = stmt.where(Appointment.location == criteria.location)
        if criteria.provider_id is not None:
            stmt = stmt.where(Appointment.id.in_(
                select(AppointmentProvider.appointment_id)
                .where(AppointmentProvider.provider_id == criteria.provider_id)
            ))
        rows = self.session.exec(stmt).all()
        return [self._appt_to_dto(r) for r in rows]

    def update_status(self, appointment_id: int, status: AppointmentStatus, changed_at: datetime) -> Optional[AppointmentDto]:
        a = self.session.get(Appointment, appointment_id)
        if not a or a.voided:
            return None
        a.status = AppointmentStatus(status).value
        a.date_changed = changed_at
        self.session.add(a)
        self.session.flush()
        self.session.refresh(a)
        return self._appt_to_dto(a)

    def void(self, appointment_id: int, reason: str, changed_at: datetime) -> Optional[AppointmentDto]:
        a = self.session.get(Appointment, appointment_id)
        if not a or a.voided:
            return None
        a.voided = True
        a.void_reason = reason
        a.date_changed = changed_at
        self.session.add(a)
        self.session.commit()
        self.session.refresh(a)
        return self._appt_to_dto(a)

    def get_service_definition(self, service_id: int) -> Optional[ServiceDefinitionDto]:
        s = self.session.exec(
            select(AppointmentServiceDefinition)
            .where(AppointmentServiceDefinition.id == service_id)
            .where(AppointmentServiceDefinition.voided == False)  # noqa: E712
        ).first()
        if not s:
            return None
        return ServiceDefinitionDto(id=s.id, uuid=s.uuid, name=s.name, duration_mins=s.duration_mins)

    def get_service_type(self, service_type_id: int) -> Optional[ServiceTypeDto]:
        t = self.session.exec(
            select(AppointmentServiceType)
            .where(AppointmentServiceType.id == service_type_id)
            .where(AppointmentServiceType.voided == False)  # noqa: E712
        ).first()
        if not t:
            return None
        return ServiceTypeDto(id=t.id, uuid=t.uuid, name=t.name, service_id=t.service_id, duration_mins=t.duration_mins)

    def get_patient(self, patient_id: int) -> Optional[PatientDto]:
        p = self.session.get(Patient, patient_id)
        if not p:
            return None
        return PatientDto(id=p.id, uuid=p.uuid, name=p.name, identifier=p.identifier)

    def get_provider(self, provider_id: int) -> Optional[ProviderDto]:
        p = self.session.get(Provider, provider_id)
        if not p:
            return None
        return ProviderDto(id=p.id, uuid=p.uuid, name=p.name)
