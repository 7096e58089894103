from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session
import logging

from ..database import get_session
from ..auth import get_current_principal
from ..application.ports.appointments_repo import (
    AppointmentDto,
    AppointmentProviderDto,
    AppointmentSearchCriteria,
    ServiceDefinitionDto,
    ServiceTypeDto,
)
from ..application.ports.authorization import UserPrincipal
from ..application.services.appointments_service import AppointmentLifecycleService
from ..infrastructure.audit.std_logger import StdAuditLogger
from ..infrastructure.persistence.sqlalchemy.repositories.appointments_repository_sql import SqlAppointmentsRepository
from ..infrastructure.persistence.sqlalchemy.repositories.appointment_audit_repository_sql import SqlAppointmentAuditRepository
from ..infrastructure.persistence.sqlalchemy.unit_of_work_sql import SqlUnitOfWork
from ..schemas.appointments.appointment import (
    AppointmentRequest,
    AppointmentResponse,
    AppointmentSearchRequest,
    StatusChangeRequest,
    VoidRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def get_appointments_service(session: Session = Depends(get_session)) -> AppointmentLifecycleService:
    return AppointmentLifecycleService(
        repo=SqlAppointmentsRepository(session),
        audit=SqlAppointmentAuditRepository(session),
        uow=SqlUnitOfWork(session),
        audit_logger=StdAuditLogger(),
    )


def _to_response(appt: AppointmentDto) -> AppointmentResponse:
    return AppointmentResponse.model_validate(appt)


def _to_responses(appts: List[AppointmentDto]) -> List[AppointmentResponse]:
    return [_to_response(a) for a in appts]


@router.post("/", response_model=AppointmentResponse)
def save_appointment(
    payload: AppointmentRequest,
    principal: UserPrincipal = Depends(get_current_principal),
    svc: AppointmentLifecycleService = Depends(get_appointments_service),
):
    appt = AppointmentDto(
        id=payload.id,
        patient_id=payload.patient_id,
        service_id=payload.service_id,
        service_type_id=payload.service_type_id,
        location=payload.location,
        start_date_time=payload.start_date_time,
        end_date_time=payload.end_date_time,
        appointment_kind=payload.appointment_kind,
        comments=payload.comments,
        providers=[AppointmentProviderDto(provider_id=p.provider_id, response=p.response) for p in payload.providers],
    )
    return _to_response(svc.validate_and_save(principal, appt))


@router.get("/all", response_model=List[AppointmentResponse])
def get_all_appointments(
    forDate: Optional[datetime] = Query(default=None),
    principal: UserPrincipal = Depends(get_current_principal),
    svc: AppointmentLifecycleService = Depends(get_appointments_service),
):
    return _to_responses(svc.get_all_appointments(principal, forDate))


@router.post("/search", response_model=List[AppointmentResponse])
def search_appointments(
    payload: AppointmentSearchRequest,
    principal: UserPrincipal = Depends(get_current_principal),
    svc: AppointmentLifecycleService = Depends(get_appointments_service),
):
    criteria = AppointmentSearchCriteria(**payload.model_dump())
    return _to_responses(svc.search(principal, criteria))


@router.get("/range", response_model=List[AppointmentResponse])
def get_appointments_in_date_range(
    start: Optional[datetime] = Query(default=None),
    end: Optional[datetime] = Query(default=None),
    principal: UserPrincipal = Depends(get_current_principal),
    svc: AppointmentLifecycleService = Depends(get_appointments_service),
):
    return _to_responses(svc.get_all_appointments_in_date_range(principal, start, end))


@router.get("/futureAppointmentsForService/{service_id}", response_model=List[AppointmentResponse])
def get_future_appointments_for_service(
    service_id: int,
    principal: UserPrincipal = Depends(get_current_principal),
    svc: AppointmentLifecycleService = Depends(get_appointments_service),
):
    return _to_responses(svc.get_all_future_appointments_for_service(principal, ServiceDefinitionDto(id=service_id)))


@router.get("/futureAppointmentsForServiceType/{service_type_id}", response_model=List[AppointmentResponse])
def get_future_appointments_for_service_type(
    service_type_id: int,
    principal: UserPrincipal = Depends(get_current_principal),
    svc: AppointmentLifecycleService = Depends(get_appointments_service),
):
    return _to_responses(svc.get_all_future_appointments_for_service_type(principal, ServiceTypeDto(id=service_type_id)))


@router.get("/service/{service_id}", response_model=List[AppointmentResponse])
def get_appointments_for_service(
    service_id: int,
    startDate: Optional[datetime] = Query(default=None),
    endDate: Optional[datetime] = Query(default=None),
    status: Optional[List[str]] = Query(default=None),
    principal: UserPrincipal = Depends(get_current_principal),
    svc: AppointmentLifecycleService = Depends(get_appointments_service),
):
    return _to_responses(svc.get_appointments_for_service(
        principal, ServiceDefinitionDto(id=service_id), startDate, endDate, status
    ))


@router.get("/{uuid}", response_model=Optional[AppointmentResponse])
def get_appointment_by_uuid(
    uuid: str,
    principal: UserPrincipal = Depends(get_current_principal),
    svc: AppointmentLifecycleService = Depends(get_appointments_service),
):
    appt = svc.get_appointment_by_uuid(principal, uuid)
    return _to_response(appt) if appt else None


@router.post("/{uuid}/status-change", response_model=AppointmentResponse)
def change_appointment_status(
    uuid: str,
    payload: StatusChangeRequest,
    principal: UserPrincipal = Depends(get_current_principal),
    svc: AppointmentLifecycleService = Depends(get_appointments_service),
):
    appt = svc.get_appointment_for_update(principal, uuid)
    return _to_response(svc.change_status(principal, appt, payload.to_status, payload.on_date))


@router.post("/{uuid}/undo-status-change", response_model=AppointmentResponse)
def undo_appointment_status_change(
    uuid: str,
    principal: UserPrincipal = Depends(get_current_principal),
    svc: AppointmentLifecycleService = Depends(get_appointments_service),
):
    appt = svc.get_appointment_for_update(principal, uuid)
    return _to_response(svc.undo_status_change(principal, appt))


@router.post("/{uuid}/void")
def void_appointment(
    uuid: str,
    payload: VoidRequest,
    principal: UserPrincipal = Depends(get_current_principal),
    svc: AppointmentLifecycleService = Depends(get_appointments_service),
):
    appt = svc.get_appointment_for_update(principal, uuid)
    svc.void_appointment(principal, appt, payload.reason)
    return {"success": True, "message": "Appointment voided successfully"}
