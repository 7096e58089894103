# app/schemas/appointments/appointment.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime

from ...application.appointment_status import AppointmentStatus
from ...application.ports.appointments_repo import AppointmentKind, ProviderResponse

class AppointmentProviderPayload(BaseModel):
    provider_id: int
    response: ProviderResponse = ProviderResponse.AWAITING

class AppointmentProviderResponse(AppointmentProviderPayload):
    model_config = ConfigDict(from_attributes=True)

    provider_name: Optional[str] = None

class AppointmentRequest(BaseModel):
    id: Optional[int] = None
    patient_id: Optional[int] = None
    service_id: Optional[int] = None
    service_type_id: Optional[int] = None
    location: Optional[str] = None
    start_date_time: Optional[datetime] = None
    end_date_time: Optional[datetime] = None
    appointment_kind: AppointmentKind = AppointmentKind.SCHEDULED
    comments: Optional[str] = None
    providers: List[AppointmentProviderPayload] = Field(default_factory=list)

class AppointmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    uuid: str
    patient_id: int
    service_id: int
    service_type_id: Optional[int] = None
    location: Optional[str] = None
    start_date_time: datetime
    end_date_time: datetime
    appointment_kind: AppointmentKind
    status: AppointmentStatus
    comments: Optional[str] = None
    date_created: Optional[datetime] = None
    date_changed: Optional[datetime] = None
    providers: List[AppointmentProviderResponse] = Field(default_factory=list)

class AppointmentSearchRequest(BaseModel):
    uuid: Optional[str] = None
    patient_id: Optional[int] = None
    service_id: Optional[int] = None
    service_type_id: Optional[int] = None
    provider_id: Optional[int] = None
    status: Optional[AppointmentStatus] = None
    appointment_kind: Optional[AppointmentKind] = None
    location: Optional[str] = None

class StatusChangeRequest(BaseModel):
    to_status: str
    on_date: Optional[datetime] = None

class VoidRequest(BaseModel):
    reason: str = Field(min_length=1)
