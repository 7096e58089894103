from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Protocol, Sequence
from datetime import datetime

from ..appointment_status import AppointmentStatus


class AppointmentKind(str, Enum):
    SCHEDULED = "Scheduled"
    WALK_IN = "WalkIn"
    VIRTUAL = "Virtual"


class ProviderResponse(str, Enum):
    ACCEPTED = "ACCEPTED"
    AWAITING = "AWAITING"
    REJECTED = "REJECTED"


@dataclass
class AppointmentProviderDto:
    provider_id: int
    response: ProviderResponse = ProviderResponse.AWAITING
    provider_name: Optional[str] = None
    id: Optional[int] = None


@dataclass
class AppointmentDto:
    id: Optional[int] = None
    uuid: Optional[str] = None
    patient_id: Optional[int] = None
    service_id: Optional[int] = None
    service_type_id: Optional[int] = None
    location: Optional[str] = None
    start_date_time: Optional[datetime] = None
    end_date_time: Optional[datetime] = None
    appointment_kind: Optional[AppointmentKind] = None
    status: Optional[AppointmentStatus] = None
    comments: Optional[str] = None
    voided: bool = False
    void_reason: Optional[str] = None
    date_created: Optional[datetime] = None
    date_changed: Optional[datetime] = None
    providers: List[AppointmentProviderDto] = field(default_factory=list)


@dataclass
class ServiceDefinitionDto:
    id: int
    uuid: Optional[str] = None
    name: Optional[str] = None
    duration_mins: Optional[int] = None


@dataclass
class ServiceTypeDto:
    id: int
    uuid: Optional[str] = None
    name: Optional[str] = None
    service_id: Optional[int] = None
    duration_mins: Optional[int] = None


@dataclass
class PatientDto:
    id: int
    uuid: Optional[str] = None
    name: Optional[str] = None
    identifier: Optional[str] = None


@dataclass
class ProviderDto:
    id: int
    uuid: Optional[str] = None
    name: Optional[str] = None


@dataclass
class AppointmentSearchCriteria:
    """Query-by-example filter: every field left as None is ignored."""

    uuid: Optional[str] = None
    patient_id: Optional[int] = None
    service_id: Optional[int] = None
    service_type_id: Optional[int] = None
    provider_id: Optional[int] = None
    status: Optional[AppointmentStatus] = None
    appointment_kind: Optional[AppointmentKind] = None
    location: Optional[str] = None


class AppointmentsRepository(Protocol):
    """Persistence for appointments and their reference data.

    Read methods never return voided appointments and order results by
    start time, then id. ``update_status`` only stages the change; it is
    made durable by the unit of work the caller commits.
    """

    def save(self, appointment: AppointmentDto) -> AppointmentDto:
        ...

    def get_by_id(self, appointment_id: int) -> Optional[AppointmentDto]:
        ...

    def get_by_uuid(self, uuid: str) -> Optional[AppointmentDto]:
        ...

    def list_appointments(
        self,
        start_from: Optional[datetime] = None,
        end_until: Optional[datetime] = None,
        service_id: Optional[int] = None,
        service_type_id: Optional[int] = None,
        statuses: Optional[Sequence[AppointmentStatus]] = None,
    ) -> List[AppointmentDto]:
        ...

    def search(self, criteria: AppointmentSearchCriteria) -> List[AppointmentDto]:
        ...

    def update_status(self, appointment_id: int, status: AppointmentStatus, changed_at: datetime) -> Optional[AppointmentDto]:
        ...

    def void(self, appointment_id: int, reason: str, changed_at: datetime) -> Optional[AppointmentDto]:
        ...

    def get_service_definition(self, service_id: int) -> Optional[ServiceDefinitionDto]:
        ...

    def get_service_type(self, service_type_id: int) -> Optional[ServiceTypeDto]:
        ...

    def get_patient(self, patient_id: int) -> Optional[PatientDto]:
        ...

    def get_provider(self, provider_id: int) -> Optional[ProviderDto]:
        ...
