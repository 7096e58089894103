# app/db/models/health/appointment.py
from typing import Optional, List
from sqlalchemy import Column, DateTime
from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime
import uuid as uuid_lib

class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    id: Optional[int] = Field(default=None, primary_key=True)
    uuid: str = Field(default_factory=lambda: str(uuid_lib.uuid4()), index=True, unique=True, max_length=38)
    patient_id: int = Field(foreign_key="patients.id", index=True)
    service_id: int = Field(foreign_key="appointment_service_definitions.id", index=True)
    service_type_id: Optional[int] = Field(default=None, foreign_key="appointment_service_types.id")
    location: Optional[str] = None
    start_date_time: datetime = Field(sa_column=Column(DateTime, index=True, nullable=False))
    end_date_time: datetime = Field(sa_column=Column(DateTime, nullable=False))
    appointment_kind: str = Field(default="Scheduled")
    status: str = Field(default="Scheduled", index=True)
    comments: Optional[str] = None
    voided: bool = Field(default=False)
    void_reason: Optional[str] = None
    date_created: datetime = Field(default_factory=datetime.utcnow, sa_column=Column(DateTime, nullable=False))
    date_changed: Optional[datetime] = Field(default=None, sa_column=Column(DateTime, nullable=True))

    # Relationships
    patient: Optional["Patient"] = Relationship(back_populates="appointments")
    service: Optional["AppointmentServiceDefinition"] = Relationship(back_populates="appointments")
    providers: List["AppointmentProvider"] = Relationship(
        back_populates="appointment",
        sa_relationship_kwargs={
            "cascade": "all, delete-orphan",
            "lazy": "selectin",
            "order_by": "AppointmentProvider.id",
        },
    )

class AppointmentProvider(SQLModel, table=True):
    __tablename__ = "appointment_providers"
    id: Optional[int] = Field(default=None, primary_key=True)
    appointment_id: Optional[int] = Field(default=None, foreign_key="appointments.id", index=True)
    provider_id: int = Field(foreign_key="providers.id", index=True)
    response: str = Field(default="AWAITING")

    # Relationships
    appointment: Optional[Appointment] = Relationship(back_populates="providers")
    provider: Optional["Provider"] = Relationship(sa_relationship_kwargs={"lazy": "selectin"})
