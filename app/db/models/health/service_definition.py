# app/db/models/health/service_definition.py
from typing import Optional, List
from sqlalchemy import Column, DateTime
from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime
import uuid as uuid_lib

class AppointmentServiceDefinition(SQLModel, table=True):
    __tablename__ = "appointment_service_definitions"
    id: Optional[int] = Field(default=None, primary_key=True)
    uuid: str = Field(default_factory=lambda: str(uuid_lib.uuid4()), unique=True, max_length=38)
    name: str
    description: Optional[str] = None
    duration_mins: Optional[int] = None
    voided: bool = Field(default=False)
    date_created: datetime = Field(default_factory=datetime.utcnow, sa_column=Column(DateTime, nullable=False))

    # Relationships
    service_types: List["AppointmentServiceType"] = Relationship(back_populates="service")
    appointments: List["Appointment"] = Relationship(back_populates="service")

class AppointmentServiceType(SQLModel, table=True):
    __tablename__ = "appointment_service_types"
    id: Optional[int] = Field(default=None, primary_key=True)
    uuid: str = Field(default_factory=lambda: str(uuid_lib.uuid4()), unique=True, max_length=38)
    name: str
    service_id: int = Field(foreign_key="appointment_service_definitions.id")
    duration_mins: Optional[int] = None
    voided: bool = Field(default=False)

    # Relationships
    service: Optional[AppointmentServiceDefinition] = Relationship(back_populates="service_types")
