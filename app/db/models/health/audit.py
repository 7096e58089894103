# app/db/models/health/audit.py
from typing import Optional
from sqlalchemy import Column, DateTime
from sqlmodel import SQLModel, Field
from datetime import datetime

class AppointmentAudit(SQLModel, table=True):
    __tablename__ = "appointment_audits"
    id: Optional[int] = Field(default=None, primary_key=True)
    appointment_id: int = Field(foreign_key="appointments.id", index=True)
    actor_id: Optional[str] = None
    from_status: str
    to_status: str
    date_recorded: datetime = Field(default_factory=datetime.utcnow, sa_column=Column(DateTime, nullable=False))
    is_undo: bool = Field(default=False)
    undone: bool = Field(default=False)
