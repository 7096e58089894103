import os

# Must be set before app.config is imported
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from app.db.models import (
    Appointment,
    AppointmentProvider,
    AppointmentServiceDefinition,
    AppointmentServiceType,
    Patient,
    Provider,
)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def seeded(session):
    """Reference data plus four appointments; id=4 is voided."""
    session.add(Patient(id=1, name="John Doe", identifier="GAN200000"))
    session.add(Provider(id=2220, name="System Provider"))
    session.add(Provider(id=2221, name="Dr. Jane Smith"))
    session.add(AppointmentServiceDefinition(id=1, name="Orthopaedics", duration_mins=30))
    session.add(AppointmentServiceDefinition(id=2, name="Retired clinic", voided=True))
    session.add(AppointmentServiceType(id=1, name="Follow-up", service_id=1, duration_mins=15))
    session.commit()

    session.add(Appointment(
        id=1, uuid="appt-uuid-1", patient_id=1, service_id=1,
        start_date_time=datetime(2108, 8, 14, 10, 0), end_date_time=datetime(2108, 8, 14, 10, 30),
        providers=[AppointmentProvider(provider_id=2221, response="ACCEPTED")],
    ))
    session.add(Appointment(
        id=2, uuid="appt-uuid-2", patient_id=1, service_id=1, service_type_id=1,
        start_date_time=datetime(2108, 8, 15, 10, 0), end_date_time=datetime(2108, 8, 15, 10, 30),
        location="OPD-1",
        providers=[
            AppointmentProvider(provider_id=2220, response="ACCEPTED"),
            AppointmentProvider(provider_id=2221, response="AWAITING"),
        ],
    ))
    session.add(Appointment(
        id=3, uuid="appt-uuid-3", patient_id=1, service_id=1, appointment_kind="WalkIn", status="Completed",
        start_date_time=datetime(2017, 1, 5, 9, 0), end_date_time=datetime(2017, 1, 5, 9, 15),
    ))
    session.add(Appointment(
        id=4, uuid="appt-uuid-4", patient_id=1, service_id=1, voided=True, void_reason="duplicate",
        start_date_time=datetime(2108, 8, 20, 10, 0), end_date_time=datetime(2108, 8, 20, 10, 30),
    ))
    session.commit()
    return session
