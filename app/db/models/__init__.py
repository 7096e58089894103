# Models package (re-export feature modules for stable imports)
from .people.person import Patient, Provider
from .health.service_definition import AppointmentServiceDefinition, AppointmentServiceType
from .health.appointment import Appointment, AppointmentProvider
from .health.audit import AppointmentAudit

__all__ = [
    "Patient",
    "Provider",
    "AppointmentServiceDefinition",
    "AppointmentServiceType",
    "Appointment",
    "AppointmentProvider",
    "AppointmentAudit",
]
