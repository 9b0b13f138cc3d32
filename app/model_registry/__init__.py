# app/model_registry/__init__.py


# Register all models here

# User models
from app.users.user_models.user_model import User

# System models
from app.system_models.patient_model.patient_model import Patient
from app.system_models.medication_model.medication_model import Medication
from app.system_models.prescription_model.prescription_model import Prescription, PrescriptionLine
from app.system_models.transport_model.transport_model import TransportRecord
from app.system_models.alarm_model.alarm_model import Alarm
