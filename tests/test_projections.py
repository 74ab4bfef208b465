from clinic.core.security import UserRole
from clinic.models.appointment import AppointmentStatus
from clinic.schemas.appointment import AppointmentDetail, MedicalRecordResponse
from clinic.schemas.user import UserResponse
from clinic.services import projections

DOCTOR = 1
OTHER_DOCTOR = 2
PATIENT = 3
OTHER_PATIENT = 4

users = [
    UserResponse(id=5, name="Root", email="root@clinic.test", role=UserRole.ADMIN),
    UserResponse(id=OTHER_PATIENT, name="Q", email="q@clinic.test", role=UserRole.PATIENT),
    UserResponse(id=PATIENT, name="P", email="p@clinic.test", role=UserRole.PATIENT),
    UserResponse(id=OTHER_DOCTOR, name="Dr. B", email="b@clinic.test", role=UserRole.DOCTOR, specialty="Dermatology"),
    UserResponse(id=DOCTOR, name="Dr. A", email="a@clinic.test", role=UserRole.DOCTOR, specialty="Cardiology"),
]


def appointment(id, scheduled_at, status, doctor_id=DOCTOR, patient_id=PATIENT, bp=None):
    record = None
    if status == AppointmentStatus.COMPLETED:
        record = MedicalRecordResponse(id=id, appointment_id=id, doctor_id=doctor_id, blood_pressure=bp)
    return AppointmentDetail(
        id=id,
        doctor_id=doctor_id,
        patient_id=patient_id,
        scheduled_at=scheduled_at,
        status=status,
        record=record,
    )


# Store join order: latest first
appointments = [
    appointment(6, "2025-04-01T09:00:00Z", AppointmentStatus.PENDING, doctor_id=OTHER_DOCTOR),
    appointment(5, "2025-03-01T09:00:00Z", AppointmentStatus.COMPLETED, bp="130/85"),
    appointment(4, "2025-02-20T09:00:00Z", AppointmentStatus.PENDING),
    appointment(3, "2025-02-10T09:00:00Z", AppointmentStatus.CANCELLED),
    appointment(2, "2025-02-01T09:00:00Z", AppointmentStatus.PENDING, patient_id=OTHER_PATIENT),
    appointment(1, "2025-01-10T10:00:00Z", AppointmentStatus.COMPLETED, bp="120/80"),
]


class TestAdminProjection:

    def test_roster_splits_doctors_and_patients(self):
        roster = projections.admin_roster(users)
        assert [d.name for d in roster.doctors] == ["Dr. B", "Dr. A"]
        assert [p.name for p in roster.patients] == ["Q", "P"]
        assert roster.doctors[1].specialty == "Cardiology"

    def test_doctor_roster(self):
        assert {d.id for d in projections.doctors(users)} == {DOCTOR, OTHER_DOCTOR}


class TestDoctorProjection:

    def test_pending_soonest_first(self):
        pending = projections.doctor_pending(appointments, DOCTOR)
        assert [a.id for a in pending] == [2, 4]

    def test_completed_most_recent_first(self):
        completed = projections.doctor_completed(appointments, DOCTOR)
        assert [a.id for a in completed] == [5, 1]

    def test_other_doctor(self):
        dashboard = projections.doctor_dashboard(appointments, OTHER_DOCTOR)
        assert [a.id for a in dashboard.pending] == [6]
        assert dashboard.completed == []


class TestPatientProjection:

    def test_all_statuses_in_store_order(self):
        mine = projections.patient_appointments(appointments, PATIENT)
        assert [a.id for a in mine] == [6, 5, 4, 3, 1]

    def test_completed_and_latest_vitals(self):
        completed = projections.patient_completed(appointments, PATIENT)
        assert [a.id for a in completed] == [5, 1]

        latest = projections.latest_vitals(appointments, PATIENT)
        assert latest.record.blood_pressure == "130/85"

    def test_no_completed_visits(self):
        assert projections.latest_vitals(appointments, OTHER_PATIENT) is None

    def test_dashboard_bundle(self):
        dashboard = projections.patient_dashboard(appointments, users, OTHER_PATIENT)
        assert [a.id for a in dashboard.appointments] == [2]
        assert dashboard.completed == []
        assert dashboard.latest_vitals is None
        assert len(dashboard.doctors) == 2

    def test_ordering_compares_stored_strings(self):
        """No timezone conversion: the raw values are compared as text."""
        mixed = [
            appointment(10, "2025-01-10T23:00:00-05:00", AppointmentStatus.PENDING),
            appointment(11, "2025-01-11T01:00:00Z", AppointmentStatus.PENDING),
        ]
        pending = projections.doctor_pending(mixed, DOCTOR)
        assert [a.id for a in pending] == [10, 11]
