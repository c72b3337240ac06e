"""Tests for patient-doctor assignments and the cross-entity read."""
import pytest

from .helpers import make_doctor, make_patient, register


def assign(client, headers, patient_id, doctor_id, notes=None):
    payload = {"patient_id": patient_id, "doctor_id": doctor_id}
    if notes is not None:
        payload["notes"] = notes
    return client.post("/api/mappings", json=payload, headers=headers)


@pytest.fixture
def patient(client, alice):
    return make_patient(client, alice, name="Patricia Patient")


@pytest.fixture
def doctor(client, bob):
    # Created by a different user on purpose: any doctor may be assigned
    return make_doctor(client, bob, name="Dr. Derek Doctor")


class TestCreateMapping:
    def test_assign_and_conflict_scenario(self, client):
        user_a = register(client, name="User A", email="a@example.com")
        p1 = make_patient(client, user_a, name="Patient One")
        d1 = make_doctor(client, user_a, name="Doctor One")

        response = assign(client, user_a, p1["id"], d1["id"], notes="Primary physician")
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Doctor assigned to patient successfully"
        mapping = body["mapping"]
        assert mapping["patient_name"] == "Patient One"
        assert mapping["doctor_name"] == "Doctor One"
        assert mapping["specialization"] == "Diagnostics"
        assert mapping["notes"] == "Primary physician"
        assert mapping["assigned_date"] is not None

        again = assign(client, user_a, p1["id"], d1["id"])
        assert again.status_code == 409
        assert again.json()["error"] == "Mapping already exists"

        user_b = register(client, name="User B", email="b@example.com")
        assert client.get(f"/api/patients/{p1['id']}", headers=user_b).status_code == 404

    def test_doctor_from_another_user_can_be_assigned(self, client, alice, patient, doctor):
        response = assign(client, alice, patient["id"], doctor["id"])
        assert response.status_code == 201
        assert response.json()["mapping"]["created_by"] == patient["created_by"]

    def test_cannot_assign_to_someone_elses_patient(self, client, bob, patient, doctor):
        response = assign(client, bob, patient["id"], doctor["id"])
        assert response.status_code == 404
        assert response.json()["error"] == "Patient not found"

    def test_unknown_doctor(self, client, alice, patient):
        response = assign(client, alice, patient["id"], 5555)
        assert response.status_code == 404
        assert response.json()["error"] == "Doctor not found"

    def test_validation(self, client, alice):
        response = client.post(
            "/api/mappings",
            json={"patient_id": 0, "doctor_id": "x", "notes": "n" * 1001},
            headers=alice,
        )
        assert response.status_code == 400
        fields = {d["field"] for d in response.json()["details"]}
        assert fields == {"patient_id", "doctor_id", "notes"}


class TestListMappings:
    def test_lists_own_mappings_newest_first(self, client, alice, bob, patient, doctor):
        other_doctor = make_doctor(client, alice, name="Dr. Olivia Other", email=None, license_number="LIC-55555")
        first = assign(client, alice, patient["id"], doctor["id"]).json()["mapping"]
        second = assign(client, alice, patient["id"], other_doctor["id"]).json()["mapping"]

        body = client.get("/api/mappings", headers=alice).json()
        assert body["count"] == 2
        assert [m["id"] for m in body["mappings"]] == [second["id"], first["id"]]

        assert client.get("/api/mappings", headers=bob).json()["count"] == 0

    def test_get_single_mapping(self, client, alice, bob, patient, doctor):
        mapping = assign(client, alice, patient["id"], doctor["id"]).json()["mapping"]

        response = client.get(f"/api/mappings/id/{mapping['id']}", headers=alice)
        assert response.status_code == 200
        assert response.json()["mapping"] == mapping

        assert client.get(f"/api/mappings/id/{mapping['id']}", headers=bob).status_code == 404


class TestDoctorsForPatient:
    def test_lists_assigned_doctors_with_mapping_details(self, client, alice, patient, doctor):
        mapping = assign(client, alice, patient["id"], doctor["id"], notes="Weekly check").json()["mapping"]

        response = client.get(f"/api/mappings/{patient['id']}", headers=alice)
        assert response.status_code == 200
        body = response.json()
        assert body["patient"] == {"id": patient["id"], "name": "Patricia Patient"}
        assert body["count"] == 1
        row = body["doctors"][0]
        assert row["id"] == doctor["id"]
        assert row["name"] == "Dr. Derek Doctor"
        assert row["license_number"] == doctor["license_number"]
        assert row["mapping_id"] == mapping["id"]
        assert row["notes"] == "Weekly check"

    def test_patient_without_doctors(self, client, alice, patient):
        body = client.get(f"/api/mappings/{patient['id']}", headers=alice).json()
        assert body["doctors"] == []
        assert body["count"] == 0

    def test_other_users_patient_is_not_found_even_with_mappings(self, client, alice, bob, patient, doctor):
        assert assign(client, alice, patient["id"], doctor["id"]).status_code == 201

        forbidden = client.get(f"/api/mappings/{patient['id']}", headers=bob)
        missing = client.get("/api/mappings/987654", headers=bob)
        assert forbidden.status_code == missing.status_code == 404
        assert forbidden.json() == missing.json()


class TestDeleteMapping:
    def test_creator_can_unassign(self, client, alice, patient, doctor):
        mapping = assign(client, alice, patient["id"], doctor["id"]).json()["mapping"]

        response = client.delete(f"/api/mappings/{mapping['id']}", headers=alice)
        assert response.status_code == 200
        assert response.json() == {"message": "Doctor unassigned from patient successfully"}
        assert client.get("/api/mappings", headers=alice).json()["count"] == 0

        # The pair can be assigned again once unassigned
        assert assign(client, alice, patient["id"], doctor["id"]).status_code == 201

    def test_other_user_cannot_unassign(self, client, alice, bob, patient, doctor):
        mapping = assign(client, alice, patient["id"], doctor["id"]).json()["mapping"]
        assert client.delete(f"/api/mappings/{mapping['id']}", headers=bob).status_code == 404
        assert client.get("/api/mappings", headers=alice).json()["count"] == 1


class TestCascades:
    def test_deleting_patient_removes_its_mappings(self, client, alice, patient, doctor):
        assign(client, alice, patient["id"], doctor["id"])
        assert client.delete(f"/api/patients/{patient['id']}", headers=alice).status_code == 200

        body = client.get("/api/mappings", headers=alice).json()
        assert [m for m in body["mappings"] if m["patient_id"] == patient["id"]] == []

    def test_deleting_doctor_removes_its_mappings(self, client, alice, bob, patient, doctor):
        assign(client, alice, patient["id"], doctor["id"])
        assert client.delete(f"/api/doctors/{doctor['id']}", headers=bob).status_code == 200

        assert client.get("/api/mappings", headers=alice).json()["count"] == 0
        assert client.get(f"/api/mappings/{patient['id']}", headers=alice).json()["count"] == 0
