"""Request and store helpers shared by the test modules."""
from healthcare_backend.auth import UserPrincipal
from healthcare_backend.models.user import User


def register(client, name="Alice Smith", email="alice@example.com", password="secret123"):
    """Register a user and return Authorization headers for them."""
    response = client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password},
    )
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


def make_patient(client, headers, **overrides):
    payload = {
        "name": "John Doe",
        "email": "john.doe@example.com",
        "phone": "+1 555-123-4567",
        "date_of_birth": "1980-05-17",
        "gender": "male",
        "address": "12 Elm Street",
        "medical_history": "Type 2 diabetes",
    }
    payload.update(overrides)
    response = client.post("/api/patients", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["patient"]


def make_doctor(client, headers, **overrides):
    payload = {
        "name": "Dr. Gregory House",
        "email": "house@example.com",
        "specialization": "Diagnostics",
        "license_number": "LIC-10001",
        "years_of_experience": 20,
    }
    payload.update(overrides)
    response = client.post("/api/doctors", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["doctor"]


async def add_user(store, name="Carol White", email="carol@example.com") -> UserPrincipal:
    async with store.session() as db:
        user = User(name=name, email=email, password="not-a-real-hash")
        db.add(user)
        await db.flush()
        return UserPrincipal(id=user.id, name=user.name, email=user.email)
