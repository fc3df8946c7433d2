import pytest
from fastapi import status

from cloud_vault.core.errors import AuthError, ConflictError, ForbiddenError, ValidationError
from cloud_vault.models.user import User
from cloud_vault.services import auth as auth_service
from tests.consts import TEST_HASH_METHOD


def test__register__happy_path(client):
    response = client.post("/api/register", json={"username": "alice", "password": "secret"})

    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["username"] == "alice"
    assert body["role"] == "user"
    assert isinstance(body["id"], int)
    assert "password" not in body


def test__register__stores_hash_not_password(client, db):
    client.post("/api/register", json={"username": "alice", "password": "secret"})

    user = db.query(User).filter(User.username == "alice").one()
    assert user.password
    assert user.password != "secret"


def test__register__duplicate_username(client, db):
    first = client.post("/api/register", json={"username": "bob", "password": "one"})
    second = client.post("/api/register", json={"username": "bob", "password": "two"})

    assert first.status_code == status.HTTP_201_CREATED
    assert second.status_code == status.HTTP_400_BAD_REQUEST
    assert second.json() == {"message": "Username already exists"}
    assert db.query(User).filter(User.username == "bob").count() == 1


@pytest.mark.parametrize(
    "payload",
    [
        {"username": "", "password": "secret"},
        {"username": "carol", "password": ""},
        {"username": "carol"},
        {},
    ],
)
def test__register__missing_fields(client, payload):
    response = client.post("/api/register", json=payload)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"message": "Username and password required"}


def test__login__returns_stored_role(client):
    client.post("/api/register", json={"username": "dave", "password": "pw"})

    response = client.post("/api/login", json={"username": "dave", "password": "pw"})

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["username"] == "dave"
    assert response.json()["role"] == "user"


def test__login__seeded_admin(client):
    response = client.post("/api/login", json={"username": "admin", "password": "admin123"})

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["role"] == "admin"


def test__login__unknown_user_and_wrong_password_look_the_same(client):
    client.post("/api/register", json={"username": "erin", "password": "right"})

    wrong_password = client.post("/api/login", json={"username": "erin", "password": "wrong"})
    unknown_user = client.post("/api/login", json={"username": "nobody", "password": "right"})

    assert wrong_password.status_code == status.HTTP_401_UNAUTHORIZED
    assert unknown_user.status_code == status.HTTP_401_UNAUTHORIZED
    assert wrong_password.json() == unknown_user.json() == {"message": "Invalid username or password"}


def test__register_service__conflict_from_database_constraint(db, monkeypatch):
    auth_service.register(db, "frank", "pw", TEST_HASH_METHOD)
    # simulate losing the race: the pre-check sees nothing, the insert collides
    monkeypatch.setattr(auth_service.users_crud, "find_by_username", lambda db, username: None)

    with pytest.raises(ConflictError):
        auth_service.register(db, "frank", "pw", TEST_HASH_METHOD)
    assert db.query(User).filter(User.username == "frank").count() == 1


def test__register_service__validation(db):
    with pytest.raises(ValidationError):
        auth_service.register(db, "", "pw")


def test__require_admin__no_header(db):
    with pytest.raises(AuthError):
        auth_service.require_admin(db, None)


def test__require_admin__regular_user(db):
    user = auth_service.register(db, "grace", "pw", TEST_HASH_METHOD)

    with pytest.raises(ForbiddenError):
        auth_service.require_admin(db, str(user.id))


def test__require_admin__admin(db, admin_id):
    user = auth_service.require_admin(db, str(admin_id))

    assert user.id == admin_id
    assert user.role == "admin"


def test__stats__requires_header(client):
    response = client.get("/api/admin/stats")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"message": "Authentication required"}


@pytest.mark.parametrize("header", ["999999", "not-a-number"])
def test__stats__unknown_identity_forbidden(client, header):
    response = client.get("/api/admin/stats", headers={"x-user-id": header})

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json() == {"message": "Only administrators can access this"}


def test__stats__non_admin_forbidden(client):
    user_id = client.post("/api/register", json={"username": "heidi", "password": "pw"}).json()["id"]

    response = client.get("/api/admin/stats", headers={"x-user-id": str(user_id)})

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test__register__no_body(client):
    response = client.post("/api/register")

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"message": "Username and password required"}


def test__register__form_encoded_body(client):
    response = client.post("/api/register", data={"username": "ivy", "password": "pw"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert set(response.json()) == {"message"}


def test__register__non_string_username(client):
    response = client.post("/api/register", json={"username": 5, "password": "pw"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert set(response.json()) == {"message"}


def test__login__no_body_is_uniform_401(client):
    response = client.post("/api/login")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"message": "Invalid username or password"}


@pytest.mark.parametrize(
    "value, expected",
    [("12", 12), ("12abc", 12), ("  7", 7), ("-3", -3), ("abc", None), ("", None)],
)
def test__parse_user_id__reads_leading_integer(value, expected):
    assert auth_service.parse_user_id(value) == expected


def test__stats__header_with_trailing_garbage(client, admin_id):
    response = client.get("/api/admin/stats", headers={"x-user-id": f"{admin_id}abc"})

    assert response.status_code == status.HTTP_200_OK
