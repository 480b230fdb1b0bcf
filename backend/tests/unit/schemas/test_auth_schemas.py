"""
Unit Tests for User and Auth Schemas
Tests for: validation, camelCase aliases, password never serialized
"""
import pytest
from pydantic import ValidationError

from app.models.user import UserRole
from app.schemas.auth import UserRegister, UserLogin
from app.schemas.user import UserCreate, UserUpdate, UserRecord, UserResponse


class TestUserRegister:
    """Test UserRegister schema"""

    def test_valid_registration(self):
        user = UserRegister(username="jdoe", password="pw", name="Jane Doe", role="teacher")

        assert user.username == "jdoe"
        assert user.role == UserRole.TEACHER

    def test_role_defaults_to_student(self):
        user = UserRegister(username="jdoe", password="pw", name="Jane Doe")

        assert user.role == UserRole.STUDENT

    def test_unknown_role_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            UserRegister(username="jdoe", password="pw", name="Jane Doe", role="principal")

        assert exc_info.value.errors()[0]["loc"] == ("role",)

    @pytest.mark.parametrize("missing", ["username", "password", "name"])
    def test_missing_required_field(self, missing):
        data = {"username": "jdoe", "password": "pw", "name": "Jane Doe"}
        del data[missing]

        with pytest.raises(ValidationError):
            UserRegister(**data)

    def test_username_with_whitespace_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            UserRegister(username="j doe", password="pw", name="Jane Doe")

        assert "whitespace" in str(exc_info.value)

    def test_surrounding_whitespace_stripped(self):
        user = UserRegister(username="  jdoe ", password="pw", name=" Jane Doe ")

        assert user.username == "jdoe"
        assert user.name == "Jane Doe"

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            UserRegister(username="jdoe", password="pw", name="   ")


class TestUserLogin:

    def test_valid(self):
        login = UserLogin(username="admin", password="password")
        assert login.username == "admin"

    def test_empty_password_rejected(self):
        with pytest.raises(ValidationError):
            UserLogin(username="admin", password="")


class TestUserUpdate:

    def test_partial_update_tracks_sent_fields(self):
        update = UserUpdate(**{"name": "New Name"})

        assert update.model_dump(exclude_unset=True) == {"name": "New Name"}

    def test_role_update(self):
        update = UserUpdate(role="admin")
        assert update.role == UserRole.ADMIN


class TestUserResponse:

    def test_response_from_record_drops_password(self):
        record = UserRecord(id=7, username="jdoe", password="digest.salt", name="Jane", role="student")
        response = UserResponse.model_validate(record.model_dump())

        dumped = response.model_dump(by_alias=True, mode="json")
        assert dumped == {"id": 7, "username": "jdoe", "name": "Jane", "role": "student"}

    def test_user_create_accepts_camel_or_snake(self):
        user = UserCreate.model_validate({"username": "a", "password": "b", "name": "c", "role": "admin"})
        assert user.role == UserRole.ADMIN
