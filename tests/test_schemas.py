import pytest
from pydantic import ValidationError

from technova.models.user import Role
from technova.schemas import UserCreate, UserUpdate


def _messages(exc_info):
    return {tuple(e["loc"]): e["msg"] for e in exc_info.value.errors()}


def test_create_collects_every_violation():
    with pytest.raises(ValidationError) as exc_info:
        UserCreate(
            name=" J ",
            email="bad",
            password="x",
            role="owner",
            phone="call me",
            skills="React",
        )
    assert _messages(exc_info) == {
        ("name",): "Name must be at least 2 characters",
        ("email",): "Invalid email address",
        ("password",): "Password must be at least 8 characters",
        ("role",): "Invalid role",
        ("phone",): "Invalid phone number format",
        ("skills",): "Skills must be an array",
    }


def test_create_reports_first_failing_password_rule(make_payload):
    with pytest.raises(ValidationError) as exc_info:
        UserCreate(**make_payload(password="longenough1!"))
    assert _messages(exc_info) == {
        ("password",): "Password must contain at least one uppercase letter"
    }


def test_create_requires_password(make_payload):
    payload = make_payload()
    del payload["password"]
    with pytest.raises(ValidationError) as exc_info:
        UserCreate(**payload)
    assert ("password",) in _messages(exc_info)


def test_create_rejects_password_longer_than_bcrypt_limit(make_payload):
    with pytest.raises(ValidationError) as exc_info:
        UserCreate(**make_payload(password="Aa1!" + "x" * 69))
    assert _messages(exc_info) == {("password",): "Password must be at most 72 bytes"}


def test_create_normalises_fields(make_payload):
    user = UserCreate(**make_payload(name="  Grace Hopper  ", phone="   "))
    assert user.name == "Grace Hopper"
    assert user.phone is None
    assert user.role is Role.DEVELOPER


def test_role_defaults_to_user(make_payload):
    payload = make_payload()
    del payload["role"]
    assert UserCreate(**payload).role is Role.USER


def test_two_character_name_is_accepted(make_payload):
    assert UserCreate(**make_payload(name="Jo")).name == "Jo"


def test_skills_accept_any_strings(make_payload):
    user = UserCreate(**make_payload(skills=["COBOL", "React"]))
    assert user.skills == ["COBOL", "React"]


@pytest.mark.parametrize("phone", ["555-123-4567", "+1 555 1234567", "(020)7946.0958", "5551234"])
def test_accepted_phone_formats(make_payload, phone):
    assert UserCreate(**make_payload(phone=phone)).phone == phone


@pytest.mark.parametrize("password", [None, "", "   "])
def test_update_with_blank_password_keeps_existing(make_payload, password):
    user = UserUpdate(**make_payload(password=password))
    assert user.password is None


def test_update_with_weak_password_is_rejected(make_payload):
    with pytest.raises(ValidationError) as exc_info:
        UserUpdate(**make_payload(password="short"))
    assert _messages(exc_info) == {
        ("password",): "Password must be at least 8 characters"
    }
