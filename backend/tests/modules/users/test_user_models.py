"""Tests for modules/users/models.py."""

from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from modules.users.models import (
    Gender,
    SortField,
    SortOrder,
    User,
    UserCreate,
    UserCredentials,
    UserPage,
    UserQuery,
    UserResponse,
    UserUpdate,
    years_between,
)


NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_user(**overrides) -> User:
    fields = dict(
        id="0b6f4f1e-7a8c-4d2b-9e3f-5a1c2d3e4f50",
        email="jane@example.com",
        first_name="Jane",
        last_name="Doe",
        created_at=NOW,
        updated_at=NOW,
    )
    fields.update(overrides)
    return User(**fields)


class TestUserCreate:
    def test_valid_input(self):
        data = UserCreate(
            email=" Jane@Example.com",
            password="Password123",
            first_name="Jane",
            last_name="Doe",
            gender="female",
            phone="+1 (555) 123-4567",
        )
        assert data.email == "jane@example.com"
        assert data.gender == Gender.FEMALE

    def test_empty_phone_treated_as_absent(self):
        data = UserCreate(
            email="jane@example.com",
            password="Password123",
            first_name="Jane",
            last_name="Doe",
            phone="",
        )
        assert data.phone is None

    @pytest.mark.parametrize("phone", ["12345", "call me maybe", "+1" + "2" * 25])
    def test_bad_phone_rejected(self, phone):
        with pytest.raises(ValidationError):
            UserCreate(
                email="jane@example.com",
                password="Password123",
                first_name="Jane",
                last_name="Doe",
                phone=phone,
            )

    @pytest.mark.parametrize("password", ["Aa1" + "x" * 70, "Aa1" + "é" * 35])
    def test_password_over_byte_limit_rejected(self, password):
        with pytest.raises(ValidationError):
            UserCreate(
                email="jane@example.com",
                password=password,
                first_name="Jane",
                last_name="Doe",
            )

    def test_password_at_byte_limit_accepted(self):
        data = UserCreate(
            email="jane@example.com",
            password="Aa1" + "x" * 69,
            first_name="Jane",
            last_name="Doe",
        )
        assert len(data.password.encode("utf-8")) == 72

    def test_future_birth_date_rejected(self):
        with pytest.raises(ValidationError, match="future"):
            UserCreate(
                email="jane@example.com",
                password="Password123",
                first_name="Jane",
                last_name="Doe",
                date_of_birth=date(date.today().year + 1, 1, 1),
            )

    def test_ancient_birth_date_rejected(self):
        with pytest.raises(ValidationError, match="120"):
            UserCreate(
                email="jane@example.com",
                password="Password123",
                first_name="Jane",
                last_name="Doe",
                date_of_birth=date(1800, 1, 1),
            )

    def test_accented_names_allowed(self):
        data = UserCreate(
            email="jose@example.com",
            password="Password123",
            first_name="José",
            last_name="Müller",
        )
        assert data.first_name == "José"

    def test_invalid_email_rejected(self):
        with pytest.raises(ValidationError):
            UserCreate(
                email="not-an-email",
                password="Password123",
                first_name="Jane",
                last_name="Doe",
            )


class TestUserUpdate:
    def test_changes_only_contains_sent_fields(self):
        update = UserUpdate(first_name="Janet")
        assert update.changes() == {"first_name": "Janet"}

    def test_explicit_null_clears_optional_field(self):
        update = UserUpdate(phone=None)
        assert update.changes() == {"phone": None}

    def test_required_fields_cannot_be_cleared(self):
        update = UserUpdate(email=None, first_name=None)
        assert update.changes() == {}


class TestUserQuery:
    def test_defaults(self):
        query = UserQuery()
        assert query.page == 1
        assert query.limit == 10
        assert query.sort_by == SortField.CREATED_AT
        assert query.sort_order == SortOrder.DESC
        assert query.is_active is None

    @pytest.mark.parametrize("field,value", [("page", 0), ("limit", 0), ("limit", 101)])
    def test_out_of_range_is_rejected_not_clamped(self, field, value):
        with pytest.raises(ValidationError):
            UserQuery(**{field: value})

    def test_unknown_sort_field_rejected(self):
        with pytest.raises(ValidationError):
            UserQuery(sort_by="password_hash")

    def test_blank_search_is_none(self):
        assert UserQuery(search="   ").search is None

    def test_search_drops_wildcards_and_filter_syntax(self):
        assert UserQuery(search="a_b%c*d,e(f)").search == "abcdef"

    def test_search_of_only_wildcards_is_none(self):
        assert UserQuery(search="%_*").search is None


class TestUserPage:
    def test_total_pages_rounds_up(self):
        assert UserPage.build([], total=21, limit=10).total_pages == 3

    def test_empty(self):
        assert UserPage.build([], total=0, limit=10).total_pages == 0


class TestResponseShaping:
    def test_full_name_is_trimmed_concatenation(self):
        response = UserResponse.from_user(make_user(first_name="Jane", last_name="Doe"))
        assert response.full_name == "Jane Doe"

    def test_credentials_never_serialized(self):
        record = UserCredentials(**make_user().model_dump(), password_hash="$2b$04$secret")

        assert "password_hash" not in record.model_dump()
        assert "secret" not in repr(record)
        assert "password_hash" not in record.to_user().model_dump()

    def test_response_has_no_credential_field(self):
        assert "password_hash" not in UserResponse.model_fields
        assert "password" not in UserResponse.model_fields


class TestYearsBetween:
    def test_birthday_not_reached(self):
        assert years_between(date(2010, 6, 15), date(2023, 6, 14)) == 12

    def test_birthday_reached(self):
        assert years_between(date(2010, 6, 15), date(2023, 6, 15)) == 13
