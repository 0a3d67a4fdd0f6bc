"""Unit tests for API key and idempotency models."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError as PydanticValidationError

from adoption_api.models.api_key import AccessLevel, ApiKey
from adoption_api.models.idempotency import IdempotencyRecord

NOW = datetime(2025, 11, 11, 12, 0, tzinfo=timezone.utc)


def make_key(**overrides) -> ApiKey:
    data = {
        "id": 1,
        "key_value": "k" * 64,
        "owner_name": "Abrigo Central",
        "access_level": AccessLevel.READ_WRITE,
        "created_at": NOW,
    }
    data.update(overrides)
    return ApiKey(**data)


class TestAccessLevel:
    """Tests for the ordering of access levels."""

    def test_read_only_below_read_write(self) -> None:
        assert AccessLevel.READ_ONLY < AccessLevel.READ_WRITE
        assert AccessLevel.READ_WRITE > AccessLevel.READ_ONLY
        assert AccessLevel.READ_ONLY <= AccessLevel.READ_ONLY
        assert AccessLevel.READ_WRITE >= AccessLevel.READ_WRITE

    def test_not_less_than_itself(self) -> None:
        assert not AccessLevel.READ_WRITE < AccessLevel.READ_WRITE

    def test_order_follows_declaration_not_string(self) -> None:
        """Test that sorting uses the declared order."""
        levels = [AccessLevel.READ_WRITE, AccessLevel.READ_ONLY]
        assert sorted(levels) == [AccessLevel.READ_ONLY, AccessLevel.READ_WRITE]

    def test_comparison_with_other_types_unsupported(self) -> None:
        with pytest.raises(TypeError):
            AccessLevel.READ_ONLY < 5  # noqa: B015

    def test_values(self) -> None:
        assert AccessLevel("READ_ONLY") is AccessLevel.READ_ONLY
        assert AccessLevel.READ_WRITE.value == "READ_WRITE"


class TestApiKey:
    """Tests for the ApiKey model."""

    def test_serializes_camel_case(self) -> None:
        data = make_key().model_dump(by_alias=True)
        assert data["keyValue"] == "k" * 64
        assert data["ownerName"] == "Abrigo Central"
        assert data["accessLevel"] == AccessLevel.READ_WRITE

    def test_accepts_camel_case_input(self) -> None:
        api_key = ApiKey.model_validate(
            {
                "id": 2,
                "keyValue": "abc",
                "ownerName": "Ana",
                "accessLevel": "READ_ONLY",
                "createdAt": "2025-11-11T12:00:00Z",
            }
        )
        assert api_key.access_level is AccessLevel.READ_ONLY
        assert api_key.expires_at is None

    def test_rejects_blank_owner(self) -> None:
        with pytest.raises(PydanticValidationError):
            make_key(owner_name="")

    def test_rejects_long_key_value(self) -> None:
        with pytest.raises(PydanticValidationError):
            make_key(key_value="k" * 65)

    def test_is_frozen(self) -> None:
        api_key = make_key()
        with pytest.raises(PydanticValidationError):
            api_key.owner_name = "Outro"

    def test_naive_timestamps_are_utc(self) -> None:
        api_key = make_key(created_at=datetime(2025, 1, 1, 0, 0))
        assert api_key.created_at.tzinfo == timezone.utc

    def test_never_expires_without_expiry(self) -> None:
        assert make_key().is_expired(NOW) is False

    def test_expired_at_or_after_expiry(self) -> None:
        api_key = make_key(expires_at=NOW)
        assert api_key.is_expired(NOW) is True
        assert api_key.is_expired(NOW + timedelta(seconds=1)) is True
        assert api_key.is_expired(NOW - timedelta(seconds=1)) is False


class TestIdempotencyRecord:
    """Tests for IdempotencyRecord liveness."""

    def test_live_before_expiry(self) -> None:
        record = IdempotencyRecord(status_code=201, body=b"{}", expiry=100.0)
        assert record.is_live(99.9) is True

    def test_not_live_at_expiry(self) -> None:
        record = IdempotencyRecord(status_code=201, body=b"{}", expiry=100.0)
        assert record.is_live(100.0) is False

    def test_rejects_invalid_status(self) -> None:
        with pytest.raises(PydanticValidationError):
            IdempotencyRecord(status_code=42, expiry=1.0)
