"""
Unit tests for the shared/ utility modules.

Covers:
- shared.generators      (generate_otp_code, generate_file_token)
- shared.datetime_utils  (utcnow, ensure_utc, minutes_from_now)
- shared.crypto          (hash_password, verify_password)
- shared.logging_config  (redact_sensitive_fields)
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

import pytest

from shared.crypto import hash_password, verify_password
from shared.datetime_utils import ensure_utc, minutes_from_now, utcnow
from shared.generators import generate_file_token, generate_otp_code
from shared.logging_config import redact_sensitive_fields


# ---------------------------------------------------------------------------
# shared.generators
# ---------------------------------------------------------------------------


class TestGenerateOtpCode:
    @pytest.mark.parametrize("length", [4, 6, 8])
    def test_length(self, length):
        assert len(generate_otp_code(length=length)) == length

    def test_only_digits(self):
        assert generate_otp_code().isdigit()

    def test_produces_variety(self):
        assert len({generate_otp_code(8) for _ in range(20)}) > 1


class TestGenerateFileToken:
    def test_hex_characters(self):
        assert re.match(r"^[0-9a-f]{32}$", generate_file_token())

    def test_produces_variety(self):
        assert len({generate_file_token() for _ in range(10)}) == 10


# ---------------------------------------------------------------------------
# shared.datetime_utils
# ---------------------------------------------------------------------------


class TestDatetimeUtils:
    def test_utcnow_is_aware(self):
        assert utcnow().tzinfo is not None

    def test_ensure_utc_none(self):
        assert ensure_utc(None) is None

    def test_ensure_utc_treats_naive_as_utc(self):
        naive = datetime(2024, 1, 1, 12, 0)
        assert ensure_utc(naive) == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_ensure_utc_converts_offsets(self):
        plus_two = timezone(timedelta(hours=2))
        value = datetime(2024, 1, 1, 14, 0, tzinfo=plus_two)
        assert ensure_utc(value) == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_minutes_from_now(self):
        before = utcnow()
        value = minutes_from_now(10)
        assert timedelta(minutes=9) < value - before <= timedelta(minutes=10, seconds=5)


# ---------------------------------------------------------------------------
# shared.crypto
# ---------------------------------------------------------------------------


class TestHashPassword:
    def test_returns_argon2_string(self):
        assert hash_password("secret").startswith("$argon2")

    def test_differs_from_input(self):
        assert hash_password("secret") != "secret"

    def test_unique_salts(self):
        # argon2 produces a new salt each call
        assert hash_password("same") != hash_password("same")


class TestVerifyPassword:
    @pytest.mark.parametrize(
        "candidate, expected",
        [("correct_password", True), ("wrong_password", False)],
        ids=["correct", "wrong"],
    )
    def test_verify(self, candidate, expected):
        h = hash_password("correct_password")
        assert verify_password(candidate, h) is expected

    @pytest.mark.parametrize("bad_hash", ["", "not-a-hash"], ids=["empty", "garbage"])
    def test_invalid_hash_returns_false(self, bad_hash):
        assert verify_password("anything", bad_hash) is False


# ---------------------------------------------------------------------------
# shared.logging_config
# ---------------------------------------------------------------------------


class TestRedaction:
    @pytest.mark.parametrize(
        "key",
        ["password", "confirm_password", "token", "reset_token", "otp_code", "jwt_secret"],
    )
    def test_sensitive_keys_redacted(self, key):
        event = redact_sensitive_fields(None, "info", {"event": "x", key: "value"})
        assert event[key] == "***REDACTED***"

    def test_other_keys_untouched(self):
        event = redact_sensitive_fields(
            None, "info", {"event": "login_success", "user_id": "abc"}
        )
        assert event == {"event": "login_success", "user_id": "abc"}
