"""
Tests for the OAuth state codec.
"""

import string
from base64 import urlsafe_b64encode

import pytest

from connectors.errors import InvalidStateError
from connectors.state import StateCodec

MINUTE_MS = 60 * 1000


def _raw(text: str) -> str:
    return urlsafe_b64encode(text.encode()).decode()


class TestUnsignedState:
    @pytest.mark.parametrize(
        "user_id, provider_id",
        [("u1", "github"), ("a0b1c2d3-uuid", "google-drive"), ("mona@example.com", "slack")],
    )
    def test_round_trip(self, codec, clock, user_id, provider_id):
        decoded = codec.decode(codec.encode(user_id, provider_id))
        assert decoded.user_id == user_id
        assert decoded.provider_id == provider_id
        assert decoded.issued_at_ms == clock.now

    def test_state_is_url_safe(self, codec):
        state = codec.encode("user-with-a-long-id-to-force-padding", "google-calendar")
        allowed = set(string.ascii_letters + string.digits + "-_=")
        assert set(state) <= allowed

    def test_decode_accepts_missing_padding(self, codec):
        state = codec.encode("u1", "github").rstrip("=")
        assert codec.decode(state).user_id == "u1"

    def test_garbage_is_rejected(self, codec):
        with pytest.raises(InvalidStateError):
            codec.decode("not a state at all")

    def test_empty_is_rejected(self, codec):
        with pytest.raises(InvalidStateError):
            codec.decode("")

    def test_wrong_field_count_is_rejected(self, codec):
        with pytest.raises(InvalidStateError):
            codec.decode(_raw("u1:github"))
        with pytest.raises(InvalidStateError):
            codec.decode(_raw("u1:github:123:extra"))

    def test_non_integer_timestamp_is_rejected(self, codec):
        with pytest.raises(InvalidStateError):
            codec.decode(_raw("u1:github:yesterday"))

    def test_empty_field_is_rejected(self, codec):
        with pytest.raises(InvalidStateError):
            codec.decode(_raw(":github:123"))

    def test_delimiter_in_identifier_cannot_be_encoded(self, codec):
        with pytest.raises(InvalidStateError):
            codec.encode("evil:user", "github")

    def test_empty_identifier_cannot_be_encoded(self, codec):
        with pytest.raises(InvalidStateError):
            codec.encode("", "github")

    def test_forged_state_is_accepted_without_secret(self, codec):
        # Unsigned states are taken at face value
        decoded = codec.decode(_raw("victim:github:1"))
        assert decoded.user_id == "victim"


class TestSignedState:
    def test_round_trip(self, clock):
        codec = StateCodec(secret="s3cret", clock=clock)
        assert codec.signed
        decoded = codec.decode(codec.encode("u1", "github"))
        assert (decoded.user_id, decoded.provider_id) == ("u1", "github")

    def test_forged_state_is_rejected(self, clock):
        codec = StateCodec(secret="s3cret", clock=clock)
        with pytest.raises(InvalidStateError):
            codec.decode(_raw("victim:github:1:0000000000000000"))

    def test_other_secret_is_rejected(self, clock):
        minted = StateCodec(secret="one", clock=clock).encode("u1", "github")
        with pytest.raises(InvalidStateError):
            StateCodec(secret="two", clock=clock).decode(minted)

    def test_unsigned_state_is_rejected(self, clock):
        unsigned = StateCodec(clock=clock).encode("u1", "github")
        with pytest.raises(InvalidStateError):
            StateCodec(secret="s3cret", clock=clock).decode(unsigned)

    def test_expired_state_is_rejected(self, clock):
        codec = StateCodec(secret="s3cret", max_age_ms=10 * MINUTE_MS, clock=clock)
        state = codec.encode("u1", "github")
        clock.advance(9 * MINUTE_MS)
        assert codec.decode(state).user_id == "u1"
        clock.advance(2 * MINUTE_MS)
        with pytest.raises(InvalidStateError):
            codec.decode(state)
