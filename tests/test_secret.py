"""Tests for $9$ secret encoding."""
import pytest

from junos_provider.utils.secret import SecretDecodeError, decode_secret, encode_secret


class TestSecret:
    """Tests for decode_secret and encode_secret."""

    @pytest.mark.parametrize("plaintext", ["s3cret", "a", "with space and symbols !@#", ""])
    def test_encode_then_decode(self, plaintext):
        assert decode_secret(encode_secret(plaintext)) == plaintext

    def test_encoded_form(self):
        encoded = encode_secret("s3cret", salt="Q")
        assert encoded.startswith("$9$Q")
        assert '"' not in encoded

    def test_plain_value_passes_through(self):
        assert decode_secret("not-encoded") == "not-encoded"

    def test_truncated(self):
        with pytest.raises(SecretDecodeError):
            decode_secret("$9$")

    def test_bad_character(self):
        with pytest.raises(SecretDecodeError):
            decode_secret("$9$QzF3n~~~")

    def test_bad_salt(self):
        with pytest.raises(ValueError):
            encode_secret("x", salt="~")
