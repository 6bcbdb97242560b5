"""Tests for PII hashing."""
import hashlib
import hmac
import pytest

from haven.shared.utils import pii


@pytest.fixture(autouse=True)
def reset_salt():
    saved = pii._salt_key
    yield
    pii._salt_key = saved


class TestSaltConfiguration:
    def test_short_salt_rejected(self):
        with pytest.raises(ValueError):
            pii.configure_pii_salt("too_short")

    def test_unconfigured_hash_raises(self):
        pii._salt_key = None

        assert pii.is_pii_salt_configured() is False
        with pytest.raises(RuntimeError):
            pii.hash_pii("sess_001")

    def test_optional_hash_without_salt(self):
        pii._salt_key = None

        assert pii.hash_pii_if_configured("sess_001") is None


class TestHashing:
    def test_hash_is_keyed_hmac(self):
        salt = "a" * 32
        pii.configure_pii_salt(salt)

        expected = hmac.new(salt.encode(), b"sess_001", hashlib.sha256).hexdigest()
        assert pii.hash_pii("sess_001") == expected
        assert pii.hash_pii_if_configured("sess_001") == expected

    def test_hash_changes_with_salt(self):
        pii.configure_pii_salt("a" * 32)
        first = pii.hash_pii("sess_001")

        pii.configure_pii_salt("b" * 32)

        assert pii.hash_pii("sess_001") != first
        assert len(first) == 64

    def test_audit_fingerprint_ignores_salt(self):
        pii._salt_key = None

        assert pii.hash_text_for_audit("hello") == hashlib.sha256(b"hello").hexdigest()
