"""Unit tests for password hashing."""

from collabnotes.security import hash_password, verify_password


def test_hash_and_verify():
    hashed = hash_password("Sup3r$ecret")
    assert hashed != "Sup3r$ecret"
    assert verify_password("Sup3r$ecret", hashed)
    assert not verify_password("wrong", hashed)


def test_long_passwords_are_not_truncated():
    base = "A1$" + "x" * 80
    hashed = hash_password(base + "a")
    assert not verify_password(base + "b", hashed)
