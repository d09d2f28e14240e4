"""Shared fixtures. Keys are derived once per test session (210k iterations)."""
import pytest

from navigator_vault.vault.kdf import derive

TEST_SALT = bytes(range(16))
TEST_PASSWORD = "correct-horse-battery-staple"


@pytest.fixture(scope="session")
def password():
    return TEST_PASSWORD


@pytest.fixture(scope="session")
def salt():
    return TEST_SALT


@pytest.fixture(scope="session")
def key():
    """Master key for TEST_PASSWORD + TEST_SALT."""
    derived, _ = derive(TEST_PASSWORD, TEST_SALT)
    return derived


@pytest.fixture(scope="session")
def other_key():
    """Master key derived from a different password and the same salt."""
    derived, _ = derive("Tr0ub4dor&3", TEST_SALT)
    return derived
