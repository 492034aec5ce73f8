"""Tests for the shared field rules."""

import pytest

from src.core.validators import check_password_strength, normalize_email, normalize_name


@pytest.mark.parametrize("password", ["Secret-pass1", "Secret.pass1", "Secret$pass1", "Secret€pass1"])
def test_password_with_punctuation_or_symbol_passes(password):
    assert check_password_strength(password) == password


@pytest.mark.parametrize("password", ["Secret pass1", "Secretépass1", "Secretpass12"])
def test_whitespace_and_accented_letters_are_not_symbols(password):
    with pytest.raises(ValueError, match="at least one symbol"):
        check_password_strength(password)


def test_password_rules_are_checked_in_order():
    with pytest.raises(ValueError, match="at least 8"):
        check_password_strength("Ab1!")
    with pytest.raises(ValueError, match="upper and lower"):
        check_password_strength("secret-pass1")
    with pytest.raises(ValueError, match="one number"):
        check_password_strength("Secret-pass")


def test_normalize_email_lowercases_and_trims():
    assert normalize_email("  Alice@Example.COM ") == "alice@example.com"


def test_normalize_name_strips_tags():
    assert normalize_name(" <i>Zoë</i> O'Brien ") == "Zoë O'Brien"
