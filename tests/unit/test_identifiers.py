"""Tests for identifier utilities."""

from price_comparer.utils.identifiers import (
    hash_password, is_temp_user_id, normalize_email, temp_user_id,
)


def test_temp_user_id_replaces_non_alphanumerics():
    """Test the placeholder user id format."""
    assert temp_user_id('anna.berg@mail.se') == 'pending_anna_berg_mail_se'
    assert temp_user_id('a+b@x-y.dk') == 'pending_a_b_x_y_dk'


def test_temp_user_id_is_recognized():
    """Test detection of placeholder ids."""
    assert is_temp_user_id(temp_user_id('anna@mail.se'))
    assert not is_temp_user_id('3f9a2b')


def test_hash_password_is_deterministic_and_one_way():
    """Test the password digest."""
    digest = hash_password('secret1')
    
    assert digest == hash_password('secret1')
    assert digest != hash_password('secret2')
    assert 'secret1' not in digest
    assert len(digest) == 64


def test_normalize_email():
    """Test case and whitespace normalization."""
    assert normalize_email('  Anna@Mail.SE ') == 'anna@mail.se'
