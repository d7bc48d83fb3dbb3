"""Tests for AuthManager."""

import pytest

from cloudleaf.auth import AuthError, validate_credentials
from cloudleaf.db.sqlite import avatar_for


class TestValidateCredentials:
    """Tests for credential validation."""

    def test_empty_name(self):
        """Test a blank name is rejected."""
        with pytest.raises(AuthError, match="Name cannot be empty."):
            validate_credentials("  ", "password123")

    def test_empty_password(self):
        """Test an empty password is rejected."""
        with pytest.raises(AuthError, match="Password cannot be empty."):
            validate_credentials("Alice", "")

    def test_valid(self):
        """Test valid credentials pass."""
        validate_credentials("Alice", "password123")


class TestLogin:
    """Tests for logging in."""

    def test_login_success(self, auth):
        """Test logging in with seeded credentials."""
        assert auth.login("Alice", "password123")
        assert auth.is_authenticated
        assert auth.current_user.name == "Alice"
        assert auth.current_user.id == 1

    def test_login_name_ignores_case(self, auth):
        """Test the name match is case-insensitive."""
        assert auth.login("alice", "password123")
        assert auth.current_user.name == "Alice"

    def test_login_name_surrounding_spaces(self, auth):
        """Test spaces around the name are ignored."""
        assert auth.login("  Alice ", "password123")
        assert auth.current_user.name == "Alice"

    def test_login_wrong_password(self, auth):
        """Test a wrong password fails and leaves no user."""
        assert not auth.login("Alice", "Password123")
        assert auth.current_user is None

    def test_login_unknown_user(self, auth):
        """Test an unknown name fails."""
        assert not auth.login("Zed", "password123")
        assert not auth.is_authenticated

    def test_login_empty_fields(self, auth):
        """Test empty fields raise before lookup."""
        with pytest.raises(AuthError):
            auth.login("", "password123")

    def test_logout(self, auth):
        """Test logging out clears the current user."""
        auth.login("Bob", "password123")
        auth.logout()
        assert auth.current_user is None


class TestSignUp:
    """Tests for signing up."""

    def test_sign_up_creates_user(self, auth, seeded_db):
        """Test a new user gets the next id and defaults."""
        assert auth.sign_up("Eve", "hunter2")

        user = auth.current_user
        assert user.id == 5
        assert user.name == "Eve"
        assert user.trust_score == 4.0
        assert user.get_ratings() == []
        assert user.avatar == avatar_for("Eve")
        assert seeded_db.count_users() == 5

    def test_sign_up_hashes_password(self, auth, seeded_db):
        """Test the stored credential is not the password."""
        auth.sign_up("Eve", "hunter2")
        stored = seeded_db.get_user_by_name("Eve").password

        assert stored != "hunter2"
        assert auth.hasher.verify("hunter2", stored)

    def test_sign_up_gets_default_wishlist(self, auth, wishlist):
        """Test new users start with the configured wishlist."""
        auth.sign_up("Eve", "hunter2")
        assert wishlist.get_texts(auth.current_user.id) == ["The Great Gatsby", "1984"]

    def test_sign_up_then_login(self, auth):
        """Test a new user can log back in."""
        auth.sign_up("Eve", "hunter2")
        auth.logout()
        assert auth.login("EVE", "hunter2")

    def test_sign_up_stores_trimmed_name(self, auth, seeded_db):
        """Test spaces around a new name are dropped before storing."""
        assert auth.sign_up(" Eve ", "hunter2")

        assert auth.current_user.name == "Eve"
        assert seeded_db.get_user_by_name("Eve") is not None
        assert not auth.sign_up("Eve  ", "other")

    def test_sign_up_existing_name_ignores_case(self, auth, seeded_db):
        """Test a case variant of an existing name is rejected."""
        assert not auth.sign_up("alice", "whatever")
        assert auth.current_user is None
        assert seeded_db.count_users() == 4

    def test_refresh(self, auth):
        """Test refresh reloads the current user."""
        auth.login("Alice", "password123")
        assert auth.refresh().name == "Alice"

        auth.logout()
        assert auth.refresh() is None
