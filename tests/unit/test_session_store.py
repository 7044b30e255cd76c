"""Tests for the persisted login session."""
import json
import time

from nail_booking.session_store import SessionStore


class TestSessionStore:
    def test_empty_session(self, store):
        """Should start with no token, no user and no admin rights."""
        assert store.token is None
        assert store.user is None
        assert store.user_name == ""
        assert store.is_authenticated() is False
        assert store.is_admin() is False

    def test_save_and_read_back(self, store, make_token, client_user):
        """Should read back the saved token and profile."""
        token = make_token()
        store.save(token, client_user)

        assert store.token == token
        assert store.token_provider() == token
        assert store.user.email == "maria@example.com"
        assert store.user_name == "Maria Silva"
        assert store.is_authenticated() is True
        assert store.is_admin() is False

    def test_save_without_user_keeps_profile(self, store, make_token, client_user):
        """Should keep the profile when only the token changes."""
        store.save(make_token(), client_user)
        new_token = make_token(expires_in=7200)
        store.save(new_token)

        assert store.token == new_token
        assert store.user_name == "Maria Silva"

    def test_admin_role(self, admin_store):
        """Should recognise the admin role."""
        assert admin_store.is_admin() is True

    def test_expired_token_clears_session(self, store, make_token, client_user):
        """Should drop the session once the token expires."""
        store.save(make_token(expires_in=-10), client_user)

        assert store.is_authenticated() is False
        assert store.token is None
        assert store.user is None

    def test_expiry_uses_injected_clock(self, make_token, client_user):
        """Should read expiry against the injected clock."""
        store = SessionStore(path=None, clock=lambda: time.time() + 7200)
        store.save(make_token(expires_in=3600), client_user)

        assert store.is_authenticated() is False

    def test_opaque_token_counts_as_session(self, store, client_user):
        """Should accept a token that is not a JWT."""
        store.save("opaque-token", client_user)
        assert store.is_authenticated() is True

    def test_clear(self, client_store):
        """Should forget the session."""
        client_store.clear()
        assert client_store.token is None
        assert client_store.is_authenticated() is False


class TestSessionFile:
    def test_persists_between_instances(self, tmp_path, make_token, admin_user):
        """Should reload the session from the file."""
        path = tmp_path / "nested" / "session.json"
        token = make_token(sub="admin-1")
        SessionStore(path).save(token, admin_user)

        reloaded = SessionStore(path)

        assert reloaded.token == token
        assert reloaded.user_name == "Vitória"
        assert reloaded.is_admin() is True
        data = json.loads(path.read_text(encoding="utf-8"))
        assert set(data) == {"token", "user", "userName"}

    def test_clear_removes_file(self, tmp_path, make_token, client_user):
        """Should delete the file on clear."""
        path = tmp_path / "session.json"
        store = SessionStore(path)
        store.save(make_token(), client_user)
        assert path.exists()

        store.clear()

        assert not path.exists()

    def test_corrupt_file_is_ignored(self, tmp_path):
        """Should start empty when the file is corrupt."""
        path = tmp_path / "session.json"
        path.write_text("{not json", encoding="utf-8")

        store = SessionStore(path)

        assert store.token is None
        assert store.is_authenticated() is False
