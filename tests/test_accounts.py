"""Tests for accounts, sessions and workspace settings."""

from datetime import timedelta

import pytest

from simplo_pages.accounts import (
    AccountService,
    AppConfigService,
    generate_api_key,
    hash_password,
    verify_password,
)
from simplo_pages.storage.models import Session, utcnow


@pytest.fixture
def accounts(db):
    return AccountService(db)


@pytest.fixture
def config(db):
    return AppConfigService(db)


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("secret123")
        assert hashed != "secret123"
        assert verify_password("secret123", hashed)
        assert not verify_password("wrong", hashed)

    def test_malformed_hash(self):
        assert not verify_password("secret123", "not-a-hash")


class TestAccountService:
    def test_register_and_login(self, accounts):
        assert accounts.has_registered_user() is False
        user = accounts.register("Ana@Example.com", "secret123", name="Ana")
        assert user.email == "ana@example.com"
        assert accounts.get_profile(user.id).name == "Ana"
        assert accounts.has_registered_user() is True

        result = accounts.login("ana@example.com", "secret123")
        assert result is not None
        logged_in, session = result
        assert logged_in.id == user.id
        assert accounts.get_user_for_token(session.token).id == user.id

    def test_register_validation(self, accounts):
        with pytest.raises(ValueError, match="email"):
            accounts.register("not-an-email", "secret123")
        with pytest.raises(ValueError, match="Password"):
            accounts.register("a@b.com", "123")
        accounts.register("a@b.com", "secret123")
        with pytest.raises(ValueError, match="already"):
            accounts.register("A@B.com", "secret123")

    def test_bad_credentials(self, accounts):
        accounts.register("a@b.com", "secret123")
        assert accounts.login("a@b.com", "wrong") is None
        assert accounts.login("nobody@b.com", "secret123") is None

    def test_sign_out(self, accounts):
        accounts.register("a@b.com", "secret123")
        _, session = accounts.login("a@b.com", "secret123")
        assert accounts.sign_out(session.token) is True
        assert accounts.get_user_for_token(session.token) is None

    def test_expired_session(self, db, accounts):
        user = accounts.register("a@b.com", "secret123")
        db.insert_session(Session(token="old", user_id=user.id,
                                  expires_at=utcnow() - timedelta(minutes=1)))
        assert accounts.get_user_for_token("old") is None

    def test_change_password(self, accounts):
        user = accounts.register("a@b.com", "secret123")
        assert accounts.change_password(user.id, "wrong", "newpass123") is False
        assert accounts.change_password(user.id, "secret123", "newpass123") is True
        assert accounts.login("a@b.com", "newpass123") is not None
        assert accounts.login("a@b.com", "secret123") is None

    def test_update_profile(self, accounts):
        user = accounts.register("a@b.com", "secret123")
        profile = accounts.update_profile(user.id, name="  Nova  ", avatar_url="https://x/y.png")
        assert profile.name == "Nova"
        assert accounts.get_profile(user.id).avatar_url == "https://x/y.png"
        with pytest.raises(ValueError):
            accounts.update_profile(user.id, name=" ")


class TestAppConfigService:
    def test_defaults_created_once(self, config):
        first = config.get()
        assert first.notify_on_lead is True
        assert first.integration_api_key is None
        assert config.get().id == first.id

    def test_update(self, config):
        updated = config.update(site_name="Meu Site", admin_email=" admin@example.com ",
                                whatsapp_number="")
        assert updated.site_name == "Meu Site"
        assert updated.admin_email == "admin@example.com"
        assert updated.whatsapp_number is None
        assert config.get().site_name == "Meu Site"

    @pytest.mark.parametrize("changes", [
        {"primary_color": "blue"},
        {"admin_email": "nope"},
        {"site_name": "  "},
        {"integration_api_key": "sk_x"},
    ])
    def test_update_validation(self, config, changes):
        with pytest.raises(ValueError):
            config.update(**changes)

    def test_api_key_lifecycle(self, config):
        assert not config.verify_api_key("sk_anything")
        key = config.regenerate_api_key()
        assert key.startswith("sk_")
        assert config.verify_api_key(key)

        new_key = config.regenerate_api_key()
        assert not config.verify_api_key(key)
        assert config.verify_api_key(new_key)

        config.revoke_api_key()
        assert not config.verify_api_key(new_key)
        assert not config.verify_api_key(None)

    def test_generated_keys_are_unique(self):
        assert generate_api_key() != generate_api_key()
        assert len(generate_api_key()) == 3 + 48
