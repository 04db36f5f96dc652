"""Tests for shared helpers."""

import pytest

from simplo_pages.core.utils import (
    generate_slug,
    is_valid_slug,
    sanitize_file_name,
    is_light_background,
    with_retry,
)
from simplo_pages.core.config import reset_settings, settings


class TestSlugs:
    def test_generate_slug_strips_accents_and_punctuation(self):
        assert generate_slug("Evento São Paulo!") == "evento-sao-paulo"

    def test_generate_slug_collapses_separators(self):
        assert generate_slug("  Lançamento -- 2024   VIP ") == "lancamento-2024-vip"

    def test_generate_slug_underscores_become_hyphens(self):
        assert generate_slug("meu_evento") == "meu-evento"

    def test_generate_slug_empty(self):
        assert generate_slug("") == ""
        assert generate_slug("!!!") == ""

    @pytest.mark.parametrize("slug", ["abc", "evento-2024", "a1-b2-c3"])
    def test_valid_slugs(self, slug):
        assert is_valid_slug(slug)

    @pytest.mark.parametrize("slug", ["", "ab", "Evento", "evento--x", "-evento", "evento-", "com espaço"])
    def test_invalid_slugs(self, slug):
        assert not is_valid_slug(slug)


class TestFileNames:
    def test_sanitize_file_name(self):
        assert sanitize_file_name("Foto Évento (1).PNG") == "foto-evento-1-.png"

    def test_sanitize_removes_path_separators(self):
        assert "/" not in sanitize_file_name("../../etc/passwd")


class TestBackgroundLightness:
    def test_white_is_light(self):
        assert is_light_background("#FFFFFF")
        assert is_light_background("#fff")

    def test_dark_colors(self):
        assert not is_light_background("#000000")
        assert not is_light_background("#1A1F2E")

    def test_invalid_color_defaults_to_light(self):
        assert is_light_background("not-a-color")
        assert is_light_background("")


class TestRetry:
    def test_returns_first_success(self):
        calls = []

        def func():
            calls.append(1)
            return "ok"

        assert with_retry(func, sleep=lambda s: None) == "ok"
        assert len(calls) == 1

    def test_retries_with_backoff(self):
        attempts = []
        delays = []

        def flaky():
            attempts.append(1)
            if len(attempts) < 3:
                raise ConnectionError("down")
            return "ok"

        result = with_retry(flaky, retries=3, base_delay=0.5, sleep=delays.append)
        assert result == "ok"
        assert delays == [0.5, 1.0]

    def test_reraises_last_failure(self):
        def failing():
            raise ConnectionError("still down")

        with pytest.raises(ConnectionError):
            with_retry(failing, retries=2, sleep=lambda s: None)

    def test_other_exceptions_are_not_retried(self):
        attempts = []

        def broken():
            attempts.append(1)
            raise KeyError("bug")

        with pytest.raises(KeyError):
            with_retry(broken, retries=3, exceptions=(ConnectionError,), sleep=lambda s: None)
        assert len(attempts) == 1

    def test_rejects_zero_retries(self):
        with pytest.raises(ValueError):
            with_retry(lambda: None, retries=0)


class TestSettings:
    @pytest.fixture(autouse=True)
    def fresh_settings(self):
        reset_settings()
        yield
        reset_settings()

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("SIMPLO_PORT", "9000")
        monkeypatch.setenv("SIMPLO_PUBLIC_URL", "https://pages.example.com/")
        monkeypatch.setenv("SIMPLO_ALLOWED_ORIGINS", "https://app.example.com, ")
        assert settings.port == 9000
        assert settings.public_url == "https://pages.example.com"
        assert "https://app.example.com" in settings.allowed_origins
        assert "http://localhost:3000" in settings.allowed_origins

    def test_debug_follows_environment(self, monkeypatch):
        from simplo_pages.api.main import create_app

        monkeypatch.delenv("SIMPLO_ENV", raising=False)
        assert create_app().debug is False

        monkeypatch.setenv("SIMPLO_ENV", "development")
        reset_settings()
        assert settings.debug is True
        assert create_app().debug is True
