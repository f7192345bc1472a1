"""
Test settings loading.

Every key in .env.example must map onto a settings field by alias, and
environment values must override the defaults.
"""
from __future__ import annotations

from pathlib import Path
import re

import pytest

# Import api.dependencies so dotenv loads exactly once (canonical location).
import api.dependencies  # noqa: F401

from core.infrastructure.database.config import DatabaseSettings
from core.settings import get_app_settings


def _parse_env_keys(env_path: Path) -> list[str]:
    text = env_path.read_text(encoding="utf-8", errors="replace")
    keys: list[str] = []
    for line in text.splitlines():
        s = line.strip()
        if not s or s.startswith("#"):
            continue
        if s.startswith("export "):
            s = s[len("export ") :].strip()
        if "=" not in s:
            continue
        k, _ = s.split("=", 1)
        k = k.strip()
        if not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", k):
            continue
        if k not in keys:
            keys.append(k)
    return keys


def _collect_alias_map(model) -> dict[str, str]:
    """
    Return map: ENV_ALIAS -> field_name for a Pydantic model.
    """
    alias_map: dict[str, str] = {}
    for field_name, field in type(model).model_fields.items():
        if field.alias:
            alias_map[field.alias] = field_name
    return alias_map


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_app_settings.cache_clear()
    yield
    get_app_settings.cache_clear()


def test_every_example_env_key_is_mapped():
    repo_root = Path(__file__).resolve().parents[1]
    keys = _parse_env_keys(repo_root / ".env.example")

    settings = get_app_settings()
    sections = {
        "push": settings.push,
        "email": settings.email,
        "orchestration": settings.orchestration,
        "api": settings.api,
        "logging": settings.logging,
    }

    alias_to_locator: dict[str, tuple[str, str]] = {}
    for section_name, model in sections.items():
        for alias, field_name in _collect_alias_map(model).items():
            if alias in alias_to_locator:
                pytest.fail(f"Duplicate env alias mapped twice: {alias}")
            alias_to_locator[alias] = (section_name, field_name)

    db_fields = {f"DB_{name.upper()}" for name in DatabaseSettings.model_fields}

    missing = [k for k in keys if k not in alias_to_locator and k not in db_fields]
    assert not missing, f"Unmapped env keys: {missing}"

    for env_key, (section_name, field_name) in alias_to_locator.items():
        assert getattr(sections[section_name], field_name) is not None


def test_environment_overrides_defaults(monkeypatch):
    monkeypatch.setenv("PUSH_ENABLED", "true")
    monkeypatch.setenv("PUSH_BATCH_SIZE", "50")
    monkeypatch.setenv("EMAIL_TEMPLATE_IDS", '{"basic_with_button": "d-real"}')
    monkeypatch.setenv("EMAIL_SENDER_ADDRESSES", '{"invitation": "invites@gyld.org"}')
    monkeypatch.setenv("API_AUTH_TOKEN", "s3cret")
    monkeypatch.setenv("ORCHESTRATION_LOOKUP_TIMEOUT", "2.5")

    settings = get_app_settings()

    assert settings.push.enabled is True
    assert settings.push.batch_size == 50
    assert settings.email.template_ids == {"basic_with_button": "d-real"}
    assert settings.email.sender_address_for("invitation") == "invites@gyld.org"
    assert settings.email.sender_address_for("reminder") == settings.email.default_sender_address
    assert settings.api.auth_token == "s3cret"
    assert settings.orchestration.lookup_timeout == 2.5


def test_push_batch_size_is_capped_at_provider_limit(monkeypatch):
    monkeypatch.setenv("PUSH_BATCH_SIZE", "500")

    with pytest.raises(ValueError):
        get_app_settings()


def test_database_settings_use_prefix(monkeypatch):
    monkeypatch.setenv("DB_DATABASE_URL", "sqlite+aiosqlite:///./gyld.db")
    monkeypatch.setenv("DB_CREATE_TABLES", "false")

    settings = DatabaseSettings()

    assert settings.database_url == "sqlite+aiosqlite:///./gyld.db"
    assert settings.create_tables is False
