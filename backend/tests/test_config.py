# backend/tests/test_config.py
from __future__ import annotations

import pytest

from househunt.clients import DemoBackend, RestBackend, create_backend

from conftest import make_settings


def test_missing_or_placeholder_credentials_mean_demo_mode():
    assert make_settings().demo_mode is True
    assert make_settings(supabase_url="https://your-project.supabase.co", supabase_anon_key="k").demo_mode is True
    assert make_settings(supabase_url="https://x.supabase.co", supabase_anon_key="your-anon-key").demo_mode is True
    assert make_settings(supabase_url="x.supabase.co", supabase_anon_key="k").demo_mode is True
    assert make_settings(supabase_url="https://x.supabase.co", supabase_anon_key="k").demo_mode is False


def test_front_end_env_names_are_accepted(monkeypatch):
    monkeypatch.setenv("VITE_SUPABASE_URL", "https://x.supabase.co")
    monkeypatch.setenv("EXPO_PUBLIC_SUPABASE_ANON_KEY", "k")
    from househunt.config import Settings

    s = Settings(_env_file=None)
    assert s.supabase_url == "https://x.supabase.co"
    assert s.supabase_anon_key == "k"
    assert s.demo_mode is False


def test_create_backend_picks_implementation():
    demo = create_backend(make_settings())
    assert isinstance(demo, DemoBackend) and demo.demo is True
    demo.close()

    rest = create_backend(make_settings(supabase_url="https://x.supabase.co", supabase_anon_key="k"))
    assert isinstance(rest, RestBackend) and rest.demo is False


def test_prod_refuses_demo_mode_and_wildcard_cors():
    with pytest.raises(ValueError):
        make_settings(app_env="prod", cors_allow_origins=["https://app.example"])
    with pytest.raises(ValueError):
        make_settings(app_env="prod", supabase_url="https://x.supabase.co", supabase_anon_key="k")
    ok = make_settings(
        app_env="prod",
        supabase_url="https://x.supabase.co",
        supabase_anon_key="k",
        cors_allow_origins=["https://app.example"],
    )
    assert ok.demo_mode is False


def test_status_history_mode_is_validated():
    assert make_settings(status_history_mode="PER_STATUS").status_history_mode == "per_status"
    with pytest.raises(ValueError):
        make_settings(status_history_mode="sometimes")
