from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Values shipped in the example .env files; treated the same as "not set".
PLACEHOLDER_URLS = ("https://your-project.supabase.co",)
PLACEHOLDER_KEYS = ("your-anon-key",)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    # ---- App ----
    app_env: str = "local"  # local|dev|prod

    # ---- CORS (used by main.py) ----
    cors_allow_origins: list[str] | str = ["*"]

    # ---- Hosted backend ----
    # The web and mobile front-ends used different env names for the same values.
    supabase_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SUPABASE_URL", "VITE_SUPABASE_URL", "EXPO_PUBLIC_SUPABASE_URL", "supabase_url"),
    )
    supabase_anon_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "SUPABASE_ANON_KEY", "VITE_SUPABASE_ANON_KEY", "EXPO_PUBLIC_SUPABASE_ANON_KEY", "supabase_anon_key"
        ),
    )
    http_timeout_seconds: float = 20.0

    # ---- Image storage ----
    image_bucket: str = "home-images"
    image_max_bytes: int = 5 * 1024 * 1024  # 5MB
    image_mime_types: list[str] = ["image/jpeg", "image/png", "image/gif"]

    # ---- Status history ----
    status_history_mode: str = "append"  # append|per_status

    # ---- Demo mode ----
    demo_database_url: str = "sqlite://"
    demo_jwt_secret: str = "demo-change-me"
    demo_session_minutes: int = 60 * 24

    @property
    def demo_mode(self) -> bool:
        url = (self.supabase_url or "").strip()
        key = (self.supabase_anon_key or "").strip()
        if not url or not key:
            return True
        if url.rstrip("/") in PLACEHOLDER_URLS or key in PLACEHOLDER_KEYS:
            return True
        return not url.startswith(("http://", "https://"))

    def model_post_init(self, __context) -> None:
        mode = (self.status_history_mode or "append").strip().lower()
        if mode not in ("append", "per_status"):
            raise ValueError(f"status_history_mode must be append or per_status, got {self.status_history_mode!r}")
        object.__setattr__(self, "status_history_mode", mode)

        env = (self.app_env or "local").strip().lower()
        is_prod = env in ("prod", "production")

        if is_prod:
            # Demo mode never persists anything; refuse to serve it as prod.
            if self.demo_mode:
                raise ValueError("CONFIG: supabase_url/supabase_anon_key must be set in prod (demo mode is not allowed)")

            origins = self.cors_allow_origins
            if origins == "*" or origins == ["*"] or (isinstance(origins, str) and "*" in origins):
                raise ValueError("SECURITY: cors_allow_origins wildcard is not allowed in prod")


settings = Settings()
