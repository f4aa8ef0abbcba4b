"""Configuration for the Ghost Blog MCP Gateway."""

from __future__ import annotations

from functools import lru_cache
from typing import FrozenSet, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import CredentialPair


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", extra="ignore"
    )

    service_name: str = Field(default="ghost-blog-mcp-gateway")

    ghost_blog_api_base_url: str = Field(default="https://animagent.ai/ghost-blog-api")
    ghost_blog_api_key: str = Field(default="")
    ghost_blog_api_verify_ssl: bool = Field(default=True)
    ghost_blog_api_user_agent: str = Field(default="Content-Creation-MCP/1.0")

    # Blog-level credentials; per-call overrides take precedence.
    ghost_admin_api_key: Optional[str] = Field(default=None)
    ghost_api_url: Optional[str] = Field(default=None)

    gateway_allowed_usernames: Optional[str] = Field(default=None)

    gateway_fast_timeout_seconds: float = Field(default=30)
    gateway_slow_timeout_seconds: float = Field(default=300)

    gateway_transport: str = Field(default="streamable-http")
    gateway_host: str = Field(default="0.0.0.0")
    gateway_port: int = Field(default=8000)
    gateway_base_url: str = Field(default="http://localhost:8000")

    github_client_id: Optional[str] = Field(default=None)
    github_client_secret: Optional[str] = Field(default=None)
    # Identity used for every call when no OAuth provider is configured (stdio).
    gateway_local_username: Optional[str] = Field(default=None)

    gateway_log_level: str = Field(default="INFO")

    def allowed_usernames(self) -> FrozenSet[str]:
        if not self.gateway_allowed_usernames:
            return frozenset()
        return frozenset(
            item.strip()
            for item in self.gateway_allowed_usernames.split(",")
            if item.strip()
        )

    def environment_credential(self) -> CredentialPair:
        return CredentialPair(
            admin_api_key=self.ghost_admin_api_key or None,
            api_url=self.ghost_api_url or None,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
