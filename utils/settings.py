#!/usr/bin/env python3
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List


def _env(name: str, default: str):
    return field(default_factory=lambda: os.environ.get(name, default))


@dataclass(frozen=True)
class Settings:
    """Centralized environment-driven settings.

    Environment is read when the instance is built, so tests can monkeypatch
    variables and call get_settings() again.
    """

    log_level: str = _env("GW_LOG_LEVEL", "INFO")
    use_wandb: str = _env("GW_USE_WANDB", "0")
    wandb_project: str = _env("GW_WANDB_PROJECT", "vault-gateway")

    api_host: str = _env("GW_API_HOST", "127.0.0.1")
    api_port: str = _env("GW_API_PORT", "8000")
    cors_origins: str = _env("GW_CORS_ORIGINS", "*")

    # Demo environment parameters
    demo_deposit: str = _env("GW_DEMO_DEPOSIT", "1000")
    demo_partner_id: str = _env("GW_DEMO_PARTNER_ID", "7")
    max_events: str = _env("GW_MAX_EVENTS", "500")

    @property
    def wandb_enabled(self) -> bool:
        return self.use_wandb == "1"

    @property
    def port(self) -> int:
        return int(self.api_port)

    @property
    def deposit_amount(self) -> int:
        return int(self.demo_deposit)

    @property
    def partner_id(self) -> int:
        return int(self.demo_partner_id)

    @property
    def event_limit(self) -> int:
        return int(self.max_events)

    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


def get_settings() -> Settings:
    return Settings()
