# hoopfund/config/settings.py
"""Typed, immutable settings built once per app from ``app.config``.

Services take a ``Settings`` (or collaborators built from it) explicitly, so
nothing reads credentials from a process-wide global.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Mapping

from flask import Flask, current_app

EXTENSION_KEY = "hoopfund"


@dataclass(frozen=True)
class Settings:
    env: str
    secret_key: str
    jwt_secret: str
    admin_password: str
    admin_token_ttl_minutes: int

    event_name: str
    fundraising_goal: Decimal
    currency: str
    venmo_handle: str
    cashapp_handle: str

    logo_storage_dir: Path
    logo_public_base_url: str

    paypal_client_id: str
    paypal_client_secret: str
    paypal_mode: str
    paypal_webhook_id: str
    paypal_timeout: int

    @property
    def paypal_enabled(self) -> bool:
        return bool(self.paypal_client_id and self.paypal_client_secret)

    @property
    def paypal_base_url(self) -> str:
        if self.paypal_mode == "live":
            return "https://api-m.paypal.com"
        return "https://api-m.sandbox.paypal.com"

    @property
    def verify_webhooks(self) -> bool:
        return bool(self.paypal_webhook_id)

    @classmethod
    def from_mapping(cls, cfg: Mapping[str, Any], instance_path: str = ".") -> "Settings":
        logo_dir = Path(str(cfg.get("LOGO_STORAGE_DIR") or "instance/sponsor-logos")).expanduser()
        if not logo_dir.is_absolute():
            # relative paths resolve against the project root (parent of instance/)
            logo_dir = Path(instance_path).parent / logo_dir

        secret = str(cfg.get("SECRET_KEY") or "")
        return cls(
            env=str(cfg.get("ENV") or "development"),
            secret_key=secret,
            jwt_secret=str(cfg.get("JWT_SECRET") or secret),
            admin_password=str(cfg.get("ADMIN_PASSWORD") or ""),
            admin_token_ttl_minutes=int(cfg.get("ADMIN_TOKEN_TTL_MINUTES") or 480),
            event_name=str(cfg.get("EVENT_NAME") or "Tournament"),
            fundraising_goal=Decimal(str(cfg.get("FUNDRAISING_GOAL") or "0")),
            currency=str(cfg.get("DEFAULT_CURRENCY") or "USD").upper(),
            venmo_handle=str(cfg.get("VENMO_HANDLE") or ""),
            cashapp_handle=str(cfg.get("CASHAPP_HANDLE") or ""),
            logo_storage_dir=logo_dir,
            logo_public_base_url=str(cfg.get("LOGO_PUBLIC_BASE_URL") or "/media/logos").rstrip("/"),
            paypal_client_id=str(cfg.get("PAYPAL_CLIENT_ID") or ""),
            paypal_client_secret=str(cfg.get("PAYPAL_CLIENT_SECRET") or ""),
            paypal_mode=str(cfg.get("PAYPAL_MODE") or "sandbox").lower(),
            paypal_webhook_id=str(cfg.get("PAYPAL_WEBHOOK_ID") or ""),
            paypal_timeout=int(cfg.get("PAYPAL_TIMEOUT") or 10),
        )

    def payment_methods(self) -> List[Dict[str, Any]]:
        """Public description of accepted payment methods."""
        methods: List[Dict[str, Any]] = []
        if self.paypal_enabled:
            methods.append({"method": "paypal", "identifier": "PayPal", "instructions": "Pay online with PayPal or card."})
        if self.venmo_handle:
            methods.append(
                {
                    "method": "venmo",
                    "identifier": self.venmo_handle,
                    "instructions": f"Send payment to {self.venmo_handle} with note: Registration [Team Name]",
                }
            )
        if self.cashapp_handle:
            methods.append(
                {
                    "method": "cashapp",
                    "identifier": self.cashapp_handle,
                    "instructions": f"Send payment to {self.cashapp_handle} with note: Tournament Registration",
                }
            )
        methods.append(
            {"method": "cash", "identifier": "In-person", "instructions": "Cash payment accepted at tournament check-in"}
        )
        return methods


def init_settings(app: Flask) -> Settings:
    settings = Settings.from_mapping(app.config, app.instance_path)
    app.extensions[EXTENSION_KEY] = settings
    return settings


def get_settings() -> Settings:
    return current_app.extensions[EXTENSION_KEY]
