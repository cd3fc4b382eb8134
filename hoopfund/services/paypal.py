# hoopfund/services/paypal.py
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import requests

from hoopfund.config.settings import Settings
from hoopfund.domain.errors import FundraiserError

log = logging.getLogger(__name__)

# Headers PayPal signs webhook deliveries with
_SIG_HEADERS = {
    "auth_algo": "PAYPAL-AUTH-ALGO",
    "cert_url": "PAYPAL-CERT-URL",
    "transmission_id": "PAYPAL-TRANSMISSION-ID",
    "transmission_sig": "PAYPAL-TRANSMISSION-SIG",
    "transmission_time": "PAYPAL-TRANSMISSION-TIME",
}


class PayPalError(FundraiserError):
    http_status = 502


class PayPalClient:
    """Thin REST client: OAuth token + webhook signature verification."""

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None) -> None:
        self.settings = settings
        self.http = session or requests.Session()

    @property
    def base_url(self) -> str:
        return self.settings.paypal_base_url

    def access_token(self) -> str:
        if not self.settings.paypal_enabled:
            raise PayPalError("PayPal not configured (missing client id/secret)")
        try:
            resp = self.http.post(
                f"{self.base_url}/v1/oauth2/token",
                auth=(self.settings.paypal_client_id, self.settings.paypal_client_secret),
                data={"grant_type": "client_credentials"},
                headers={"Accept": "application/json"},
                timeout=self.settings.paypal_timeout,
            )
            resp.raise_for_status()
            token = (resp.json() or {}).get("access_token")
        except requests.RequestException as e:
            raise PayPalError(f"PayPal token request failed: {str(e)[:300]}") from e
        except ValueError as e:
            raise PayPalError("PayPal token response was not JSON") from e
        if not token:
            raise PayPalError("PayPal token missing in response")
        return str(token)

    def verify_webhook_signature(self, headers: Mapping[str, str], event: Dict[str, Any]) -> bool:
        """Ask PayPal whether a delivery was signed for our webhook id."""
        body: Dict[str, Any] = {k: headers.get(h, "") for k, h in _SIG_HEADERS.items()}
        missing = [h for k, h in _SIG_HEADERS.items() if not body[k]]
        if missing:
            log.warning("paypal webhook missing signature headers: %s", ", ".join(missing))
            return False
        body["webhook_id"] = self.settings.paypal_webhook_id
        body["webhook_event"] = event

        token = self.access_token()
        try:
            resp = self.http.post(
                f"{self.base_url}/v1/notifications/verify-webhook-signature",
                json=body,
                headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json"},
                timeout=self.settings.paypal_timeout,
            )
            resp.raise_for_status()
            status = str((resp.json() or {}).get("verification_status") or "")
        except requests.RequestException as e:
            raise PayPalError(f"PayPal signature verification failed: {str(e)[:300]}") from e
        except ValueError as e:
            raise PayPalError("PayPal verification response was not JSON") from e
        return status.upper() == "SUCCESS"
