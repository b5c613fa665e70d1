"""AxiomSink: CI metrics ingestion over HTTP.

Each event is POSTed on its own as a one-element JSON array with bearer-token
auth. Failures are logged as warnings and never retried: the gate decision
has already been made and must not wait on, or fail because of, telemetry.
"""

from __future__ import annotations

import logging

import httpx

from ciguard_telemetry.base import BaseSink
from ciguard_telemetry.models import RunMetadata, build_payload

logger = logging.getLogger(__name__)

DEFAULT_INGEST_URL = "https://api.axiom.co/v1/datasets/ci-metrics/ingest"
_TIMEOUT_SECONDS = 10.0


class AxiomSink(BaseSink):
    def __init__(self, token: str, url: str = DEFAULT_INGEST_URL, client: httpx.Client | None = None):
        self._url = url
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=_TIMEOUT_SECONDS)
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    def send(self, event: dict, metadata: RunMetadata) -> bool:
        try:
            payload = build_payload(event, metadata)
            response = self._client.post(self._url, json=payload, headers=self._headers)
        except httpx.HTTPError as e:
            logger.warning("Error sending telemetry event %s: %s", event.get("event"), e)
            return False
        except (TypeError, ValueError) as e:
            # httpx refuses non-finite floats and objects json cannot encode
            logger.warning("Could not encode telemetry event %s: %s", event.get("event"), e)
            return False

        if not response.is_success:
            logger.warning("Failed to send telemetry event %s: %d", event.get("event"), response.status_code)
            return False
        return True

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
