"""
HTTP client for the external classifier service.

Every call runs on a bounded thread pool and is abandoned once the timeout
elapses, so a hung connection cannot hold the caller longer than the
configured limit even when requests' per-socket timeout would not fire.
"""

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import Any, Dict, Optional
import logging

import requests

from triage_hub.services.classifier.errors import (
    ExternalServiceTimeout,
    ExternalServiceUnavailable,
    MalformedExternalResponse,
)

logger = logging.getLogger(__name__)


class ClassifierClient:
    """
    POSTs JSON to the classifier service and returns the decoded object.

    Raises:
        ExternalServiceTimeout: no answer within `timeout_seconds`
        ExternalServiceUnavailable: connection error or non-2xx status
        MalformedExternalResponse: body is not a JSON object
    """

    def __init__(
        self,
        timeout_seconds: float,
        max_workers: int = 8,
        session: Optional[requests.Session] = None
    ):
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="classifier",
        )

    def post(self, base_url: str, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{base_url.rstrip('/')}{path}"
        future = self._executor.submit(self._post, url, body)
        try:
            return future.result(timeout=self.timeout_seconds)
        except FutureTimeoutError:
            future.cancel()
            raise ExternalServiceTimeout(f"no response from {url} within {self.timeout_seconds}s")

    def _post(self, url: str, body: Dict[str, Any]) -> Dict[str, Any]:
        try:
            resp = self.session.post(url, json=body, timeout=self.timeout_seconds)
        except requests.Timeout as e:
            raise ExternalServiceTimeout(str(e))
        except requests.RequestException as e:
            raise ExternalServiceUnavailable(str(e))

        if not 200 <= resp.status_code < 300:
            raise ExternalServiceUnavailable(f"{url} returned status {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise MalformedExternalResponse(f"invalid JSON from {url}: {e}")

        if not isinstance(data, dict):
            raise MalformedExternalResponse(f"expected a JSON object from {url}")
        return data

    def close(self) -> None:
        self._executor.shutdown(wait=False)
        self.session.close()
