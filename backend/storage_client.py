"""
Client for the seating persistence API (see backend/main_api.py).

Every call is bounded by a timeout and retried with exponential backoff on
network, timeout and HTTP errors. When all attempts fail the call degrades to
"no data" (False / None) instead of raising.
"""
import logging
import time
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from backend import config
from models import Plan, SeatAssignment

logger = logging.getLogger(__name__)


class SeatingStorageClient:

    def __init__(
        self,
        base_url=config.API_BASE_URL,
        timeout=config.REQUEST_TIMEOUT,
        retries=config.RETRY_ATTEMPTS,
        base_delay=config.RETRY_BASE_DELAY,
        transport=None,
        sleep=time.sleep,
    ):
        self.retries = max(1, retries)
        self.base_delay = base_delay
        self._sleep = sleep
        self._http = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    def close(self):
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _request(self, method, path, **kwargs):
        for attempt in range(1, self.retries + 1):
            try:
                response = self._http.request(method, path, **kwargs)
                response.raise_for_status()
                return response.json()
            except httpx.TimeoutException:
                logger.warning("Request timeout (attempt %d/%d): %s %s", attempt, self.retries, method, path)
            except httpx.TransportError as e:
                logger.warning("Network error (attempt %d/%d): %s", attempt, self.retries, e)
            except httpx.HTTPStatusError as e:
                logger.warning("Server error (attempt %d/%d): %s", attempt, self.retries, e.response.status_code)
            except ValueError as e:
                logger.warning("Invalid JSON from server (attempt %d/%d): %s", attempt, self.retries, e)

            if attempt < self.retries:
                delay = self.base_delay * 2 ** (attempt - 1)
                logger.info("Retrying in %.1fs...", delay)
                self._sleep(delay)

        logger.error("All %d attempts failed for %s %s", self.retries, method, path)
        return None

    def save_plan(self, plan):
        payload = {"seatingArrangement": plan.to_json_dict()["seatingArrangement"]}
        data = self._request("POST", "/save-seating", json=payload)
        return bool(data and data.get("success"))

    def load_plan(self):
        data = self._request("GET", "/seating")
        if data is None:
            return None

        try:
            return Plan.model_validate(data)
        except ValidationError as e:
            logger.error("Server returned an invalid seating plan: %s", e)
            return None

    def find_student(self, examinee_id):
        data = self._request("GET", f"/student/{quote(examinee_id, safe='')}")
        if not data or not data.get("found") or not data.get("student"):
            return None

        try:
            return SeatAssignment.model_validate(data["student"])
        except ValidationError as e:
            logger.error("Server returned an invalid seat assignment: %s", e)
            return None

    def has_data(self):
        plan = self.load_plan()
        return plan is not None and plan.total_students > 0
