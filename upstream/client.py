"""
Service Intake API client.

Thin proxy to the upstream intake service: lookup of previous service
orders, submission of a new request, and status queries. The API key
stays server-side and is sent as an `apikey` header.

Failures are raised as UpstreamError with the upstream status and the
parsed body. Submission retries 503 responses with exponential backoff
and then makes a best-effort call to kick off queue processing.
"""

import json
import logging
import time
from typing import Any, Callable, Optional

import requests

from upstream.errors import UpstreamError, UpstreamNotConfiguredError, UpstreamTimeoutError
from upstream.retry import RetryPolicy
from utils.config import Config

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================

LOOKUP_PATH = "/api/ServiceIntake/GetServiceIntake"
SUBMIT_PATH = "/api/ServiceIntake/SubmitServiceOrder"
STATUS_PATH = "/api/ServiceIntake/GetServiceOrderStatus"
PROCESS_QUEUE_PATH = "/api/ServiceIntake/ProcessQueue"


# =============================================================================
# Response Parsing
# =============================================================================


def parse_body(response: requests.Response) -> Any:
    """
    Parse a response body.

    204/205 and empty bodies give None. JSON is tried regardless of the
    declared content type; anything unparseable comes back as raw text.
    """
    if response.status_code in (204, 205):
        return None

    text = response.text
    if not text:
        return None

    try:
        return json.loads(text)
    except ValueError:
        return text


def extract_message(body: Any) -> Optional[str]:
    """Pull a message out of an error body (message or Message)."""
    if not isinstance(body, dict):
        return None
    for key in ("message", "Message"):
        if isinstance(body.get(key), str):
            return body[key]
    return None


# =============================================================================
# Client
# =============================================================================


class IntakeApiClient:
    """
    Client for the upstream service intake API.

    Usage:
        with IntakeApiClient.from_config(Config.load()) as client:
            orders = client.lookup({"JobNo": "ELS-26-01-0001", ...})
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30,
        retry_policy: Optional[RetryPolicy] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})

    @classmethod
    def from_config(cls, config: Config) -> "IntakeApiClient":
        return cls(
            base_url=config.service_intake_api_url,
            api_key=config.service_intake_api_key,
            timeout=config.request_timeout,
            retry_policy=RetryPolicy(
                max_attempts=config.max_retries,
                base_delay=config.retry_base_delay,
                multiplier=config.retry_multiplier,
            ),
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    def _require_configured(self) -> None:
        if not self.is_configured:
            raise UpstreamNotConfiguredError()

    def _request(
        self,
        method: str,
        path: str,
        fallback_message: str,
        **kwargs: Any,
    ) -> requests.Response:
        """Send one request, translating transport failures."""
        url = f"{self.base_url}{path}"
        headers = {"apikey": self.api_key}
        try:
            return self._session.request(
                method, url, headers=headers, timeout=self.timeout, **kwargs
            )
        except requests.Timeout as e:
            logger.error("%s %s timed out: %s", method, path, e)
            raise UpstreamTimeoutError(f"{fallback_message} Request timed out.") from e
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise UpstreamError(fallback_message, details=str(e)) from e

    def _check(self, response: requests.Response, fallback_message: str) -> Any:
        body = parse_body(response)
        if response.status_code >= 400:
            logger.error(
                "Upstream returned %s for %s", response.status_code, response.url
            )
            raise UpstreamError(
                extract_message(body) or fallback_message,
                status=response.status_code,
                details=body,
            )
        return body

    # =========================================================================
    # Operations
    # =========================================================================

    def lookup(self, request: dict[str, str]) -> Any:
        """
        Look up previous service orders.

        The upstream endpoint is a GET that reads its criteria from a JSON
        body, so the body is sent with the GET.

        Args:
            request: {JobNo, EmailAddress, City, Zip}

        Returns:
            Parsed upstream body (shape normalised by the caller)
        """
        self._require_configured()
        response = self._request(
            "GET",
            LOOKUP_PATH,
            "Lookup request to upstream API failed.",
            json=request,
        )
        return self._check(response, "Lookup request to upstream API failed.")

    def submit(self, payload: dict[str, Any]) -> Any:
        """
        Submit a service order request.

        503 responses are retried per the retry policy. After a successful
        submit the queue processor is triggered; a failure there is logged
        and does not fail the submission.
        """
        self._require_configured()
        policy = self.retry_policy
        attempt = 1

        while True:
            response = self._request(
                "POST",
                SUBMIT_PATH,
                "Submit request to upstream API failed.",
                json=payload,
            )
            if not policy.should_retry(response.status_code, attempt):
                break

            delay = policy.delay_for(attempt)
            logger.warning(
                "Submit attempt %d/%d got %d, retrying in %.2fs",
                attempt,
                policy.max_attempts,
                response.status_code,
                delay,
            )
            self._sleep(delay)
            attempt += 1

        body = self._check(response, "Submit request to upstream API failed.")
        self.trigger_queue_processing(body)
        return body

    def trigger_queue_processing(self, submit_body: Any) -> bool:
        """
        Ask upstream to process its intake queue now.

        Returns:
            True if the trigger was accepted, False otherwise
        """
        queue_name = submit_body.get("queueName") if isinstance(submit_body, dict) else None
        try:
            response = self._session.post(
                f"{self.base_url}{PROCESS_QUEUE_PATH}",
                headers={"apikey": self.api_key},
                json={"queueName": queue_name},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("Queue processing trigger failed: %s", e)
            return False

        if response.status_code >= 400:
            logger.warning("Queue processing trigger returned %s", response.status_code)
            return False
        return True

    def status(self, reference_id: str) -> Any:
        """Fetch current processing status for a reference id."""
        self._require_configured()
        response = self._request(
            "GET",
            STATUS_PATH,
            "Status request to upstream API failed.",
            params={"referenceId": reference_id},
        )
        return self._check(response, "Status request to upstream API failed.")

    def close(self) -> None:
        """Close the session."""
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
