"""HTTP transport for the booking API.

Pattern: one pooled requests.Session per process, urllib3 retries for
429/5xx on idempotent verbs, tenacity retries with exponential backoff
for connection-level failures, and a circuit breaker around the whole
call. Responses are decoded here and non-2xx answers become ApiError.
"""
import logging
from typing import Any, Callable, Optional

import requests
from requests.adapters import HTTPAdapter
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from urllib3.exceptions import NewConnectionError
from urllib3.util.retry import Retry

from nail_booking import config
from nail_booking.circuit_breaker import CircuitBreaker
from nail_booking.errors import ApiError, ApiUnavailable
from nail_booking.logging_config import generate_request_id, get_logger

logger = get_logger(__name__)
# tenacity's before_sleep_log wants a stdlib logger
retry_logger = logging.getLogger(__name__)

IDEMPOTENT_METHODS = frozenset({"GET", "DELETE"})
DEFAULT_FALLBACK = "Erro ao comunicar com o servidor"
UNAVAILABLE_MESSAGE = "Não foi possível conectar ao servidor de agendamentos"


def create_http_session(
    max_retries: int = config.MAX_RETRIES,
    backoff_factor: float = 0.5,
) -> requests.Session:
    """
    Create a pooled session that retries 429/5xx on idempotent requests.

    Args:
        max_retries: Retries per request at the HTTP level
        backoff_factor: urllib3 backoff multiplier

    Returns:
        Configured requests.Session
    """
    session = requests.Session()

    retry_strategy = Retry(
        total=max_retries,
        backoff_factor=backoff_factor,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=sorted(IDEMPOTENT_METHODS),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(
        max_retries=retry_strategy,
        pool_connections=10,
        pool_maxsize=10,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update({"Accept": "application/json"})
    return session


def request_never_sent(exc: BaseException) -> bool:
    """True when the connection was never established.

    Only then is it safe to repeat a POST or PATCH: a connect timeout or
    a refused/unresolvable host. A reset or a dropped connection after the
    body was written may already have created the appointment.
    """
    if isinstance(exc, requests.exceptions.ConnectTimeout):
        return True
    if not isinstance(exc, requests.exceptions.ConnectionError):
        return False
    reason = exc.args[0] if exc.args else None
    reason = getattr(reason, "reason", reason)
    return isinstance(reason, NewConnectionError)


class ApiTransport:
    """Sends requests to the booking API and decodes the answers.

    ``token_provider`` is called before every request; when it returns a
    token the request carries ``Authorization: Bearer <token>``. This is
    how a token obtained mid-flow (quick registration) is picked up by the
    very next call.
    """

    def __init__(
        self,
        base_url: str = config.API_BASE_URL,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        session: Optional[requests.Session] = None,
        timeout: float = config.REQUEST_TIMEOUT,
        max_retries: int = config.MAX_RETRIES,
        breaker: Optional[CircuitBreaker] = None,
        wait=None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider
        self.session = session or create_http_session(max_retries=max_retries)
        self.timeout = timeout
        self.max_retries = max_retries
        self.breaker = breaker or CircuitBreaker()
        self.wait = wait or wait_exponential(multiplier=1, min=1, max=8)

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict] = None,
        json: Optional[Any] = None,
        fallback: str = DEFAULT_FALLBACK,
    ) -> Any:
        """
        Perform one API call.

        Args:
            method: HTTP verb
            path: Path below the base URL, starting with "/"
            params: Query string parameters
            json: JSON body
            fallback: Message used when the server gives no ``error`` text

        Returns:
            Decoded JSON body (None for empty bodies)

        Raises:
            ApiUnavailable: connection failure, timeout or open circuit
            ApiError: non-2xx answer
        """
        method = method.upper()
        url = f"{self.base_url}{path}"
        headers = {"X-Request-ID": generate_request_id()}
        token = self.token_provider() if self.token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"

        response = self.breaker.call(
            self._send, method, url, params=params, json=json, headers=headers
        )
        return self._decode(response, method, path, fallback)

    def get(self, path: str, **kwargs) -> Any:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs) -> Any:
        return self.request("POST", path, **kwargs)

    def patch(self, path: str, **kwargs) -> Any:
        return self.request("PATCH", path, **kwargs)

    def delete(self, path: str, **kwargs) -> Any:
        return self.request("DELETE", path, **kwargs)

    def _retry_policy(self, method: str):
        if method in IDEMPOTENT_METHODS:
            return retry_if_exception_type(
                (requests.exceptions.ConnectionError, requests.exceptions.Timeout)
            )
        return retry_if_exception(request_never_sent)

    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        retrying = Retrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=self.wait,
            retry=self._retry_policy(method),
            before_sleep=before_sleep_log(retry_logger, logging.WARNING),
            reraise=True,
        )
        try:
            for attempt in retrying:
                with attempt:
                    return self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as exc:
            logger.error("api_unreachable", method=method, url=url, error=str(exc))
            raise ApiUnavailable(UNAVAILABLE_MESSAGE, payload=str(exc)) from exc

    def _decode(self, response: requests.Response, method: str, path: str, fallback: str) -> Any:
        payload = None
        if response.content:
            try:
                payload = response.json()
            except ValueError:
                payload = None

        if response.ok:
            logger.debug("api_call", method=method, path=path, status=response.status_code)
            return payload

        message = fallback
        if isinstance(payload, dict) and payload.get("error"):
            message = str(payload["error"])

        logger.warning(
            "api_error",
            method=method,
            path=path,
            status=response.status_code,
            error=message,
        )
        raise ApiError(message, status_code=response.status_code, payload=payload)
