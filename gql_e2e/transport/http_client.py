"""GraphQL-over-HTTP execution context.

Implements the execution environment used by default for scenario groups:
- POST <endpoint>  {"query": ..., "variables": ...}
- a response body with ``data`` / ``errors`` is returned as a RawResponse,
  whatever the HTTP status
- any other HTTP failure raises
"""

import asyncio
import time
from typing import Any, Mapping, Optional

import requests

from ..config import RunConfig
from ..scenario.schema import RawResponse, Session
from .retry_policy import RetryPolicy, no_retry_policy, retry_policy_for


HEALTH_QUERY = "{ __typename }"


class GraphQLHttpClient:
    """HTTP client for a GraphQL endpoint."""

    def __init__(
        self,
        endpoint: str,
        headers: Optional[Mapping[str, str]] = None,
        retry_policy: Optional[RetryPolicy] = None,
        request_timeout: float = 30.0,
    ):
        """Initialize HTTP client.

        Args:
            endpoint: GraphQL endpoint URL (e.g., http://localhost:3000/api/graphql).
            headers: Extra headers sent with every request.
            retry_policy: Retry policy for transport failures (default: none).
            request_timeout: Request timeout in seconds.
        """
        self.endpoint = endpoint
        self.retry_policy = retry_policy or no_retry_policy()
        self.request_timeout = request_timeout
        self._session = requests.Session()
        self._session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })
        if headers:
            self._session.headers.update(headers)

    def execute(
        self,
        query: str,
        variables: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> RawResponse:
        """Send one query.

        Args:
            query: Query document, sent verbatim.
            variables: Query variables.
            headers: Per-request headers (e.g. session credentials).

        Returns:
            RawResponse with ``data`` and ``errors`` from the body.

        Raises:
            requests.HTTPError: On HTTP errors without a GraphQL body.
            ValueError: If a successful response is not a GraphQL result.
        """
        response = self._request_with_retry(
            "POST",
            self.endpoint,
            json={"query": query, "variables": dict(variables or {})},
            headers=dict(headers or {}),
            timeout=self.request_timeout,
        )

        body = _json_body(response)
        if isinstance(body, dict) and ("data" in body or "errors" in body):
            return RawResponse.from_dict(body)

        response.raise_for_status()
        raise ValueError(
            f"Response from {self.endpoint} is not a GraphQL result "
            f"(status {response.status_code})"
        )

    def health_check(self) -> bool:
        """Check if the endpoint answers a trivial query.

        Returns:
            True if the server returns a GraphQL result.
        """
        try:
            response = self._session.post(
                self.endpoint,
                json={"query": HEALTH_QUERY},
                timeout=5,
            )
        except (requests.ConnectionError, requests.Timeout):
            return False

        body = _json_body(response)
        return response.status_code < 500 and isinstance(body, dict) and "data" in body

    def _request_with_retry(
        self,
        method: str,
        url: str,
        **kwargs,
    ) -> requests.Response:
        """Execute HTTP request with retry logic.

        Only 5xx responses, connection errors and timeouts are retried, and
        only as many times as the policy allows.

        Args:
            method: HTTP method (GET, POST, etc.).
            url: Request URL.
            **kwargs: Additional arguments for requests.

        Returns:
            Response object (possibly a final 5xx response).
        """
        max_retries = self.retry_policy.max_retries

        for attempt in range(max_retries + 1):
            try:
                response = self._session.request(method, url, **kwargs)
            except (requests.ConnectionError, requests.Timeout):
                if attempt < max_retries:
                    time.sleep(self.retry_policy.get_delay(attempt))
                    continue
                raise

            if response.status_code >= 500 and attempt < max_retries:
                time.sleep(self.retry_policy.get_delay(attempt))
                continue

            return response

        raise RuntimeError("Request failed with no response captured")

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


class HttpSessionScope:
    """A context view that sends requests with one credential's headers."""

    def __init__(self, client: GraphQLHttpClient, headers: Mapping[str, str]):
        self.client = client
        self.headers = dict(headers)

    async def dispatch(self, query: str, variables: Mapping[str, Any]) -> RawResponse:
        """Send the request from a worker thread."""
        return await asyncio.to_thread(
            self.client.execute, query, variables, headers=self.headers
        )


class HttpContext:
    """Execution context handed to query steps and hooks."""

    def __init__(self, client: GraphQLHttpClient, config: RunConfig):
        self.client = client
        self.config = config

    def with_session(self, credential: Any) -> HttpSessionScope:
        """Scope requests to ``credential`` (None for anonymous requests)."""
        return HttpSessionScope(self.client, self.session_headers(credential))

    def session_headers(self, credential: Any) -> dict[str, str]:
        """Build request headers for a session credential.

        The item id goes into ``session_item_header``. A token (the
        credential data itself when it is a string, or its ``token`` key)
        goes into ``session_header`` with ``session_scheme``.
        """
        session = Session.from_value(credential)
        if session is None:
            return {}

        headers = {self.config.session_item_header: session.item_id}

        token = None
        if isinstance(session.data, str):
            token = session.data
        elif isinstance(session.data, Mapping):
            token = session.data.get("token")

        if token:
            scheme = self.config.session_scheme
            headers[self.config.session_header] = f"{scheme} {token}" if scheme else str(token)

        return headers


class HttpEnvironment:
    """Default execution environment: a GraphQL endpoint over HTTP."""

    def __init__(self, config: RunConfig):
        self.config = config
        self.client: Optional[GraphQLHttpClient] = None
        self.context: Optional[HttpContext] = None

    def setup(self) -> HttpContext:
        """Create the client and the context handle."""
        self.client = GraphQLHttpClient(
            self.config.endpoint,
            headers=self.config.headers,
            retry_policy=retry_policy_for(self.config.max_retries),
            request_timeout=self.config.request_timeout,
        )
        self.context = HttpContext(self.client, self.config)
        return self.context

    def connect(self) -> None:
        """Optionally verify the endpoint answers.

        Raises:
            ConnectionError: If ``check_on_connect`` is set and the check fails.
        """
        if self.config.check_on_connect and not self.client.health_check():
            self.client.close()
            raise ConnectionError(f"GraphQL endpoint not reachable: {self.config.endpoint}")

    def disconnect(self) -> None:
        if self.client is not None:
            self.client.close()


def _json_body(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None
