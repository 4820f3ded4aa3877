"""
Base HTTP Knowledge Source
==========================

Abstract base class for HTTP-based external knowledge sources.
Provides the pooled client, availability caching, retries and the
query template shared by the concrete REST adapters.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from abc import abstractmethod
from datetime import UTC, datetime
from typing import Any

import httpx

from knowledge_consensus.domain.entities import KnowledgeQuery, SourceResult
from knowledge_consensus.domain.errors import SourceQueryError
from knowledge_consensus.ports.knowledge_source import KnowledgeSourceAdapter

logger = logging.getLogger(__name__)

_WORD_RE = re.compile(r"[\w'-]+")


class KnowledgeSourceError(SourceQueryError):
    """Exception raised when HTTP knowledge source operations fail."""

    pass


def extract_keywords(statement: str, min_length: int = 4) -> list[str]:
    """Lower-cased words of at least ``min_length`` characters, in order."""
    return [
        word
        for word in (match.group(0).lower() for match in _WORD_RE.finditer(statement))
        if len(word) >= min_length
    ]


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class HTTPKnowledgeSource(KnowledgeSourceAdapter):
    """
    Abstract base class for HTTP-based knowledge sources.

    Provides common HTTP client functionality and connection pooling.
    Subclasses implement the provider-specific request and parsing in
    ``_query_source``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        max_retries: int = 2,
        retry_delay: float = 0.5,
        max_results: int = 5,
        enabled: bool = True,
        availability_ttl: float = 30.0,
        max_connections: int = 10,
        user_agent: str = "KnowledgeConsensus/0.1 (statement verification)",
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the HTTP knowledge source.

        Args:
            base_url: Base URL for the API.
            timeout: Request timeout in seconds.
            max_retries: Extra attempts on transport errors and 5xx responses.
            retry_delay: Seconds to wait between attempts.
            max_results: Default number of results requested per query.
            enabled: Disabled sources report unavailable and answer empty.
            availability_ttl: Seconds a health check result is reused.
            max_connections: Maximum concurrent connections.
            user_agent: User-Agent header for requests.
            headers: Extra headers sent with every request.
            transport: Optional custom transport (used by tests).
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._max_results = max_results
        self._enabled = enabled
        self._availability_ttl = availability_ttl
        self._user_agent = user_agent
        self._extra_headers = headers or {}
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

        self._available: bool | None = None
        self._checked_at = 0.0

        # Connection limits
        self._limits = httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_connections // 2,
        )

    @property
    def base_url(self) -> str:
        """Return the base URL."""
        return self._base_url

    @property
    def enabled(self) -> bool:
        return self._enabled

    async def connect(self) -> None:
        """Initialize the HTTP client."""
        if self._client is not None:
            return

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(self._timeout),
            limits=self._limits,
            headers={
                "User-Agent": self._user_agent,
                "Accept": "application/json",
                **self._extra_headers,
            },
            follow_redirects=True,
            transport=self._transport,
        )
        logger.info(f"{self.name} client ready: {self._base_url}")

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
        self._available = None
        logger.info(f"{self.name} disconnected")

    async def health_check(self) -> bool:
        """Check if the API is responding."""
        if not self._client:
            return False
        try:
            # Subclasses can override with specific health check endpoints
            response = await self._client.get("/", timeout=5.0)
            return response.status_code < 500
        except httpx.HTTPError:
            return False

    async def is_available(self) -> bool:
        """
        Whether the source can answer queries right now.

        The health check result is reused for ``availability_ttl`` seconds.
        Never raises.
        """
        if not self._enabled:
            return False
        try:
            now = time.monotonic()
            if self._available is not None and now - self._checked_at < self._availability_ttl:
                return self._available

            await self.connect()
            self._available = await self.health_check()
            self._checked_at = now
            if not self._available:
                logger.warning(f"{self.name} health check failed: {self._base_url}")
            return self._available
        except Exception as e:
            logger.warning(f"{self.name} availability check errored: {e}")
            self._available = False
            self._checked_at = time.monotonic()
            return False

    async def query(self, query: KnowledgeQuery) -> SourceResult:
        """
        Answer a knowledge query.

        Disabled sources and statements without usable keywords get an
        empty result without any network traffic.

        Raises:
            KnowledgeSourceError: If the provider cannot be reached.
        """
        start_time = time.perf_counter()

        if not self._enabled:
            return SourceResult.empty(self._elapsed_ms(start_time))

        keywords = extract_keywords(query.statement)
        if not keywords:
            logger.debug(f"{self.name}: no keywords in statement, skipping request")
            return SourceResult.empty(self._elapsed_ms(start_time))

        await self.connect()
        result = await self._query_source(query, keywords)
        return result.model_copy(update={"query_time_ms": self._elapsed_ms(start_time)})

    @abstractmethod
    async def _query_source(
        self,
        query: KnowledgeQuery,
        keywords: list[str],
    ) -> SourceResult:
        """
        Provider-specific request and response parsing.

        Args:
            query: The verification request.
            keywords: Significant words of the statement.

        Returns:
            The provider's verdict.
        """
        ...

    def _result_limit(self, query: KnowledgeQuery) -> int:
        return query.max_results or self._max_results

    async def _get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> httpx.Response:
        """
        Make a GET request, retrying transport errors and 5xx responses.

        Raises:
            KnowledgeSourceError: When all attempts fail or on a 4xx response.
        """
        if not self._client:
            raise KnowledgeSourceError(self.name, "Client not connected")

        request_timeout = httpx.Timeout(timeout) if timeout else httpx.USE_CLIENT_DEFAULT
        last_error: Exception | None = None

        for attempt in range(self._max_retries + 1):
            try:
                response = await self._client.get(path, params=params, timeout=request_timeout)
                response.raise_for_status()
                return response
            except httpx.HTTPStatusError as e:
                if e.response.status_code < 500:
                    raise KnowledgeSourceError(
                        self.name, f"HTTP {e.response.status_code} for {path}"
                    ) from e
                last_error = e
            except httpx.TransportError as e:
                last_error = e

            if attempt < self._max_retries:
                logger.debug(
                    f"{self.name} request failed (attempt {attempt + 1}/"
                    f"{self._max_retries + 1}): {last_error}"
                )
                await asyncio.sleep(self._retry_delay)

        raise KnowledgeSourceError(
            self.name,
            f"Request failed after {self._max_retries + 1} attempts: {last_error}",
        )

    def _json(self, response: httpx.Response) -> dict[str, Any]:
        """
        Decode a JSON object body.

        Raises:
            KnowledgeSourceError: If the body is not a JSON object.
        """
        try:
            data = response.json()
        except ValueError as e:
            raise KnowledgeSourceError(self.name, f"Invalid JSON response: {e}") from e
        if not isinstance(data, dict):
            raise KnowledgeSourceError(
                self.name, f"Unexpected response payload: {type(data).__name__}"
            )
        return data

    @staticmethod
    def _elapsed_ms(start_time: float) -> float:
        return (time.perf_counter() - start_time) * 1000
