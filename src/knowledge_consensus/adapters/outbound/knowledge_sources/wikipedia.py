"""
Wikipedia Adapter
=================

Reference-encyclopedia source backed by the MediaWiki Action API.
https://www.mediawiki.org/wiki/API:Action_API

A single ``generator=search`` request returns the matching articles
together with their plain-text intro extracts.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from knowledge_consensus.adapters.outbound.knowledge_sources.base import (
    HTTPKnowledgeSource,
    parse_timestamp,
)
from knowledge_consensus.domain.entities import (
    Domain,
    KnowledgeQuery,
    Source,
    SourceCategory,
    SourceResult,
)

logger = logging.getLogger(__name__)

# Encyclopedia coverage is uneven across domains: medical and legal
# articles lag behind primary sources.
DOMAIN_RELIABILITY: dict[Domain, float] = {
    Domain.HEALTHCARE: 70.0,
    Domain.FINANCIAL: 75.0,
    Domain.LEGAL: 65.0,
    Domain.INSURANCE: 70.0,
}

SUPPORT_THRESHOLD = 60
MAX_CONFIDENCE = 95


class WikipediaAdapter(HTTPKnowledgeSource):
    """
    Adapter for Wikipedia via the MediaWiki Action API.

    Generally reliable but not authoritative: raw credibility 75.
    """

    def __init__(
        self,
        base_url: str = "https://en.wikipedia.org",
        *,
        api_path: str = "/w/api.php",
        **kwargs: Any,
    ) -> None:
        super().__init__(base_url=base_url, **kwargs)
        self._api_path = api_path

    @property
    def name(self) -> str:
        return "Wikipedia"

    @property
    def raw_credibility(self) -> float:
        return 75.0

    @property
    def supported_domains(self) -> tuple[Domain, ...]:
        return tuple(DOMAIN_RELIABILITY)

    def reliability_for_domain(self, domain: Domain | None) -> float:
        if domain is None:
            return self.raw_credibility
        return DOMAIN_RELIABILITY.get(domain, self.raw_credibility)

    async def health_check(self) -> bool:
        """Check MediaWiki API health."""
        if not self._client:
            return False
        try:
            response = await self._client.get(
                self._api_path,
                params={"action": "query", "meta": "siteinfo", "format": "json"},
                timeout=5.0,
            )
            return response.status_code == 200
        except Exception:
            return False

    async def _query_source(
        self,
        query: KnowledgeQuery,
        keywords: list[str],
    ) -> SourceResult:
        pages = await self._search_pages(query.statement, self._result_limit(query), query)

        credibility = self.reliability_for_domain(query.domain)
        verified_at = datetime.now(UTC)
        sources: list[Source] = []
        evidence: list[str] = []

        for page in pages:
            title = page.get("title", "")
            if not title:
                continue
            page_id = page.get("pageid", "")
            sources.append(
                Source(
                    id=f"wikipedia:{page_id}",
                    name="Wikipedia",
                    title=title,
                    category=SourceCategory.ENCYCLOPEDIA,
                    url=page.get("fullurl")
                    or f"{self.base_url}/wiki/{title.replace(' ', '_')}",
                    last_updated=parse_timestamp(page.get("touched")),
                    last_verified=verified_at,
                    credibility_score=credibility,
                )
            )
            extract = (page.get("extract") or "").strip()
            if extract:
                evidence.append(extract)

        confidence = self._calculate_confidence(len(sources), query.statement)
        logger.debug(f"Wikipedia returned {len(sources)} article(s), confidence={confidence}")

        return SourceResult(
            is_supported=confidence > SUPPORT_THRESHOLD,
            confidence=confidence,
            evidence=evidence,
            contradictions=[],
            sources=sources,
        )

    async def _search_pages(
        self,
        statement: str,
        limit: int,
        query: KnowledgeQuery,
    ) -> list[dict[str, Any]]:
        """Search articles and fetch their intro extracts in one request."""
        response = await self._get(
            self._api_path,
            params={
                "action": "query",
                "generator": "search",
                "gsrsearch": statement[:300],
                "gsrlimit": limit,
                "prop": "extracts|info",
                "inprop": "url",
                "exintro": 1,
                "explaintext": 1,
                "exsentences": 3,
                "exlimit": "max",
                "format": "json",
            },
            timeout=query.timeout_seconds,
        )
        data = self._json(response)
        pages = list(data.get("query", {}).get("pages", {}).values())
        # Pages come back keyed by id; "index" carries the search rank.
        return sorted(pages, key=lambda page: page.get("index", 0))

    @staticmethod
    def _calculate_confidence(result_count: int, statement: str) -> float:
        """More matching articles and a more specific statement mean more confidence."""
        if result_count == 0:
            return 0.0
        base_confidence = min(result_count * 20, 80)
        keyword_bonus = 10 if len(statement.split()) > 3 else 0
        return float(min(base_confidence + keyword_bonus, MAX_CONFIDENCE))
