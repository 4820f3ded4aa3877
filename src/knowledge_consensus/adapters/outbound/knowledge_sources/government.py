"""
Government Data Adapter
=======================

Authoritative-registry source backed by the data.gov CKAN catalog.
https://docs.ckan.org/en/latest/api/

Datasets published by federal agencies are matched against the
statement; the publishing agency and recency of the datasets raise the
confidence.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from knowledge_consensus.adapters.outbound.knowledge_sources.base import (
    HTTPKnowledgeSource,
    KnowledgeSourceError,
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

DOMAIN_RELIABILITY: dict[Domain, float] = {
    Domain.HEALTHCARE: 98.0,
    Domain.FINANCIAL: 95.0,
    Domain.LEGAL: 97.0,
    Domain.INSURANCE: 90.0,
}

# Organization-title fragments of the agencies that are authoritative
# for each domain.
DOMAIN_AGENCY_KEYWORDS: dict[Domain, tuple[str, ...]] = {
    Domain.HEALTHCARE: ("health", "food and drug", "disease control", "medicare"),
    Domain.FINANCIAL: ("treasury", "securities", "federal reserve", "financial"),
    Domain.LEGAL: ("justice", "court", "attorney"),
    Domain.INSURANCE: ("insurance", "flood", "medicare"),
}

BASE_CONFIDENCE = 80
AGENCY_MATCH_BONUS = 10
RECENCY_BONUS = 5
RECENCY_WINDOW = timedelta(days=180)
MAX_CONFIDENCE = 98
SUPPORT_THRESHOLD = 70
MAX_EVIDENCE_CHARS = 500


class GovernmentDataAdapter(HTTPKnowledgeSource):
    """
    Adapter for the data.gov dataset catalog (CKAN ``package_search``).

    Government sources are highly reliable: raw credibility 95.
    """

    def __init__(
        self,
        base_url: str = "https://catalog.data.gov",
        *,
        api_key: str | None = None,
        timeout: float = 15.0,
        **kwargs: Any,
    ) -> None:
        headers = {"X-Api-Key": api_key} if api_key else None
        super().__init__(base_url=base_url, timeout=timeout, headers=headers, **kwargs)

    @property
    def name(self) -> str:
        return "Government Data"

    @property
    def raw_credibility(self) -> float:
        return 95.0

    @property
    def supported_domains(self) -> tuple[Domain, ...]:
        return tuple(DOMAIN_RELIABILITY)

    def reliability_for_domain(self, domain: Domain | None) -> float:
        if domain is None:
            return self.raw_credibility
        return DOMAIN_RELIABILITY.get(domain, self.raw_credibility)

    async def health_check(self) -> bool:
        """Check CKAN API health."""
        if not self._client:
            return False
        try:
            response = await self._client.get("/api/3/action/status_show", timeout=5.0)
            return response.status_code == 200
        except Exception:
            return False

    async def _query_source(
        self,
        query: KnowledgeQuery,
        keywords: list[str],
    ) -> SourceResult:
        datasets = await self._search_datasets(keywords, self._result_limit(query), query)

        credibility = self.reliability_for_domain(query.domain)
        verified_at = datetime.now(UTC)
        sources: list[Source] = []
        evidence: list[str] = []

        for dataset in datasets:
            title = dataset.get("title") or dataset.get("name")
            if not title:
                continue
            agency = (dataset.get("organization") or {}).get("title") or "data.gov"
            slug = dataset.get("name") or dataset.get("id", "")
            sources.append(
                Source(
                    id=f"datagov:{dataset.get('id', slug)}",
                    name=agency,
                    title=title,
                    category=SourceCategory.GOVERNMENT,
                    url=f"{self._base_url}/dataset/{slug}",
                    publish_date=parse_timestamp(dataset.get("metadata_created")),
                    last_updated=parse_timestamp(dataset.get("metadata_modified")),
                    last_verified=verified_at,
                    author=agency,
                    credibility_score=credibility,
                )
            )
            summary = (dataset.get("notes") or "").strip() or title
            evidence.append(summary[:MAX_EVIDENCE_CHARS])

        confidence = self._calculate_confidence(sources, query.domain, verified_at)
        logger.debug(f"data.gov returned {len(sources)} dataset(s), confidence={confidence}")

        return SourceResult(
            is_supported=confidence > SUPPORT_THRESHOLD,
            confidence=confidence,
            evidence=evidence,
            contradictions=[],
            sources=sources,
        )

    async def _search_datasets(
        self,
        keywords: list[str],
        limit: int,
        query: KnowledgeQuery,
    ) -> list[dict[str, Any]]:
        response = await self._get(
            "/api/3/action/package_search",
            params={"q": " ".join(keywords), "rows": limit},
            timeout=query.timeout_seconds,
        )
        data = self._json(response)
        if not data.get("success", False):
            error = data.get("error")
            message = error.get("message") if isinstance(error, dict) else error
            raise KnowledgeSourceError(
                self.name, f"package_search failed: {message or 'unknown error'}"
            )
        return (data.get("result") or {}).get("results") or []

    @staticmethod
    def _calculate_confidence(
        sources: list[Source],
        domain: Domain | None,
        now: datetime,
    ) -> float:
        """High base confidence, raised by a matching agency and recent data."""
        if not sources:
            return 0.0

        confidence = BASE_CONFIDENCE

        agency_keywords = DOMAIN_AGENCY_KEYWORDS.get(domain, ()) if domain else ()
        if any(
            keyword in (source.author or "").lower()
            for source in sources
            for keyword in agency_keywords
        ):
            confidence += AGENCY_MATCH_BONUS

        if any(
            source.last_updated is not None and now - source.last_updated < RECENCY_WINDOW
            for source in sources
        ):
            confidence += RECENCY_BONUS

        return float(min(confidence, MAX_CONFIDENCE))
