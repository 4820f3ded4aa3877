"""
Knowledge Source Port
=====================

Abstract interface every external knowledge provider implements.
The consolidation engine only ever talks to this contract; new
providers are added by implementing it and registering an instance.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from knowledge_consensus.domain.entities import Domain, KnowledgeQuery, SourceResult


class KnowledgeSourceAdapter(ABC):
    """
    Port for one external knowledge provider.

    Implementations own their transport, their request timeouts and
    their response parsing.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Stable identifier used for registration and reporting."""
        ...

    @property
    @abstractmethod
    def raw_credibility(self) -> float:
        """Provider credibility on a 0-100 scale."""
        ...

    @property
    def supported_domains(self) -> tuple[Domain, ...]:
        """
        Domains this provider covers. Empty means all of them.

        Informational only: the engine queries every enabled source
        regardless of the query's domain and expresses domain fit
        through reliability weights instead.
        """
        return ()

    def reliability_for_domain(self, domain: Domain | None) -> float:
        """Provider credibility (0-100) for a specific domain."""
        return self.raw_credibility

    @abstractmethod
    async def is_available(self) -> bool:
        """
        Check whether the provider can currently answer queries.

        Must never raise: internal faults are reported as ``False``.
        """
        ...

    @abstractmethod
    async def query(self, query: KnowledgeQuery) -> SourceResult:
        """
        Ask the provider about a statement.

        Args:
            query: The verification request.

        Returns:
            The provider's verdict and evidence.

        Raises:
            Exception: On transient failure. The engine isolates it.
        """
        ...

    async def connect(self) -> None:
        """Open long-lived resources (HTTP clients, sessions)."""
        return None

    async def disconnect(self) -> None:
        """Release long-lived resources."""
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
