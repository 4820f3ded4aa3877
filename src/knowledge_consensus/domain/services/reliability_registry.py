"""
Source Reliability Registry
===========================

Holds every registered knowledge source together with its trust
configuration: a base weight, optional per-domain overrides and an
enabled flag.

Weights move only through feedback events (a fixed +/-0.05 step) or
explicit overrides, and are always clamped into [0, 1]. Configs are
frozen and swapped under a lock, so a snapshot taken at the start of a
query stays consistent while feedback keeps arriving.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from typing import TYPE_CHECKING, NamedTuple

from knowledge_consensus.domain.entities import (
    Domain,
    FeedbackPolarity,
    ReliabilityConfig,
    clamp_weight,
)

if TYPE_CHECKING:
    from knowledge_consensus.ports.knowledge_source import KnowledgeSourceAdapter

logger = logging.getLogger(__name__)

FEEDBACK_STEP = 0.05
NEUTRAL_WEIGHT = 0.5


class SourceRegistration(NamedTuple):
    """An adapter paired with the config in force when it was read."""

    adapter: KnowledgeSourceAdapter
    config: ReliabilityConfig

    @property
    def name(self) -> str:
        return self.adapter.name


def default_config_for(adapter: KnowledgeSourceAdapter) -> ReliabilityConfig:
    """Config derived from the adapter's raw credibility."""
    return ReliabilityConfig(
        source_name=adapter.name,
        base_weight=adapter.raw_credibility / 100,
        domain_weights={},
        enabled=True,
    )


class SourceReliabilityRegistry:
    """
    Registry of knowledge sources and their reliability weights.

    Registration order is preserved and used to break ties when sources
    are sorted by reliability.
    """

    def __init__(self) -> None:
        self._adapters: dict[str, KnowledgeSourceAdapter] = {}
        self._configs: dict[str, ReliabilityConfig] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        adapter: KnowledgeSourceAdapter,
        config: ReliabilityConfig | None = None,
    ) -> ReliabilityConfig:
        """
        Register an adapter, replacing any previous one with the same name.

        Args:
            adapter: The knowledge source.
            config: Trust configuration. Derived from the adapter's raw
                credibility when omitted.

        Returns:
            The config stored for the adapter.
        """
        if config is None:
            config = default_config_for(adapter)
        elif config.source_name != adapter.name:
            config = ReliabilityConfig(
                source_name=adapter.name,
                base_weight=config.base_weight,
                domain_weights=config.domain_weights,
                enabled=config.enabled,
            )

        with self._lock:
            self._adapters[adapter.name] = adapter
            self._configs[adapter.name] = config

        logger.info(
            f"Registered knowledge source {adapter.name!r} "
            f"(base_weight={config.base_weight:.2f}, enabled={config.enabled})"
        )
        return config

    def deregister(self, name: str) -> None:
        """Remove an adapter and its config. Unknown names are ignored."""
        with self._lock:
            removed = self._adapters.pop(name, None)
            self._configs.pop(name, None)

        if removed is not None:
            logger.info(f"Deregistered knowledge source {name!r}")

    # ------------------------------------------------------------------
    # Weights
    # ------------------------------------------------------------------

    def weight_for(self, name: str, domain: Domain | str | None = None) -> float:
        """
        Trust weight of a source, optionally for a domain.

        Returns the domain override if present, else the base weight,
        else a neutral 0.5 for a name without config.
        """
        config = self._configs.get(name)
        if config is None:
            return NEUTRAL_WEIGHT
        return config.weight_for(domain)

    def update_from_feedback(
        self,
        name: str,
        polarity: FeedbackPolarity | str,
        domain: Domain | str | None = None,
    ) -> ReliabilityConfig | None:
        """
        Nudge a source's weight by one feedback step.

        Positive feedback adds 0.05, negative feedback subtracts 0.05.
        With a domain the domain override moves (starting from the base
        weight when no override exists yet); otherwise the base weight
        moves. The result is clamped into [0, 1].

        Returns:
            The updated config, or None for an unknown source.
        """
        polarity = FeedbackPolarity(polarity)
        step = FEEDBACK_STEP if polarity is FeedbackPolarity.POSITIVE else -FEEDBACK_STEP

        with self._lock:
            config = self._configs.get(name)
            if config is None:
                logger.warning(f"Feedback for unknown knowledge source {name!r} ignored")
                return None

            if domain is not None:
                domain = Domain(domain)
                updated = self._replace(
                    config,
                    domain_weights={
                        **config.domain_weights,
                        domain: config.weight_for(domain) + step,
                    },
                )
            else:
                updated = self._replace(config, base_weight=config.base_weight + step)
            self._configs[name] = updated

        logger.debug(
            f"Feedback {polarity.value} for {name!r}"
            f"{f' [{domain}]' if domain else ''}: "
            f"{config.weight_for(domain):.2f} -> {updated.weight_for(domain):.2f}"
        )
        return updated

    def set_weight(
        self,
        name: str,
        weight: float,
        domain: Domain | str | None = None,
    ) -> ReliabilityConfig | None:
        """Explicitly override the base weight or one domain weight (clamped)."""
        with self._lock:
            config = self._configs.get(name)
            if config is None:
                logger.warning(f"Weight override for unknown knowledge source {name!r} ignored")
                return None

            if domain is not None:
                updated = self._replace(
                    config,
                    domain_weights={**config.domain_weights, Domain(domain): clamp_weight(weight)},
                )
            else:
                updated = self._replace(config, base_weight=weight)
            self._configs[name] = updated
        return updated

    def set_enabled(self, name: str, enabled: bool) -> ReliabilityConfig | None:
        """Enable or disable a source without deregistering it."""
        with self._lock:
            config = self._configs.get(name)
            if config is None:
                return None
            updated = self._replace(config, enabled=enabled)
            self._configs[name] = updated

        logger.info(f"Knowledge source {name!r} {'enabled' if enabled else 'disabled'}")
        return updated

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_config(self, name: str) -> ReliabilityConfig | None:
        """Current config of a source, if registered."""
        return self._configs.get(name)

    def get_adapter(self, name: str) -> KnowledgeSourceAdapter | None:
        """Registered adapter by name."""
        return self._adapters.get(name)

    def names(self) -> list[str]:
        """Registered source names in registration order."""
        with self._lock:
            return list(self._adapters)

    def adapters(self) -> list[KnowledgeSourceAdapter]:
        """Registered adapters in registration order."""
        with self._lock:
            return list(self._adapters.values())

    def registrations(self) -> tuple[SourceRegistration, ...]:
        """
        Immutable view of every registration, in registration order.

        Later registry mutations do not affect the returned tuple.
        """
        with self._lock:
            return tuple(
                SourceRegistration(adapter, self._configs.get(name) or default_config_for(adapter))
                for name, adapter in self._adapters.items()
            )

    def sorted_by_reliability(
        self,
        domain: Domain | str | None = None,
    ) -> list[KnowledgeSourceAdapter]:
        """
        Adapters ordered by weight for the domain, highest first.

        Ties keep registration order.
        """
        with self._lock:
            entries = list(self._adapters.items())
            return [
                adapter
                for _, adapter in sorted(
                    entries, key=lambda entry: -self.weight_for(entry[0], domain)
                )
            ]

    # ------------------------------------------------------------------
    # Snapshot / restore for external persistence
    # ------------------------------------------------------------------

    def snapshot(self) -> list[ReliabilityConfig]:
        """All configs in registration order."""
        with self._lock:
            return [self._configs[name] for name in self._adapters if name in self._configs]

    def restore(self, configs: Iterable[ReliabilityConfig]) -> int:
        """
        Replace configs of currently registered sources.

        Configs for names that are not registered are skipped.

        Returns:
            Number of configs applied.
        """
        applied = 0
        with self._lock:
            for config in configs:
                if config.source_name not in self._adapters:
                    logger.debug(f"Skipping saved config for unregistered source {config.source_name!r}")
                    continue
                self._configs[config.source_name] = config
                applied += 1

        logger.info(f"Restored {applied} reliability config(s)")
        return applied

    def __len__(self) -> int:
        return len(self._adapters)

    def __contains__(self, name: object) -> bool:
        return name in self._adapters

    @staticmethod
    def _replace(config: ReliabilityConfig, **changes: object) -> ReliabilityConfig:
        # Rebuild through the constructor so validators clamp the new weights.
        data = config.model_dump()
        data.update(changes)
        return ReliabilityConfig(**data)
