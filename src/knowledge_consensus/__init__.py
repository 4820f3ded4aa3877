"""
Knowledge Consensus
===================

A hexagonal-architecture engine that verifies statements against several
independent external knowledge sources and folds their answers into one
confidence-bearing verdict.

Layers:
- domain: Entities (Source, KnowledgeQuery, ConsolidatedResult) and the
  consolidation services (registry, engine, fast path)
- ports: Abstract interfaces (KnowledgeSourceAdapter, ReliabilityStore)
- application: Use-case orchestration (KnowledgeVerificationService)
- adapters: Concrete knowledge sources (Wikipedia, data.gov) and stores
- infrastructure: Config, DI wiring, logging, entrypoint
- api: FastAPI routes and request/response schemas
"""

__version__ = "0.1.0"
