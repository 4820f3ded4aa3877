"""
Adapters Layer
==============

Concrete implementations of the ports for specific technologies.

Inbound Adapters:
- FastAPI routes (in api/ layer)

Outbound Adapters:
- Wikipedia (MediaWiki Action API)
- data.gov dataset catalog (CKAN)
- In-memory reliability store
"""
