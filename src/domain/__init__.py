"""Domain models and pipeline stages for the transaction tax report.

This package contains in-memory (Pydantic) models describing broker
transactions, security classifications and tax forms, plus the enrichment and
aggregation stages. Remote lookups are consumed through the protocols declared
in ``securities`` and ``pricing`` so that business logic stays testable without
network access.
"""

__all__ = [
    "enricher",
    "errors",
    "pricing",
    "securities",
    "tax",
    "transactions",
]
