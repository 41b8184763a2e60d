"""Execution models and exchange ingestion."""

from spot_journal.data.fetcher import BybitAPIError, BybitClientConfig, BybitExecutionClient
from spot_journal.data.models import Execution, Side

__all__ = [
    "BybitAPIError",
    "BybitClientConfig",
    "BybitExecutionClient",
    "Execution",
    "Side",
]
