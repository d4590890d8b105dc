"""
BOM code generation.

Codes look like ``EST-2026-0042``: a prefix, the year and a per-year
sequence drawn from an atomically incremented counter document.
"""

import random
import time
from datetime import UTC, datetime

from src.config import get_logger, get_settings
from src.core.exceptions import StoreFailureError
from src.core.interfaces.storage import IDocumentStore

logger = get_logger(__name__)


class BOMCodeGenerator:
    """Issues BOM codes from the ``counters/bom-<year>`` sequence."""

    def __init__(
        self,
        store: IDocumentStore,
        prefix: str | None = None,
        sequence_width: int | None = None,
        counters_collection: str | None = None,
    ):
        settings = get_settings().costing
        self._store = store
        self._prefix = prefix or settings.bom_code_prefix
        self._width = sequence_width or settings.bom_code_sequence_width
        self._collection = counters_collection or settings.counters_collection

    async def generate(self, now: datetime | None = None) -> str:
        """
        Next code for the current year.

        When the counter cannot be incremented a time-based code is issued
        instead; it is unique in practice but not sequential.
        """
        year = (now or datetime.now(UTC)).year
        try:
            sequence = await self._store.increment(self._collection, f"bom-{year}")
        except StoreFailureError as e:
            code = self.fallback_code(year)
            logger.warning("bom_code_counter_unavailable", fallback_code=code, error=e.message)
            return code
        return f"{self._prefix}-{year}-{sequence:0{self._width}d}"

    def fallback_code(self, year: int) -> str:
        millis = str(int(time.time() * 1000))[-4:]
        return f"{self._prefix}-{year}-{millis}{random.randint(0, 99):02d}"
