import logging
import threading
from typing import Dict, Optional

from ..settings import settings
from .taxonomy import BaseIngredientEntry, TaxonomyRepository

logger = logging.getLogger("recipe_import.resolver")


class EntityResolver:
    """
    Best-effort lookup of a cleaned ingredient name in the taxonomy.

    Exact (case-sensitive) approved match first, then the first approved
    substring match. A miss is not an error. Read-only: the taxonomy is never
    written.
    """

    def __init__(self, repository: TaxonomyRepository, fuzzy_limit: Optional[int] = None):
        self.repository = repository
        self.fuzzy_limit = fuzzy_limit or settings.fuzzy_match_limit
        self._cache: Dict[str, Optional[BaseIngredientEntry]] = {}
        self._lock = threading.Lock()

    def resolve(self, name: str) -> Optional[BaseIngredientEntry]:
        if not name or not name.strip():
            return None

        with self._lock:
            if name in self._cache:
                return self._cache[name]

        try:
            match = self._lookup(name)
        except Exception as e:
            # Not cached: the next call retries
            logger.warning(f"Taxonomy lookup failed for '{name}': {e}")
            return None

        with self._lock:
            self._cache[name] = match
        return match

    def _lookup(self, name: str) -> Optional[BaseIngredientEntry]:
        entry = self.repository.find_by_name(name)
        if entry is not None and entry.is_approved:
            return entry

        results = self.repository.search(name, approved_only=True, limit=self.fuzzy_limit)
        if results:
            logger.debug(f"Fuzzy match '{name}' -> '{results[0].name}'")
            return results[0]
        return None
