"""
Shared route dependencies.
"""

import logging
import os
from functools import lru_cache
from typing import Dict

from gradebook.scoring import parse_component_weights
from gradebook.store import InMemoryStore, StoreError, store_from_env

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _env_store():
    return store_from_env()


def get_store():
    """
    Document store accessor; tests override this dependency.

    An unconfigured store is logged and replaced by an empty one, so the
    insight routes answer with their empty result shapes.
    """
    try:
        return _env_store()
    except StoreError as exc:
        logger.error("Document store unavailable, serving empty results: %s", exc)
        return InMemoryStore()


def get_default_weights() -> Dict[str, float]:
    """Component weights used when a subject has no custom components."""
    return parse_component_weights(os.getenv("DEFAULT_COMPONENT_WEIGHTS"))
