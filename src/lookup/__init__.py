"""Item search service client."""

from src.lookup.client import ItemLookupClient

__all__ = ["ItemLookupClient"]
