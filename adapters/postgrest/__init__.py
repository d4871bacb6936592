"""
Supabase PostgREST 어댑터
"""

from adapters.postgrest.errors import (
    MalformedResponseError,
    StoreApiError,
    StoreError,
    TransientStoreError,
)
from adapters.postgrest.rest_client import PostgrestClient

__all__ = [
    "PostgrestClient",
    "StoreError",
    "TransientStoreError",
    "StoreApiError",
    "MalformedResponseError",
]
