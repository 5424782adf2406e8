"""Supabase adapters: GoTrue identity, PostgREST tables and storage."""

from portal_sync.adapters.supabase.http_client import SupabaseHttpClient
from portal_sync.adapters.supabase.supabase_database import SupabaseDatabase
from portal_sync.adapters.supabase.supabase_identity_provider import SupabaseIdentityProvider

__all__ = ["SupabaseDatabase", "SupabaseHttpClient", "SupabaseIdentityProvider"]
