"""Data-access clients for the hosted store."""

from stockdesk.client.query import QueryBuilder
from stockdesk.client.supabase import SupabaseClient, create_client

__all__ = ["QueryBuilder", "SupabaseClient", "create_client"]
