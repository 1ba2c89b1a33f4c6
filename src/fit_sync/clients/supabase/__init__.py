"""Supabase backend clients."""

from .auth import SupabaseAuthProvider
from .http import SupabaseHttp
from .user_data import SupabaseUserDataClient

__all__ = ["SupabaseAuthProvider", "SupabaseHttp", "SupabaseUserDataClient"]
