# Authentication against Supabase auth.
# Wraps sign up / sign in / sign out / current user into Session objects.

from .session import AuthError, Session, SupabaseAuth

__all__ = ["AuthError", "Session", "SupabaseAuth"]
