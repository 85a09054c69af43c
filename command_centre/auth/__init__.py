"""
Authentication and role-based access control.

Tokens are verified against Supabase Auth (JWKS). Roles come from the
profiles table and gate every non-public endpoint.
"""
