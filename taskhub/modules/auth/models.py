# Supabase Auth
# This module uses Supabase's built-in authentication system
# Supabase Auth handles:
# - User registration (auth.users table)
# - User login and session management
# - JWT token generation and validation
# - Password hashing and security

"""
Supabase Auth provides:
- auth.sign_up() - Register new users (full_name stored in user_metadata)
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Get current user from JWT token
- auth.get_session() - Read the session held by the client
- auth.sign_out() - Logout users

The application profile lives in the public.profiles table and is created
right after sign-up (see modules/profiles/models.py). A failed profile insert
leaves the auth.users row in place; the next login retries the profile load.
"""
