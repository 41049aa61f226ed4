# Supabase Auth
# Authentication uses Supabase's built-in auth system (auth.users table):
# - sign_up / sign_in_with_password / get_user / sign_out
# - JWT access tokens sent as "Authorization: Bearer <token>"
#
# Application data about a user lives in the profiles table (see profiles/models.py).
# A profile row is created on registration with the default "inspector" role.
# app_metadata.type == "super_user" grants admin regardless of profile role.
