# Supabase Auth
# This module uses Supabase's built-in authentication system
# Admin privileges come from the user_roles table (or app_metadata.type == "super_user")

"""
Supabase Auth provides:
- auth.sign_up() - Register new users
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Get current user from JWT token
- auth.sign_out() - Logout users

Expected Supabase table structure:

user_roles:
- id: uuid (primary key)
- user_id: uuid (references auth.users.id, not null)
- role: text (not null) - 'admin' | 'user'
- created_at: timestamp (default: now())
"""
