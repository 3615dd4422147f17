# Supabase table: profiles
# One row per user, created by the auth signup trigger
# Actual operations are handled via Supabase SDK in service.py

"""
Survey columns on profiles:
- user_id: uuid (unique, references auth.users)
- skill_level: text - newbie | confident | hero
- avoid_projects: text[] (may be empty)
- physical_capability: text
- space_type: text
- current_goal: text
- survey_completed_at: timestamp (nullable) - null until the DIY survey is submitted
"""
