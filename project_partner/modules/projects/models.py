# Supabase table: projects (templates)
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
#
# The phases column is maintained by rebuild_phases_json_from_project_phases /
# rebuild_phases_json_from_templates; this service never writes it directly.

"""
Expected Supabase table structure:
- id: uuid (primary key)
- name: text (not null, unique case-insensitive via idx_projects_name_unique)
- description: text (nullable)
- category: text[] (nullable) - legacy rows may hold a single concatenated string
- publish_status: text (not null, default: 'draft') - draft | beta-testing | published | archived
- parent_project_id: uuid (nullable, references projects.id) - root of the revision lineage
- revision_number: int (default: 1)
- revision_notes: text (nullable)
- release_notes: text (nullable)
- is_current_version: boolean
- beta_released_at / published_at / archived_at: timestamp (nullable)
- phases: jsonb (array of phase -> operations -> steps)
- skill_level, effort_level, estimated_time, estimated_total_time, typical_project_size: text (nullable)
- scaling_unit: text (nullable), estimated_time_per_unit: numeric (nullable)
- project_challenges: text (nullable)
- project_type: text - primary | secondary
- image: text (nullable)
- created_by: uuid (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Views:
- project_templates_live: latest published / beta-testing revision per lineage

Tree tables (read by the rebuild RPCs):
- project_phases -> template_operations -> template_steps
"""
