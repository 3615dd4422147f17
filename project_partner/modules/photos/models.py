# Supabase table: project_photos
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- user_id: uuid (not null)
- project_run_id: uuid (not null)
- template_id: uuid (nullable)
- step_id: text (not null), step_name: text
- phase_id, phase_name, operation_id, operation_name: text (nullable)
- storage_path: text (not null) - bucket-relative path, or s3://<bucket>/<key> for S3 objects
- file_name: text - sanitized original filename
- file_size: int (bytes)
- privacy_level: text - personal | project_partner | public (default: project_partner)
- caption, photo_name: text (nullable)
- created_at: timestamp

Storage bucket: project-photos, objects at <user_id>/<project_run_id>/<timestamp>-<random>.<ext>

RPC:
- get_photos_by_project_type() -> per template: template_id, template_name, photo_count,
  public_count, project_partner_count, personal_count
"""
