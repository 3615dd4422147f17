# Revisions live in the projects table (see modules/projects/models.py)
# This file documents the lineage columns the revision workflow relies on

"""
Lineage columns on projects:
- parent_project_id: uuid (nullable) - null on the root revision, the root id on every later revision
- revision_number: int - assigned by create_project_revision
- revision_notes: text (nullable)
- release_notes: text (nullable) - written when a revision is released
- publish_status: text - draft | beta-testing | published | archived
- is_current_version: boolean - maintained by database triggers
- beta_released_at / published_at / archived_at: timestamp (nullable)

RPC:
- create_project_revision(source_project_id uuid, revision_notes_text text) -> uuid
  Copies the source template (including its phase tree) into a new draft revision.
"""
