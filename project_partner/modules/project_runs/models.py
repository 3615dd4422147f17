# Supabase table: project_runs
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- template_id: uuid (references projects.id)
- user_id: uuid (not null)
- home_id: uuid (nullable, references homes.id)
- name, custom_project_name, description: text
- status: text - not-started | in-progress | complete
- start_date, plan_end_date, end_date: timestamp
- phases: jsonb - immutable snapshot of the template phase tree, never empty
- completed_steps: jsonb (array of step ids)
- step_completion_percentages: jsonb (nullable)
- progress: int (0-100)
- current_phase_id, current_operation_id, current_step_id: text (nullable)
- category: text[] / text, effort_level, skill_level, estimated_time, estimated_total_time,
  typical_project_size, scaling_unit, item_type, project_challenges: text (nullable)
- estimated_time_per_unit: numeric (nullable)
- customization_decisions, budget_data, issue_reports, time_tracking, project_photos,
  phase_ratings, survey_data, feedback_data, schedule_events, shopping_checklist_data: jsonb (nullable)
- instruction_level_preference: text - quick | detailed | intermediate | new_user
- progress_reporting_style: text - linear | exponential | time-based
- schedule_optimization_method: text - single-piece-flow | batch-flow
- initial_budget, initial_timeline, initial_sizing: text (nullable)
- project_leader, accountability_partner: text (nullable)
- created_at, updated_at: timestamp

Related tables:
- homes: id, user_id, name, is_primary, home_ownership
- project_run_spaces: id, project_run_id, space_name (default "Room 1" created by the snapshot RPC)

RPCs:
- create_project_run_snapshot(p_template_id, p_user_id, p_run_name, p_home_id, p_start_date, p_plan_end_date) -> uuid
- refresh_project_run_from_template(p_run_id) -> void
"""
