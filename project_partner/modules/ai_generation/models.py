# Tables written by the generated-project import pipeline
# Actual operations are handled via Supabase SDK in import_pipeline.py

"""
standard_phases:
- id: uuid, name: text (unique), description: text
- is_locked: boolean
- position_rule: text - first | last | nth | ...; imported phases use nth with position_value 999

template_operations:
- id, project_id (projects.id), standard_phase_id (standard_phases.id)
- name, description: text
- display_order: int

template_steps:
- id, operation_id (template_operations.id)
- step_number: int (1-based), step_title, description: text
- content_sections: jsonb [{id, type, content}]
- materials, tools, outputs, apps: jsonb arrays
- estimated_time_minutes: int
- display_order: int

step_instructions:
- template_step_id, instruction_level (quick | detailed | contractor)
- content: jsonb {text, sections, photos, videos, links}

process_variables: id, name (unique), display_name, description, variable_type, unit
workflow_step_process_variables: step_id, variable_key, label, description, variable_type, required, unit
outputs: id, name (unique), description, type, is_required
workflow_step_outputs: step_id, name, description, output_type, requirement

RPC:
- rebuild_phases_json_from_templates(p_project_id) -> void
"""
