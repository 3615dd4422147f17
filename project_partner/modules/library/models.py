# Supabase tables: tools, materials, variation_instances (+ tool_models, pricing_data, variation_warning_flags)
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
tools:
- id: uuid (primary key)
- name: text (not null, unique)
- description: text (nullable)
- category: text (nullable)
- example_models: text (nullable) - up to three "Brand Model" strings
- photo_url: text (nullable)
- created_at, updated_at: timestamp

materials:
- id: uuid (primary key)
- name: text (not null) - exposed as "item"
- description, category: text (nullable)
- unit: text (nullable) - exposed as "unit_size"
- avg_cost_per_unit: numeric (nullable)
- photo_url: text (nullable)
- created_at, updated_at: timestamp

variation_instances:
- id: uuid (primary key)
- core_item_id: uuid - tools.id or materials.id
- item_type: text - tools | materials
- name, description: text
- attributes: jsonb (attribute key -> value)
- sku, photo_url: text (nullable)

tool_models: id, variation_instance_id, model_name, manufacturer, model_number
pricing_data: id, model_id (references tool_models.id), retailer, price
variation_warning_flags: id, variation_instance_id, warning_flag_id

Deleting tools must follow the foreign keys:
pricing_data -> tool_models -> variation_warning_flags -> variation_instances -> tools
"""
