"""Prompt construction for AI project generation."""
from typing import List, Optional

from project_partner.core.sanitization import sanitize_input
from project_partner.modules.ai_generation.schemas import GenerationRequest, ExistingContent


def build_system_prompt(category: List[str]) -> str:
    return (
        f"You are an expert DIY project planner specializing in {', '.join(category)} projects.\n"
        "Generate comprehensive, detailed project structures with phases, operations, steps, instructions, "
        "tools, materials, outputs, process variables, time estimates, and risk management."
    )


def _existing_content_context(existing: Optional[ExistingContent]) -> str:
    if not existing:
        return ""
    lines: List[str] = []
    if existing.phases:
        lines.append("")
        lines.append("EXISTING PROJECT STRUCTURE (DO NOT DUPLICATE - only update content for these):")
        for phase in existing.phases:
            lines.append(f"- Phase: {phase.name}")
            for op in phase.operations:
                lines.append(f"  - Operation: {op.name}")
                for step in op.steps:
                    lines.append(f"    - Step: {step.step_title}")
        lines.append(
            "IMPORTANT: If structure is not selected, ONLY generate content for the existing "
            "phases/operations/steps listed above. DO NOT create new phases, operations, or steps."
        )
    if existing.risks:
        lines.append("")
        lines.append(
            "EXISTING PROJECT RISKS (DO NOT DUPLICATE - review these carefully and only add NEW risks "
            "that are meaningfully different):"
        )
        for i, risk in enumerate(existing.risks, start=1):
            lines.append(f'{i}. Risk: "{risk.risk}"')
            lines.append(f'   Mitigation: "{risk.mitigation}"')
        lines.append("If a risk is already covered (even with slightly different wording), DO NOT include it.")
    return "\n".join(lines)


def _library_context(tools: List[str], materials: List[str]) -> str:
    lines = []
    if tools:
        lines.append(f"AVAILABLE TOOLS IN LIBRARY: {', '.join(tools)}")
    if materials:
        lines.append(f"AVAILABLE MATERIALS IN LIBRARY: {', '.join(materials)}")
    return "\n".join(lines)


def _structure_section(include_structure: bool, updating_with_phases: bool) -> str:
    if include_structure:
        section = (
            "1. STRUCTURE: Create phases, operations, and steps\n"
            "   - Phases should represent major project stages (e.g., Preparation, Execution, Finishing)\n"
            "   - Operations should group related tasks within each phase\n"
            "   - Steps should be specific, actionable tasks"
        )
        if updating_with_phases:
            section += "\n   - You may create new phases/operations/steps if needed, but review existing structure first"
        return section
    return (
        "1. STRUCTURE: CRITICAL - DO NOT CREATE NEW PHASES, OPERATIONS, OR STEPS\n"
        "   - Structure generation is DISABLED\n"
        "   - ONLY generate content (instructions, tools, materials, outputs, etc.) for the existing "
        "phases/operations/steps listed above\n"
        '   - If the existing structure above is empty, return an empty phases array: "phases": []'
    )


def _risk_section(include_risks: bool, has_existing_risks: bool) -> str:
    if not include_risks:
        return (
            "7. RISK MANAGEMENT: DO NOT GENERATE RISKS\n"
            "   - Risks are not selected for generation\n"
            "   - Skip the risks section entirely"
        )
    section = (
        "7. RISK MANAGEMENT: Key risks for the whole project\n"
        "   - For each risk: risk description, likelihood (low/medium/high), impact (low/medium/high)\n"
        "   - Mitigation: Specific mitigation measure\n"
        '   - Mitigation cost: Optional cost estimate (e.g., "$25 for drop cloths")'
    )
    if has_existing_risks:
        section += "\n   - CRITICAL: Review existing risks above and DO NOT duplicate them"
    return section


DECISION_TREE_SECTION = """8. DECISION TREES AND ALTERNATIVE OPERATIONS:
   - IF-NECESSARY OPERATIONS: operations only needed depending on project state
     (e.g. "Wall Spackling (If Necessary)"); set flowType "if-necessary", decisionCriteria and dependentOn
   - ALTERNATIVE OPERATIONS: separate operations when the methodology is fundamentally different
     (e.g. "Paint with Roller" vs "Paint with Sprayer"); set flowType "alternate" and a shared alternateGroup
   - STANDARD OPERATIONS: set flowType "standard" or omit"""


def _json_shape(include_decision_trees: bool, include_alternate_tools: bool, include_risks: bool) -> str:
    operation_extras = ""
    if include_decision_trees:
        operation_extras = (
            '          "flowType": "standard|if-necessary|alternate",\n'
            '          "alternateGroup": "group-id-if-alternate",\n'
            '          "decisionCriteria": "Criteria for if-necessary operations",\n'
            '          "dependentOn": "operation-id-if-dependent",\n'
        )
    if include_alternate_tools:
        tools = '"tools": [{"name": "Tool 1", "alternates": ["Alternate Tool 1"]}, {"name": "Tool 2"}],'
    else:
        tools = '"tools": ["Tool 1", "Tool 2"],'
    risks = ""
    if include_risks:
        risks = (
            ',\n  "risks": [{"risk": "Risk description", "likelihood": "low|medium|high", '
            '"impact": "low|medium|high", "mitigation": "Specific mitigation measure", '
            '"mitigationCost": "Optional cost estimate"}]'
        )
    return (
        "{\n"
        '  "phases": [\n'
        '    {\n'
        '      "name": "Phase Name",\n'
        '      "description": "Phase description",\n'
        '      "operations": [\n'
        '        {\n'
        '          "name": "Operation Name",\n'
        '          "description": "Operation description",\n'
        f"{operation_extras}"
        '          "steps": [\n'
        '            {\n'
        '              "stepTitle": "Step Title",\n'
        '              "description": "Step description",\n'
        '              "materials": ["Material 1", "Material 2"],\n'
        f"              {tools}\n"
        '              "outputs": [{"name": "Output Name", "description": "Output description", '
        '"type": "inspection|measurement|document|photo|none", "requirement": "Quantified requirement"}],\n'
        '              "processVariables": [{"name": "variable_name_snake_case", "displayName": "Display Name", '
        '"description": "Variable description", "variableType": "number|text|boolean|measurement", '
        '"unit": "unit if applicable"}],\n'
        '              "timeEstimates": {"low": 0.5, "medium": 1.0, "high": 2.0},\n'
        '              "instructions": {"quick": "Brief quick instruction", "detailed": "Detailed standard '
        'instruction", "contractor": "Expert-level contractor instruction"}\n'
        '            }\n'
        '          ]\n'
        '        }\n'
        '      ]\n'
        '    }\n'
        f"  ]{risks}\n"
        "}"
    )


def build_user_prompt(request: GenerationRequest, library_tools: List[str], library_materials: List[str]) -> str:
    selection = request.content_selection
    name = sanitize_input(request.project_name)
    categories = ", ".join(request.category)
    updating = bool(request.existing_project_id)
    existing = request.existing_content if updating else None
    has_existing_phases = bool(existing and existing.phases)
    has_existing_risks = bool(existing and existing.risks)

    parts = [
        f"You are an expert DIY project planner specializing in {categories} projects.",
        "",
        f"{'UPDATE' if updating else 'CREATE'} a comprehensive {name} project"
        f"{' by updating existing content' if updating else ' with complete structure and content'}.",
        "",
        f"PROJECT: {name}",
    ]
    if request.project_description:
        parts.append(f"DESCRIPTION: {sanitize_input(request.project_description)}")
    parts.append(f"CATEGORY: {categories}")
    if request.ai_instructions:
        parts.append(f"SPECIFIC INSTRUCTIONS: {sanitize_input(request.ai_instructions)}")
    library = _library_context(
        library_tools if selection.tools else [],
        library_materials if selection.materials else [],
    )
    if library:
        parts.append(library)
    context = _existing_content_context(existing)
    if context:
        parts.append(context)

    parts.extend([
        "",
        "Generate a complete project structure with the following requirements:",
        "",
        _structure_section(selection.structure, updating and has_existing_phases),
        "",
        "2. STEP INSTRUCTIONS: Provide 3 skill levels for each step\n"
        "   - QUICK: Brief overview (2-3 sentences) for experienced DIYers\n"
        "   - DETAILED: Standard instructions (5-7 sentences) with key details\n"
        "   - CONTRACTOR: Expert-level (8-12 sentences) with technical specifications and best practices",
        "",
        "3. OUTPUTS: Quantified deliverables for each step\n"
        '   - Each output must have a measurable requirement (e.g., "100% coverage", "Primer dry to touch")\n'
        "   - Include output name, description, type, and specific requirement",
        "",
        "4. TOOLS AND MATERIALS:\n"
        "   - Use only tools and materials that have been added to the library\n"
        "   - Match suggested items to library items (use exact names from library)\n"
        "   - If an item isn't in library, suggest it but note it needs to be added\n"
        "   - Include quantities where applicable",
        "",
        "5. PROCESS VARIABLES: Dynamic variables for each step\n"
        '   - For prep steps: e.g., "cleaner_application_coverage" (percentage)\n'
        '   - For execution steps: e.g., "material_coverage_rate" (square feet per unit)\n'
        "   - Include: name (snake_case), displayName, description, variableType, unit (if applicable)",
        "",
        "6. TIME ESTIMATES: High, medium, low time ranges in hours\n"
        "   - Low: Fastest possible time for experienced person\n"
        "   - Medium: Average time for intermediate skill level\n"
        "   - High: Time for beginner or complex scenarios",
        "",
        _risk_section(selection.risks, updating and has_existing_risks),
    ])
    if selection.decision_trees:
        parts.extend(["", DECISION_TREE_SECTION])

    parts.extend([
        "",
        "Return ONLY valid JSON in this exact structure:",
        _json_shape(selection.decision_trees, selection.alternate_tools, selection.risks),
        "",
        "IMPORTANT:",
        f"- Use professional terminology appropriate for {categories} projects",
        "- Ensure all outputs are quantified",
        "- Match tools/materials to library when possible",
        "- Include realistic time estimates",
        "- Cover all major risks with practical mitigations" if selection.risks else "- DO NOT generate risks section",
        "- Make instructions appropriate for each skill level",
        f"- Focus specifically on {name} - do NOT generate content for other project types",
    ])
    if not selection.structure:
        parts.append(
            "CRITICAL STRUCTURE RESTRICTION: use the EXACT existing structure provided above; phase names, "
            "operation names and step titles MUST match exactly. If no existing structure is provided, "
            'return "phases": [].'
        )
    return "\n".join(parts)
