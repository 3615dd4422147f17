"""
Tests for AI project generation: pricing, prompt assembly, response parsing and the API call.
"""

import inspect
import json

import httpx
import pytest
from fastapi import HTTPException

from project_partner.config.settings import settings
from project_partner.modules.ai_generation.pricing import estimate_cost, token_cost
from project_partner.modules.ai_generation.prompts import build_system_prompt, build_user_prompt
from project_partner.modules.ai_generation.routes import generate_project, import_generated_project
from project_partner.modules.ai_generation.schemas import (
    ContentSelection,
    CostEstimateRequest,
    ExistingContent,
    GenerationRequest,
)
from project_partner.modules.ai_generation.service import AIGenerationService, parse_ai_json


GENERATED = {
    "phases": [{
        "name": "Preparation",
        "description": "Get ready",
        "operations": [{"name": "Clean", "description": "Clean walls", "steps": []}],
    }]
}


# =============================================================================
# Pricing Tests
# =============================================================================

class TestPricing:

    def test_default_estimate(self):
        estimate = estimate_cost()
        assert estimate["ai_processing"]["tokens_used"] == {"input": 100000, "output": 75000}
        assert estimate["ai_processing"]["estimated"] == pytest.approx(0.06)
        assert estimate["scraping"]["estimated"] == pytest.approx(0.10)
        assert estimate["total"]["estimated"] == pytest.approx(0.16)

    def test_without_scraping(self):
        estimate = estimate_cost(10, "gpt-4o", include_web_scraping=False)
        assert estimate["scraping"]["estimated"] == 0
        assert estimate["total"]["estimated"] == pytest.approx(0.05 + 0.15)

    def test_token_cost(self):
        assert token_cost("gpt-4-turbo", 1_000_000, 1_000_000) == pytest.approx(40.0)


# =============================================================================
# parse_ai_json Tests
# =============================================================================

class TestParseAIJson:

    def test_plain_json(self):
        assert parse_ai_json(json.dumps(GENERATED)) == GENERATED

    def test_fenced_block(self):
        content = "Here you go:\n```json\n" + json.dumps(GENERATED) + "\n```\nEnjoy."
        assert parse_ai_json(content) == GENERATED

    def test_outer_object(self):
        content = "Result: " + json.dumps({"phases": []}) + " (end)"
        assert parse_ai_json(content) == {"phases": []}

    def test_unparseable(self):
        with pytest.raises(ValueError):
            parse_ai_json("no json here")

    def test_non_object(self):
        with pytest.raises(ValueError):
            parse_ai_json("[1, 2]")


# =============================================================================
# Prompt Tests
# =============================================================================

class TestPrompts:

    def test_system_prompt_names_categories(self):
        assert "Painting & Finishing, Walls & Drywall projects" in build_system_prompt(
            ["Painting & Finishing", "Walls & Drywall"]
        )

    def test_new_project_prompt(self):
        request = GenerationRequest(
            project_name="Interior <b>Painting</b>",
            category=["Painting & Finishing"],
            ai_instructions="Focus on <script>x</script>latex paint",
        )
        prompt = build_user_prompt(request, ["Paint Roller"], ["Primer"])

        assert "CREATE a comprehensive Interior Painting project" in prompt
        assert "SPECIFIC INSTRUCTIONS: Focus on latex paint" in prompt
        assert "AVAILABLE TOOLS IN LIBRARY: Paint Roller" in prompt
        assert "AVAILABLE MATERIALS IN LIBRARY: Primer" in prompt
        assert "7. RISK MANAGEMENT: Key risks" in prompt
        assert "DECISION TREES" in prompt
        assert "<script>" not in prompt

    def test_update_prompt_lists_existing_content(self):
        request = GenerationRequest(
            project_name="Interior Painting",
            existing_project_id="proj-1",
            content_selection=ContentSelection(structure=False, decision_trees=False, risks=False),
            existing_content=ExistingContent(
                phases=[{"name": "Prep", "operations": [{"name": "Clean", "steps": [{"step_title": "Wash walls"}]}]}],
                risks=[{"risk": "Drips", "mitigation": "Drop cloths"}],
            ),
        )
        prompt = build_user_prompt(request, [], [])

        assert prompt.count("UPDATE a comprehensive") == 1
        assert "    - Step: Wash walls" in prompt
        assert '1. Risk: "Drips"' in prompt
        assert "Structure generation is DISABLED" in prompt
        assert "DO NOT GENERATE RISKS" in prompt
        assert "DECISION TREES" not in prompt
        assert "CRITICAL STRUCTURE RESTRICTION" in prompt

    def test_library_names_omitted_when_not_selected(self):
        request = GenerationRequest(
            project_name="Shelf",
            content_selection=ContentSelection(tools=False, materials=False),
        )
        prompt = build_user_prompt(request, ["Drill"], ["Screws"])
        assert "AVAILABLE TOOLS IN LIBRARY" not in prompt
        assert "AVAILABLE MATERIALS IN LIBRARY" not in prompt


# =============================================================================
# AIGenerationService Tests
# =============================================================================

def _patch_openai(monkeypatch, handler):
    real_client = httpx.Client

    def client_factory(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(httpx, "Client", client_factory)


class TestGenerate:

    def test_missing_api_key(self, supabase, monkeypatch):
        monkeypatch.setattr(settings, "openai_api_key", None)
        with pytest.raises(HTTPException) as exc:
            AIGenerationService(supabase).generate(GenerationRequest(project_name="Shelf"))
        assert exc.value.status_code == 500
        assert exc.value.detail == "Service configuration error"

    def test_successful_generation(self, supabase, monkeypatch):
        monkeypatch.setattr(settings, "openai_api_key", "sk-test")
        supabase.seed("tools", {"id": "t1", "name": "Paint Roller"})
        captured = {}

        def handler(request):
            captured["auth"] = request.headers["Authorization"]
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={
                "choices": [{"message": {"content": json.dumps(GENERATED)}}],
                "usage": {"prompt_tokens": 1_000_000, "completion_tokens": 0},
            })

        _patch_openai(monkeypatch, handler)
        response = AIGenerationService(supabase).generate(GenerationRequest(
            project_name="Interior Painting",
            ai_model="gpt-4-turbo",
            web_sources=["https://example.com/guide"],
        ))

        assert response.project == GENERATED
        assert response.metadata.model == "gpt-4-turbo-preview"
        assert response.metadata.tokens_used == {"input": 1_000_000, "output": 0}
        assert response.metadata.estimated_cost["ai_processing"] == pytest.approx(10.0)
        assert response.metadata.estimated_cost["total"] == pytest.approx(10.1)
        assert response.metadata.sources_used == ["https://example.com/guide"]
        assert captured["auth"] == "Bearer sk-test"
        assert captured["body"]["model"] == "gpt-4-turbo-preview"
        assert captured["body"]["response_format"] == {"type": "json_object"}
        assert "Paint Roller" in captured["body"]["messages"][1]["content"]

    def test_upstream_error_is_502(self, supabase, monkeypatch):
        monkeypatch.setattr(settings, "openai_api_key", "sk-test")
        _patch_openai(monkeypatch, lambda request: httpx.Response(429, json={"error": "rate limited"}))
        with pytest.raises(HTTPException) as exc:
            AIGenerationService(supabase).generate(GenerationRequest(project_name="Shelf"))
        assert exc.value.status_code == 502

    def test_unparseable_content_is_502(self, supabase, monkeypatch):
        monkeypatch.setattr(settings, "openai_api_key", "sk-test")
        _patch_openai(monkeypatch, lambda request: httpx.Response(200, json={
            "choices": [{"message": {"content": "I cannot help with that"}}],
        }))
        with pytest.raises(HTTPException) as exc:
            AIGenerationService(supabase).generate(GenerationRequest(project_name="Shelf"))
        assert exc.value.status_code == 502

    def test_default_model_comes_from_settings(self, supabase, monkeypatch):
        monkeypatch.setattr(settings, "openai_api_key", "sk-test")
        monkeypatch.setattr(settings, "ai_default_model", "gpt-4o")
        captured = {}

        def handler(request):
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"choices": [{"message": {"content": json.dumps(GENERATED)}}]})

        _patch_openai(monkeypatch, handler)
        response = AIGenerationService(supabase).generate(GenerationRequest(project_name="Shelf"))

        assert captured["body"]["model"] == "gpt-4o"
        assert response.metadata.model == "gpt-4o"

    def test_estimate_uses_default_model(self, supabase, monkeypatch):
        monkeypatch.setattr(settings, "ai_default_model", "gpt-4o")
        estimate = AIGenerationService(supabase).estimate_cost(
            CostEstimateRequest(project_name="Shelf", estimated_steps=10, include_web_scraping=False)
        )
        assert estimate["total"]["estimated"] == pytest.approx(0.05 + 0.15)


# =============================================================================
# Route Tests
# =============================================================================

class TestGenerationRoutes:

    def test_blocking_handlers_run_in_threadpool(self):
        assert not inspect.iscoroutinefunction(generate_project)
        assert not inspect.iscoroutinefunction(import_generated_project)

    def test_generate_route(self, admin_client, monkeypatch):
        monkeypatch.setattr(settings, "openai_api_key", "sk-test")
        _patch_openai(monkeypatch, lambda request: httpx.Response(200, json={
            "choices": [{"message": {"content": json.dumps(GENERATED)}}],
        }))
        response = admin_client.post("/api/v1/ai/generate", json={"project_name": "Shelf"})
        assert response.status_code == 200
        assert response.json()["project"] == GENERATED

    def test_import_route(self, admin_client, supabase):
        response = admin_client.post("/api/v1/ai/import", json={
            "project_name": "Shelf", "structure": {"phases": []},
        })
        assert response.status_code == 200
        assert response.json()["success"] is True
        assert supabase.rows("projects")[0]["name"] == "Shelf"
