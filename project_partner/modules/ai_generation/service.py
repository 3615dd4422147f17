"""
AI project generation.

Calls the OpenAI chat-completions API with a JSON response format and returns the
generated phase/operation/step structure with cost and token metadata.
"""
import json
import logging
import re
import time
from typing import Any, Dict, List, Optional

import httpx
from fastapi import HTTPException
from supabase import Client

from project_partner.config.settings import settings
from project_partner.modules.ai_generation.pricing import estimate_cost, scraping_cost, token_cost
from project_partner.modules.ai_generation.prompts import build_system_prompt, build_user_prompt
from project_partner.modules.ai_generation.schemas import (
    CostEstimateRequest, GenerationMetadata, GenerationRequest, GenerationResponse
)

logger = logging.getLogger(__name__)

# Request model name -> API model id
MODEL_IDS = {
    "gpt-4o-mini": "gpt-4o-mini",
    "gpt-4-turbo": "gpt-4-turbo-preview",
    "gpt-4o": "gpt-4o",
}


def resolve_model(requested: Optional[str]) -> str:
    return requested or settings.ai_default_model

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```")
_OUTER_OBJECT = re.compile(r"\{[\s\S]*\}")


def parse_ai_json(content: str) -> Dict[str, Any]:
    """Parse model output as JSON, falling back to a ```json block or the outermost {...}."""
    try:
        parsed = json.loads(content)
    except (TypeError, ValueError) as e:
        logger.warning(f"AI response is not plain JSON ({e}), trying to extract it")
        match = _FENCED_JSON.search(content or "")
        candidate = match.group(1) if match else None
        if candidate is None:
            match = _OUTER_OBJECT.search(content or "")
            candidate = match.group(0) if match else None
        if candidate is None:
            raise ValueError("Failed to parse AI response as JSON")
        parsed = json.loads(candidate)
    if not isinstance(parsed, dict):
        raise ValueError("AI response JSON is not an object")
    return parsed


class AIGenerationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.api_key = settings.openai_api_key
        self.api_url = settings.openai_api_url

    def _build_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _library_names(self, table: str) -> List[str]:
        try:
            result = self.supabase.table(table).select("name").order("name").execute()
            return [r["name"] for r in result.data or [] if r.get("name")]
        except Exception as e:
            logger.warning(f"Could not load {table} library for the prompt: {e}")
            return []

    def estimate_cost(self, request: CostEstimateRequest) -> Dict[str, Any]:
        return estimate_cost(request.estimated_steps, resolve_model(request.ai_model), request.include_web_scraping)

    def generate(self, request: GenerationRequest) -> GenerationResponse:
        if not self.api_key:
            logger.error("OPENAI_API_KEY is not configured")
            raise HTTPException(status_code=500, detail="Service configuration error")

        started = time.monotonic()
        model_name = resolve_model(request.ai_model)
        model_id = MODEL_IDS.get(model_name, "gpt-4o")
        system_prompt = build_system_prompt(request.category)
        user_prompt = build_user_prompt(
            request,
            self._library_names("tools"),
            self._library_names("materials"),
        )
        logger.info(f"Generating project {request.project_name!r} with model {model_id}")

        try:
            with httpx.Client(timeout=settings.ai_request_timeout) as client:
                response = client.post(
                    self.api_url,
                    headers=self._build_headers(),
                    json={
                        "model": model_id,
                        "messages": [
                            {"role": "system", "content": system_prompt},
                            {"role": "user", "content": user_prompt},
                        ],
                        "temperature": settings.ai_temperature,
                        "max_tokens": settings.ai_max_tokens,
                        "response_format": {"type": "json_object"},
                    },
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"OpenAI API error: {e.response.status_code} {e.response.text}")
            raise HTTPException(status_code=502, detail=f"OpenAI API error: {e.response.status_code}")
        except httpx.HTTPError as e:
            logger.error(f"OpenAI request failed: {e}")
            raise HTTPException(status_code=502, detail="Project generation failed")

        try:
            content = data["choices"][0]["message"]["content"]
            project = parse_ai_json(content)
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"Unusable AI response: {e}")
            raise HTTPException(status_code=502, detail="Failed to parse AI response as JSON")
        logger.info(f"AI response received, length: {len(content)}")

        usage = data.get("usage") or {}
        input_tokens = usage.get("prompt_tokens") or 0
        output_tokens = usage.get("completion_tokens") or 0
        ai_processing = token_cost(model_name, input_tokens, output_tokens)
        scraping = scraping_cost(request.include_web_scraping)

        metadata = GenerationMetadata(
            estimated_cost={"scraping": scraping, "ai_processing": ai_processing, "total": ai_processing + scraping},
            sources_used=request.web_sources,
            tokens_used={"input": input_tokens, "output": output_tokens},
            generation_time=int((time.monotonic() - started) * 1000),
            model=model_id,
        )
        return GenerationResponse(project=project, metadata=metadata)
