from typing import Dict

# USD per 1M tokens
MODEL_COSTS: Dict[str, Dict[str, float]] = {
    "gpt-4o-mini": {"input": 0.15, "output": 0.60},
    "gpt-4-turbo": {"input": 10.0, "output": 30.0},
    "gpt-4o": {"input": 2.50, "output": 10.0},
}

# Average prompt / response size per generated step
TOKENS_PER_STEP = {"input": 2000, "output": 1500}

SCRAPING_COST = 0.10


def token_cost(model: str, input_tokens: int, output_tokens: int) -> float:
    costs = MODEL_COSTS.get(model, MODEL_COSTS["gpt-4o-mini"])
    return input_tokens / 1_000_000 * costs["input"] + output_tokens / 1_000_000 * costs["output"]


def scraping_cost(include_web_scraping: bool) -> float:
    return SCRAPING_COST if include_web_scraping else 0.0


def estimate_cost(estimated_steps: int = 50, model: str = "gpt-4o-mini", include_web_scraping: bool = True) -> Dict:
    input_tokens = estimated_steps * TOKENS_PER_STEP["input"]
    output_tokens = estimated_steps * TOKENS_PER_STEP["output"]
    ai_processing = token_cost(model, input_tokens, output_tokens)
    scraping = scraping_cost(include_web_scraping)
    return {
        "scraping": {"estimated": scraping},
        "ai_processing": {
            "estimated": ai_processing,
            "model": model,
            "tokens_used": {"input": input_tokens, "output": output_tokens},
        },
        "total": {"estimated": scraping + ai_processing},
    }
