"""OpenRouter model listing used by ``ccx models`` and the setup wizard.

The listing is fetched once per process and memoised; failures are logged and
yield an empty list so callers can fall back to manual model entry.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from .static_values import OPENROUTER_MODELS_URL, OPENROUTER_URL_ENVVAR

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0

_cached_models: Optional[List["OpenRouterModel"]] = None


@dataclass
class OpenRouterModel:
    id: str
    name: str
    description: str = ""
    prompt_price: float = 0.0
    completion_price: float = 0.0
    context_length: int = 0

    @classmethod
    def from_api(cls, entry: Dict[str, Any]) -> "OpenRouterModel":
        pricing = entry.get("pricing") or {}
        return cls(
            id=str(entry.get("id", "")),
            name=str(entry.get("name") or entry.get("id", "")),
            description=str(entry.get("description") or ""),
            prompt_price=price_per_million(pricing.get("prompt")),
            completion_price=price_per_million(pricing.get("completion")),
            context_length=int(entry.get("context_length") or 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "promptPrice": self.prompt_price,
            "completionPrice": self.completion_price,
            "contextLength": self.context_length,
        }


def price_per_million(price: Any) -> float:
    """OpenRouter quotes USD per token as a string; convert to USD per 1M tokens."""
    try:
        return float(price) * 1_000_000
    except (TypeError, ValueError):
        return 0.0


def format_context(context_length: int) -> str:
    if context_length >= 1_000_000:
        return f"{context_length / 1_000_000:.1f}M"
    if context_length >= 1000:
        return f"{context_length / 1000:.0f}K"
    return str(context_length)


def models_url() -> str:
    return os.getenv(OPENROUTER_URL_ENVVAR) or OPENROUTER_MODELS_URL


def fetch_models(url: Optional[str] = None, client: Optional[httpx.Client] = None) -> List[OpenRouterModel]:
    global _cached_models
    if _cached_models is not None:
        return _cached_models

    url = url or models_url()
    try:
        if client is not None:
            resp = client.get(url, timeout=DEFAULT_TIMEOUT)
        else:
            resp = httpx.get(url, timeout=DEFAULT_TIMEOUT, follow_redirects=True)
        resp.raise_for_status()
        payload = resp.json()
    except httpx.HTTPStatusError as exc:
        logger.error("Failed to fetch models: HTTP %d from %s", exc.response.status_code, url)
        return []
    except (httpx.HTTPError, ValueError) as exc:
        logger.error("Failed to fetch models from %s: %s", url, exc)
        return []

    data = payload.get("data") if isinstance(payload, dict) else payload
    if not isinstance(data, list):
        logger.error("Unexpected model listing shape from %s", url)
        return []
    _cached_models = [OpenRouterModel.from_api(entry) for entry in data if isinstance(entry, dict) and entry.get("id")]
    logger.debug("Fetched %d models from %s", len(_cached_models), url)
    return _cached_models


def clear_cache() -> None:
    global _cached_models
    _cached_models = None


def search_models(
    models: List[OpenRouterModel],
    term: Optional[str] = None,
    *,
    include_description: bool = True,
) -> List[OpenRouterModel]:
    if term:
        needle = term.lower()
        models = [
            m
            for m in models
            if needle in m.id.lower()
            or needle in m.name.lower()
            or (include_description and needle in m.description.lower())
        ]
    return sorted(models, key=lambda m: m.id)


def find_model(models: List[OpenRouterModel], model_id: str) -> Optional[OpenRouterModel]:
    for model in models:
        if model.id == model_id:
            return model
    return None
