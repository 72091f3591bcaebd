from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class ProviderTemplate:
    name: str
    display_name: str
    description: str
    base_url: str
    default_model: Optional[str] = None
    requires_api_key: bool = True
    clear_anthropic_key: bool = True
    setup_instructions: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "displayName": self.display_name,
            "description": self.description,
            "baseUrl": self.base_url,
            "requiresApiKey": self.requires_api_key,
            "clearAnthropicKey": self.clear_anthropic_key,
        }
        if self.default_model:
            data["defaultModel"] = self.default_model
        if self.setup_instructions:
            data["setupInstructions"] = self.setup_instructions
        return data

    @property
    def is_openrouter(self) -> bool:
        return self.name.startswith("openrouter") or "openrouter" in self.base_url


_TEMPLATES: List[ProviderTemplate] = [
    ProviderTemplate(
        name="anthropic",
        display_name="Anthropic",
        description="Official Anthropic API with your own key",
        base_url="https://api.anthropic.com",
        clear_anthropic_key=False,
        setup_instructions="Create a key at https://console.anthropic.com/settings/keys",
    ),
    ProviderTemplate(
        name="openrouter",
        display_name="OpenRouter",
        description="Any model on OpenRouter through its Anthropic-compatible endpoint",
        base_url="https://openrouter.ai/api",
        default_model="anthropic/claude-sonnet-4",
        setup_instructions="Create a key at https://openrouter.ai/keys",
    ),
    ProviderTemplate(
        name="zai",
        display_name="Z.ai (GLM)",
        description="GLM models through Z.ai's Anthropic-compatible API",
        base_url="https://api.z.ai/api/anthropic",
        default_model="glm-4.6",
        setup_instructions="Create a key at https://z.ai/manage-apikey/apikey-list",
    ),
    ProviderTemplate(
        name="minimax",
        display_name="MiniMax",
        description="MiniMax models through the Anthropic-compatible endpoint",
        base_url="https://api.minimax.io/anthropic",
        default_model="MiniMax-M2",
        setup_instructions="Create a key at https://platform.minimax.io",
    ),
    ProviderTemplate(
        name="moonshot",
        display_name="Moonshot (Kimi)",
        description="Kimi models through Moonshot's Anthropic-compatible API",
        base_url="https://api.moonshot.ai/anthropic",
        default_model="kimi-k2-turbo-preview",
        setup_instructions="Create a key at https://platform.moonshot.ai/console/api-keys",
    ),
    ProviderTemplate(
        name="deepseek",
        display_name="DeepSeek",
        description="DeepSeek models through the Anthropic-compatible API",
        base_url="https://api.deepseek.com/anthropic",
        default_model="deepseek-chat",
        setup_instructions="Create a key at https://platform.deepseek.com/api_keys",
    ),
    ProviderTemplate(
        name="ollama",
        display_name="Local proxy",
        description="A local Anthropic-compatible proxy (LiteLLM, claude-code-router, ...)",
        base_url="http://localhost:4000",
        requires_api_key=False,
    ),
    ProviderTemplate(
        name="custom",
        display_name="Custom",
        description="Any Anthropic-compatible endpoint",
        base_url="",
        requires_api_key=False,
    ),
]


def list_templates() -> List[ProviderTemplate]:
    return list(_TEMPLATES)


def get_template(name: str) -> Optional[ProviderTemplate]:
    for template in _TEMPLATES:
        if template.name == name:
            return template
    return None
