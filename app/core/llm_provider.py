from __future__ import annotations

import logging
import os
from typing import Any

import aisuite as ai  # type: ignore
import google.generativeai as genai  # type: ignore

from app.core.errors import ConfigurationMissingError, TransportError
from app.core.settings import Settings, get_settings

logger = logging.getLogger(__name__)

# Environment variable holding the credential for each model provider prefix
PROVIDER_API_KEYS = {
    "google-genai": "GOOGLE_API_KEY",
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "groq": "GROQ_API_KEY",
    "mistral": "MISTRAL_API_KEY",
}


def missing_api_key(model: str) -> str | None:
    """Name of the unset credential variable for a model, or None if usable."""
    key_name = PROVIDER_API_KEYS.get(model.split(":", 1)[0])
    if key_name and not os.getenv(key_name):
        return key_name
    return None


class LLMProvider:
    def __init__(self, model: str) -> None:
        self.model = model
        self._client = None
        self._genai_model: Any | None = None

        provider = self.model.split(":", 1)[0]
        key_name = missing_api_key(self.model)
        if key_name:
            raise ConfigurationMissingError(f"{key_name} is not set for model {self.model}")

        # Route to google-generativeai if model starts with google-genai:
        if provider == "google-genai":
            genai.configure(api_key=os.getenv("GOOGLE_API_KEY"))
            model_id = self.model.split(":", 1)[1]
            self._genai_model = genai.GenerativeModel(model_id)
        else:
            try:
                self._client = ai.Client()
            except Exception as exc:  # fail fast if aisuite cannot initialize
                raise ConfigurationMissingError("Failed to initialize aisuite client") from exc

    def chat(
        self,
        messages: list[dict[str, Any]],
        temperature: float = 1.0,
        max_tokens: int | None = None,
    ) -> str:
        """Send a chat completion request. messages: list of dicts with keys: role (system|user|assistant), content (str)"""
        try:
            if self._genai_model is not None:
                # Map OpenAI-style messages to a single prompt for simplicity
                prompt = "\n".join(
                    f"{m.get('role','user')}: {m.get('content','')}" for m in messages
                )
                generation_config: dict[str, Any] = {"temperature": temperature}
                if max_tokens:
                    generation_config["max_output_tokens"] = max_tokens
                response = self._genai_model.generate_content(
                    prompt, generation_config=generation_config
                )
                return response.text or ""

            kwargs: dict[str, Any] = {}
            if max_tokens:
                kwargs["max_tokens"] = max_tokens
            resp = self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
                **kwargs,
            )
            return resp.choices[0].message.content or ""
        except Exception as exc:
            raise TransportError(f"{self.model} request failed: {exc}") from exc


def get_llm_provider(settings: Settings | None = None) -> LLMProvider | None:
    """Return the configured provider, or None when no credential is available."""
    settings = settings or get_settings()
    try:
        return LLMProvider(model=settings.aisuite_model)
    except ConfigurationMissingError as e:
        logger.warning(f"AI backend unavailable, itineraries will use templates: {e}")
        return None
