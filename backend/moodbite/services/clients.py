"""
Thin async transports for the hosted inference providers.

Each transport knows how to talk to one API and raises ProviderUnavailable or
MalformedResponse; turning those into UNKNOWN / Failure is the adapters' job.
Transports are created once and shared by every adapter that uses the same API.
"""

import json
import re

import httpx
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from moodbite.services.errors import MalformedResponse, ProviderUnavailable


def extract_json(text: str):
    """Extract JSON from a model response, handling markdown fences and chatter."""
    text = text.strip()
    m = re.search(r"```(?:json)?\s*([\s\S]*?)```", text)
    if m:
        text = m.group(1).strip()
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        start, end = text.find("{"), text.rfind("}")
        if start == -1 or end <= start:
            raise
        return json.loads(text[start:end + 1])


async def post_json(
    name: str,
    url: str,
    payload: dict,
    headers: dict | None = None,
    client: httpx.AsyncClient | None = None,
    timeout: float = 30.0,
):
    """POST a JSON payload and return the decoded JSON body."""
    try:
        if client is not None:
            response = await client.post(url, headers=headers, json=payload)
        else:
            async with httpx.AsyncClient(timeout=timeout) as owned:
                response = await owned.post(url, headers=headers, json=payload)
    except httpx.HTTPError as e:
        raise ProviderUnavailable(name, f"request failed: {e!r}") from e

    if not response.is_success:
        raise ProviderUnavailable(name, f"HTTP {response.status_code}: {response.text[:200]}")
    try:
        return response.json()
    except ValueError as e:
        raise MalformedResponse(name, "response body is not JSON") from e


class HuggingFaceInference:
    """Hosted text-classification model on the Hugging Face inference API."""

    name = "huggingface"

    def __init__(self, api_token: str, base_url: str, model: str, http_client: httpx.AsyncClient | None = None):
        self.api_token = api_token
        self.url = f"{base_url.rstrip('/')}/{model}"
        self.http_client = http_client

    async def top_label(self, text: str) -> str:
        if not self.api_token:
            raise ProviderUnavailable(self.name, "Hugging Face API token not configured")
        payload = await post_json(
            self.name,
            self.url,
            {"inputs": text},
            headers={"Authorization": f"Bearer {self.api_token}"},
            client=self.http_client,
        )
        # The API answers [[{label, score}, ...]] for a single input; some
        # deployments flatten it to [{label, score}, ...].
        try:
            entries = payload[0]
            if isinstance(entries, dict):
                entries = payload
            best = max(entries, key=lambda e: e.get("score", 0))
            return best["label"]
        except (IndexError, KeyError, TypeError, ValueError) as e:
            raise MalformedResponse(self.name, f"unexpected classification payload: {str(payload)[:200]}") from e


class OpenRouterChat:
    """OpenAI-compatible chat completions served by OpenRouter."""

    name = "openrouter"

    def __init__(self, api_key: str, url: str, model: str, http_client: httpx.AsyncClient | None = None):
        self.api_key = api_key
        self.url = url
        self.model = model
        self.http_client = http_client

    async def complete(self, prompt: str) -> str:
        if not self.api_key:
            raise ProviderUnavailable(self.name, "OpenRouter API key not configured")
        data = await post_json(
            self.name,
            self.url,
            {"model": self.model, "messages": [{"role": "user", "content": prompt}]},
            headers={"Authorization": f"Bearer {self.api_key}"},
            client=self.http_client,
        )
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise MalformedResponse(self.name, "completion has no message content") from e
        if not content:
            raise MalformedResponse(self.name, "empty completion")
        return content


class GeminiModels:
    """Google Gemini through the google-genai async client."""

    name = "gemini"

    def __init__(self, api_key: str):
        self.api_key = api_key
        self._client = None

    @property
    def client(self):
        if self._client is None and self.api_key:
            from google import genai
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def generate(self, model: str, contents, temperature: float | None = None) -> str:
        if not self.client:
            raise ProviderUnavailable(self.name, "Gemini API key not configured")
        config = None
        if temperature is not None:
            config = genai_types.GenerateContentConfig(temperature=temperature)
        try:
            response = await self.client.aio.models.generate_content(
                model=model,
                contents=contents,
                config=config,
            )
        except (genai_errors.APIError, httpx.HTTPError) as e:
            raise ProviderUnavailable(self.name, f"generate_content failed: {e}") from e
        text = response.text
        if not text:
            raise MalformedResponse(self.name, "empty response")
        return text


class AnthropicMessages:
    """Claude through the Anthropic Messages API."""

    name = "anthropic"

    def __init__(self, api_key: str, model: str):
        self.api_key = api_key
        self.model = model
        self._client = None

    @property
    def client(self):
        if self._client is None and self.api_key:
            import anthropic
            self._client = anthropic.AsyncAnthropic(api_key=self.api_key)
        return self._client

    async def complete(self, prompt: str, max_tokens: int = 1024) -> str:
        if not self.client:
            raise ProviderUnavailable(self.name, "Anthropic API key not configured")
        import anthropic
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            raise ProviderUnavailable(self.name, f"messages.create failed: {e}") from e
        if not response.content:
            raise MalformedResponse(self.name, "empty response")
        return response.content[0].text
