"""
Collaborators used by the UI around the core pipeline: ingredient
identification from a photo and a food image lookup.
"""

import logging

import httpx
from google.genai import types as genai_types

from moodbite.services.clients import GeminiModels
from moodbite.services.errors import MalformedResponse, ProviderUnavailable

logger = logging.getLogger(__name__)

INGREDIENT_PROMPT = (
    "Analyze this image and list only the food ingredients you see. Exclude any non-food items "
    "like bowls, plates, or utensils. Please provide the list as a simple comma-separated string. "
    "For example: 'apples, milk, cheese, bread'."
)

CUSTOM_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"


def split_ingredients(text: str) -> list[str]:
    return [item.strip().lower() for item in text.split(",") if item.strip()]


async def identify_ingredients(
    models: GeminiModels, model: str, image: bytes, mime_type: str
) -> list[str]:
    """Ask a Gemini vision model which ingredients are visible in ``image``."""
    image_part = genai_types.Part.from_bytes(data=image, mime_type=mime_type)
    text = await models.generate(model, [INGREDIENT_PROMPT, image_part])
    ingredients = split_ingredients(text)
    logger.info(f"Identified {len(ingredients)} ingredients from a {len(image)} byte image")
    return ingredients


class FoodImageSearch:
    """Google Custom Search image lookup for a suggested dish."""

    name = "google-search"

    def __init__(self, api_key: str, engine_id: str, http_client: httpx.AsyncClient | None = None):
        self.api_key = api_key
        self.engine_id = engine_id
        self.http_client = http_client

    async def find_image(self, food_name: str) -> str:
        if not self.api_key or not self.engine_id:
            raise ProviderUnavailable(self.name, "Google search credentials not configured")
        params = {
            "key": self.api_key,
            "cx": self.engine_id,
            "q": f"photograph of {food_name} indian dish",
            "searchType": "image",
            "num": 1,
        }
        try:
            if self.http_client is not None:
                response = await self.http_client.get(CUSTOM_SEARCH_URL, params=params)
            else:
                async with httpx.AsyncClient(timeout=15.0) as client:
                    response = await client.get(CUSTOM_SEARCH_URL, params=params)
        except httpx.HTTPError as e:
            raise ProviderUnavailable(self.name, f"request failed: {e!r}") from e

        if not response.is_success:
            raise ProviderUnavailable(self.name, f"HTTP {response.status_code}: {response.text[:200]}")

        try:
            items = response.json().get("items") or []
        except (ValueError, AttributeError) as e:
            raise MalformedResponse(self.name, "unexpected search response") from e
        if not items or not items[0].get("link"):
            raise MalformedResponse(self.name, f"no image found for {food_name!r}")
        return items[0]["link"]
