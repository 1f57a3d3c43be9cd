"""
Suggestion router: the HTTP surface consumed by the MoodBite web client.

Endpoints:
  POST /suggest-food         - mood text (+ optional ingredients) to one food suggestion
  POST /identify-ingredients - raw image bytes to a list of visible ingredients
  GET  /food-image           - image URL for a suggested dish
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from moodbite.config import Settings, get_settings
from moodbite.schemas.suggestion import (
    FinalSuggestion,
    FoodImageResponse,
    IngredientsResponse,
    SuggestFoodRequest,
)
from moodbite.services.collaborators import FoodImageSearch, identify_ingredients
from moodbite.services.errors import EmptyInputError, ProviderError
from moodbite.services.mood_bite import MoodBite, ProviderTransports, get_mood_bite, get_transports

logger = logging.getLogger(__name__)

router = APIRouter()


def get_image_search(settings: Settings = Depends(get_settings)) -> FoodImageSearch:
    return FoodImageSearch(settings.GOOGLE_SEARCH_API_KEY, settings.SEARCH_ENGINE_ID)


# ── Suggest Food ─────────────────────────────────────────────────

@router.post("/suggest-food", response_model=FinalSuggestion, response_model_exclude_none=True)
async def suggest_food(
    body: SuggestFoodRequest,
    mood_bite: MoodBite = Depends(get_mood_bite),
):
    try:
        run = await mood_bite.run(body.text, body.ingredients)
    except EmptyInputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if run.failed:
        return JSONResponse(status_code=500, content=run.suggestion.to_payload())
    return run.suggestion


# ── Identify Ingredients ─────────────────────────────────────────

@router.post("/identify-ingredients", response_model=IngredientsResponse)
async def identify_ingredients_from_image(
    request: Request,
    settings: Settings = Depends(get_settings),
    transports: ProviderTransports = Depends(get_transports),
):
    """Identify ingredients in a photo.

    The body is the raw image; its Content-Type header (e.g. image/jpeg) is
    passed through to the vision model.
    """
    mime_type = request.headers.get("content-type", "")
    if not mime_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Request body must be an image.")
    image = await request.body()
    if not image:
        raise HTTPException(status_code=400, detail="Request body must be an image.")

    try:
        ingredients = await identify_ingredients(
            transports.gemini, settings.GEMINI_VISION_MODEL, image, mime_type
        )
    except ProviderError as e:
        logger.error(f"Ingredient identification failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to identify ingredients.")
    except Exception as e:
        logger.error(f"Ingredient identification raised {e!r}")
        raise HTTPException(status_code=500, detail="Failed to identify ingredients.")
    return {"ingredients": ingredients}


# ── Food Image ───────────────────────────────────────────────────

@router.get("/food-image", response_model=FoodImageResponse)
async def food_image(
    food_name: str | None = Query(None, alias="foodName"),
    search: FoodImageSearch = Depends(get_image_search),
):
    if not food_name or not food_name.strip():
        raise HTTPException(status_code=400, detail="foodName parameter is required")
    try:
        image_url = await search.find_image(food_name.strip())
    except ProviderError as e:
        logger.error(f"Image search failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to find an image")
    return FoodImageResponse(image_url=image_url)
