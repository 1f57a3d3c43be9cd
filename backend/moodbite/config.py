from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    HUGGING_FACE_API_TOKEN: str = ""
    HF_INFERENCE_URL: str = "https://api-inference.huggingface.co/models"
    HF_EMOTION_MODEL: str = "SamLowe/roberta-base-go_emotions"

    GEMINI_API_KEY: str = ""
    GEMINI_MOOD_MODEL: str = "gemini-1.5-flash-latest"
    GEMINI_SUGGESTION_MODEL: str = "gemini-1.5-pro-latest"
    GEMINI_VISION_MODEL: str = "gemini-1.5-flash-latest"

    OPENROUTER_API_KEY: str = ""
    OPENROUTER_URL: str = "https://openrouter.ai/api/v1/chat/completions"
    OPENROUTER_MODEL: str = "anthropic/claude-3-haiku"

    ANTHROPIC_API_KEY: str = ""
    CLAUDE_MODEL: str = "claude-3-haiku-20240307"

    GOOGLE_SEARCH_API_KEY: str = ""
    SEARCH_ENGINE_ID: str = ""

    # Provider names in priority order, comma separated
    CLASSIFIER_PROVIDERS: str = "roberta,gemini,openrouter"
    SUGGESTION_PROVIDERS: str = "gemini,openrouter"
    SUGGESTION_STRATEGY: str = "fallback"

    CLASSIFIER_TIMEOUT_SECONDS: float = 15.0
    SUGGESTION_TIMEOUT_SECONDS: float = 45.0
    REQUEST_TIMEOUT_SECONDS: float = 90.0

    FRONTEND_URL: str = "http://localhost:3000"
    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}

    @staticmethod
    def split_names(value: str) -> list[str]:
        return [name.strip().lower() for name in value.split(",") if name.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
