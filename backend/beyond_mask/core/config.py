from pathlib import Path

from pydantic_settings import BaseSettings

_BACKEND_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    app_name: str = "Beyond Mask"
    debug: bool = False

    # Database
    database_url: str = f"sqlite:///{_BACKEND_DIR / 'beyond_mask.db'}"
    db_pool_size: int = 5

    # LLM
    llm_provider: str = "gemini"  # gemini
    gemini_api_key: str = ""
    llm_model: str = "gemini-2.0-flash"
    llm_max_output_tokens: int = 1000

    # Retry around the completion call (seconds)
    completion_max_attempts: int = 3
    completion_retry_min_wait: float = 1.0
    completion_retry_max_wait: float = 10.0

    # Language policy
    script_classifier: str = "majority"  # majority

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["*"]

    model_config = {
        "env_file": str(_BACKEND_DIR / ".env"),
        "env_prefix": "BEYOND_MASK_",
    }


settings = Settings()
