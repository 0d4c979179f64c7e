import os
from typing import Optional

from pydantic import BaseModel

GATEWAY_URL = "https://ai.gateway.lovable.dev/v1/chat/completions"
DEFAULT_MODEL = "google/gemini-2.5-flash"
DEFAULT_ENDPOINT_URL = "http://localhost:8000/analyze-content"
DEFAULT_BUCKET = "verification-images"

MB = 1024 * 1024
MAX_IMAGE_BYTES = 10 * MB


class Settings(BaseModel):
    """Endpoint configuration. Built once and handed to create_app()."""

    api_key: Optional[str] = None
    gateway_url: str = GATEWAY_URL
    model: str = DEFAULT_MODEL
    temperature: float = 0.7
    request_timeout: float = 60.0
    port: int = 8000

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            api_key=os.environ.get("LOVABLE_API_KEY") or None,
            gateway_url=os.getenv("AI_GATEWAY_URL", GATEWAY_URL),
            model=os.getenv("AI_GATEWAY_MODEL", DEFAULT_MODEL),
            temperature=float(os.getenv("AI_TEMPERATURE", "0.7")),
            request_timeout=float(os.getenv("AI_REQUEST_TIMEOUT", "60")),
            port=int(os.getenv("PORT", "8000")),
        )


class ClientSettings(BaseModel):
    """Where the submitting client uploads images and sends analysis requests."""

    endpoint_url: str = DEFAULT_ENDPOINT_URL
    storage_url: Optional[str] = None
    storage_key: Optional[str] = None
    bucket: str = DEFAULT_BUCKET
    max_image_bytes: int = MAX_IMAGE_BYTES
    request_timeout: float = 120.0

    @classmethod
    def from_env(cls) -> "ClientSettings":
        return cls(
            endpoint_url=os.getenv("TRUTHGUARD_ENDPOINT_URL", DEFAULT_ENDPOINT_URL),
            storage_url=os.environ.get("SUPABASE_URL"),
            storage_key=os.environ.get("SUPABASE_ANON_KEY"),
            bucket=os.getenv("TRUTHGUARD_BUCKET", DEFAULT_BUCKET),
        )
