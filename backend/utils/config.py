"""Configuration from environment."""
import os

PORT = int(os.environ.get("PORT", "8001"))

# When TESTING=true, use test DB URL so tests never touch production.
if os.environ.get("TESTING") == "true":
    DATABASE_URL = os.environ.get("TESTING_DATABASE_URL", "sqlite:///:memory:")
else:
    DATABASE_URL = os.environ.get(
        "DATABASE_URL",
        "sqlite:///./pinpoint.db",
    )

CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("CORS_ORIGINS", "http://localhost:8081,http://127.0.0.1:8081").split(",")
    if origin.strip()
]

# External services. Missing keys make every call fail, which routes shares into the fallback location.
GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY", "")
GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-2.5-flash-lite")
GOOGLE_PLACES_API_KEY = os.environ.get("GOOGLE_PLACES_API_KEY", "")

EXTERNAL_TIMEOUT_S = float(os.environ.get("EXTERNAL_TIMEOUT_S", "10"))
TIKTOK_RETRY_BACKOFF_S = float(os.environ.get("TIKTOK_RETRY_BACKOFF_S", "0.5"))

RECOMMENDATION_RADIUS_KM = float(os.environ.get("RECOMMENDATION_RADIUS_KM", "10"))
RECOMMENDATION_LIMIT = int(os.environ.get("RECOMMENDATION_LIMIT", "20"))
