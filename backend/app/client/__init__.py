from app.client.api_client import ApiError, StudentApiClient
from app.client.cache import TTLCache

__all__ = ["ApiError", "StudentApiClient", "TTLCache"]
