from collabkit.api.client import ApiClient, ApiError, TransportError, build_client, error_message, is_public_path

__all__ = [
    "ApiClient",
    "ApiError",
    "TransportError",
    "build_client",
    "error_message",
    "is_public_path",
]
