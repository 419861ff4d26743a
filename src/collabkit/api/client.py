from __future__ import annotations

import asyncio
import logging
import re
import threading
import time
from typing import Any, Callable, Dict, Optional

import requests

from collabkit.config.loader import resolve_api_settings

LOGGER = logging.getLogger("collabkit.api")

_PUBLIC_PATH_PATTERNS = [
    re.compile(r"^/?auth/(login|register|signin|signup|refresh|verify|otp|forgot|reset)", re.IGNORECASE),
    re.compile(r"^/?(login|register|signin|signup|forgot-password|reset-password|verify-otp|otp)", re.IGNORECASE),
    re.compile(r"^/?public/", re.IGNORECASE),
]


class ApiError(RuntimeError):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TransportError(ApiError):
    pass


def is_public_path(path: str) -> bool:
    bare = (path or "").split("?", 1)[0]
    return any(pattern.search(bare) for pattern in _PUBLIC_PATH_PATTERNS)


def error_message(err: BaseException, fallback: str) -> str:
    message = getattr(err, "message", None)
    if isinstance(message, str) and message.strip():
        return message.strip()
    text = str(err).strip()
    return text or fallback


class ApiClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 20.0,
        token: str = "",
        on_unauthorized: Optional[Callable[[], None]] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.token = token
        self.on_unauthorized = on_unauthorized
        self.session = requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        # requests.Session is shared by every to_thread worker.
        self._session_lock = threading.Lock()

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        response = self._request("GET", path, params=params)
        return self._json(response)

    def get_bytes(self, path: str, params: Optional[Dict[str, Any]] = None) -> bytes:
        response = self._request("GET", path, params=params)
        return response.content

    def post(self, path: str, body: Optional[Dict[str, Any]] = None) -> Any:
        response = self._request("POST", path, json=body)
        return self._json(response)

    async def aget(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await asyncio.to_thread(self.get, path, params)

    async def aget_bytes(self, path: str, params: Optional[Dict[str, Any]] = None) -> bytes:
        return await asyncio.to_thread(self.get_bytes, path, params)

    async def apost(self, path: str, body: Optional[Dict[str, Any]] = None) -> Any:
        return await asyncio.to_thread(self.post, path, body)

    def close(self) -> None:
        self.session.close()

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self, path: str) -> Dict[str, str]:
        if not self.token or is_public_path(path):
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = self._url(path)
        start = time.perf_counter()
        LOGGER.info(f"[api] {method} {path}")
        try:
            with self._session_lock:
                response = self.session.request(
                    method,
                    url,
                    headers=self._headers(path),
                    timeout=self.timeout,
                    **kwargs,
                )
        except requests.RequestException as err:
            LOGGER.error(f"[api] {method} {path} transport failure: {err}")
            raise TransportError(f"Network error: {err}") from err

        elapsed = time.perf_counter() - start
        if response.status_code == 401 and not is_public_path(path):
            LOGGER.warning(f"[api] {method} {path} unauthorized; clearing session token")
            self.token = ""
            if self.on_unauthorized is not None:
                self.on_unauthorized()
        if response.status_code >= 400:
            message = _server_message(response)
            LOGGER.error(f"[api] {method} {path} -> HTTP {response.status_code}: {message}")
            raise ApiError(message, status_code=response.status_code)

        LOGGER.info(f"[api] {method} {path} -> HTTP {response.status_code} elapsed={elapsed:.2f}s")
        return response

    def _json(self, response: requests.Response) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as err:
            raise ApiError(f"Invalid JSON response: {err}", status_code=response.status_code) from err


def _server_message(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        for key in ("message", "error"):
            value = data.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return f"HTTP {response.status_code}"


def build_client(cfg: Dict[str, Any], on_unauthorized: Optional[Callable[[], None]] = None) -> ApiClient:
    settings = resolve_api_settings(cfg)
    return ApiClient(
        base_url=str(settings["base_url"] or ""),
        timeout=float(settings["timeout"] or 20.0),
        token=str(settings["token"] or ""),
        on_unauthorized=on_unauthorized,
    )
