"""HTTP client for the user registration API."""

import logging
from typing import Any, Dict, List

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-2xx response from the API, with its decoded body."""

    def __init__(self, status_code: int, body: Any):
        self.status_code = status_code
        self.body = body
        super().__init__(f"API responded with status {status_code}")


class UserApiClient:
    """Thin wrapper over the ``/api/users`` endpoints.

    Pass ``http`` to reuse an existing ``httpx.Client`` (for instance a
    FastAPI ``TestClient``); otherwise one is created for ``base_url``.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:5000",
        http: httpx.Client | None = None,
        timeout: float = 10.0,
    ):
        self._owns_http = http is None
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)

    def _request(self, method: str, path: str, **kwargs) -> Any:
        response = self.http.request(method, path, **kwargs)
        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = {}
            raise ApiError(response.status_code, body)
        return response.json()

    def list_users(self) -> List[Dict[str, Any]]:
        users = self._request("GET", "/api/users")
        if not isinstance(users, list):
            raise ValueError("Unexpected user list payload")
        return users

    def get_user(self, user_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/api/users/{user_id}")

    def create_user(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/api/users", json=data)

    def update_user(self, user_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"/api/users/{user_id}", json=data)

    def delete_user(self, user_id: int) -> Dict[str, Any]:
        return self._request("DELETE", f"/api/users/{user_id}")

    def close(self) -> None:
        if self._owns_http:
            self.http.close()
