"""Client for the remote todo service."""

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from todo_sync.exceptions import StoreError
from todo_sync.models import TodoItem

logger = logging.getLogger(__name__)


class RemoteTodoClient:
    """Client for a REST todo service.

    The service assigns integer IDs on creation; those become the mapped IDs
    of the local todos.
    """

    def __init__(
        self,
        base_url: str,
        api_token: str | None = None,
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize remote client.

        Args:
            base_url: Root URL of the todo service API.
            api_token: Bearer token, if the service requires one.
            timeout: Request timeout in seconds.
            http_client: Preconfigured httpx client, mainly for tests.

        Raises:
            ValueError: If no base URL is given.
        """
        if not base_url and http_client is None:
            raise ValueError("Remote todo service URL not configured")

        headers = {"Accept": "application/json"}
        if api_token:
            headers["Authorization"] = f"Bearer {api_token}"

        self.client = http_client or httpx.Client(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
        )

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self.client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise StoreError(f"{method} {url} failed: {e}") from e
        return response

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise StoreError(
                f"{response.request.method} {response.request.url.path} returned invalid JSON: {e}"
            ) from e

    @staticmethod
    def _parse_item(data: Any) -> TodoItem:
        try:
            return TodoItem.from_api_dict(data)
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            raise StoreError(f"Service returned an unusable todo {data!r}: {e}") from e

    def list_items(self) -> list[TodoItem]:
        """List every todo held by the service.

        Raises:
            StoreError: If the request fails or the response cannot be parsed.
        """
        data = self._decode(self._request("GET", "/todos"))
        if not isinstance(data, list):
            raise StoreError(f"GET /todos returned {type(data).__name__}, expected a list")
        return [self._parse_item(item) for item in data]

    def add(self, item: TodoItem) -> int:
        """Create a todo on the service.

        Returns:
            The ID the service assigned.

        Raises:
            StoreError: If the request fails or the response carries no ID.
        """
        payload = item.to_api_dict()
        payload.pop("id")
        data = self._decode(self._request("POST", "/todos", json=payload))

        assigned = data.get("id") if isinstance(data, dict) else None
        if not isinstance(assigned, int) or assigned <= 0:
            raise StoreError(f"Service accepted {item.app_id} without a usable ID: {data!r}")

        logger.debug(f"Service assigned ID {assigned} to {item.app_id}")
        return assigned

    def find_by_mapped_id(self, mapped_id: int) -> TodoItem | None:
        """Fetch a todo by service ID.

        Returns:
            The todo, or None if the service does not know the ID.

        Raises:
            StoreError: If the request fails for any other reason, or the
                response cannot be parsed.
        """
        try:
            response = self.client.get(f"/todos/{mapped_id}")
        except httpx.HTTPError as e:
            raise StoreError(f"GET /todos/{mapped_id} failed: {e}") from e

        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise StoreError(f"GET /todos/{mapped_id} failed: {e}") from e
        return self._parse_item(self._decode(response))

    def update(self, item: TodoItem) -> None:
        """Overwrite the service's copy of a todo.

        Raises:
            StoreError: If the request fails.
        """
        self._request("PUT", f"/todos/{item.mapped_id}", json=item.to_api_dict())

    def remove(self, item: TodoItem) -> None:
        """Delete a todo from the service.

        Raises:
            StoreError: If the request fails.
        """
        self._request("DELETE", f"/todos/{item.mapped_id}")

    def commit(self) -> None:
        """Nothing to do; the service persists every request."""

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self) -> "RemoteTodoClient":
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()
