"""Tests for the remote todo service client."""

import json
from collections.abc import Callable

import httpx
import pytest

from todo_sync.exceptions import StoreError
from todo_sync.models import TodoItem
from todo_sync.stores import RemoteTodoClient


def make_client(handler: Callable[[httpx.Request], httpx.Response]) -> RemoteTodoClient:
    """Create a client whose requests are answered by handler."""
    http_client = httpx.Client(
        base_url="https://todos.example.com/api",
        transport=httpx.MockTransport(handler),
    )
    return RemoteTodoClient("https://todos.example.com/api", http_client=http_client)


class TestRemoteTodoClient:
    """Test RemoteTodoClient functionality."""

    def test_requires_base_url(self) -> None:
        """Test that a client cannot be built without a URL."""
        with pytest.raises(ValueError):
            RemoteTodoClient("")

    def test_auth_header(self) -> None:
        """Test that the token is sent as a bearer token."""
        client = RemoteTodoClient("https://todos.example.com/api", api_token="secret")

        assert client.client.headers["Authorization"] == "Bearer secret"
        client.close()

    def test_list_items(self, sample_item: TodoItem) -> None:
        """Test listing todos."""

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "GET"
            assert request.url.path == "/api/todos"
            return httpx.Response(200, json=[sample_item.to_api_dict()])

        with make_client(handler) as client:
            items = client.list_items()

        assert items == [sample_item]

    def test_add_returns_assigned_id(self, make_item: Callable[..., TodoItem]) -> None:
        """Test that creating a todo returns the service's ID."""
        sent = {}

        def handler(request: httpx.Request) -> httpx.Response:
            sent.update(json.loads(request.content))
            return httpx.Response(201, json={"id": 314, "appId": "a"})

        with make_client(handler) as client:
            assigned = client.add(make_item("a"))

        assert assigned == 314
        assert "id" not in sent
        assert sent["appId"] == "a"

    @pytest.mark.parametrize("body", [{}, {"id": 0}, {"id": "7"}, []])
    def test_add_without_usable_id(
        self, make_item: Callable[..., TodoItem], body: object
    ) -> None:
        """Test that a response without a positive integer ID is an error."""
        with make_client(lambda request: httpx.Response(201, json=body)) as client:
            with pytest.raises(StoreError):
                client.add(make_item("a"))

    def test_add_with_non_json_body(self, make_item: Callable[..., TodoItem]) -> None:
        """Test that a body that is not JSON surfaces as StoreError."""
        with make_client(lambda request: httpx.Response(201, content=b"created")) as client:
            with pytest.raises(StoreError, match="invalid JSON"):
                client.add(make_item("a"))

    @pytest.mark.parametrize(
        "record",
        [
            {"id": 5, "summary": "no app ID or timestamps"},
            {"id": 5, "appId": "a", "createdAt": "yesterday", "modifiedAt": "today"},
            {"id": 5, "appId": "a", "createdAt": "2024-01-01T00:00:00Z",
             "modifiedAt": "2024-01-01T00:00:00Z", "priority": 42},
        ],
    )
    def test_unusable_record(self, record: dict) -> None:
        """Test that records missing fields or holding bad values surface as StoreError."""

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/api/todos":
                return httpx.Response(200, json=[record])
            return httpx.Response(200, json=record)

        with make_client(handler) as client:
            with pytest.raises(StoreError):
                client.list_items()
            with pytest.raises(StoreError):
                client.find_by_mapped_id(5)

    def test_list_not_a_list(self) -> None:
        """Test that a listing which is not a JSON array is rejected."""
        with make_client(lambda request: httpx.Response(200, json={"todos": []})) as client:
            with pytest.raises(StoreError):
                client.list_items()

    def test_find_by_mapped_id(self, sample_item: TodoItem) -> None:
        """Test fetching a todo by service ID."""

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/api/todos/42":
                return httpx.Response(200, json=sample_item.to_api_dict())
            return httpx.Response(404)

        with make_client(handler) as client:
            assert client.find_by_mapped_id(42) == sample_item
            assert client.find_by_mapped_id(43) is None

    def test_update_and_remove(self, make_item: Callable[..., TodoItem]) -> None:
        """Test the requests sent for updates and deletions."""
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append((request.method, request.url.path))
            return httpx.Response(204)

        item = make_item("a", mapped_id=5)
        with make_client(handler) as client:
            client.update(item)
            client.remove(item)

        assert requests == [("PUT", "/api/todos/5"), ("DELETE", "/api/todos/5")]

    def test_server_error_raises_store_error(self, make_item: Callable[..., TodoItem]) -> None:
        """Test that HTTP failures surface as StoreError."""
        with make_client(lambda request: httpx.Response(500)) as client:
            with pytest.raises(StoreError):
                client.update(make_item("a", mapped_id=5))
            with pytest.raises(StoreError):
                client.find_by_mapped_id(5)

    def test_connection_error_raises_store_error(self) -> None:
        """Test that transport failures surface as StoreError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with make_client(handler) as client:
            with pytest.raises(StoreError):
                client.list_items()
