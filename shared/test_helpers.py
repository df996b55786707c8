"""
Test helper functions and factory methods for the POS client.
"""

import json
from typing import Any, Dict, List, Optional, Set, Tuple

import httpx


def create_license_payload(status: str = "ACTIVE",
                           license_type: str = "TRIAL",
                           days_remaining: int = 15,
                           read_only: Optional[bool] = None) -> Dict[str, Any]:
    """Create a license state body as returned by GET /license/state."""
    if read_only is None:
        read_only = status == "EXPIRED"
    return {
        "status": status,
        "license_type": license_type,
        "days_remaining": days_remaining,
        "read_only": read_only
    }


def create_mock_user(user_id: int = 1,
                     username: str = "admin",
                     full_name: str = "Store Admin",
                     role_id: int = 1) -> Dict[str, Any]:
    """Create a user object as returned by /auth/login."""
    return {
        "id": user_id,
        "username": username,
        "full_name": full_name,
        "role_id": role_id
    }


class StubLicenseBackend:
    """In-memory license service served through httpx.MockTransport.

    Paths listed in ``failing`` answer 503; when ``down`` is set every
    request fails with a connection error. Every request is recorded.
    """

    def __init__(self, state: Optional[Dict[str, Any]] = None, is_first_run: bool = False):
        self.state = state or create_license_payload()
        self.is_first_run = is_first_run
        self.activation_response: Dict[str, Any] = {"success": True, "message": "License activated successfully!"}
        self.activation_status = 200
        self.failing: Set[str] = set()
        self.down = False
        self.requests: List[Tuple[str, str, Any]] = []

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def count(self, path: str, method: Optional[str] = None) -> int:
        return len([
            r for r in self.requests
            if r[1] == path and (method is None or r[0] == method)
        ])

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.method, path, body))

        if self.down:
            raise httpx.ConnectError("connection refused", request=request)
        if path in self.failing:
            return httpx.Response(503, json={"message": "unavailable"})

        if path == "/license/state":
            return httpx.Response(200, json=self.state)
        if path == "/license/reconcile":
            return httpx.Response(200, json={"ok": True})
        if path == "/license/activate":
            return httpx.Response(self.activation_status, json=self.activation_response)
        if path == "/license/first-run":
            return httpx.Response(200, json={"is_first_run": self.is_first_run})
        if path == "/license/first-run/seen":
            self.is_first_run = False
            return httpx.Response(200, json={"ok": True})
        if path == "/health":
            return httpx.Response(200, json={"status": "ok"})
        return httpx.Response(404, json={"message": "not found"})


class StubDataBackend:
    """In-memory data service: login plus canned CRUD answers."""

    def __init__(self, users: Optional[Dict[str, Dict[str, Any]]] = None):
        self.users = users or {
            "admin": create_mock_user(),
            "cashier": create_mock_user(user_id=2, username="cashier", full_name="Front Desk", role_id=2),
            "stock": create_mock_user(user_id=3, username="stock", full_name="Back Room", role_id=3),
        }
        self.password = "secret"
        self.requests: List[Tuple[str, str, Any]] = []

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def count(self, path: str, method: Optional[str] = None) -> int:
        return len([
            r for r in self.requests
            if r[1] == path and (method is None or r[0] == method)
        ])

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.method, path, body))

        if path == "/auth/login":
            user = self.users.get(body.get("username"))
            if user is None or body.get("password") != self.password:
                return httpx.Response(401, json={"success": False, "message": "Invalid username or password"})
            return httpx.Response(200, json={"success": True, "user": user})
        if path == "/health":
            return httpx.Response(200, json={"status": "ok"})

        if request.method == "GET":
            return httpx.Response(200, json=[])
        if request.method == "POST":
            return httpx.Response(201, json=dict(body or {}, id=1))
        return httpx.Response(200, json=dict(body or {}))
