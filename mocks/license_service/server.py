"""
Mock license service implementing the backend license operations.
"""

import math
from datetime import datetime, timedelta
from typing import Dict, Optional, Set

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from shared.logging import get_logger


GRACE_DAYS = 3
CODE_DAYS = {"M": 30, "A": 365}
_BASE36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


class ActivateRequest(BaseModel):
    code: str


def code_checksum(data: str) -> str:
    """Four base-36 characters from a position-weighted character sum."""
    total = 0
    for index, char in enumerate(data):
        total = (total + ord(char) * (index + 1)) & 0xFFFFFFFF

    digits = []
    for _ in range(4):
        digits.append(_BASE36[total % 36])
        total //= 36
    return "".join(reversed(digits))


def make_code(kind: str, first: str, second: str) -> str:
    """Build a valid POS-{M|A}-XXXX-XXXX-CCCC code."""
    return f"POS-{kind}-{first}-{second}-{code_checksum(first + second)}"


def parse_code(code: str) -> Optional[str]:
    """Return the license kind for a well-formed, checksummed code."""
    parts = code.split("-")
    if len(parts) != 5 or parts[0] != "POS" or parts[1] not in CODE_DAYS:
        return None
    if not all(len(part) == 4 and part.isalnum() for part in parts[2:]):
        return None
    if parts[4] != code_checksum(parts[2] + parts[3]):
        return None
    return parts[1]


class MockLicenseServer:
    """Mock license service backed by a single in-memory license record."""

    def __init__(self, trial_days: float = 15, port: int = 8020, now=datetime.now):
        self.port = port
        self.now = now
        self.logger = get_logger("mock.license_service")
        self.app = FastAPI(title="Mock License Service", version="1.0.0")

        self.license_type = "TRIAL"
        self.status = "ACTIVE"
        self.expires_at = self.now() + timedelta(days=trial_days)
        self.first_run_seen = False
        self.used_codes: Set[str] = set()
        self.calls: Dict[str, int] = {}
        self.fail_reconcile = False

        self._setup_routes()

    def set_days_remaining(self, days: float):
        self.expires_at = self.now() + timedelta(days=days)

    def days_remaining(self) -> int:
        # Truncation toward zero, matching the reference bookkeeping
        delta = (self.expires_at - self.now()).total_seconds() / 86400
        return int(math.trunc(delta))

    def compute_status(self) -> str:
        days = self.days_remaining()
        if days > 0:
            return "ACTIVE"
        if days >= -GRACE_DAYS:
            return "GRACE"
        return "EXPIRED"

    def state(self) -> Dict[str, object]:
        return {
            "status": self.status,
            "license_type": self.license_type,
            "days_remaining": self.days_remaining(),
            "read_only": self.status == "EXPIRED"
        }

    def _count(self, name: str):
        self.calls[name] = self.calls.get(name, 0) + 1

    def _setup_routes(self):
        """Set up mock license routes."""

        @self.app.get("/health")
        async def health():
            return {"status": "ok"}

        @self.app.get("/license/state")
        async def license_state():
            self._count("state")
            return self.state()

        @self.app.post("/license/reconcile")
        async def reconcile():
            self._count("reconcile")
            if self.fail_reconcile:
                return _error_response(503, "Reconcile unavailable")
            new_status = self.compute_status()
            if new_status != self.status:
                self.logger.info("License status changed", old=self.status, new=new_status)
                self.status = new_status
            return {"ok": True}

        @self.app.post("/license/activate")
        async def activate(request: ActivateRequest):
            self._count("activate")
            code = request.code
            kind = parse_code(code)
            if kind is None:
                return {"success": False, "message": "Invalid code. Expected format: POS-M-XXXX-XXXX-XXXX"}
            if code in self.used_codes:
                return {"success": False, "message": "This code has already been used."}

            self.used_codes.add(code)
            self.license_type = "PAID"
            self.status = "ACTIVE"
            self.expires_at = self.now() + timedelta(days=CODE_DAYS[kind])
            self.logger.info("License activated", kind=kind)
            return {
                "success": True,
                "message": "License activated successfully!",
                "read_only": False,
                "state": self.state()
            }

        @self.app.get("/license/first-run")
        async def first_run():
            self._count("first_run")
            return {"is_first_run": not self.first_run_seen}

        @self.app.post("/license/first-run/seen")
        async def first_run_seen():
            self._count("first_run_seen")
            self.first_run_seen = True
            return {"ok": True}


def _error_response(status_code: int, message: str):
    return JSONResponse(status_code=status_code, content={"message": message})


def create_app() -> FastAPI:
    return MockLicenseServer().app


if __name__ == "__main__":
    import uvicorn
    server = MockLicenseServer()
    uvicorn.run(server.app, host="127.0.0.1", port=server.port)
