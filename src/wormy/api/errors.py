from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from wormy.runtime.errors import WormyError

_STATUS_BY_CODE = {
    "not_found": 404,
    "forbidden": 403,
    "rate_limited": 429,
    "invalid_payload": 400,
    "invalid_config": 400,
}


@dataclass
class ApiError(Exception):
    status_code: int
    code: str
    message: str
    details: Dict[str, Any]

    def to_json(self) -> Dict[str, Any]:
        return {"ok": False, "error": {"code": self.code, "message": self.message, "details": self.details}}

    @staticmethod
    def bad_request(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(400, code, message, details or {})

    @staticmethod
    def not_found(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(404, code, message, details or {})

    @staticmethod
    def internal(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(500, code, message, details or {})

    @staticmethod
    def from_wormy(err: WormyError) -> "ApiError":
        details = err.details if isinstance(err.details, dict) else {"details": err.details}
        return ApiError(_STATUS_BY_CODE.get(err.code, 409), err.code, err.reason, details)
