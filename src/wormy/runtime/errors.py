from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class WormyError(Exception):
    """Canonical error type for module calls and tx dispatch failures.

    Every failure is a hard failure of the call: module state is restored
    to what it was before the call began.
    """

    code: str
    reason: str
    details: Any | None = None

    def __str__(self) -> str:  # pragma: no cover
        if self.details is None:
            return f"{self.code}:{self.reason}"
        return f"{self.code}:{self.reason}:{self.details}"


@dataclass
class RateLimitExceeded(WormyError):
    code: str = "rate_limited"
    reason: str = "daily_cap_reached"
    details: Any | None = None


@dataclass
class IdentityVerificationFailed(WormyError):
    code: str = "forbidden"
    reason: str = "identity_verification_failed"
    details: Any | None = None


@dataclass
class InvalidConfiguration(WormyError):
    code: str = "invalid_config"
    reason: str = "invalid_configuration"
    details: Any | None = None


@dataclass
class ModuleInactive(WormyError):
    code: str = "invalid_state"
    reason: str = "module_inactive"
    details: Any | None = None


@dataclass
class InvalidArgument(WormyError):
    code: str = "invalid_payload"
    reason: str = "invalid_argument"
    details: Any | None = None


@dataclass
class ScheduleNotFound(WormyError):
    code: str = "not_found"
    reason: str = "schedule_not_found"
    details: Any | None = None


@dataclass
class ScheduleAlreadyExists(WormyError):
    code: str = "conflict"
    reason: str = "schedule_already_exists"
    details: Any | None = None


@dataclass
class ScheduleRevoked(WormyError):
    code: str = "invalid_state"
    reason: str = "schedule_revoked"
    details: Any | None = None


@dataclass
class NothingToRelease(WormyError):
    code: str = "invalid_state"
    reason: str = "nothing_to_release"
    details: Any | None = None


@dataclass
class InsufficientLedgerBalance(WormyError):
    code: str = "insufficient_funds"
    reason: str = "pool_balance_too_low"
    details: Any | None = None


@dataclass
class TransferFailed(WormyError):
    code: str = "transfer_failed"
    reason: str = "ledger_transfer_failed"
    details: Any | None = None


@dataclass
class ReentrantCall(WormyError):
    code: str = "reentrant_call"
    reason: str = "call_in_progress"
    details: Any | None = None


@dataclass
class Unauthorized(WormyError):
    code: str = "forbidden"
    reason: str = "admin_only"
    details: Any | None = None
