# src/wormy/runtime/admin_config.py
from __future__ import annotations

"""
Administrator-gated module tunables.

Each module owns one pydantic params model. Mutations are validated as a
whole (field ranges and cross-field rules) before anything is replaced, and
every accepted mutation is reported as a before/after change set.
"""

from typing import Any, Dict, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from wormy.runtime.day_bucket import MAX_DAILY_CAP
from wormy.runtime.errors import InvalidConfiguration, Unauthorized

Json = Dict[str, Any]

P = TypeVar("P", bound="ModuleParams")


class ModuleParams(BaseModel):
    """Base tunables shared by every module."""

    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)

    active: bool = True


class RateLimitedParams(ModuleParams):
    daily_cap: int = Field(default=1, ge=1, le=MAX_DAILY_CAP)


class PitStopParams(RateLimitedParams):
    daily_cap: int = Field(default=3, ge=1, le=MAX_DAILY_CAP)
    reward_amount: int = Field(default=10, gt=0)


class FuelParams(RateLimitedParams):
    fuel_amount: int = Field(default=25, gt=0)


class RaceParams(RateLimitedParams):
    daily_cap: int = Field(default=5, ge=1, le=MAX_DAILY_CAP)
    points_per_race: int = Field(default=1, gt=0)
    season: int = Field(default=1, ge=0)


class FaucetParams(RateLimitedParams):
    min_amount: int = Field(default=1, gt=0)
    max_amount: int = Field(default=100, gt=0)

    @model_validator(mode="after")
    def _range_ordered(self) -> "FaucetParams":
        if self.min_amount > self.max_amount:
            raise ValueError("min_amount_exceeds_max_amount")
        return self


class DailyGameParams(ModuleParams):
    check_in_cap: int = Field(default=1, ge=1, le=MAX_DAILY_CAP)
    vote_cap: int = Field(default=1, ge=1, le=MAX_DAILY_CAP)
    cheer_cap: int = Field(default=1, ge=1, le=MAX_DAILY_CAP)
    predict_cap: int = Field(default=1, ge=1, le=MAX_DAILY_CAP)
    num_vote_options: int = Field(default=4, ge=1)
    check_in_points: int = Field(default=10, ge=0)
    vote_points: int = Field(default=5, ge=0)
    cheer_points: int = Field(default=2, ge=0)
    predict_points: int = Field(default=5, ge=0)


class VestingParams(ModuleParams):
    pass


def _errors(ve: ValidationError) -> list:
    return ve.errors(include_url=False, include_context=False)


def build_params(model: Type[P], raw: Json | None) -> P:
    try:
        return model.model_validate(dict(raw or {}))
    except ValidationError as ve:
        raise InvalidConfiguration(reason="params_validation_failed", details={"model": model.__name__, "errors": _errors(ve)})


class AdministrativeConfig:
    """Tunables plus the single administrator allowed to change them."""

    def __init__(self, *, admin: str, params: ModuleParams) -> None:
        admin_s = str(admin or "").strip()
        if not admin_s:
            raise InvalidConfiguration(reason="missing_admin")
        self._admin = admin_s
        self._params = params

    @property
    def admin(self) -> str:
        return self._admin

    @property
    def params(self) -> ModuleParams:
        return self._params

    def is_admin(self, caller: str) -> bool:
        return str(caller or "").strip() == self._admin

    def require_admin(self, caller: str) -> None:
        if not self.is_admin(caller):
            raise Unauthorized(details={"caller": str(caller)})

    def get(self, key: str) -> Any:
        if key not in type(self._params).model_fields:
            raise InvalidConfiguration(reason="unknown_config_key", details={"key": key})
        return getattr(self._params, key)

    def snapshot(self) -> Json:
        out = self._params.model_dump()
        out["admin"] = self._admin
        return out

    def update(self, caller: str, changes: Json) -> Json:
        """Apply a validated change set; returns {"before": ..., "after": ...} for changed keys."""
        self.require_admin(caller)
        changes = dict(changes or {})
        if not changes:
            raise InvalidConfiguration(reason="empty_change_set")

        fields = type(self._params).model_fields
        unknown = sorted(k for k in changes if k not in fields)
        if unknown:
            raise InvalidConfiguration(reason="unknown_config_key", details={"keys": unknown})

        current = self._params.model_dump()
        merged = dict(current)
        merged.update(changes)
        try:
            new_params = type(self._params).model_validate(merged)
        except ValidationError as ve:
            raise InvalidConfiguration(reason="params_validation_failed", details={"errors": _errors(ve)})

        after = new_params.model_dump()
        self._params = new_params
        return {
            "before": {k: current[k] for k in sorted(changes)},
            "after": {k: after[k] for k in sorted(changes)},
        }

    def set(self, caller: str, key: str, value: Any) -> Json:
        return self.update(caller, {key: value})

    def checkpoint(self) -> tuple:
        return (self._admin, self._params)

    def restore(self, cp: tuple) -> None:
        self._admin, self._params = cp

    def transfer_admin(self, caller: str, new_admin: str) -> Json:
        self.require_admin(caller)
        new_s = str(new_admin or "").strip()
        if not new_s:
            raise InvalidConfiguration(reason="missing_admin")
        before = self._admin
        self._admin = new_s
        return {"before": {"admin": before}, "after": {"admin": new_s}}
