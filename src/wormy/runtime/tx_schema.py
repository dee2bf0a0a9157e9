from __future__ import annotations

"""Transaction payload schemas.

Strict shape checks (types, required keys, no unknown keys) run before a
payload reaches a module. Modules still enforce semantics (caps, ranges,
schedule state).
"""

from typing import Any, Dict, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from wormy.runtime.chain_config import MODULE_NAMES
from wormy.runtime.errors import InvalidArgument

Json = Dict[str, Any]

_HEX = r"^[0-9a-fA-F]+$"


class _StrictModel(BaseModel):
    """Strict model: reject unknown keys."""

    model_config = ConfigDict(extra="forbid")


class PohGatedPayload(_StrictModel):
    poh_sig: str = Field(..., min_length=2, pattern=_HEX)

    def poh_sig_bytes(self) -> bytes:
        return bytes.fromhex(self.poh_sig) if len(self.poh_sig) % 2 == 0 else b""


class VotePayload(PohGatedPayload):
    option: int = Field(..., ge=0)


class CheerPayload(PohGatedPayload):
    target: str = Field(..., min_length=1)


class PredictPayload(PohGatedPayload):
    value: int


class VestingCreatePayload(_StrictModel):
    beneficiary: str = Field(..., min_length=1)
    start_time: int
    duration: int
    total_amount: int


class VestingBeneficiaryPayload(_StrictModel):
    beneficiary: str = Field(..., min_length=1)


class ConfigSetPayload(_StrictModel):
    module: str = Field(..., min_length=1)
    changes: Dict[str, Any] = Field(..., min_length=1)


class AdminTransferPayload(_StrictModel):
    module: str = Field(..., min_length=1)
    new_admin: str = Field(..., min_length=1)


TX_SCHEMAS: Dict[str, Type[_StrictModel]] = {
    "PIT_STOP": PohGatedPayload,
    "FUEL_CLAIM": PohGatedPayload,
    "RACE_ENTER": PohGatedPayload,
    "FAUCET_CLAIM": PohGatedPayload,
    "GAME_CHECK_IN": PohGatedPayload,
    "GAME_VOTE": VotePayload,
    "GAME_CHEER": CheerPayload,
    "GAME_PREDICT": PredictPayload,
    "VESTING_CREATE": VestingCreatePayload,
    "VESTING_RELEASE": VestingBeneficiaryPayload,
    "VESTING_REVOKE": VestingBeneficiaryPayload,
    "CONFIG_SET": ConfigSetPayload,
    "ADMIN_TRANSFER": AdminTransferPayload,
}


def schema_for(tx_type: str) -> Optional[Type[_StrictModel]]:
    return TX_SCHEMAS.get(str(tx_type or "").strip().upper())


def validate_payload(tx_type: str, payload: Any) -> _StrictModel:
    """Parse ``payload`` with the schema for ``tx_type``; raise InvalidArgument on mismatch."""
    sch = schema_for(tx_type)
    if sch is None:
        raise InvalidArgument(code="tx_unimplemented", reason="tx_type_not_implemented", details={"tx_type": tx_type})
    if not isinstance(payload, dict):
        raise InvalidArgument(reason="payload_must_be_object", details={"tx_type": tx_type})
    try:
        model = sch.model_validate(payload)
    except ValidationError as ve:
        raise InvalidArgument(
            reason="payload_schema_mismatch",
            details={"tx_type": tx_type, "errors": ve.errors(include_url=False, include_context=False)},
        )
    module = getattr(model, "module", None)
    if module is not None and module not in MODULE_NAMES:
        raise InvalidArgument(reason="unknown_module", details={"module": module})
    return model
