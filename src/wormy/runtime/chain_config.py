# src/wormy/runtime/chain_config.py
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

Json = Dict[str, Any]

MODULE_NAMES = ("pitstop", "fuel", "race", "faucet", "game", "vesting")

_ALLOWED_MODES = {"dev", "testnet", "prod"}


def _as_int(v: Any, default: int) -> int:
    try:
        return int(v)
    except Exception:
        return int(default)


def _as_str(v: Any, default: str) -> str:
    if v is None:
        return str(default)
    s = str(v)
    return s if s.strip() else str(default)


def _as_dict(v: Any) -> Json:
    return v if isinstance(v, dict) else {}


@dataclass(frozen=True)
class ChainConfig:
    chain_id: str
    mode: str  # "dev" | "testnet" | "prod"

    admin: str
    seconds_per_day: int
    start_time: int

    # Hex/base64 Ed25519 public key of the proof-of-humanity authority.
    poh_authority_pubkey: str

    api_host: str
    api_port: int

    log_level: str

    # Initial tunables per module name (see wormy.runtime.admin_config).
    modules: Json = field(default_factory=dict)
    # Tokens minted into each module pool at boot (dev/testnet only).
    initial_pools: Dict[str, int] = field(default_factory=dict)


def validate_chain_config(cfg: ChainConfig) -> None:
    """Fail-fast validation for operator config."""

    if not isinstance(cfg.chain_id, str) or not cfg.chain_id.strip():
        raise ValueError("chain_id must be a non-empty string")

    mode = str(cfg.mode or "").strip().lower()
    if mode not in _ALLOWED_MODES:
        raise ValueError(f"mode must be one of {sorted(_ALLOWED_MODES)}; got: {cfg.mode!r}")

    if not isinstance(cfg.admin, str) or not cfg.admin.strip():
        raise ValueError("admin must be a non-empty string")

    if int(cfg.seconds_per_day) <= 0:
        raise ValueError(f"seconds_per_day must be > 0; got: {cfg.seconds_per_day}")

    if int(cfg.start_time) < 0:
        raise ValueError(f"start_time must be >= 0; got: {cfg.start_time}")

    if mode != "dev" and not str(cfg.poh_authority_pubkey or "").strip():
        raise ValueError("poh_authority_pubkey is required outside dev mode")

    if int(cfg.api_port) <= 0 or int(cfg.api_port) > 65535:
        raise ValueError(f"api_port must be 1..65535; got: {cfg.api_port}")

    unknown = sorted(set(cfg.modules) - set(MODULE_NAMES))
    if unknown:
        raise ValueError(f"unknown modules in config: {unknown}")
    for name, params in cfg.modules.items():
        if not isinstance(params, dict):
            raise ValueError(f"modules.{name} must be a mapping")

    unknown_pools = sorted(set(cfg.initial_pools) - set(MODULE_NAMES))
    if unknown_pools:
        raise ValueError(f"unknown modules in initial_pools: {unknown_pools}")
    if cfg.initial_pools and mode == "prod":
        raise ValueError("initial_pools is not allowed in prod mode")
    for name, amount in cfg.initial_pools.items():
        if int(amount) < 0:
            raise ValueError(f"initial_pools.{name} must be >= 0")


def default_chain_config() -> ChainConfig:
    return ChainConfig(
        chain_id="wormy-dev",
        # Production-safe default: no implicit dev posture.
        mode="prod",
        admin="wormy-admin",
        seconds_per_day=86_400,
        start_time=0,
        poh_authority_pubkey="",
        api_host="127.0.0.1",
        api_port=8080,
        log_level="INFO",
    )


def _read_raw(p: Path) -> Json:
    text = p.read_text(encoding="utf-8")
    if p.suffix.lower() in {".yaml", ".yml"}:
        raw = yaml.safe_load(text)
    else:
        raw = json.loads(text)
    if not isinstance(raw, dict):
        raise ValueError("config must be a JSON/YAML object")
    return raw


def chain_config_from_dict(raw: Json) -> ChainConfig:
    d = default_chain_config()
    cfg = ChainConfig(
        chain_id=_as_str(raw.get("chain_id"), d.chain_id),
        mode=_as_str(raw.get("mode"), d.mode).strip().lower(),
        admin=_as_str(raw.get("admin"), d.admin),
        seconds_per_day=_as_int(raw.get("seconds_per_day"), d.seconds_per_day),
        start_time=_as_int(raw.get("start_time"), d.start_time),
        poh_authority_pubkey=_as_str(raw.get("poh_authority_pubkey"), d.poh_authority_pubkey),
        api_host=_as_str(raw.get("api_host"), d.api_host),
        api_port=_as_int(raw.get("api_port"), d.api_port),
        log_level=_as_str(raw.get("log_level"), d.log_level),
        modules={str(k): v for k, v in _as_dict(raw.get("modules")).items()},
        initial_pools={str(k): _as_int(v, 0) for k, v in _as_dict(raw.get("initial_pools")).items()},
    )
    validate_chain_config(cfg)
    return cfg


def read_chain_config_file(path: str) -> ChainConfig:
    return chain_config_from_dict(_read_raw(Path(path)))


def load_chain_config(*, config_path: Optional[str] = None) -> ChainConfig:
    """Load config from ``config_path`` or WORMY_CONFIG_PATH; env vars override a few fields."""
    p = config_path or os.environ.get("WORMY_CONFIG_PATH")
    raw: Json = _read_raw(Path(p)) if p else {}

    for key, env_name in (
        ("mode", "WORMY_MODE"),
        ("admin", "WORMY_ADMIN"),
        ("poh_authority_pubkey", "WORMY_POH_AUTHORITY_PUBKEY"),
        ("log_level", "WORMY_LOG_LEVEL"),
    ):
        v = os.environ.get(env_name)
        if v is not None and v.strip():
            raw[key] = v.strip()

    return chain_config_from_dict(raw)
