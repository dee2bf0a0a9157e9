# src/wormy/env.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

_LOADED = False


def dotenv_path(explicit: Optional[str] = None) -> Path:
    """``explicit`` if given, else WORMY_DOTENV_PATH, else ./.env."""
    return Path(explicit or os.getenv("WORMY_DOTENV_PATH") or ".env").expanduser()


def load_dotenv_if_present(explicit: Optional[str] = None) -> bool:
    """Load the node's .env at most once per process; never overrides variables already set.

    True only when a file existed and was read on this call.
    """
    global _LOADED
    if _LOADED:
        return False
    _LOADED = True

    path = dotenv_path(explicit)
    if not path.is_file():
        return False
    load_dotenv(dotenv_path=str(path), override=False)
    return True
