# src/wormy/api/__main__.py
from __future__ import annotations

import argparse
import os
from typing import Optional

import uvicorn

from wormy.env import load_dotenv_if_present


def main(argv: Optional[list[str]] = None) -> int:
    load_dotenv_if_present()

    p = argparse.ArgumentParser(description="Wormy public API (module status, game, race and vesting queries)")
    p.add_argument("--config", default=os.environ.get("WORMY_CONFIG_PATH", ""))
    p.add_argument("--host", default="")
    p.add_argument("--port", type=int, default=0)
    args = p.parse_args(argv)

    # The executor is booted inside create_app and reads the same path.
    if args.config:
        os.environ["WORMY_CONFIG_PATH"] = args.config

    from wormy.api.app import create_app
    from wormy.runtime.chain_config import load_chain_config
    from wormy.util.structured_logging import configure_structured_logging

    cfg = load_chain_config()
    configure_structured_logging(cfg.log_level)

    uvicorn.run(
        create_app(),
        host=args.host or cfg.api_host,
        port=int(args.port or cfg.api_port),
        log_level=cfg.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
