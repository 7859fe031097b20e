from __future__ import annotations

import argparse
import sys

from .config import Settings, bootstrap_env
from .dispatch import build_runtime
from .logs import configure_logging, rich_error
from .mcp_server import serve_stdio


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--log-level", default="")
    args, _ = parser.parse_known_args(sys.argv[1:] if argv is None else list(argv))
    try:
        bootstrap_env()
        settings = Settings.from_env()
        # stdout carries the protocol; logs go to stderr only.
        configure_logging(str(args.log_level or "").strip() or settings.log_level)
        return serve_stdio(build_runtime(settings))
    except Exception as e:
        rich_error(str(e))
        return 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
