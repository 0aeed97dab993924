"""CLI entrypoint for selecty."""

from __future__ import annotations

import argparse
from importlib import metadata
from pathlib import Path
from typing import Sequence

from .app import SelectyApp
from .config import ensure_config_dir, load_config


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="selecty", description="Selecty stylist consultation TUI")
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to an alternative config.toml",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Ensure configuration exists, handle CLI flags, and run the TUI."""

    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.version:
        try:
            version = metadata.version("selecty")
        except metadata.PackageNotFoundError:
            version = "0.0.0"
        print(f"selecty {version}")
        return

    ensure_config_dir()
    config = load_config(args.config) if args.config is not None else None
    app = SelectyApp(config=config)
    app.run()


if __name__ == "__main__":
    main()
