# pkgshelf/launch.py
from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import List, Optional

import structlog

from . import BIND, create_app, ensure_layout
from .errors import ConfigurationError
from .logging import setup_logging
from .scanning import LibraryScanner
from .settings import ShelfConfig, load_settings

log = structlog.stdlib.get_logger()


def resolve_config_path(argv: List[str]) -> Path:
    if len(argv) >= 2:
        return Path(argv[1]).resolve()
    return Path(os.environ.get("PKGSHELF_CONFIG", "config.json")).resolve()


def load_or_exit(config_path: Path) -> ShelfConfig:
    try:
        return load_settings(config_path)
    except ConfigurationError as e:
        raise SystemExit(f"Error loading {config_path}: {e.message}")


def main(argv: Optional[List[str]] = None) -> None:
    argv = sys.argv if argv is None else argv
    config = load_or_exit(resolve_config_path(argv))
    setup_logging(config.log_level)
    ensure_layout(config)

    scanner = LibraryScanner(config)
    app = create_app(config, scanner)
    log.info("Package server starting", url=f"{config.base_url}/", bind=BIND,
             library=str(config.library_root), catalogs=str(config.catalog_dir))
    scanner.scan()
    app.run(host=BIND, port=config.port, debug=False)
