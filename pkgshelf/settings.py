import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union

from .errors import ConfigurationError

DEFAULT_LIBRARY = {"root": "data", "catalogs": "json", "images": "covers"}
DEFAULT_CATEGORIES = ("games", "apps", "updates", "DLC", "demos", "homebrew")
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class ShelfConfig:
    host: str                   # address advertised in catalog urls
    port: int
    library_root: Path
    catalog_dir: Path
    image_dir_name: str = "covers"
    scan_workers: int = 1
    log_level: str = "INFO"
    base_dir: Optional[Path] = None     # where background.png lives

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def image_dir(self) -> Path:
        return self.library_root / self.image_dir_name


def _resolve(base: Path, value: str) -> Path:
    p = Path(value).expanduser()
    return p if p.is_absolute() else (base / p)


def config_from_dict(data: Dict, base_dir: Union[str, Path]) -> ShelfConfig:
    base = Path(base_dir)
    server = data.get("server")
    if not isinstance(server, dict):
        raise ConfigurationError("config is missing the 'server' section")

    host = server.get("ip")
    if not isinstance(host, str) or not host.strip():
        raise ConfigurationError("server.ip must be a non-empty string")
    port = server.get("port")
    if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
        raise ConfigurationError(f"server.port must be an integer 1-65535, got {port!r}")

    library = dict(DEFAULT_LIBRARY)
    raw_lib = data.get("library", {})
    if not isinstance(raw_lib, dict):
        raise ConfigurationError("'library' must be an object")
    library.update({k: raw_lib[k] for k in DEFAULT_LIBRARY if k in raw_lib})
    for k, v in library.items():
        if not isinstance(v, str) or not v:
            raise ConfigurationError(f"library.{k} must be a non-empty string")
    if Path(library["images"]).name != library["images"]:
        raise ConfigurationError("library.images must be a plain directory name")

    workers = data.get("scan_workers", 1)
    if isinstance(workers, bool) or not isinstance(workers, int) or workers < 1:
        raise ConfigurationError("scan_workers must be a positive integer")
    level = str(data.get("log_level", "INFO")).upper()
    if level not in LOG_LEVELS:
        raise ConfigurationError(f"log_level must be one of {sorted(LOG_LEVELS)}")

    return ShelfConfig(
        host=host.strip(),
        port=port,
        library_root=_resolve(base, library["root"]),
        catalog_dir=_resolve(base, library["catalogs"]),
        image_dir_name=library["images"],
        scan_workers=workers,
        log_level=level,
        base_dir=base,
    )


def load_settings(config_file: Union[str, Path]) -> ShelfConfig:
    config_file = Path(config_file)
    try:
        data = json.loads(config_file.read_text("utf-8"))
    except OSError as e:
        raise ConfigurationError(f"cannot read config: {e}", path=str(config_file)) from e
    except ValueError as e:
        raise ConfigurationError(f"config is not valid JSON: {e}", path=str(config_file)) from e
    if not isinstance(data, dict):
        raise ConfigurationError("config must be a JSON object", path=str(config_file))
    try:
        return config_from_dict(data, config_file.resolve().parent)
    except ConfigurationError as e:
        raise ConfigurationError(e.message, path=str(config_file)) from e
