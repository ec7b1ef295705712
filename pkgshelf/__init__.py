import os
from typing import Optional

from flask import Flask

from .routes import bp as routes_bp
from .scanning import LibraryScanner
from .settings import DEFAULT_CATEGORIES, ShelfConfig

# Listen on every interface unless overridden; catalogs advertise config.host
BIND = os.environ.get("BIND", "0.0.0.0")


def ensure_layout(config: ShelfConfig, categories=DEFAULT_CATEGORIES) -> None:
    """Create the catalog dir, the cover store and the default category dirs."""
    for d in [config.catalog_dir, config.image_dir] + [config.library_root / c for c in categories]:
        d.mkdir(parents=True, exist_ok=True)


def create_app(config: ShelfConfig, scanner: Optional[LibraryScanner] = None) -> Flask:
    app = Flask(__name__)
    app.config["APP_TITLE"] = "Package Shelf"
    app.config["SHELF_CONFIG"] = config
    app.config["SCANNER"] = scanner or LibraryScanner(config)
    app.config["BACKGROUND_FILE"] = "background.png"

    app.register_blueprint(routes_bp)
    return app
