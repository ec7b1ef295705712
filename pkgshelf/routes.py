from __future__ import annotations
from pathlib import Path
from flask import Blueprint, current_app, render_template_string, send_from_directory, jsonify

import structlog

from .catalog import CATALOG_EXT
from .errors import CatalogError
from .templates import INDEX_HTML

log = structlog.stdlib.get_logger()

bp = Blueprint("pkgshelf", __name__)


def _cfg():
    c = current_app.config
    return c["SHELF_CONFIG"], c["SCANNER"], c["APP_TITLE"]


def _not_found(message: str):
    return jsonify({"error": message}), 404


@bp.get("/")
def index():
    config, scanner, app_title = _cfg()
    catalogs, counts = [], {}
    if config.catalog_dir.is_dir():
        for p in sorted(config.catalog_dir.glob(f"*{CATALOG_EXT}")):
            name = p.stem
            catalogs.append(name)
            try:
                counts[name] = len(scanner.writer.load(name)["DATA"])
            except CatalogError:
                counts[name] = "?"
    return render_template_string(
        INDEX_HTML,
        app_title=app_title,
        catalogs=catalogs,
        counts=counts,
        categories=scanner.categories(),
        base_url=config.base_url,
        library_root=str(config.library_root),
    )


@bp.get("/refresh")
def refresh():
    _, scanner, _ = _cfg()
    log.info("Library refresh requested")
    report = scanner.scan()
    return (f"Library refresh finished: {report.recorded} package(s) catalogued, "
            f"{report.failed} failed. Check the JSON files for the results.")


@bp.get("/pkg/<path:filename>")
def package_file(filename):
    config, _, _ = _cfg()
    return send_from_directory(config.library_root, filename)


@bp.get("/images/<path:filename>")
def cover_image(filename):
    config, _, _ = _cfg()
    return send_from_directory(config.image_dir, filename)


@bp.get("/background")
@bp.get("/background.png")
def background():
    config, _, _ = _cfg()
    base = Path(config.base_dir or Path.cwd())
    name = current_app.config["BACKGROUND_FILE"]
    if not (base / name).is_file():
        return _not_found(f"Background not found. Create {name} in the root folder.")
    return send_from_directory(base, name)


@bp.get("/favicon.ico")
def favicon():
    return ("", 204)


# catch-all last: /games and /games.json both serve the games catalog
@bp.get("/<name>")
def catalog(name):
    config, scanner, _ = _cfg()
    if name.endswith(CATALOG_EXT):
        name = name[: -len(CATALOG_EXT)]
    path = scanner.writer.path_for(name)
    if not name or not path.is_file():
        return _not_found("File Not found")
    return send_from_directory(path.parent, path.name, mimetype="application/json")
