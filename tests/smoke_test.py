#!/usr/bin/env python3
"""
Smoke test for the package shelf.

Checks:
- Layout bootstrap + category discovery
- Record from a full param table (title/version/region)
- TITLE_ID fallback from the content id header
- Cover carved from the embedded PNG
- Junk packages skipped without aborting the scan
- Rescan is byte-identical; removed packages disappear
- Catalog + cover served over HTTP
"""
import shutil, tempfile
from pathlib import Path

from compat import make_config, make_pkg, png_bytes, read_catalog
from pkgshelf import create_app, ensure_layout
from pkgshelf.scanning import LibraryScanner


def main():
    tmp = Path(tempfile.mkdtemp(prefix="pkgshelf_test_"))
    try:
        config = make_config(tmp)
        ensure_layout(config)
        lib = config.library_root

        # Game A: complete table + cover
        make_pkg(lib / "games" / "A.pkg",
                 {"TITLE_ID": "CUSA00001", "TITLE": "Example Game", "VERSION": 1,
                  "CONTENT_ID": "UP0001-CUSA00001_00"},
                 png=png_bytes(512, 512))
        # Game B: no TITLE_ID, only a content id
        make_pkg(lib / "games" / "B.pkg", {"CONTENT_ID": "UP1234-CUSA05678_00"},
                 content_id="UP1234-CUSA05678_00")
        # Junk: no table at all
        (lib / "games" / "C.pkg").write_bytes(b"\x00" * 2048)
        # Update in a bundle folder, no .pkg suffix
        make_pkg(lib / "updates" / "patch" / "part0", {"TITLE_ID": "CUSA00001", "VERSION": 2})

        scanner = LibraryScanner(config)
        report = scanner.scan()
        assert sorted(report.categories) == sorted(scanner.categories())

        games = read_catalog(config, "games")["DATA"]
        by_id = {e["title_id"]: e for e in games.values()}
        assert set(by_id) == {"CUSA00001", "CUSA05678"}, f"unexpected titles: {sorted(by_id)}"
        assert by_id["CUSA00001"]["name"] == "Example Game"
        assert by_id["CUSA00001"]["version"] == 1
        assert by_id["CUSA00001"]["region"] == "USA"
        assert by_id["CUSA05678"]["name"] == "Unknown"
        assert by_id["CUSA05678"]["version"] == "0.00"
        assert report.categories["games"].skipped == 1

        updates = read_catalog(config, "updates")["DATA"]
        assert list(updates) == ["http://127.0.0.1:3000/pkg/updates/patch/part0"]

        cover = config.image_dir / "CUSA00001.png"
        assert cover.read_bytes().startswith(b"\x89PNG"), "cover not carved"

        before = {p.name: p.read_bytes() for p in config.catalog_dir.iterdir()}
        scanner.scan()
        after = {p.name: p.read_bytes() for p in config.catalog_dir.iterdir()}
        assert before == after, "rescan changed catalogs"

        (lib / "games" / "B.pkg").unlink()
        scanner.scan(["games"])
        assert [e["title_id"] for e in read_catalog(config, "games")["DATA"].values()] == ["CUSA00001"]

        client = create_app(config, scanner).test_client()
        assert client.get("/games.json").get_json()["DATA"]
        assert client.get("/images/CUSA00001.png").status_code == 200

        # Report
        print("[OK] Categories:", sorted(report.categories))
        print("[OK] Games:", sorted(by_id))
        print("[OK] Fallback title id:", by_id["CUSA05678"]["title_id"])
        print("[OK] Cover carved:", cover.name, cover.stat().st_size, "bytes")
        print("[OK] Rescan idempotent; removed package dropped.")
        print("[OK] Catalog + cover served.")

    finally:
        shutil.rmtree(tmp, ignore_errors=True)


if __name__ == "__main__":
    main()
