from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Optional

import structlog

from .catalog import CatalogWriter
from .covers import cover_name, extract_cover
from .errors import ErrorKind, Outcome
from .metadata import creation_time, detect_region, extract_details, format_date
from .models import CategoryReport, GameRecord, PackageFile, ScanReport
from .settings import ShelfConfig
from .signature import BLOCK_SIZE
from .utils import cover_url, package_url

log = structlog.stdlib.get_logger()

PKG_EXT = ".pkg"


def list_categories(library_root: Path, image_dir_name: str) -> List[str]:
    if not library_root.is_dir():
        return []
    return sorted(p.name for p in library_root.iterdir()
                  if p.is_dir() and p.name != image_dir_name)


def detect_candidates(category_dir: Path) -> List[Path]:
    """Top-level ``*.pkg`` files, plus every file one folder down.

    Files inside a sub-folder are taken whatever their extension; only the
    top level is filtered.
    """
    found: List[Path] = []
    for entry in sorted(category_dir.iterdir()):
        if entry.is_dir():
            try:
                found.extend(sorted(p for p in entry.iterdir() if p.is_file()))
            except PermissionError:
                log.warning("Cannot list folder", path=str(entry))
        elif entry.is_file() and entry.name.endswith(PKG_EXT):
            found.append(entry)
    return found


def stat_package(pkg_path: Path, category: str) -> PackageFile:
    st = os.stat(pkg_path)
    return PackageFile(path=pkg_path, category=category, size=st.st_size, created=creation_time(st))


class LibraryScanner:
    """Rebuilds every category catalog from what is on disk."""

    def __init__(self, config: ShelfConfig, writer: Optional[CatalogWriter] = None,
                 block_size: int = BLOCK_SIZE) -> None:
        self.config = config
        self.writer = writer or CatalogWriter(config.catalog_dir)
        self.block_size = block_size

    def categories(self) -> List[str]:
        return list_categories(self.config.library_root, self.config.image_dir_name)

    def candidates(self, category: str) -> List[Path]:
        return detect_candidates(self.config.library_root / category)

    def build_record(self, pkg: PackageFile, details: dict) -> GameRecord:
        title_id = str(details["TITLE_ID"])
        base = self.config.base_url
        return GameRecord(
            package_url=package_url(base, self.config.library_root, pkg.path),
            region=detect_region(details.get("CONTENT_ID")),
            title_id=title_id,
            title=details.get("TITLE") or "Unknown",
            version=details.get("VERSION") or "0.00",
            release_date=format_date(pkg.created),
            size=str(pkg.size),
            cover_url=cover_url(base, cover_name(title_id)),
        )

    def inspect_package(self, pkg_path: Path) -> Outcome:
        """Metadata (with the title id fallback applied) for one package.

        NOT_FOUND when the package yields no title id. Reads only.
        """
        log.info("Processing", path=str(pkg_path))
        details = extract_details(pkg_path, self.block_size)
        if not details.ok:
            return details
        if not details.value.get("TITLE_ID"):
            return Outcome.not_found("no TITLE_ID and no usable content id")
        return details

    def record_package(self, category: str, pkg_path: Path, details: dict) -> Outcome:
        """Carve the cover and upsert the record for an inspected package."""
        title_id = str(details["TITLE_ID"])
        cover = extract_cover(pkg_path, title_id, self.config.image_dir, self.block_size)
        if cover.error is ErrorKind.IO_ERROR:
            return cover
        if not cover.ok:
            log.warning("No cover image", path=str(pkg_path), title_id=title_id)

        try:
            pkg = stat_package(pkg_path, category)
            record = self.build_record(pkg, details)
            self.writer.upsert(category, record.package_url, record)
        except OSError as e:
            return Outcome.io_error(e)
        return Outcome.found(record)

    def process_package(self, category: str, pkg_path: Path) -> Outcome:
        """Extract one package and upsert its record.

        Returns the record, NOT_FOUND when the package yields no title id,
        or IO_ERROR when the file (or the catalog) could not be read/written.
        """
        details = self.inspect_package(pkg_path)
        if not details.ok:
            return details
        return self.record_package(category, pkg_path, details.value)

    def _run(self, category: str, paths: List[Path]) -> List[Outcome]:
        workers = self.config.scan_workers
        if workers <= 1 or len(paths) <= 1:
            return [self.process_package(category, p) for p in paths]
        # Only the reads fan out. Packages sharing a title id share a cover
        # file, so covers and records are written in candidate order.
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=f"scan-{category}") as pool:
            inspected = list(pool.map(self.inspect_package, paths))
        return [self.record_package(category, p, d.value) if d.ok else d
                for p, d in zip(paths, inspected)]

    def scan_category(self, category: str) -> CategoryReport:
        report = CategoryReport(category=category)
        self.writer.reset(category)
        try:
            paths = self.candidates(category)
        except OSError as e:
            log.error("Cannot list category", category=category, error=str(e))
            return report
        report.candidates = len(paths)

        for path, outcome in zip(paths, self._run(category, paths)):
            if outcome.ok:
                report.recorded += 1
            elif outcome.error is ErrorKind.IO_ERROR:
                report.failed += 1
                log.error("Failed to process PKG", path=str(path), error=outcome.detail)
            else:
                report.skipped += 1
                log.warning("Skipped", path=str(path), reason=outcome.detail)
        return report

    def scan(self, categories: Optional[Iterable[str]] = None) -> ScanReport:
        names = list(categories) if categories is not None else self.categories()
        log.info("Scanning for PKG files", categories=names)
        report = ScanReport()
        for category in names:
            try:
                report.categories[category] = self.scan_category(category)
            except OSError as e:
                # the reset itself failed; earlier catalogs stay as written
                log.error("Catalog reset failed", category=category, error=str(e))
                report.categories[category] = CategoryReport(category=category, failed=1)
        log.info("Scan finished", recorded=report.recorded, failed=report.failed)
        return report
