from __future__ import annotations

import os
import string
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Union

import structlog

from .errors import ErrorKind, Outcome
from .models import Value
from .sfo import SFO_MAGIC, parse_param_table
from .signature import BLOCK_SIZE, find_signature

log = structlog.stdlib.get_logger()

SFO_WINDOW = 2048
CONTENT_ID_WINDOW = (0x30, 0x50)

REGIONS = {"UP": "USA", "EP": "EUR", "JP": "JAP"}

_PREFIX_CHARS = frozenset(string.ascii_uppercase)
_DIGIT_CHARS = frozenset(string.digits)


def extract_metadata(pkg_path: Union[str, Path], block_size: int = BLOCK_SIZE) -> Outcome:
    """Find and decode the parameter table of a package."""
    try:
        with open(pkg_path, "rb") as fh:
            offset = find_signature(fh, SFO_MAGIC, block_size)
            if offset is None:
                return Outcome.not_found("PARAM.SFO not found")
            fh.seek(offset)
            window = fh.read(SFO_WINDOW)
    except OSError as e:
        return Outcome.io_error(e)
    return Outcome.found(parse_param_table(window))


def read_content_header(pkg_path: Union[str, Path]) -> str:
    start, end = CONTENT_ID_WINDOW
    with open(pkg_path, "rb") as fh:
        fh.seek(start)
        raw = fh.read(end - start)
    return raw.decode("utf-8", errors="replace").replace("\x00", "")


def match_title_token(text: str) -> Optional[str]:
    """First ``<LETTERS><DIGITS>`` run that directly follows a hyphen.

    "UP1234-CUSA05678_00" -> "CUSA05678"
    """
    n = len(text)
    pos = text.find("-")
    while pos != -1:
        i = pos + 1
        j = i
        while j < n and text[j] in _PREFIX_CHARS:
            j += 1
        k = j
        while k < n and text[k] in _DIGIT_CHARS:
            k += 1
        if j > i and k > j:
            return text[i:k]
        pos = text.find("-", pos + 1)
    return None


def fallback_title_id(pkg_path: Union[str, Path]) -> Outcome:
    """Title id taken from the content id in the raw package header."""
    try:
        header = read_content_header(pkg_path)
    except OSError as e:
        return Outcome.io_error(e)
    token = match_title_token(header)
    if token is None:
        return Outcome.not_found(f"no title id in header {header!r}")
    return Outcome.found(token)


def detect_region(content_id: Optional[str]) -> Optional[str]:
    if not content_id:
        return None
    return REGIONS.get(content_id[:2], "UNK")


def creation_time(st: os.stat_result) -> float:
    # st_birthtime is missing on most Linux filesystems; ctime is the closest
    return getattr(st, "st_birthtime", None) or st.st_ctime


def format_date(timestamp: float) -> str:
    """MM-DD-YYYY in local time."""
    return datetime.fromtimestamp(timestamp).strftime("%m-%d-%Y")


def format_release_date(pkg_path: Union[str, Path]) -> str:
    return format_date(creation_time(os.stat(pkg_path)))


def extract_details(pkg_path: Union[str, Path], block_size: int = BLOCK_SIZE) -> Outcome:
    """Parameter table plus the TITLE_ID fallback.

    The returned mapping only carries TITLE_ID when one was actually found.
    """
    meta = extract_metadata(pkg_path, block_size)
    if not meta.ok:
        return meta
    details: Dict[str, Value] = dict(meta.value)

    if not details.get("TITLE_ID") and details.get("CONTENT_ID"):
        fallback = fallback_title_id(pkg_path)
        if fallback.ok:
            details["TITLE_ID"] = fallback.value
            log.debug("Title id taken from content header", path=str(pkg_path), title_id=fallback.value)
        elif fallback.error is ErrorKind.IO_ERROR:
            return fallback
    return Outcome.found(details)
