from pathlib import Path
from urllib.parse import quote

# unreserved marks only; reserved characters such as + # ? are escaped
_URL_SAFE = "/-_.!~*'()"


def rel_url_path(root: Path, path: Path) -> str:
    """``path`` relative to ``root`` as a quoted, forward-slash url path."""
    rel = Path(path).relative_to(root).as_posix()
    return quote(rel.replace("\\", "/"), safe=_URL_SAFE)


def package_url(base_url: str, root: Path, path: Path) -> str:
    return f"{base_url}/pkg/{rel_url_path(root, path)}"


def cover_url(base_url: str, cover_name: str) -> str:
    return f"{base_url}/images/{quote(cover_name, safe=_URL_SAFE)}"
