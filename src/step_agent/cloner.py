# cloner.py
# Website UI capture for the clone_website tool.
#
# Render the page in headless Chrome, download the stylesheets, scripts,
# images and icons it references plus the fonts and images those
# stylesheets pull in, then rewrite every captured URL (in the HTML and
# inside saved CSS) to a local relative path so the copy can be served
# from disk.

import hashlib
import os
import posixpath
import re
from typing import Callable
from urllib.parse import urldefrag, urljoin, urlparse

import httpx
from bs4 import BeautifulSoup

PAGE_LOAD_TIMEOUT = 90
LINK_RELS = {"stylesheet", "icon", "preload", "apple-touch-icon"}
ASSET_ATTRS = (("link", "href"), ("script", "src"), ("img", "src"), ("source", "src"))
EXTERNAL_DIR = "_ext"

_CSS_URL = re.compile(r"""url\(\s*(['"]?)([^'")]+)\1\s*\)""", re.IGNORECASE)
_CSS_IMPORT = re.compile(r"""@import\s+(['"])([^'"]+)\1""", re.IGNORECASE)


def default_output_dir(url: str) -> str:
    host = urlparse(url).hostname or ""
    return host.replace(".", "_") or "cloned_site"


def _digest(value: str) -> str:
    return hashlib.sha1(value.encode("utf-8")).hexdigest()[:8]


def _with_suffix(path: str, suffix: str) -> str:
    stem, ext = posixpath.splitext(path)
    return f"{stem}.{suffix}{ext}"


def local_asset_path(asset_url: str, page_url: str | None = None) -> str:
    """
    Map an asset URL to a path under the output directory (posix, relative).

    Assets served from another host than page_url live under
    ``_ext/<host>/``. A query string adds a short hash to the file name, so
    ``site.css?v=1`` and ``site.css?v=2`` stay separate files.
    """
    parsed = urlparse(asset_url)
    parts = [part for part in parsed.path.split("/") if part not in ("", ".", "..")]
    if not parts or parsed.path.endswith("/"):
        parts.append("index")
    if parsed.query:
        parts[-1] = _with_suffix(parts[-1], _digest(parsed.query))

    if page_url is not None:
        host = parsed.netloc.rsplit("@", 1)[-1]
        if host != urlparse(page_url).netloc.rsplit("@", 1)[-1]:
            parts = [EXTERNAL_DIR, host.replace(":", "_")] + parts
    return "/".join(parts)


def fetch_rendered_html(url: str, timeout: int = PAGE_LOAD_TIMEOUT) -> str:
    """Load the page in headless Chrome and return the rendered DOM."""
    from selenium import webdriver
    from selenium.webdriver.chrome.options import Options

    opts = Options()
    opts.add_argument("--headless=new")
    opts.add_argument("--window-size=1920,1080")
    opts.add_argument("--no-sandbox")
    opts.add_argument("--disable-dev-shm-usage")

    driver = webdriver.Chrome(options=opts)
    try:
        driver.set_page_load_timeout(timeout)
        driver.get(url)
        return driver.page_source
    finally:
        driver.quit()


def _resolve(base_url: str, value: str) -> tuple[str | None, str]:
    """Absolute http(s) URL without its fragment, plus the fragment."""
    absolute, fragment = urldefrag(urljoin(base_url, value.strip()))
    if urlparse(absolute).scheme not in ("http", "https"):
        return None, fragment
    return absolute, fragment


def _asset_elements(soup: BeautifulSoup):
    for tag_name, attr in ASSET_ATTRS:
        for element in soup.find_all(tag_name):
            value = element.get(attr)
            if not value:
                continue
            if tag_name == "link":
                rels = {rel.lower() for rel in element.get("rel") or []}
                if not rels & LINK_RELS:
                    continue
            yield element, attr, value


def collect_asset_urls(html: str, page_url: str) -> list[str]:
    """Absolute http(s) asset URLs referenced by the document, in order, deduplicated."""
    soup = BeautifulSoup(html, "html.parser")
    urls: list[str] = []
    for _, _, value in _asset_elements(soup):
        absolute = urljoin(page_url, value)
        if urlparse(absolute).scheme not in ("http", "https"):
            continue
        if absolute not in urls:
            urls.append(absolute)
    return urls


def css_references(css: str, css_url: str) -> list[str]:
    """Absolute URLs a stylesheet loads through url(...) and @import, in order."""
    urls: list[str] = []
    values = [m.group(2) for m in _CSS_URL.finditer(css)] + [m.group(2) for m in _CSS_IMPORT.finditer(css)]
    for value in values:
        absolute, _ = _resolve(css_url, value)
        if absolute is not None and absolute not in urls:
            urls.append(absolute)
    return urls


def rewrite_html(html: str, page_url: str, url_map: dict[str, str]) -> str:
    """Point captured asset references at their local copies."""
    soup = BeautifulSoup(html, "html.parser")
    for element, attr, value in _asset_elements(soup):
        local = url_map.get(urljoin(page_url, value))
        if local is not None:
            element[attr] = local
    return str(soup)


def rewrite_css(css: str, css_url: str, css_path: str, url_map: dict[str, str]) -> str:
    """Replace url(...) and @import targets with paths relative to the stylesheet."""
    css_dir = posixpath.dirname(css_path) or "."

    def local(value: str) -> str | None:
        absolute, fragment = _resolve(css_url, value)
        target = url_map.get(absolute) if absolute else None
        if target is None:
            return None
        relative = posixpath.relpath(target, css_dir)
        return f"{relative}#{fragment}" if fragment else relative

    def replace_url(match: re.Match) -> str:
        quote, value = match.group(1), match.group(2)
        new = local(value)
        return match.group(0) if new is None else f"url({quote}{new}{quote})"

    def replace_import(match: re.Match) -> str:
        quote, value = match.group(1), match.group(2)
        new = local(value)
        return match.group(0) if new is None else f"@import {quote}{new}{quote}"

    css = _CSS_URL.sub(replace_url, css)
    return _CSS_IMPORT.sub(replace_import, css)


def download_assets(
    urls: list[str],
    output_dir: str,
    client: httpx.Client,
    page_url: str | None = None,
    url_map: dict[str, str] | None = None,
) -> dict[str, str]:
    """
    Save each asset under output_dir and record it in url_map.

    Failed downloads are skipped. A URL whose local path is already taken by
    another URL gets a hashed file name instead of overwriting it.
    """
    url_map = {} if url_map is None else url_map
    for url in urls:
        if url in url_map:
            continue
        try:
            response = client.get(url)
        except httpx.HTTPError:
            continue
        if response.status_code != 200:
            continue

        relative = local_asset_path(url, page_url)
        if relative in url_map.values():
            relative = _with_suffix(relative, _digest(url))
        target = os.path.join(output_dir, *relative.split("/"))
        os.makedirs(os.path.dirname(target), exist_ok=True)
        with open(target, "wb") as fh:
            fh.write(response.content)
        url_map[url] = relative
    return url_map


def _read_text(path: str) -> str:
    with open(path, encoding="utf-8", errors="replace") as fh:
        return fh.read()


def clone_website(
    url: str,
    output_dir: str,
    *,
    fetch_page: Callable[[str], str] = fetch_rendered_html,
    client: httpx.Client | None = None,
) -> str:
    """Capture url into output_dir. Returns a one-line summary (or error text)."""
    output_dir = os.path.abspath(output_dir)
    os.makedirs(output_dir, exist_ok=True)

    try:
        html = fetch_page(url)
    except Exception as e:
        return f"An error occurred during UI capture: {e}"

    own_client = client is None
    client = client or httpx.Client(follow_redirects=True, timeout=30)
    try:
        url_map = download_assets(collect_asset_urls(html, url), output_dir, client, url)

        # Stylesheets pull in fonts, images and further stylesheets.
        pending = [asset for asset, relative in url_map.items() if relative.endswith(".css")]
        while pending:
            css_url = pending.pop(0)
            css = _read_text(os.path.join(output_dir, *url_map[css_url].split("/")))
            before = set(url_map)
            download_assets(css_references(css, css_url), output_dir, client, url, url_map)
            pending.extend(
                asset for asset, relative in url_map.items()
                if asset not in before and relative.endswith(".css")
            )
    finally:
        if own_client:
            client.close()

    for css_url, relative in url_map.items():
        if not relative.endswith(".css"):
            continue
        css_file = os.path.join(output_dir, *relative.split("/"))
        css = _read_text(css_file)
        with open(css_file, "w", encoding="utf-8") as fh:
            fh.write(rewrite_css(css, css_url, relative, url_map))

    with open(os.path.join(output_dir, "index.html"), "w", encoding="utf-8") as fh:
        fh.write(rewrite_html(html, url, url_map))

    return f"Successfully cloned UI from {url}. Saved index.html and {len(url_map)} assets to '{output_dir}'."
