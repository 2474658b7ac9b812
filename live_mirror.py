#!/usr/bin/env python3
import argparse
import html
import json
import logging
import os
import posixpath
import random
import re
import string
import sys
import time
import tomllib
from collections import deque
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import (
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Set,
    Tuple,
)
from urllib.parse import unquote, urljoin, urlparse, urlunparse

import requests
import yaml
from bs4 import BeautifulSoup
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

LOGGER = logging.getLogger("live_mirror")

# -------------------- Config --------------------

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/91.0.4472.124 Safari/537.36"
)

DEFAULT_HEADERS = {
    "User-Agent": DEFAULT_USER_AGENT,
    "Accept": "*/*",
    "Accept-Language": "en-US,en;q=0.7",
}

DEFAULT_ALLOWED_EXTENSIONS = (
    ".css",
    ".js",
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".svg",
    ".webp",
    ".woff",
    ".woff2",
    ".ttf",
    ".otf",
    ".eot",
    ".ico",
    ".json",
    ".xml",
    ".txt",
)

# bucket -> output subdirectory, in resolution order
BUCKET_DIRS = {
    "stylesheet": "css",
    "script": "js",
    "image": "images",
    "font": "fonts",
    "other": "assets",
}
BUCKETS = tuple(BUCKET_DIRS)
DEFAULT_BUCKET_EXTENSIONS = {
    "stylesheet": ".css",
    "script": ".js",
    "image": ".png",
    "font": ".woff2",
    "other": ".bin",
}
AUTH_DIR = "auth"

AUTH_SESSION_ENDPOINT = "auth/session"
AUTH_LOGIN_ENDPOINT = "auth/login"
AUTH_REGISTER_ENDPOINT = "auth/register"
AUTH_LOGOUT_ENDPOINT = "auth/logout"

FONT_EXTS = {".woff", ".woff2", ".ttf", ".otf", ".eot"}
IMAGE_EXTS = {".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp"}
HTML_LIKE_EXTS = {".html", ".htm", ".php", ".asp", ".aspx", ".jsp", ".jspx", ".cfm"}

CSS_URL_RE = re.compile(r"url\(\s*([\"']?)([^)\"']+)\1\s*\)", re.IGNORECASE)
INVALID_FILENAME_CHARS_RE = re.compile(r'[<>:"/\\|?*\x00-\x1f]')

# Raw-markup fallbacks for references the live DOM scan missed
MARKUP_STYLESHEET_RE = re.compile(
    r"<link[^>]+href=[\"']([^\"']+\.css[^\"']*?)[\"'][^>]*>", re.IGNORECASE
)
MARKUP_SCRIPT_RE = re.compile(
    r"<script[^>]+src=[\"']([^\"']+\.js[^\"']*?)[\"'][^>]*>", re.IGNORECASE
)
MARKUP_IMAGE_RE = re.compile(r"<img[^>]+src=[\"']([^\"']+)[\"'][^>]*>", re.IGNORECASE)
MARKUP_FONT_RE = re.compile(
    r"url\(\s*[\"']?([^\"')]+\.(?:woff2?|ttf|otf|eot)(?:[?#][^\"')]*)?)[\"']?\s*\)",
    re.IGNORECASE,
)

# background declarations in a style attribute; url()s inside use CSS_URL_RE
INLINE_BACKGROUND_RE = re.compile(
    r"(background(?:-image)?\s*:)([^;<>{}]*)", re.IGNORECASE
)

LOGIN_FIELD_RE = re.compile(r"user|login|email", re.IGNORECASE)
CONFIRM_FIELD_RE = re.compile(r"confirm|repeat", re.IGNORECASE)

# Header login bars are tried before generic form fields.
LOGIN_FORM_SELECTORS: Dict[str, Tuple[str, ...]] = {
    "username": (
        ".loginBar .el-input__inner >> nth=0",
        'input[type="text"][name*="user"]',
        'input[type="text"][name*="login"]',
        'input[type="email"]',
        'input[name*="email"]',
        'input[type="text"]',
    ),
    "password": (
        ".loginBar .el-input__inner >> nth=1",
        'input[type="password"]',
    ),
    "submit": (
        ".loginBar .el-button--primary",
        'button[type="submit"]',
        'input[type="submit"]',
        'button:has-text("Login")',
        'button:has-text("Sign in")',
    ),
}

# -------------------- Settings --------------------


@dataclass
class Settings:
    # Target
    base_url: str = ""
    max_pages: int = 100
    max_depth: int = 3
    timeout: int = 30000  # navigation, ms
    retries: int = 3

    # Credentials
    username: Optional[str] = None
    password: Optional[str] = None

    # Browser
    user_agent: str = DEFAULT_USER_AGENT
    viewport_width: int = 1920
    viewport_height: int = 1080
    settle_ms: int = 2000
    headless: bool = True

    # Assets
    max_file_size: int = 50 * 1024 * 1024
    allowed_extensions: Set[str] = field(
        default_factory=lambda: set(DEFAULT_ALLOWED_EXTENSIONS)
    )
    download_timeout: float = 30.0
    concurrent_downloads: int = 5

    # Output
    output_dir: str = "public_html"

    # Logging
    log_level: str = "info"
    log_file: Optional[str] = None


# -------------------- Errors --------------------


class MirrorError(Exception):
    pass


class NavigationFailure(MirrorError):
    """A URL could not be rendered (timeout, network error, dead page)."""


class FetchFailure(MirrorError):
    """An asset could not be downloaded (timeout, non-2xx, size limit)."""


class RewriteFailure(MirrorError):
    """Markup or a stylesheet could not be transformed."""


class StartupFailure(MirrorError):
    """The run cannot start: output directories, browser, or login."""


# -------------------- Utils --------------------


def sanitize_filename(name: str) -> str:
    name = INVALID_FILENAME_CHARS_RE.sub("_", name)
    name = name or "file"
    if name.startswith("."):
        name = "_" + name[1:]
    return name[:200]


def can_fetch_url(u: Optional[str]) -> bool:
    if not u:
        return False
    u = u.strip()
    if not u:
        return False
    if u.lower().startswith(
        ("#", "mailto:", "tel:", "javascript:", "data:", "blob:", "about:")
    ):
        return False
    return True


def origin_of(url: str) -> Tuple[str, str, Optional[int]]:
    p = urlparse(url)
    scheme = p.scheme.lower()
    try:
        port = p.port
    except ValueError:
        port = None
    if port is None:
        port = {"http": 80, "https": 443}.get(scheme)
    return scheme, (p.hostname or "").lower(), port


def is_same_origin(base: str, other: str) -> bool:
    return origin_of(base) == origin_of(other)


def normalize_page_url(u: str) -> str:
    p = urlparse(u.strip())
    scheme = p.scheme.lower()
    host = (p.hostname or "").lower()
    netloc = host
    try:
        port = p.port
    except ValueError:
        port = None
    if port is not None and port != {"http": 80, "https": 443}.get(scheme):
        netloc = f"{host}:{port}"
    return urlunparse((scheme, netloc, p.path or "/", p.params, p.query, ""))


def url_extension(url: str) -> str:
    path = unquote(urlparse(url).path)
    return os.path.splitext(posixpath.basename(path))[1].lower()


def build_session(
    user_agent: str = DEFAULT_USER_AGENT, retries: int = 3
) -> requests.Session:
    s = requests.Session()
    retry = Retry(
        total=max(0, retries),
        backoff_factor=0.5,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods={"GET", "HEAD"},
        raise_on_status=False,
        respect_retry_after_header=True,
    )
    adapter = HTTPAdapter(max_retries=retry, pool_connections=16, pool_maxsize=16)
    s.mount("http://", adapter)
    s.mount("https://", adapter)
    s.headers.update(DEFAULT_HEADERS)
    s.headers["User-Agent"] = user_agent
    return s


def apply_browser_cookies(http: requests.Session, cookies: Iterable[Mapping]) -> int:
    n = 0
    for c in cookies:
        name = c.get("name")
        if not name:
            continue
        http.cookies.set(
            name,
            c.get("value", ""),
            domain=c.get("domain") or "",
            path=c.get("path") or "/",
        )
        n += 1
    return n


def ensure_parent_dir(p: Path) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)


def relative_link(target: str, from_file: str) -> str:
    start = posixpath.dirname(from_file) or "."
    return posixpath.relpath(target, start)


def relative_root(page_file: str) -> str:
    return "../" * page_file.count("/")


# -------------------- HTML utils --------------------


def bs4_parse(markup: str) -> BeautifulSoup:
    try:
        return BeautifulSoup(markup, "lxml")
    except Exception:
        return BeautifulSoup(markup, "html.parser")


def serialize_html(soup: BeautifulSoup) -> str:
    try:
        return soup.decode(formatter="html")
    except Exception:
        return str(soup)


def scan_markup(markup: str) -> Dict[str, List[str]]:
    found: Dict[str, List[str]] = {b: [] for b in BUCKETS}
    patterns = (
        ("stylesheet", MARKUP_STYLESHEET_RE),
        ("script", MARKUP_SCRIPT_RE),
        ("image", MARKUP_IMAGE_RE),
        ("font", MARKUP_FONT_RE),
    )
    for bucket, pattern in patterns:
        for m in pattern.finditer(markup or ""):
            ref = html.unescape(m.group(1).strip())
            if can_fetch_url(ref):
                found[bucket].append(ref)
    # serialized style attributes carry &quot; around url() arguments
    for decl in INLINE_BACKGROUND_RE.finditer(html.unescape(markup or "")):
        for m in CSS_URL_RE.finditer(decl.group(2)):
            ref = m.group(2).strip()
            if can_fetch_url(ref):
                found["image"].append(ref)
    return found


# -------------------- Output layout --------------------


def local_page_path(page_url: str, base_url: str) -> str:
    """Mirror-relative file for a captured page.

    The base URL and any bare directory root become ``index.html``; other
    paths keep their segments with ``.html`` appended when the last segment
    has no extension. Server-side page extensions are swapped for ``.html``.
    """
    if normalize_page_url(page_url) == normalize_page_url(base_url):
        return "index.html"
    path = unquote(urlparse(page_url).path or "/")
    segs = [sanitize_filename(s) for s in path.split("/") if s and s not in (".", "..")]
    if not segs:
        return "index.html"
    stem, ext = os.path.splitext(segs[-1])
    ext = ext.lower()
    if ext in (".html", ".htm"):
        pass
    elif ext in HTML_LIKE_EXTS:
        segs[-1] = stem + ".html"
    elif not ext:
        segs[-1] = segs[-1] + ".html"
    return "/".join(segs)


# -------------------- Data model --------------------


@dataclass
class ResourceInventory:
    stylesheet: List[str] = field(default_factory=list)
    script: List[str] = field(default_factory=list)
    image: List[str] = field(default_factory=list)
    font: List[str] = field(default_factory=list)
    other: List[str] = field(default_factory=list)
    _seen: Set[str] = field(default_factory=set, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        for _, refs in self.items():
            self._seen.update(refs)

    @classmethod
    def from_mapping(
        cls, data: Optional[Mapping[str, Iterable[str]]]
    ) -> "ResourceInventory":
        inv = cls()
        inv.update(data or {})
        return inv

    def add(self, bucket: str, ref: Optional[str]) -> bool:
        # categories stay disjoint: first bucket to claim a reference keeps it
        if bucket not in BUCKET_DIRS:
            bucket = "other"
        if not can_fetch_url(ref):
            return False
        ref = ref.strip()
        if ref in self._seen:
            return False
        getattr(self, bucket).append(ref)
        self._seen.add(ref)
        return True

    def update(self, data: Mapping[str, Iterable[str]]) -> None:
        for bucket in BUCKETS:
            for ref in data.get(bucket) or ():
                self.add(bucket, ref)

    def items(self) -> Iterator[Tuple[str, List[str]]]:
        for bucket in BUCKETS:
            yield bucket, getattr(self, bucket)

    def __contains__(self, ref: object) -> bool:
        return ref in self._seen

    def __len__(self) -> int:
        return sum(len(refs) for _, refs in self.items())


@dataclass
class PageRecord:
    url: str
    html: str
    title: str
    resources: ResourceInventory = field(default_factory=ResourceInventory)


@dataclass
class AssetRecord:
    local_path: str
    bucket: str
    url: str


# -------------------- Browser session --------------------


class BrowserSession:
    """One rendering tab, reused sequentially for every navigation."""

    def navigate(self, url: str, timeout_ms: int) -> None:
        raise NotImplementedError

    def settle(self, ms: int) -> None:
        raise NotImplementedError

    def current_url(self) -> str:
        raise NotImplementedError

    def current_markup(self) -> str:
        raise NotImplementedError

    def current_title(self) -> str:
        raise NotImplementedError

    def query_links(self) -> List[str]:
        raise NotImplementedError

    def collect_resources(self) -> Dict[str, List[str]]:
        raise NotImplementedError

    def fill_and_submit(
        self, selectors: Mapping[str, Sequence[str]], values: Mapping[str, str]
    ) -> bool:
        raise NotImplementedError

    def cookies(self) -> List[dict]:
        return []

    def close(self) -> None:
        pass


RESOURCE_SCAN_JS = """
() => {
  const out = {stylesheet: [], script: [], image: [], font: [], other: []};
  const urlRe = /url\\(\\s*['"]?([^'")]+)['"]?\\s*\\)/g;
  const fontRe = /\\.(woff2?|ttf|otf|eot)([?#]|$)/i;
  const imageRe = /\\.(png|jpe?g|gif|svg|webp|ico|bmp|avif)([?#]|$)/i;
  const push = (bucket, value) => { if (value) out[bucket].push(value); };

  document.querySelectorAll('link[rel~="stylesheet"]').forEach(l => push('stylesheet', l.href));
  document.querySelectorAll('script[src]').forEach(s => push('script', s.src));
  document.querySelectorAll('img[src]').forEach(i => push('image', i.src));

  document.querySelectorAll('*').forEach(el => {
    const bg = window.getComputedStyle(el).backgroundImage;
    if (!bg || bg === 'none') return;
    for (const m of bg.matchAll(urlRe)) push('image', m[1]);
  });

  Array.from(document.styleSheets).forEach(sheet => {
    let rules;
    try {
      rules = sheet.cssRules;
    } catch (e) {
      return;  // cross-origin sheets are unreadable
    }
    const base = sheet.href || document.baseURI;
    Array.from(rules || []).forEach(rule => {
      const isFontFace = rule.type === CSSRule.FONT_FACE_RULE;
      for (const m of (rule.cssText || '').matchAll(urlRe)) {
        let abs;
        try { abs = new URL(m[1], base).href; } catch (e) { continue; }
        if (isFontFace || fontRe.test(abs)) push('font', abs);
        else if (imageRe.test(abs)) push('image', abs);
        else push('other', abs);
      }
    });
  });
  return out;
}
"""


class PlaywrightSession(BrowserSession):
    def __init__(self, settings: Settings, logger: Optional[logging.Logger] = None):
        self.settings = settings
        self.logger = logger or LOGGER
        self._pl = None
        self._browser = None
        self._context = None
        self._page = None

    def open(self) -> "PlaywrightSession":
        self.logger.info("Launching browser...")
        try:
            self._pl = sync_playwright().start()
            self._browser = self._pl.chromium.launch(
                headless=self.settings.headless,
                args=["--no-sandbox", "--disable-dev-shm-usage", "--disable-gpu"],
            )
            self._context = self._browser.new_context(
                user_agent=self.settings.user_agent,
                viewport={
                    "width": self.settings.viewport_width,
                    "height": self.settings.viewport_height,
                },
                ignore_https_errors=True,
            )
            self._page = self._context.new_page()
        except PlaywrightError as e:
            self.close()
            raise StartupFailure(f"could not launch browser: {e}") from e
        return self

    def _require_page(self):
        if self._page is None:
            raise NavigationFailure("browser session is not open")
        return self._page

    def navigate(self, url: str, timeout_ms: int) -> None:
        page = self._require_page()
        try:
            page.goto(url, wait_until="networkidle", timeout=timeout_ms)
        except PlaywrightError as e:
            raise NavigationFailure(f"{url}: {e}") from e

    def settle(self, ms: int) -> None:
        if ms > 0:
            self._require_page().wait_for_timeout(ms)

    def current_url(self) -> str:
        return self._require_page().url

    def current_markup(self) -> str:
        try:
            return self._require_page().content()
        except PlaywrightError as e:
            raise NavigationFailure(f"could not read markup: {e}") from e

    def current_title(self) -> str:
        try:
            return self._require_page().title()
        except PlaywrightError as e:
            raise NavigationFailure(f"could not read title: {e}") from e

    def query_links(self) -> List[str]:
        try:
            hrefs = self._require_page().eval_on_selector_all(
                "a[href]", "els => els.map(e => e.getAttribute('href'))"
            )
        except PlaywrightError as e:
            raise NavigationFailure(f"could not read links: {e}") from e
        return [h for h in hrefs if h]

    def collect_resources(self) -> Dict[str, List[str]]:
        try:
            return self._require_page().evaluate(RESOURCE_SCAN_JS)
        except PlaywrightError as e:
            raise NavigationFailure(f"could not scan resources: {e}") from e

    def _first_match(self, selectors: Sequence[str]):
        page = self._require_page()
        for sel in selectors:
            try:
                handle = page.query_selector(sel)
            except PlaywrightError:
                continue
            if handle is not None:
                return handle
        return None

    def fill_and_submit(
        self, selectors: Mapping[str, Sequence[str]], values: Mapping[str, str]
    ) -> bool:
        page = self._require_page()
        try:
            for name, value in values.items():
                handle = self._first_match(selectors.get(name, ()))
                if handle is None:
                    self.logger.debug("no %s field on %s", name, page.url)
                    return False
                handle.click()
                handle.fill(value)
            submit = self._first_match(selectors.get("submit", ()))
            if submit is None:
                self.logger.debug("no submit control on %s", page.url)
                return False
            submit.click()
        except PlaywrightError as e:
            self.logger.warning("Failed to fill login form on %s: %s", page.url, e)
            return False
        try:
            page.wait_for_load_state("networkidle", timeout=self.settings.timeout)
        except PlaywrightError as e:
            self.logger.debug("no network quiescence after submit: %s", e)
        return True

    def cookies(self) -> List[dict]:
        if self._context is None:
            return []
        return list(self._context.cookies())

    def close(self) -> None:
        try:
            if self._browser:
                self._browser.close()
                self.logger.info("Browser closed")
        except PlaywrightError:
            pass
        try:
            if self._pl:
                self._pl.stop()
        except PlaywrightError:
            pass
        self._page = self._context = self._browser = self._pl = None


def open_playwright_session(
    settings: Settings, logger: Optional[logging.Logger] = None
) -> BrowserSession:
    return PlaywrightSession(settings, logger).open()


# -------------------- Authentication --------------------


class Authenticator:
    def __init__(
        self,
        session: BrowserSession,
        settings: Settings,
        logger: Optional[logging.Logger] = None,
    ):
        self.session = session
        self.settings = settings
        self.logger = logger or LOGGER

    def authenticate(self, username: str, password: str) -> bool:
        base = self.settings.base_url
        values = {"username": username, "password": password}
        self.logger.info("Authenticating...")
        try:
            self.session.navigate(base, self.settings.timeout)
        except NavigationFailure as e:
            raise StartupFailure(f"authentication could not load {base}: {e}") from e
        self.session.settle(self.settings.settle_ms)
        if self._submit(values):
            return True

        login_url = urljoin(base, "/login")
        self.logger.info("No login form on %s, checking %s", base, login_url)
        try:
            self.session.navigate(login_url, self.settings.timeout)
        except NavigationFailure as e:
            self.logger.warning(
                "No login page found (%s), continuing without authentication", e
            )
            return False
        if self._submit(values):
            return True
        self.logger.warning("No login form found, continuing without authentication")
        return False

    def _submit(self, values: Mapping[str, str]) -> bool:
        if not self.session.fill_and_submit(LOGIN_FORM_SELECTORS, values):
            return False
        self.session.settle(self.settings.settle_ms)
        self.logger.info("Login form submitted on %s", self.session.current_url())
        return True


# -------------------- Discovery --------------------


class UrlDiscoverer:
    """Breadth-first fixpoint over same-origin anchors.

    ``discovered`` only grows; ``visited`` holds the URLs whose links have
    been expanded. A URL that fails to render stays discovered but is never
    marked visited.
    """

    def __init__(
        self,
        session: BrowserSession,
        settings: Settings,
        logger: Optional[logging.Logger] = None,
    ):
        self.session = session
        self.settings = settings
        self.logger = logger or LOGGER
        self.discovered: Set[str] = set()
        self.visited: Set[str] = set()
        self._order: List[str] = []
        self._seed = ""

    def _add(self, url: str) -> None:
        self.discovered.add(url)
        self._order.append(url)

    def discover(self, seed_url: str) -> List[str]:
        self.logger.info("Starting URL discovery...")
        seed = normalize_page_url(seed_url)
        self._seed = seed
        if seed not in self.discovered:
            self._add(seed)
        frontier: deque = deque([(seed, 0)])
        while frontier:
            if len(self.discovered) >= self.settings.max_pages:
                self.logger.info("Page ceiling reached (%d)", self.settings.max_pages)
                break
            url, depth = frontier.popleft()
            if url in self.visited or depth >= self.settings.max_depth:
                continue
            try:
                links = self._expand(url)
            except NavigationFailure as e:
                self.logger.warning("Failed to discover URLs from %s: %s", url, e)
                continue
            self.visited.add(url)
            found = 0
            for link in links:
                if link in self.discovered:
                    continue
                if len(self.discovered) >= self.settings.max_pages:
                    break
                self._add(link)
                frontier.append((link, depth + 1))
                found += 1
            self.logger.info("Found %d new same-origin URLs on %s", found, url)
        self.logger.info("Discovered %d unique URLs", len(self.discovered))
        return list(self._order)

    def _expand(self, url: str) -> List[str]:
        self.logger.info("Discovering URLs from: %s", url)
        self.session.navigate(url, self.settings.timeout)
        page_url = self.session.current_url() or url
        out: List[str] = []
        for href in self.session.query_links():
            link = self.resolve_link(page_url, href)
            if link is not None:
                out.append(link)
        return out

    def resolve_link(self, page_url: str, href: Optional[str]) -> Optional[str]:
        if not can_fetch_url(href):
            return None
        absu = urljoin(page_url, href.strip())
        if urlparse(absu).scheme not in ("http", "https"):
            return None
        if not is_same_origin(self._seed or self.settings.base_url, absu):
            return None
        return normalize_page_url(absu)


# -------------------- Capture --------------------


class PageCapture:
    def __init__(
        self,
        session: BrowserSession,
        settings: Settings,
        logger: Optional[logging.Logger] = None,
    ):
        self.session = session
        self.settings = settings
        self.logger = logger or LOGGER

    def capture(self, urls: Iterable[str]) -> List[PageRecord]:
        urls = list(urls)
        records: List[PageRecord] = []
        for i, url in enumerate(urls, 1):
            self.logger.info("Processing page %d/%d: %s", i, len(urls), url)
            try:
                records.append(self.capture_one(url))
            except NavigationFailure as e:
                self.logger.warning("Failed to process page %s: %s", url, e)
        return records

    def capture_one(self, url: str) -> PageRecord:
        self.session.navigate(url, self.settings.timeout)
        # client-side rendering gets a fixed grace period after quiescence
        self.session.settle(self.settings.settle_ms)
        markup = self.session.current_markup()
        title = self.session.current_title() or ""
        resources = ResourceInventory.from_mapping(self.session.collect_resources())
        self.logger.debug("%s: %d resources", url, len(resources))
        return PageRecord(url=url, html=markup, title=title, resources=resources)


# -------------------- Asset resolution --------------------


def collect_references(pages: Iterable[PageRecord]) -> ResourceInventory:
    """Union every page's inventory with a raw-markup scan of its html.

    The raw scan runs first so the attribute strings actually present in the
    markup claim the unsuffixed filenames. Document-relative strings
    (``pic.png``, ``../img/a.png``) only mean something next to the page
    they came from, so they are recorded as absolute URLs against it.
    """
    inv = ResourceInventory()
    for page in pages:
        found = scan_markup(page.html)
        for bucket, refs in found.items():
            found[bucket] = [page_relative_reference(r, page.url) for r in refs]
        inv.update(found)
        inv.update(dict(page.resources.items()))
    return inv


def page_relative_reference(ref: str, page_url: str) -> str:
    ref = ref.strip()
    if ref.startswith("/") or urlparse(ref).scheme:
        return ref
    return urljoin(page_url, ref)


def classify_css_reference(ref: str) -> str:
    ext = url_extension(ref)
    if ext in FONT_EXTS:
        return "font"
    if ext in IMAGE_EXTS:
        return "image"
    return "other"


def normalize_reference(ref: str, base_url: str) -> Optional[str]:
    if not can_fetch_url(ref):
        return None
    ref = ref.strip()
    if ref.startswith("//"):
        return f"{urlparse(base_url).scheme or 'https'}:{ref}"
    absu = urljoin(base_url, ref)
    if urlparse(absu).scheme not in ("http", "https"):
        return None
    return absu


def candidate_filename(url: str, bucket: str) -> str:
    name = posixpath.basename(unquote(urlparse(url).path))
    _, ext = os.path.splitext(name)
    if not name or not ext:
        token = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
        ext = DEFAULT_BUCKET_EXTENSIONS[bucket]
        return f"asset_{int(time.time() * 1000)}_{token}{ext}"
    return sanitize_filename(name)


def unique_filename(directory: Path, name: str, taken: Set[str]) -> str:
    stem, ext = os.path.splitext(name)
    candidate = name
    counter = 1
    while candidate in taken or (directory / candidate).exists():
        candidate = f"{stem}_{counter}{ext}"
        counter += 1
    return candidate


@dataclass
class FetchJob:
    reference: str
    url: str
    bucket: str
    dest: Path
    local_path: str


class AssetResolver:
    """Relocates every referenced asset into the bucket directories.

    Memoization is keyed by the original reference string: each distinct
    string is fetched at most once per run, even when it failed.
    """

    def __init__(
        self,
        output_dir: Path,
        settings: Settings,
        http: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.output_dir = Path(output_dir)
        self.settings = settings
        self.http = http or build_session(settings.user_agent, settings.retries)
        self.logger = logger or LOGGER
        self.records: Dict[str, AssetRecord] = {}
        self.failed: Set[str] = set()
        self._attempted: Set[str] = set()
        self._reserved: Dict[str, Set[str]] = {b: set() for b in BUCKETS}

    @property
    def asset_map(self) -> Dict[str, str]:
        return {ref: rec.local_path for ref, rec in self.records.items()}

    def resolve(self, pages: Sequence[PageRecord]) -> Dict[str, str]:
        self.logger.info("Starting asset download...")
        for bucket, refs in collect_references(pages).items():
            jobs = [j for j in (self.plan(ref, bucket) for ref in refs) if j]
            done = self._fetch_all(jobs)
            if bucket == "stylesheet":
                self._resolve_stylesheet_dependencies(done)
        self.logger.info(
            "Downloaded %d unique assets (%d failed)",
            len(self.records),
            len(self.failed),
        )
        return self.asset_map

    def plan(
        self, ref: str, bucket: str, base_url: Optional[str] = None
    ) -> Optional[FetchJob]:
        if ref in self.records or ref in self._attempted:
            return None
        self._attempted.add(ref)
        url = normalize_reference(ref, base_url or self.settings.base_url)
        if url is None:
            self.logger.debug("skip unfetchable reference %s", ref)
            return None
        ext = url_extension(url)
        allowed = self.settings.allowed_extensions
        if ext and allowed and ext not in allowed:
            self.logger.debug("skip %s: extension %s not allowed", url, ext)
            return None
        dirname = BUCKET_DIRS[bucket]
        directory = self.output_dir / dirname
        name = unique_filename(
            directory, candidate_filename(url, bucket), self._reserved[bucket]
        )
        self._reserved[bucket].add(name)
        return FetchJob(ref, url, bucket, directory / name, f"{dirname}/{name}")

    def _fetch_all(self, jobs: List[FetchJob]) -> List[FetchJob]:
        if not jobs:
            return []
        workers = max(1, min(self.settings.concurrent_downloads, len(jobs)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            future_map = {pool.submit(self.download, job): job for job in jobs}
            for fut in as_completed(future_map):
                job = future_map[fut]
                try:
                    fut.result()
                except FetchFailure as e:
                    self.logger.warning("Failed to download %s: %s", job.reference, e)
                    self.failed.add(job.reference)
                    self._reserved[job.bucket].discard(job.dest.name)
                    continue
                self.records[job.reference] = AssetRecord(
                    local_path=job.local_path, bucket=job.bucket, url=job.url
                )
        return [j for j in jobs if j.reference in self.records]

    def download(self, job: FetchJob) -> None:
        limit = self.settings.max_file_size
        self.logger.info("Downloading: %s", job.url)
        try:
            resp = self.http.get(
                job.url, timeout=self.settings.download_timeout, stream=True
            )
        except requests.RequestException as e:
            raise FetchFailure(str(e)) from e
        try:
            if not 200 <= resp.status_code < 300:
                raise FetchFailure(f"HTTP {resp.status_code}")
            cl = resp.headers.get("Content-Length")
            if cl and cl.isdigit() and int(cl) > limit:
                raise FetchFailure(f"too large ({cl} bytes)")
            written = 0
            try:
                ensure_parent_dir(job.dest)
                with open(job.dest, "wb") as f:
                    for chunk in resp.iter_content(chunk_size=64 * 1024):
                        if not chunk:
                            continue
                        written += len(chunk)
                        if written > limit:
                            raise FetchFailure(f"exceeded {limit} bytes")
                        f.write(chunk)
            except FetchFailure:
                job.dest.unlink(missing_ok=True)
                raise
            except (requests.RequestException, OSError, ValueError) as e:
                try:
                    job.dest.unlink(missing_ok=True)
                except (OSError, ValueError):
                    pass
                raise FetchFailure(str(e)) from e
        finally:
            resp.close()
        self.logger.info("Downloaded: %s -> %s", job.url, job.local_path)

    def _resolve_stylesheet_dependencies(self, sheets: List[FetchJob]) -> None:
        # one level deep: url()s inside the dependencies are not chased
        jobs: List[FetchJob] = []
        for sheet in sheets:
            try:
                text = sheet.dest.read_text(encoding="utf-8", errors="ignore")
            except OSError as e:
                self.logger.warning("Failed to read stylesheet %s: %s", sheet.dest, e)
                continue
            for m in CSS_URL_RE.finditer(text):
                ref = m.group(2).strip()
                job = self.plan(ref, classify_css_reference(ref), base_url=sheet.url)
                if job is not None:
                    jobs.append(job)
        self._fetch_all(jobs)
        for sheet in sheets:
            try:
                self.rewrite_stylesheet(sheet)
            except RewriteFailure as e:
                self.logger.warning("Failed to process CSS file %s: %s", sheet.dest, e)

    def rewrite_stylesheet(self, sheet: FetchJob) -> None:
        def repl(m: re.Match) -> str:
            rec = self.records.get(m.group(2).strip())
            if rec is None:
                return m.group(0)
            q = m.group(1) or ""
            rel = relative_link(rec.local_path, sheet.local_path)
            return f"url({q}{rel}{q})"

        try:
            text = sheet.dest.read_text(encoding="utf-8", errors="ignore")
            new_text = CSS_URL_RE.sub(repl, text)
            if new_text != text:
                sheet.dest.write_text(new_text, encoding="utf-8")
        except OSError as e:
            raise RewriteFailure(str(e)) from e


# -------------------- Rewriting --------------------

AUTH_CHECK_SCRIPT = """
(function () {
  var root = __MIRROR_ROOT__;
  function toggle(selector, visible) {
    document.querySelectorAll(selector).forEach(function (el) {
      el.style.display = visible ? '' : 'none';
    });
  }
  document.addEventListener('DOMContentLoaded', function () {
    fetch(root + '__SESSION__', {credentials: 'same-origin'})
      .then(function (response) { return response.json(); })
      .then(function (data) {
        var body = document.body;
        document.querySelectorAll('input[name="csrf_token"]').forEach(function (input) {
          input.value = data.csrf_token || '';
        });
        if (data.authenticated) {
          body.classList.add('authenticated');
          body.classList.remove('not-authenticated');
          toggle('.protected, .auth-required', true);
          toggle('.login-only', false);
          document.querySelectorAll('a[href*="login"]').forEach(function (link) {
            link.textContent = 'Logout';
            link.href = root + '__LOGOUT__';
          });
          if (data.username) {
            document.querySelectorAll('.username, .user-name, [data-username]').forEach(function (el) {
              el.textContent = data.username;
            });
          }
        } else {
          body.classList.add('not-authenticated');
          body.classList.remove('authenticated');
          toggle('.protected, .auth-required', false);
          toggle('.login-only', true);
        }
      })
      .catch(function (error) {
        console.warn('Authentication check failed:', error);
      });
  });
})();
"""

AUTH_STATE_CSS = """
.not-authenticated .protected,
.not-authenticated .auth-required {
    display: none !important;
}

.authenticated .login-only {
    display: none !important;
}

.auth-message {
    padding: 10px;
    margin: 10px 0;
    border-radius: 4px;
    background-color: #f0f0f0;
    border: 1px solid #ccc;
}

.auth-message.error {
    background-color: #ffe6e6;
    border-color: #ff9999;
    color: #cc0000;
}

.auth-message.success {
    background-color: #e6ffe6;
    border-color: #99ff99;
    color: #006600;
}
"""

AUTH_SCRIPT_ID = "mirror-auth-check"
AUTH_STYLE_ID = "mirror-auth-state"


def auth_check_script(root: str) -> str:
    return (
        AUTH_CHECK_SCRIPT.replace("__MIRROR_ROOT__", json.dumps(root))
        .replace("__SESSION__", AUTH_SESSION_ENDPOINT)
        .replace("__LOGOUT__", AUTH_LOGOUT_ENDPOINT)
    )


class PathRewriter:
    def __init__(self, settings: Settings, logger: Optional[logging.Logger] = None):
        self.settings = settings
        self.logger = logger or LOGGER

    def rewrite_pages(
        self, pages: Sequence[PageRecord], asset_map: Mapping[str, str]
    ) -> None:
        self.logger.info("Rewriting paths in HTML files...")
        page_paths = {
            normalize_page_url(p.url): local_page_path(p.url, self.settings.base_url)
            for p in pages
        }
        for page in pages:
            try:
                page.html = self.rewrite(page, asset_map, page_paths)
                self.logger.info("Paths rewritten for: %s", page.url)
            except RewriteFailure as e:
                self.logger.warning("Failed to rewrite paths for %s: %s", page.url, e)

    def rewrite(
        self,
        page: PageRecord,
        asset_map: Mapping[str, str],
        page_paths: Optional[Mapping[str, str]] = None,
    ) -> str:
        try:
            soup = bs4_parse(page.html)
        except Exception as e:
            raise RewriteFailure(f"unparseable markup: {e}") from e
        page_file = local_page_path(page.url, self.settings.base_url)
        root = relative_root(page_file)

        # each step is independent; a failing one leaves the others applied
        steps: List[Tuple[str, Callable[[], None]]] = [
            ("tags", lambda: self._rewrite_tags(soup, page.url, asset_map, root)),
            (
                "inline styles",
                lambda: self._rewrite_inline_styles(soup, page.url, asset_map, root),
            ),
            ("forms", lambda: self._rewrite_forms(soup, root)),
            (
                "anchors",
                lambda: self._rewrite_anchors(
                    soup, page.url, page_paths or {}, page_file
                ),
            ),
            ("auth injection", lambda: self._inject_auth_check(soup, root)),
        ]
        for name, step in steps:
            try:
                step()
            except Exception as e:
                self.logger.warning(
                    "Rewrite step '%s' failed for %s: %s", name, page.url, e
                )
        return serialize_html(soup)

    @staticmethod
    def _lookup(
        value: str, page_url: str, asset_map: Mapping[str, str]
    ) -> Optional[str]:
        value = value.strip()
        hit = asset_map.get(value)
        if hit is None and can_fetch_url(value):
            hit = asset_map.get(urljoin(page_url, value))
        return hit

    def _rewrite_tags(
        self,
        soup: BeautifulSoup,
        page_url: str,
        asset_map: Mapping[str, str],
        root: str,
    ) -> None:
        targets = []
        for link in soup.find_all("link", href=True):
            rels = {r.lower() for r in (link.get("rel") or [])}
            if "stylesheet" in rels:
                targets.append((link, "href"))
        for tag in soup.find_all(["script", "img"], src=True):
            targets.append((tag, "src"))
        for tag, attr in targets:
            local = self._lookup(tag.get(attr) or "", page_url, asset_map)
            if local is None:
                continue
            tag[attr] = root + local
            for rm in ("integrity", "crossorigin"):
                if rm in tag.attrs:
                    del tag.attrs[rm]

    def _rewrite_inline_styles(
        self,
        soup: BeautifulSoup,
        page_url: str,
        asset_map: Mapping[str, str],
        root: str,
    ) -> None:
        def repl_url(m: re.Match) -> str:
            local = self._lookup(m.group(2), page_url, asset_map)
            if local is None:
                return m.group(0)
            q = m.group(1) or ""
            return f"url({q}{root}{local}{q})"

        def repl(m: re.Match) -> str:
            return m.group(1) + CSS_URL_RE.sub(repl_url, m.group(2))

        for tag in soup.find_all(style=True):
            css = tag.get("style") or ""
            new_css = INLINE_BACKGROUND_RE.sub(repl, css)
            if new_css != css:
                tag["style"] = new_css

    def _rewrite_forms(self, soup: BeautifulSoup, root: str) -> None:
        for form in soup.find_all("form"):
            kind = classify_form(form)
            if kind is None:
                continue
            if kind == "login":
                form["action"] = root + AUTH_LOGIN_ENDPOINT
            else:
                form["action"] = root + AUTH_REGISTER_ENDPOINT
            form["method"] = "POST"
            if form.find("input", attrs={"name": "csrf_token"}) is None:
                # filled from the session endpoint by the injected script
                token = soup.new_tag("input", type="hidden", value="")
                token["name"] = "csrf_token"
                form.append(token)

    def _rewrite_anchors(
        self,
        soup: BeautifulSoup,
        page_url: str,
        page_paths: Mapping[str, str],
        page_file: str,
    ) -> None:
        if not page_paths:
            return
        for a in soup.find_all("a", href=True):
            href = a.get("href")
            if not can_fetch_url(href):
                continue
            absu = urljoin(page_url, href.strip())
            target = page_paths.get(normalize_page_url(absu))
            if target is None:
                continue
            rel = relative_link(target, page_file)
            frag = urlparse(absu).fragment
            a["href"] = f"{rel}#{frag}" if frag else rel

    def _inject_auth_check(self, soup: BeautifulSoup, root: str) -> None:
        if soup.find(id=AUTH_SCRIPT_ID) is not None:
            return
        head = soup.head
        if head is None:
            head = soup.new_tag("head")
            if soup.html is not None:
                soup.html.insert(0, head)
            else:
                soup.insert(0, head)
        script = soup.new_tag("script", id=AUTH_SCRIPT_ID)
        script.string = auth_check_script(root)
        style = soup.new_tag("style", id=AUTH_STYLE_ID)
        style.string = AUTH_STATE_CSS
        head.append(script)
        head.append(style)


def classify_form(form) -> Optional[str]:
    """'login', 'register' or None for a parsed <form> element."""
    inputs = form.find_all("input")
    if not any((i.get("type") or "text").lower() == "password" for i in inputs):
        return None
    if any(CONFIRM_FIELD_RE.search(i.get("name") or "") for i in inputs):
        return "register"
    for i in inputs:
        if (i.get("type") or "").lower() == "email":
            return "login"
        if LOGIN_FIELD_RE.search(i.get("name") or ""):
            return "login"
    return None


# -------------------- Manifest --------------------


def write_manifest(
    output_dir: Path,
    base_url: str,
    *,
    pages: Mapping[str, str],
    asset_map: Mapping[str, str],
) -> Path:
    created_ts = (
        datetime.now(timezone.utc)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z")
    )
    data = {
        "site": base_url,
        "created_utc": created_ts,
        "pages": dict(pages),
        "assets": dict(asset_map),
        "layout": {bucket: f"{d}/" for bucket, d in BUCKET_DIRS.items()},
    }
    path = output_dir / "manifest.json"
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


# -------------------- Pipeline --------------------


@dataclass
class MirrorResult:
    output_dir: Path
    pages_discovered: int = 0
    pages_captured: int = 0
    pages_saved: int = 0
    assets_relocated: int = 0
    assets_failed: int = 0


SessionFactory = Callable[[Settings, logging.Logger], BrowserSession]


class MirrorPipeline:
    def __init__(
        self,
        settings: Settings,
        session_factory: Optional[SessionFactory] = None,
        http: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.settings = settings
        self.session_factory = session_factory or open_playwright_session
        self.http = http or build_session(settings.user_agent, settings.retries)
        self.logger = logger or LOGGER

    def prepare_output(self) -> Path:
        out = Path(self.settings.output_dir)
        try:
            out.mkdir(parents=True, exist_ok=True)
            for d in list(BUCKET_DIRS.values()) + [AUTH_DIR]:
                (out / d).mkdir(exist_ok=True)
        except OSError as e:
            raise StartupFailure(f"cannot create output directory {out}: {e}") from e
        self.logger.info("Directory structure created in %s", out)
        return out

    def run(self) -> MirrorResult:
        s = self.settings
        out = self.prepare_output()
        result = MirrorResult(output_dir=out)
        session = self.session_factory(s, self.logger)
        try:
            if s.username and s.password:
                auth = Authenticator(session, s, self.logger)
                auth.authenticate(s.username, s.password)
                n = apply_browser_cookies(self.http, session.cookies())
                self.logger.debug("shared %d browser cookies with downloader", n)

            self.logger.info("Discovering URLs...")
            urls = UrlDiscoverer(session, s, self.logger).discover(s.base_url)
            result.pages_discovered = len(urls)

            pages = PageCapture(session, s, self.logger).capture(urls)
            result.pages_captured = len(pages)

            resolver = AssetResolver(out, s, http=self.http, logger=self.logger)
            asset_map = resolver.resolve(pages)
            result.assets_relocated = len(asset_map)
            result.assets_failed = len(resolver.failed)

            PathRewriter(s, self.logger).rewrite_pages(pages, asset_map)
            saved = self.save_pages(pages, out)
            result.pages_saved = len(saved)
            write_manifest(out, s.base_url, pages=saved, asset_map=asset_map)
        finally:
            session.close()
        self.logger.info("Website mirror completed")
        return result

    def save_pages(self, pages: Sequence[PageRecord], out: Path) -> Dict[str, str]:
        saved: Dict[str, str] = {}
        for page in pages:
            rel = local_page_path(page.url, self.settings.base_url)
            path = out / rel
            try:
                ensure_parent_dir(path)
                path.write_text(page.html, encoding="utf-8")
            except OSError as e:
                self.logger.warning("Failed to save %s: %s", path, e)
                continue
            saved[page.url] = rel
            self.logger.info("Saved: %s", path)
        return saved


# -------------------- Config loader --------------------

CONFIG_GROUPS = ("target", "credentials", "crawler", "assets", "output", "logging")


def load_config_file(path: str) -> Dict[str, object]:
    p = Path(path)
    suf = p.suffix.lower()
    if suf in {".toml", ".tml"}:
        with open(p, "rb") as f:
            return tomllib.load(f) or {}
    elif suf in {".yaml", ".yml"}:
        with open(p, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise RuntimeError("Top-level YAML must be a mapping")
            return data
    else:
        raise RuntimeError("Unsupported config format. Use .toml or .yaml")


def flatten_config(cfg: Mapping[str, object]) -> Dict[str, object]:
    flat = {k: v for k, v in cfg.items() if k not in CONFIG_GROUPS}
    for g in CONFIG_GROUPS:
        if isinstance(cfg.get(g), dict):
            flat.update(cfg[g])
    return flat


def normalize_extensions(exts: Optional[Iterable[str]]) -> Set[str]:
    if exts is None:
        return set(DEFAULT_ALLOWED_EXTENSIONS)
    out = set()
    for e in exts:
        e = e.strip().lower()
        if e:
            out.add(e if e.startswith(".") else "." + e)
    return out


# -------------------- CLI --------------------


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        description="Mirror a rendered website into a static, self-hosted copy.",
        add_help=True,
    )
    p.add_argument("--config", type=str, help="path to config.toml|.yaml", default=None)
    p.add_argument("base_url", nargs="?", default=None, help="http(s) URL to mirror")
    p.add_argument(
        "-o",
        "--output-dir",
        dest="output_dir",
        default="public_html",
        help="output directory",
    )
    p.add_argument("--verbose", action="store_true", help="debug logging")
    p.add_argument("--log-level", type=str, default="info", help="log level")
    p.add_argument("--log-file", type=str, default=None, help="rotating log file")

    # target
    p.add_argument("--max-pages", type=int, default=100, help="max discovered pages")
    p.add_argument("--max-depth", type=int, default=3, help="max link depth")
    p.add_argument(
        "--timeout", type=int, default=30000, help="navigation timeout in ms"
    )
    p.add_argument("--retries", type=int, default=3, help="HTTP retries per asset")

    # credentials
    p.add_argument("--username", type=str, default=None, help="login username")
    p.add_argument("--password", type=str, default=None, help="login password")

    # browser
    p.add_argument("--user-agent", type=str, default=DEFAULT_USER_AGENT)
    p.add_argument("--viewport-width", type=int, default=1920)
    p.add_argument("--viewport-height", type=int, default=1080)
    p.add_argument(
        "--settle-ms",
        type=int,
        default=2000,
        help="extra wait after network idle before reading the DOM",
    )
    p.add_argument("--headed", action="store_true", help="show the browser window")

    # assets
    p.add_argument(
        "--max-file-size",
        type=int,
        default=50 * 1024 * 1024,
        help="max bytes per asset",
    )
    p.add_argument(
        "--allowed-extensions",
        nargs="+",
        default=None,
        help="asset extensions to download (default: common web types)",
    )
    p.add_argument(
        "--download-timeout", type=float, default=30.0, help="asset timeout seconds"
    )
    p.add_argument(
        "--concurrent-downloads", type=int, default=5, help="parallel asset downloads"
    )
    return p


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = build_arg_parser()
    preliminary, _ = parser.parse_known_args(argv)
    if preliminary.config:
        cfg = load_config_file(preliminary.config)
        if isinstance(cfg, dict):
            parser.set_defaults(**flatten_config(cfg))
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> Settings:
    return Settings(
        base_url=args.base_url or "",
        max_pages=max(1, args.max_pages),
        max_depth=max(0, args.max_depth),
        timeout=max(1000, args.timeout),
        retries=max(0, args.retries),
        username=args.username,
        password=args.password,
        user_agent=args.user_agent,
        viewport_width=max(320, args.viewport_width),
        viewport_height=max(240, args.viewport_height),
        settle_ms=max(0, args.settle_ms),
        headless=bool(getattr(args, "headless", True)) and not args.headed,
        max_file_size=max(1024, args.max_file_size),
        allowed_extensions=normalize_extensions(args.allowed_extensions),
        download_timeout=max(1.0, args.download_timeout),
        concurrent_downloads=max(1, args.concurrent_downloads),
        output_dir=args.output_dir,
        log_level="debug" if args.verbose else args.log_level,
        log_file=args.log_file,
    )


def configure_logging(
    level: str = "info", log_file: Optional[str] = None
) -> logging.Logger:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        ensure_parent_dir(Path(log_file))
        handlers.append(
            RotatingFileHandler(
                log_file, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
            )
        )
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s: %(message)s",
        handlers=handlers,
        force=True,
    )
    return LOGGER


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    if not args.base_url or urlparse(args.base_url).scheme not in {"http", "https"}:
        print("Invalid URL. Use http:// or https://")
        sys.exit(1)

    settings = build_settings(args)
    logger = configure_logging(settings.log_level, settings.log_file)

    print("Reminder: only mirror content you own or have permission to copy.")
    try:
        result = MirrorPipeline(settings, logger=logger).run()
    except StartupFailure as e:
        logger.error("Mirroring aborted: %s", e)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        sys.exit(130)

    print("Mirroring complete")
    print(f"Pages discovered: {result.pages_discovered}")
    print(f"Pages saved: {result.pages_saved}")
    print(f"Assets downloaded: {result.assets_relocated}")
    print(f"Assets failed: {result.assets_failed}")
    print(f"Output directory: {result.output_dir}")


if __name__ == "__main__":
    main()
