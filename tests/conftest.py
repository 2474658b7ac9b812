import logging
from typing import Dict, List, Mapping, Optional, Sequence

import pytest
import requests
from bs4 import BeautifulSoup

from live_mirror import BrowserSession, NavigationFailure, Settings

BASE = "https://site.test/"


class FakeBrowserSession(BrowserSession):
    """In-memory stand-in for a rendering tab: url -> markup."""

    def __init__(
        self,
        pages: Mapping[str, str],
        resources: Optional[Mapping[str, Dict[str, List[str]]]] = None,
        login_pages: Sequence[str] = (),
        cookie_jar: Optional[List[dict]] = None,
    ):
        self.pages = dict(pages)
        self.resources = dict(resources or {})
        self.login_pages = set(login_pages)
        self.cookie_jar = list(cookie_jar or [])
        self.navigations: List[str] = []
        self.submissions: List[tuple] = []
        self.closed = False
        self._url: Optional[str] = None

    def navigate(self, url: str, timeout_ms: int) -> None:
        self.navigations.append(url)
        if url not in self.pages:
            raise NavigationFailure(f"{url}: net::ERR_NAME_NOT_RESOLVED")
        self._url = url

    def settle(self, ms: int) -> None:
        pass

    def current_url(self) -> str:
        return self._url or ""

    def current_markup(self) -> str:
        return self.pages[self._url]

    def current_title(self) -> str:
        soup = BeautifulSoup(self.pages[self._url], "html.parser")
        return soup.title.get_text() if soup.title else ""

    def query_links(self) -> List[str]:
        soup = BeautifulSoup(self.pages[self._url], "html.parser")
        return [a.get("href") for a in soup.find_all("a", href=True)]

    def collect_resources(self) -> Dict[str, List[str]]:
        return self.resources.get(self._url, {})

    def fill_and_submit(self, selectors, values) -> bool:
        self.submissions.append((self._url, dict(values)))
        return self._url in self.login_pages

    def cookies(self) -> List[dict]:
        return self.cookie_jar

    def close(self) -> None:
        self.closed = True


class FakeResponse:
    def __init__(self, status_code: int = 200, body: bytes = b"", headers=None):
        self.status_code = status_code
        self.body = body
        self.headers = dict(headers or {})
        self.closed = False

    def iter_content(self, chunk_size: int = 1):
        for i in range(0, len(self.body), chunk_size):
            yield self.body[i : i + chunk_size]

    def close(self) -> None:
        self.closed = True


class FakeHttp:
    """Routes absolute URLs to bodies, responses or exceptions."""

    def __init__(self, routes: Optional[Mapping[str, object]] = None):
        self.routes = dict(routes or {})
        self.calls: List[str] = []
        self.headers: Dict[str, str] = {}
        self.cookies = requests.cookies.RequestsCookieJar()

    def get(self, url: str, timeout=None, stream: bool = False):
        self.calls.append(url)
        route = self.routes.get(url)
        if route is None:
            return FakeResponse(404)
        if isinstance(route, Exception):
            raise route
        if isinstance(route, FakeResponse):
            return route
        body = route.encode("utf-8") if isinstance(route, str) else route
        return FakeResponse(200, body, {"Content-Length": str(len(body))})


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        base_url=BASE,
        output_dir=str(tmp_path / "public_html"),
        settle_ms=0,
        concurrent_downloads=2,
    )


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("live_mirror")
