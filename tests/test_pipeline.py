import json
from pathlib import Path

import pytest
from bs4 import BeautifulSoup
from conftest import BASE, FakeBrowserSession, FakeHttp

import live_mirror
from live_mirror import (
    MirrorPipeline,
    StartupFailure,
    build_settings,
    flatten_config,
    load_config_file,
    parse_args,
)

HOME = """<html><head><title>Home</title>
<link rel="stylesheet" href="/css/main.css"></head>
<body><img src="/img/a.png"><a href="/about">About</a>
<form action="/signin"><input type="email" name="email"><input type="password" name="pw"></form>
</body></html>"""

ABOUT = """<html><head><title>About</title>
<link rel="stylesheet" href="/css/main.css"></head>
<body><img src="/img/a.png"><a href="/">Home</a></body></html>"""

ROUTES = {
    "https://site.test/css/main.css": "@font-face { src: url('/fonts/f.woff2'); }",
    "https://site.test/img/a.png": b"PNG",
    "https://site.test/fonts/f.woff2": b"WOFF",
}


def make_pipeline(settings, session, http):
    return MirrorPipeline(settings, session_factory=lambda s, log: session, http=http)


def test_end_to_end_mirror(settings):
    session = FakeBrowserSession({BASE: HOME, BASE + "about": ABOUT})
    http = FakeHttp(ROUTES)
    out = Path(settings.output_dir)

    result = make_pipeline(settings, session, http).run()

    assert result.pages_discovered == 2
    assert result.pages_saved == 2
    assert result.assets_relocated == 3
    assert session.closed

    for bucket in ("css", "js", "images", "fonts", "assets", "auth"):
        assert (out / bucket).is_dir()
    assert (out / "css" / "main.css").exists()
    assert (out / "images" / "a.png").read_bytes() == b"PNG"
    assert (out / "fonts" / "f.woff2").read_bytes() == b"WOFF"
    assert "url('../fonts/f.woff2')" in (out / "css" / "main.css").read_text()

    # shared assets are fetched once for both pages
    assert http.calls.count("https://site.test/img/a.png") == 1

    home = BeautifulSoup((out / "index.html").read_text(), "html.parser")
    assert home.find("link", rel="stylesheet")["href"] == "css/main.css"
    assert home.find("img")["src"] == "images/a.png"
    assert home.find("a")["href"] == "about.html"
    assert home.find("form")["action"] == "auth/login"
    assert home.find("form")["method"] == "POST"
    assert home.find("input", attrs={"name": "csrf_token"}) is not None

    about = BeautifulSoup((out / "about.html").read_text(), "html.parser")
    assert about.find("img")["src"] == "images/a.png"
    assert about.find("a")["href"] == "index.html"

    manifest = json.loads((out / "manifest.json").read_text())
    assert manifest["site"] == BASE
    assert manifest["pages"] == {BASE: "index.html", BASE + "about": "about.html"}
    assert manifest["assets"]["/img/a.png"] == "images/a.png"


def test_credentials_trigger_authentication(settings):
    settings.username, settings.password = "test", "secret"
    cookie = {"name": "sid", "value": "abc", "domain": "site.test", "path": "/"}
    session = FakeBrowserSession(
        {BASE: "<p>home</p>"}, login_pages=[BASE], cookie_jar=[cookie]
    )
    http = FakeHttp()

    make_pipeline(settings, session, http).run()

    assert session.submissions == [(BASE, {"username": "test", "password": "secret"})]
    assert http.cookies.get("sid") == "abc"


def test_no_credentials_no_login(settings):
    session = FakeBrowserSession({BASE: "<p>home</p>"}, login_pages=[BASE])
    make_pipeline(settings, session, FakeHttp()).run()
    assert session.submissions == []


def test_unreachable_seed_produces_empty_mirror(settings):
    session = FakeBrowserSession({})
    result = make_pipeline(settings, session, FakeHttp()).run()
    assert result.pages_discovered == 1
    assert result.pages_captured == 0
    assert session.closed


def test_failed_login_target_aborts_and_closes_session(settings):
    settings.username, settings.password = "test", "secret"
    session = FakeBrowserSession({})
    with pytest.raises(StartupFailure):
        make_pipeline(settings, session, FakeHttp()).run()
    assert session.closed


def test_output_dir_failure_is_startup_failure(settings, tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    settings.output_dir = str(blocker / "public_html")
    with pytest.raises(StartupFailure):
        make_pipeline(settings, FakeBrowserSession({}), FakeHttp()).run()


def test_config_file_seeds_arguments(tmp_path):
    cfg = tmp_path / "mirror.toml"
    cfg.write_text(
        """
[target]
base_url = "https://site.test/"
max_pages = 7

[credentials]
username = "test228"

[assets]
allowed_extensions = ["CSS", "png"]
concurrent_downloads = 2

[crawler]
headless = false
"""
    )
    args = parse_args(["--config", str(cfg), "--max-pages", "9"])
    s = build_settings(args)

    assert s.base_url == "https://site.test/"
    assert s.max_pages == 9
    assert s.username == "test228"
    assert s.allowed_extensions == {".css", ".png"}
    assert s.concurrent_downloads == 2
    assert s.headless is False


def test_yaml_config_and_flattening(tmp_path):
    cfg = tmp_path / "mirror.yaml"
    cfg.write_text("output:\n  output_dir: site\nlogging:\n  log_level: debug\n")
    flat = flatten_config(load_config_file(str(cfg)))
    assert flat == {"output_dir": "site", "log_level": "debug"}


def test_unsupported_config_format(tmp_path):
    cfg = tmp_path / "mirror.ini"
    cfg.write_text("")
    with pytest.raises(RuntimeError):
        load_config_file(str(cfg))


def test_main_rejects_bad_url(capsys):
    with pytest.raises(SystemExit) as exc:
        live_mirror.main(["ftp://site.test/"])
    assert exc.value.code == 1
    assert "Invalid URL" in capsys.readouterr().out


def test_main_exits_nonzero_on_startup_failure(monkeypatch, tmp_path):
    def fail(self):
        raise StartupFailure("browser unavailable")

    monkeypatch.setattr(MirrorPipeline, "run", fail)
    with pytest.raises(SystemExit) as exc:
        live_mirror.main([BASE, "-o", str(tmp_path / "out")])
    assert exc.value.code == 1
