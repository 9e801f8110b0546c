# tests/conftest.py
import json
import os
import types

import pytest
from freezegun import freeze_time

from modules.job_applier.lib.cache import DetailCache, FileDetailStore
from modules.job_applier.lib.config import MailConfig
from modules.job_applier.lib.pipeline import Pipeline

LISTING = "https://arbetsformedlingen.se/platsbanken/annonser/"
DETAIL_API = "https://platsbanken-api.arbetsformedlingen.se/jobs/v1/job/"


# ---------------------------------------------------------------------
# Live tests are opt-in: use --live or RUN_LIVE_TESTS=1
# ---------------------------------------------------------------------
def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--live",
        action="store_true",
        default=False,
        help="Run tests marked as 'live' (network calls or external services).",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "live: marks tests that perform live network calls or hit external services (skipped by default).",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    run_live = config.getoption("--live") or os.getenv("RUN_LIVE_TESTS") == "1"
    if run_live:
        return
    skip_live = pytest.mark.skip(reason="live tests disabled (use --live or RUN_LIVE_TESTS=1)")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


# ---------------------------------------------------------------------
# Test-wide env defaults (autouse, function-scoped)
# ---------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _env_defaults(monkeypatch, tmp_path):
    # Write logs to a throwaway dir so real logs stay clean (per test)
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("ACTIVITY_LOG_PREFIX", "activity-test")
    monkeypatch.setenv("ERROR_LOG_PREFIX", "error-test")
    for name in ("JOB_APPLIER_HOME", "JOB_APPLIER_REGION", "JOB_APPLIER_SEARCH"):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def frozen_utc():
    with freeze_time("2025-01-01T00:00:00Z"):
        yield


@pytest.fixture
def read_log(tmp_path):
    """Return the JSONL records written under a log prefix during this test."""

    def _read(prefix: str) -> list[dict]:
        log_dir = tmp_path / "logs"
        if not log_dir.exists():
            return []
        out = []
        for p in sorted(log_dir.glob(f"{prefix}-*.jsonl")):
            out.extend(json.loads(line) for line in p.read_text(encoding="utf-8").splitlines() if line)
        return out

    return _read


# ---------------------------------------------------------------------
# Advert documents
# ---------------------------------------------------------------------
def make_detail(advert_id: str = "28912345", **overrides) -> dict:
    doc = {
        "id": advert_id,
        "title": "Servitör",
        "occupation": "Servitör/Servitris",
        "workTimeExtent": "Heltid",
        "company": {"name": "Acme Restaurang AB"},
        "workplace": {"region": "Jönköpings län"},
        "application": {"email": "jobb@acme.se"},
    }
    doc.update(overrides)
    return doc


@pytest.fixture
def detail_doc():
    return make_detail


class FakeHttp:
    """Serves advert detail bodies by URL and records every request."""

    def __init__(self, bodies: dict[str, bytes] | None = None):
        self.bodies = dict(bodies or {})
        self.calls: list[str] = []
        self.posts: list[tuple[str, object]] = []
        self.search_reply: object = {"numberOfAds": 0, "ads": []}
        self.closed = False

    def add(self, doc: dict) -> str:
        self.bodies[DETAIL_API + doc["id"]] = json.dumps(doc).encode("utf-8")
        return LISTING + doc["id"]

    def get_bytes(self, url: str, **_kwargs) -> bytes:
        self.calls.append(url)
        if url not in self.bodies:
            raise OSError(f"404 for {url}")
        return self.bodies[url]

    def post_json(self, url: str, payload, **_kwargs):
        self.posts.append((url, payload))
        return self.search_reply

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_http():
    return FakeHttp()


@pytest.fixture
def stub_mailer():
    sent = {"messages": []}

    def send_application(**kwargs):
        sent["messages"].append(kwargs)
        return "<fake-message-id@example>"

    return types.SimpleNamespace(send_application=send_application, sent=sent)


# ---------------------------------------------------------------------
# Config root + pipeline
# ---------------------------------------------------------------------
@pytest.fixture
def config_root(tmp_path):
    root = tmp_path / "JobApplier"
    root.mkdir()
    resume = root / "cv.pdf"
    resume.write_bytes(b"%PDF-1.4 fake")
    (root / "config.json").write_text(
        json.dumps({
            "SMTP": {"username": "me@example.se", "token": "s3cret", "server": "smtp.example.se"},
            "resumePath": str(resume),
        }),
        encoding="utf-8",
    )
    (root / "personal_letter.txt").write_text("Hej! Jag söker jobbet.\n", encoding="utf-8")
    return root


@pytest.fixture
def mail_config(config_root):
    return MailConfig(
        username="me@example.se",
        token="s3cret",
        server="smtp.example.se",
        resume_path=str(config_root / "cv.pdf"),
    )


@pytest.fixture
def make_pipeline(config_root, fake_http, mail_config, stub_mailer):
    def _make(**overrides) -> Pipeline:
        kwargs = {
            "cache": DetailCache(FileDetailStore(str(config_root / "Jobs")), fake_http),
            "sqlite_path": str(config_root / "log.db"),
            "mail_config": mail_config,
            "letter": "Hej! Jag söker jobbet.\n",
            "send_mail": stub_mailer.send_application,
        }
        kwargs.update(overrides)
        return Pipeline(**kwargs)

    return _make
