# tests/test_job_applier_main.py
import pytest

from modules.job_applier import main as ja_main
from modules.job_applier.lib import db
from modules.job_applier.lib.config import ConfigError


@pytest.fixture
def wired(monkeypatch, fake_http, stub_mailer):
    monkeypatch.setattr(ja_main, "HttpClient", lambda timeout: fake_http)
    monkeypatch.setattr("modules.job_applier.lib.pipeline.send_application", stub_mailer.send_application)
    return fake_http


def test_run_processes_search_hits(wired, stub_mailer, config_root, detail_doc):
    wired.add(detail_doc("301"))
    wired.add(detail_doc("302", application={}))
    wired.search_reply = {"numberOfAds": 3, "ads": [{"id": "301"}, {"id": "302"}, {"id": "303"}]}

    summary = ja_main.run(config_root=str(config_root), region="Jonkoping", search="servering")

    assert summary == {
        "region": "Jonkoping",
        "search": "servering",
        "total": 3,
        "outcomes": {"sent": 1, "already_sent": 0, "no_email": 1, "error": 1},
    }
    assert len(stub_mailer.sent["messages"]) == 1
    assert db.count_rows(str(config_root / "log.db")) == 2
    assert wired.closed

    # Running again sends nothing new
    again = ja_main.run(config_root=str(config_root))
    assert again["outcomes"] == {"sent": 0, "already_sent": 2, "no_email": 0, "error": 1}
    assert len(stub_mailer.sent["messages"]) == 1


def test_run_without_config_file_aborts(wired, tmp_path):
    with pytest.raises(ConfigError):
        ja_main.run(config_root=str(tmp_path))
    assert wired.posts == []


def test_run_unknown_region_aborts(wired, config_root):
    with pytest.raises(ConfigError):
        ja_main.run(config_root=str(config_root), region="Atlantis")
    assert wired.closed
