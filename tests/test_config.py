import json

import pytest

from dogwatcher.config import load_config, load_sites
from dogwatcher.models import RESERVED_MARKER


def test_load_config_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    config = load_config({})

    assert config.data_dir == tmp_path / "data"
    assert config.headless is True
    assert config.navigation_timeout_ms == 60000
    assert config.selector_timeout_ms == 30000
    assert config.email is None
    assert config.slack_webhook is None


def test_load_config_reads_channels(tmp_path):
    config = load_config({
        "DOG_LIST_DIR": str(tmp_path / "dogs"),
        "HEADLESS": "false",
        "SELECTOR_TIMEOUT_MS": "1500",
        "EMAIL_USER": "watcher@example.org",
        "EMAIL_PASS": "secret",
        "EMAIL_RECIPIENT": "me@example.org",
        "SMTP_PORT": "587",
        "SMTP_STARTTLS": "yes",
        "SLACK_WEBHOOK": " https://hooks.slack.com/services/test ",
    })

    assert config.data_dir == tmp_path / "dogs"
    assert config.headless is False
    assert config.selector_timeout_ms == 1500
    assert config.email.host == "smtp.gmail.com"
    assert config.email.port == 587
    assert config.email.starttls is True
    assert config.slack_webhook == "https://hooks.slack.com/services/test"


def test_load_config_rejects_bad_integer():
    with pytest.raises(ValueError, match="SMTP_PORT"):
        load_config({"EMAIL_USER": "a", "EMAIL_RECIPIENT": "b", "SMTP_PORT": "abc"})


def test_load_sites_accepts_card_selector_alias(tmp_path):
    path = tmp_path / "sites.json"
    path.write_text(json.dumps([
        {
            "id": "a",
            "name": "Rescue A",
            "url": "https://example.org/a",
            "cardSelector": ".dog",
            "nameSelector": ".name",
            "urlSelector": "a",
        },
        {
            "id": "b",
            "name": "Rescue B",
            "url": "https://example.org/b",
            "listItemSelector": "li.pet",
            "nameSelector": "h2",
            "urlSelector": "a",
            "reservedMarker": "(on hold)",
        },
    ]), encoding="utf-8")

    sites = load_sites(path)

    assert [site.id for site in sites] == ["a", "b"]
    assert sites[0].list_item_selector == ".dog"
    assert sites[0].reserved_marker == RESERVED_MARKER
    assert sites[1].list_item_selector == "li.pet"
    assert sites[1].reserved_marker == "(on hold)"


def test_load_sites_reports_missing_keys(tmp_path):
    path = tmp_path / "sites.json"
    path.write_text(json.dumps([{"id": "a", "name": "A", "url": "https://example.org"}]), encoding="utf-8")

    with pytest.raises(ValueError, match="listItemSelector"):
        load_sites(path)
