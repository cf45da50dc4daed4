"""
Test the command line interface
"""

import json

import pytest
from typer.testing import CliRunner

from menu_crawler import cli
from menu_crawler.core.logging import setup_logging
from menu_crawler.output import output_filename
from menu_crawler.registry import Registry
from menu_crawler.strategies import InlineDataCrawler

BASE = "https://cafe.example.com"
MENU = '<ul><li class="item"><p class="title">Latte</p></li></ul>'

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    # The CLI points loguru at the runner's captured stderr
    setup_logging("INFO")


@pytest.fixture
def offline_registry(monkeypatch, make_definition, make_driver):
    """Registry whose crawlers read canned pages instead of launching a browser"""

    class OfflineCrawler(InlineDataCrawler):
        def create_driver(self):
            return make_driver({f"{BASE}/menu": MENU})

    def explode():
        raise RuntimeError("browser crashed")

    registry = Registry()
    registry.register("testcafe", lambda: OfflineCrawler(make_definition()))
    registry.register("broken", explode)

    monkeypatch.setattr(cli, "build_registry", lambda settings=None: registry)
    return registry


def test_list_shows_builtin_brands():
    result = runner.invoke(cli.app, ["list"])

    assert result.exit_code == 0
    for brand in ("paik", "ediya", "gongcha"):
        assert brand in result.output
    assert "list-detail" in result.output


def test_run_unknown_brand_exits_with_error():
    result = runner.invoke(cli.app, ["run", "nope"])

    assert result.exit_code == 1
    assert "Unknown crawler: nope" in result.output


def test_run_writes_json(offline_registry, tmp_path):
    result = runner.invoke(cli.app, ["run", "testcafe", "--output-dir", str(tmp_path)])

    assert result.exit_code == 0
    assert "testcafe: 1 products" in result.output
    records = json.loads((tmp_path / output_filename("testcafe")).read_text(encoding="utf-8"))
    assert [record["name"] for record in records] == ["Latte"]


def test_run_failure_exits_with_error(offline_registry, tmp_path):
    result = runner.invoke(cli.app, ["run", "broken", "--output-dir", str(tmp_path)])

    assert result.exit_code == 1
    assert list(tmp_path.iterdir()) == []


def test_run_test_mode_flags(offline_registry, tmp_path):
    result = runner.invoke(
        cli.app, ["run", "testcafe", "--test", "--max-products", "1", "--output-dir", str(tmp_path)]
    )

    assert result.exit_code == 0
    settings = cli.get_settings()
    assert settings.test_mode is True
    assert settings.max_products == 1


@pytest.mark.parametrize("flags", [[], ["--parallel"]])
def test_run_all_reports_every_brand(flags, offline_registry, tmp_path):
    result = runner.invoke(cli.app, ["run-all", *flags, "--output-dir", str(tmp_path)])

    assert result.exit_code == 0
    assert "testcafe" in result.output
    assert "browser crashed" in result.output
    assert [path.name for path in tmp_path.iterdir()] == [output_filename("testcafe")]
