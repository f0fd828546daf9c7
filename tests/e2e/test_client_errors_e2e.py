import pytest
from playwright.sync_api import Page

from a11ysuite.client_errors import client_error_failures, expect_no_client_errors


@pytest.mark.e2e
def test_clean_page_has_no_client_errors(live_server, page: Page, client_errors):
    page.goto(f"{live_server['base_url']}/good.html")
    expect_no_client_errors(page, client_errors)


@pytest.mark.e2e
def test_uncaught_exception_lands_in_page_errors(live_server, page: Page, client_errors):
    page.goto(f"{live_server['base_url']}/page-error.html")
    page.wait_for_load_state("networkidle")
    page.wait_for_timeout(200)

    assert len(client_errors.page_errors) == 1
    assert "fixture exploded" in client_errors.page_errors[0]
    assert client_errors.console_errors == []
    assert client_errors.request_failures == []

    failures = client_error_failures(client_errors)
    assert [f.split(":")[0] for f in failures] == ["Page errors"]


@pytest.mark.e2e
def test_console_error_is_captured(live_server, page: Page, client_errors):
    page.goto(f"{live_server['base_url']}/console.html")
    page.wait_for_load_state("networkidle")

    assert len(client_errors.console_errors) == 1
    assert client_errors.console_errors[0].startswith("[console.error] fixture console error")
    assert client_errors.page_errors == []


@pytest.mark.e2e
def test_failed_request_is_captured(live_server, page: Page, client_errors):
    page.goto(f"{live_server['base_url']}/request-failed.html")
    page.wait_for_load_state("networkidle")

    assert len(client_errors.request_failures) == 1
    assert "127.0.0.1:9/unreachable.png" in client_errors.request_failures[0]


@pytest.mark.e2e
def test_console_recorder_report(live_server, page: Page, console_recorder, artifacts):
    url = f"{live_server['base_url']}/console.html"
    page.goto(url, wait_until="networkidle")

    assert len(console_recorder.errors) == 1
    assert len(console_recorder.warnings) == 1
    error = console_recorder.errors[0]
    assert error.source.endswith("/console.html")
    assert error.args[0] == "fixture console error"
    assert error.args[1] == {"code": 42}

    path = artifacts.attach_json("console-errors.json", console_recorder.report(url))
    assert path.exists()
