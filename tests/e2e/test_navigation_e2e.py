import re

import pytest
from playwright.sync_api import Page, expect

from a11ysuite.pages import GenericPage


@pytest.mark.e2e
def test_navigation_helpers(live_server, page: Page, tmp_path):
    base = live_server["base_url"]
    generic = GenericPage(page)
    nav = generic.nav

    generic.goto(f"{base}/good.html")
    nav.wait_for_page_load()
    assert nav.title() == "Accessible fixture page"
    assert nav.current_url().endswith("/good.html")

    heading = page.locator("h1")
    assert nav.text_of(heading) == "Welcome"
    assert nav.is_visible(heading)
    assert not nav.is_visible(page.locator("#does-not-exist"), timeout=500)

    nav.scroll_to(page.locator("footer"))
    shot = nav.screenshot("good-page", directory=tmp_path)
    assert shot.exists()

    nav.click(page.get_by_role("link", name="Forms"))
    nav.wait_for_url(re.compile(r"forms\.html$"))
    expect(page.locator("h1")).to_have_text("Contact")
