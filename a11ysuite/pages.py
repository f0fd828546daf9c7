import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import expect

from a11ysuite import checks
from a11ysuite.axe import AxeAudit, AxeEngine
from a11ysuite.config import nav_timeout_ms
from a11ysuite.snapshot import FOCUSABLE_SELECTOR, snapshot_from_page

logger = logging.getLogger(__name__)

SCREENSHOT_DIR = Path("test-results") / "screenshots"
MODAL_TRIGGER_SELECTOR = (
    '[data-testid="modal-trigger"], button:has-text("Open"), '
    'button:has-text("Show"), button:has-text("Modal")'
)
MODAL_SELECTOR = '[role="dialog"], .modal, [data-testid="modal"]'

PERFORMANCE_JS = """
() => {
    const nav = performance.getEntriesByType('navigation')[0];
    const fcp = performance.getEntriesByType('paint').find(p => p.name === 'first-contentful-paint');
    return {
        loadTime: nav ? nav.loadEventEnd - nav.loadEventStart : 0,
        firstContentfulPaint: fcp ? fcp.startTime : 0,
    };
}
"""

SCROLL_JS = """
(distance) => new Promise((resolve) => {
    let total = 0;
    const timer = setInterval(() => {
        window.scrollBy(0, distance);
        total += distance;
        if (total >= document.body.scrollHeight) {
            clearInterval(timer);
            resolve(true);
        }
    }, 100);
})
"""


@dataclass(frozen=True)
class PerformanceMetrics:
    load_time: float
    first_contentful_paint: float
    largest_contentful_paint: float = 0.0
    cumulative_layout_shift: float = 0.0

    def to_dict(self):
        return asdict(self)


class Navigator:
    """Navigation and element helpers for one Playwright page."""

    def __init__(self, page):
        self.page = page

    def goto(self, url, wait_until="domcontentloaded"):
        self.page.goto(url, wait_until=wait_until, timeout=nav_timeout_ms())

    def wait_for_page_load(self, timeout=10000):
        self.page.wait_for_load_state("networkidle", timeout=timeout)

    def title(self):
        return self.page.title()

    def current_url(self):
        return self.page.url

    def screenshot(self, name, directory=SCREENSHOT_DIR):
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"{name}.png"
        self.page.screenshot(path=str(path), full_page=True)
        return path

    def wait_for_element(self, locator, timeout=5000):
        locator.wait_for(timeout=timeout)

    def click(self, locator):
        self.wait_for_element(locator)
        locator.click()

    def fill(self, locator, text):
        self.wait_for_element(locator)
        locator.fill(text)

    def text_of(self, locator):
        self.wait_for_element(locator)
        return locator.text_content() or ""

    def is_visible(self, locator, timeout=5000):
        try:
            locator.wait_for(state="visible", timeout=timeout)
        except PlaywrightError:
            return False
        return True

    def scroll_to(self, locator):
        locator.scroll_into_view_if_needed()

    def wait_for_url(self, pattern, timeout=10000):
        self.page.wait_for_url(pattern, timeout=timeout)


class AccessibilityProbe:
    """DOM heuristics against the live page. Every call takes a fresh snapshot."""

    def __init__(self, page):
        self.page = page

    def snapshot(self):
        return snapshot_from_page(self.page)

    def heading_hierarchy(self):
        return checks.check_heading_hierarchy(self.snapshot().heading_levels)

    def image_accessibility(self):
        return checks.check_image_accessibility(self.snapshot().images)

    def aria_implementation(self):
        snap = self.snapshot()
        return checks.check_aria_implementation(snap.roles, snap.landmark_count)

    def document_structure(self):
        return checks.check_document_structure(self.snapshot())

    def has_basic_accessibility(self):
        return checks.has_basic_accessibility(self.snapshot())

    def has_skip_links(self):
        return self.snapshot().skip_link_count > 0

    def live_region_count(self):
        return self.snapshot().live_region_count

    def form_labels(self):
        return checks.check_form_labels(self.snapshot().form_fields)

    def interactive_elements(self):
        return checks.count_interactive_elements(self.snapshot())

    def accessible_names(self):
        return checks.check_accessible_names(self.snapshot().controls)

    def reduced_motion(self):
        self.page.emulate_media(reduced_motion="reduce")
        return checks.check_reduced_motion(self.snapshot().animated_styles)

    def lazy_images(self):
        return checks.check_lazy_images(self.snapshot().images)

    def keyboard_navigation(self, max_elements=5, settle_ms=100, focus_timeout_ms=2000):
        """
        Tab through up to max_elements focusable elements and count how many
        times a visible element received focus. Stops at the first miss.
        """
        focusable = self.page.locator(FOCUSABLE_SELECTOR)
        count = focusable.count()
        navigated = 0

        if count > 0:
            focusable.first.focus()
            for _ in range(min(count, max_elements)):
                self.page.keyboard.press("Tab")
                self.page.wait_for_timeout(settle_ms)
                try:
                    expect(self.page.locator(":focus")).to_be_visible(timeout=focus_timeout_ms)
                except (AssertionError, PlaywrightError):
                    break
                navigated += 1

        return checks.KeyboardNavResult(success=navigated > 0, navigated_elements=navigated)

    def modal_focus_trapped(self, max_triggers=2, settle_ms=1000):
        """
        Open up to max_triggers modals and report, per opened dialog, whether
        focus landed inside it. Triggers that cannot be clicked are skipped.
        """
        results = []
        triggers = self.page.locator(MODAL_TRIGGER_SELECTOR).all()[:max_triggers]
        for trigger in triggers:
            try:
                trigger.click(timeout=2000)
                self.page.wait_for_timeout(settle_ms)
                modal = self.page.locator(MODAL_SELECTOR).first
                if not modal.count() or not modal.is_visible():
                    continue
                inside = modal.evaluate("(el) => el.contains(document.activeElement)")
            except PlaywrightError as e:
                logger.debug("Skipping modal trigger: %s", e.message)
                continue
            results.append(bool(inside))
        return results

    def performance_metrics(self):
        data = self.page.evaluate(PERFORMANCE_JS)
        return PerformanceMetrics(
            load_time=float(data.get("loadTime") or 0),
            first_contentful_paint=float(data.get("firstContentfulPaint") or 0),
        )

    def simulate_user_interaction(self, distance=100, settle_ms=2000):
        """Scroll to the bottom in steps, then give lazy content time to load."""
        self.page.evaluate(SCROLL_JS, distance)
        self.page.wait_for_timeout(settle_ms)


class GenericPage:
    """A page under test: navigation, DOM probing and axe auditing side by side."""

    def __init__(self, page, engine: Optional[AxeEngine] = None, artifacts=None):
        self.page = page
        self.nav = Navigator(page)
        self.probe = AccessibilityProbe(page)
        self.audit = AxeAudit(page, engine, artifacts)

    def goto(self, url, wait_until="domcontentloaded"):
        self.nav.goto(url, wait_until=wait_until)
        self.audit.reset()
