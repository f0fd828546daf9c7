import logging
from dataclasses import dataclass
from typing import Optional

from playwright.sync_api import Error as PlaywrightError

from a11ysuite.checks import filter_violations

logger = logging.getLogger(__name__)

AXE_CDN = "https://cdnjs.cloudflare.com/ajax/libs/axe-core/4.9.1/axe.min.js"
AXE_LOAD_TIMEOUT_MS = 5000

AXE_RUN_JS = """
async (options) => {
    return await axe.run(document, options);
}
"""


@dataclass(frozen=True)
class RuleFilter:
    """
    Tags and rule ids handed to axe-core.

    Excluded rules always win: a rule listed in both include_rules and
    exclude_rules is never run.
    """
    tags: tuple = ()
    include_rules: tuple = ()
    exclude_rules: frozenset = frozenset()

    @classmethod
    def from_config(cls, config, tags=None, include_rules=None, exclude_rules=None):
        return cls(
            tags=tuple(config.wcag_tags if tags is None else tags),
            include_rules=tuple(config.baseline_rules if include_rules is None else include_rules),
            exclude_rules=frozenset(config.exclude_rules if exclude_rules is None else exclude_rules),
        )

    @property
    def effective_rules(self):
        return [r for r in self.include_rules if r not in self.exclude_rules]

    def axe_options(self):
        rules = self.effective_rules
        options = {}
        if rules:
            options["runOnly"] = {"type": "rule", "values": rules}
        elif self.tags:
            options["runOnly"] = {"type": "tag", "values": list(self.tags)}
        # nothing selected: axe runs its default rule set
        if self.exclude_rules:
            options["rules"] = {r: {"enabled": False} for r in sorted(self.exclude_rules)}
        return options


@dataclass(frozen=True)
class AxeAvailability:
    available: bool
    reason: str = ""

    def __bool__(self):
        return self.available


class AxeEngine:
    def __init__(self, source=AXE_CDN, timeout_ms=AXE_LOAD_TIMEOUT_MS):
        self.source = source
        self.timeout_ms = timeout_ms

    def inject(self, page) -> AxeAvailability:
        """Load axe-core into the current document, reporting whether it worked."""
        try:
            page.add_script_tag(url=self.source)
            page.wait_for_function("() => typeof window.axe !== 'undefined'", timeout=self.timeout_ms)
        except PlaywrightError as e:
            logger.warning("axe-core could not be loaded from %s: %s", self.source, e.message)
            return AxeAvailability(False, e.message)
        return AxeAvailability(True)


class AxeAudit:
    """
    Audit capability bound to one page.

    Availability is resolved once, on first use after navigation; call
    reset() when the page navigates away so the engine is injected again.
    """

    def __init__(self, page, engine: Optional[AxeEngine] = None, artifacts=None):
        self.page = page
        self.engine = engine or AxeEngine()
        self.artifacts = artifacts
        self._availability = None

    @property
    def availability(self) -> AxeAvailability:
        if self._availability is None:
            self._availability = self.engine.inject(self.page)
        return self._availability

    def reset(self):
        self._availability = None

    def run(self, rule_filter: Optional[RuleFilter] = None):
        """Run axe and return the raw result object (violations, passes, ...)."""
        if not self.availability:
            raise RuntimeError(f"axe-core is not loaded: {self.availability.reason}")
        options = rule_filter.axe_options() if rule_filter else {}
        return self.page.evaluate(AXE_RUN_JS, options)

    def violations(self, rule_filter: Optional[RuleFilter] = None):
        violations = self.run(rule_filter)["violations"]
        logger.info("axe reported %d violation(s) on %s", len(violations), self.page.url)
        if self.artifacts is not None:
            self.artifacts.attach_json("axe-violations.json", violations)
        return violations

    def color_contrast_violations(self):
        return filter_violations(self.run()["violations"], "color-contrast")

    def fallback_check(self) -> bool:
        """Weaker check used when the engine is unavailable: the page has a title."""
        return bool(self.page.title().strip())


def run_axe(page, config, artifacts=None, engine=None, tags=None, include_rules=None, exclude_rules=None):
    """
    Run axe-core on the current page with defaults from config.

    tags, include_rules and exclude_rules override the configured values
    for this call only. Returns the raw violations list.
    """
    rule_filter = RuleFilter.from_config(
        config, tags=tags, include_rules=include_rules, exclude_rules=exclude_rules,
    )
    return AxeAudit(page, engine, artifacts).violations(rule_filter)
