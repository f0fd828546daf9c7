from a11ysuite.assertions import SoftAssertions
from a11ysuite.axe import AxeAudit, AxeEngine, RuleFilter, run_axe
from a11ysuite.client_errors import (
    ClientErrorBuckets,
    ClientErrorCapture,
    ConsoleRecorder,
    expect_no_client_errors,
)
from a11ysuite.config import SiteConfig, load_site_config
from a11ysuite.pages import AccessibilityProbe, GenericPage, Navigator
from a11ysuite.reporting import Artifacts, save_accessibility_report

__version__ = "0.1.0"
