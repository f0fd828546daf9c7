import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from slugify import slugify

logger = logging.getLogger(__name__)

REPORT_DIR = Path("test-results") / "accessibility"


def _to_jsonable(payload):
    if hasattr(payload, "to_dict"):
        return payload.to_dict()
    if isinstance(payload, (list, tuple)):
        return [_to_jsonable(p) for p in payload]
    return payload


class Artifacts:
    """JSON attachments for one test, written into its own directory."""

    def __init__(self, directory):
        self.directory = Path(directory)
        self.written = []

    def attach_json(self, name, payload):
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / name
        path.write_text(json.dumps(_to_jsonable(payload), indent=2, default=str), encoding="utf-8")
        self.written.append(path)
        logger.debug("Attached %s", path)
        return path

    @classmethod
    def for_test(cls, output_dir, nodeid):
        return cls(Path(output_dir) / slugify(nodeid, max_length=120))


def save_accessibility_report(results, site_name, report_dir=REPORT_DIR):
    """Persist an axe result under report_dir and return the file path."""
    report_dir = Path(report_dir)
    report_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%f")
    path = report_dir / f"{slugify(site_name or 'report')}-{timestamp}.json"
    path.write_text(json.dumps(results, indent=2), encoding="utf-8")
    logger.info("Accessibility report saved to %s", path)
    return path
