import os
import sys
import time
import subprocess
import signal
import contextlib
from pathlib import Path

import pytest

from a11ysuite.axe import AxeEngine
from a11ysuite.client_errors import ClientErrorCapture, ConsoleRecorder
from a11ysuite.config import load_site_config
from a11ysuite.pages import GenericPage
from a11ysuite.reporting import Artifacts

SITE_DIR = Path(__file__).parent / "site"
FIXTURE_PORT = int(os.environ.get("A11Y_FIXTURE_PORT", "8765"))


def pytest_generate_tests(metafunc):
    if "site_url" in metafunc.fixturenames:
        urls = load_site_config().urls
        metafunc.parametrize("site_url", urls, ids=list(urls))


@pytest.fixture(scope="session")
def site_config():
    return load_site_config()


@pytest.fixture(scope="session")
def axe_engine():
    return AxeEngine()


@pytest.fixture(scope="session")
def live_server():
    """
    Serve tests/site/ on 127.0.0.1 for E2E checks against known pages.
    """
    import requests

    proc = subprocess.Popen(
        [sys.executable, "-m", "http.server", str(FIXTURE_PORT),
         "--bind", "127.0.0.1", "--directory", str(SITE_DIR)],
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
    )

    base = f"http://127.0.0.1:{FIXTURE_PORT}"
    for _ in range(30):
        try:
            r = requests.get(f"{base}/good.html", timeout=1.5)
            if r.status_code < 500:
                break
        except requests.RequestException:
            pass
        time.sleep(0.5)
    else:
        with contextlib.suppress(Exception):
            out = proc.stdout.read().decode("utf-8", errors="ignore")
            print("Server boot log:\n", out)
        proc.kill()
        raise RuntimeError(f"Fixture server did not start on :{FIXTURE_PORT}")

    yield {"base_url": base, "proc": proc}

    with contextlib.suppress(Exception):
        proc.send_signal(signal.SIGINT)
        proc.terminate()
        proc.wait(timeout=5)


@pytest.fixture
def artifacts(pytestconfig, request):
    return Artifacts.for_test(pytestconfig.getoption("--output"), request.node.nodeid)


@pytest.fixture
def client_errors(page, axe_engine):
    with ClientErrorCapture(page, ignore_urls=[axe_engine.source]) as buckets:
        yield buckets


@pytest.fixture
def console_recorder(page):
    with ConsoleRecorder(page) as recorder:
        yield recorder


@pytest.fixture
def generic_page(page, axe_engine, artifacts):
    return GenericPage(page, axe_engine, artifacts)
