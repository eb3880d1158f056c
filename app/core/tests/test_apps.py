"""
Tests for project startup.

Test Organization:
    - TestAppLoading: django.setup() and the system check in a fresh interpreter
"""

import os
import subprocess
import sys
from pathlib import Path

APP_DIR = Path(__file__).resolve().parents[2]


# =============================================================================
# TestAppLoading
# =============================================================================


class TestAppLoading:
    """
    Tests for loading the project from a clean process.

    Verifies:
    - Installed apps populate without AppRegistryNotReady
    - manage.py check reports no issues

    The test process has already set Django up, so import-order problems
    in app packages only show in a new interpreter.
    """

    def _run(self, *args):
        env = {**os.environ, "DJANGO_SETTINGS_MODULE": "config.settings"}
        return subprocess.run(
            [sys.executable, *args],
            cwd=APP_DIR,
            env=env,
            capture_output=True,
            text=True,
            timeout=120,
        )

    def test_django_setup_in_fresh_process(self):
        """
        Why it matters: core is imported while apps are still loading; an
        early DRF import there breaks manage.py, ASGI and WSGI alike.
        """
        result = self._run("-c", "import django; django.setup()")

        assert result.returncode == 0, result.stderr

    def test_manage_check(self):
        result = self._run("manage.py", "check")

        assert result.returncode == 0, result.stderr
        assert "no issues" in result.stdout
