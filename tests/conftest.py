import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Must be set before any service module builds its engine or reads settings
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["TESTING"] = "1"
os.environ["JWT_SECRET"] = "test-slot-booking-secret"
os.environ["JWT_ALGORITHM"] = "HS256"
os.environ["REDIS_URL"] = ""
os.environ["SMTP_HOST"] = ""
os.environ["AUTO_VERIFY_EMAILS"] = "0"

import pytest  # noqa: E402

from common.settings import get_settings  # noqa: E402


@pytest.fixture()
def rate_limits_on(monkeypatch):
    monkeypatch.setenv("TESTING", "0")
    get_settings.cache_clear()
    yield
    monkeypatch.setenv("TESTING", "1")
    get_settings.cache_clear()
