"""Root pytest configuration.

Test settings must be in the environment before any ``libs`` module is
imported: settings and the rate limiter are cached at import time.
"""

import os
import tempfile

# Load .env.test for local overrides (e.g. pointing DATABASE_URL at Postgres)
from dotenv import load_dotenv

env_test_path = os.path.join(os.path.dirname(__file__), ".env.test")
if os.path.exists(env_test_path):
    load_dotenv(env_test_path, override=True)

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["ENVIRONMENT"] = "local"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["STORAGE_BACKEND"] = "disk"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="suits-uploads-")
os.environ.pop("DEFAULT_PRODUCT_IMAGE_URL", None)

from libs.common.config import get_settings  # noqa: E402

# Clear cached settings to reload with new env vars
get_settings.cache_clear()
