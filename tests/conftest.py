# tests/conftest.py
import os

# Settings are read at import time, so the environment is fixed before any
# application module is collected.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["PLAYLIST_REQUIRE_AUTH"] = "true"
