"""Test environment. Loaded by pytest before any nhatroso module reads settings."""

import os

os.environ["APP_ENV"] = "dev"
os.environ["DEBUG"] = "false"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-access-secret"
os.environ["REFRESH_TOKEN_SECRET"] = "test-refresh-secret"
# Minimum cost keeps bcrypt from dominating test time.
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "true"
os.environ["AUTH_RATE_LIMIT_REQUESTS"] = "10"
os.environ["AUTH_RATE_LIMIT_WINDOW_SEC"] = "15"
