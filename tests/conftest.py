"""Test environment: in-memory SQLite, a fixed JWT secret and cheap bcrypt, set before app import."""

import os

os.environ["APP_ENV"] = "dev"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret-key-for-jwt-testing-0123456789"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ALLOW_REMODERATION"] = "true"
