"""Unit tests for app.core.config.Settings validators."""

import unittest

from pydantic import ValidationError

from app.core.config import PLACEHOLDER_JWT_SECRET, Settings
from app.core.security import TokenService

GOOD_SECRET = "config-test-secret-that-is-long-enough"


def _settings(**overrides: object) -> Settings:
    values: dict[str, object] = {
        "DATABASE_URL": "sqlite://",
        "JWT_SECRET": GOOD_SECRET,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestDefaults(unittest.TestCase):
    def test_token_defaults_to_24_hours(self) -> None:
        settings = _settings()
        self.assertEqual(settings.JWT_EXPIRE_MINUTES, 1440)
        self.assertEqual(settings.JWT_ALGORITHM, "HS256")

    def test_token_service_from_settings(self) -> None:
        service = TokenService.from_settings(_settings(JWT_EXPIRE_MINUTES=30))
        self.assertEqual(service.default_ttl.total_seconds(), 30 * 60)


class TestValidators(unittest.TestCase):
    def test_rejects_unknown_database_scheme(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(DATABASE_URL="mongodb://localhost/vetted")

    def test_rejects_driverless_mysql_url(self) -> None:
        for url in ("mysql://root@localhost/vetted", "mysql+pymysql://root@localhost/vetted"):
            with self.subTest(url=url):
                with self.assertRaises(ValidationError):
                    _settings(DATABASE_URL=url)

    def test_accepts_postgres_and_sqlite(self) -> None:
        for url in ("postgresql+psycopg2://u:p@localhost/vetted", "sqlite:///./vetted.db"):
            with self.subTest(url=url):
                self.assertEqual(_settings(DATABASE_URL=url).DATABASE_URL, url)

    def test_rejects_asymmetric_algorithm(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(JWT_ALGORITHM="RS256")

    def test_normalizes_algorithm_case(self) -> None:
        self.assertEqual(_settings(JWT_ALGORITHM="hs512").JWT_ALGORITHM, "HS512")

    def test_rejects_blank_secret(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(JWT_SECRET="   ")

    def test_placeholder_secret_refused_in_prod(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(APP_ENV="prod", JWT_SECRET=PLACEHOLDER_JWT_SECRET)
        self.assertEqual(_settings(APP_ENV="prod").APP_ENV, "prod")

    def test_default_ttl_cannot_exceed_max(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(JWT_EXPIRE_MINUTES=120, JWT_MAX_EXPIRE_MINUTES=60)

    def test_bcrypt_rounds_bounds(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(BCRYPT_ROUNDS=3)
        with self.assertRaises(ValidationError):
            _settings(BCRYPT_ROUNDS=17)

    def test_api_prefix(self) -> None:
        self.assertEqual(_settings(API_PREFIX="/api/v1/").API_PREFIX, "/api/v1")
        with self.assertRaises(ValidationError):
            _settings(API_PREFIX="api")


if __name__ == "__main__":
    unittest.main()
