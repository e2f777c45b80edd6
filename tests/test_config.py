"""
Bookshelf Backend — Configuration Tests
==========================================

What:  Settings validators and the production-readiness check.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from bookshelf.config import DEV_JWT_SECRET, Settings

STRONG_SECRET = "a-properly-long-random-secret-value"


class TestSettingsValidation:

    def test_levels_and_algorithms_normalized(self):
        settings = Settings(log_level="debug", jwt_algorithm="hs512", jwt_secret=STRONG_SECRET)
        assert settings.log_level == "DEBUG"
        assert settings.jwt_algorithm == "HS512"

    @pytest.mark.parametrize("algorithm", ["RS256", "none", ""])
    def test_non_hmac_algorithm_rejected(self, algorithm):
        with pytest.raises(PydanticValidationError):
            Settings(jwt_algorithm=algorithm, jwt_secret=STRONG_SECRET)

    def test_short_secret_rejected(self):
        with pytest.raises(PydanticValidationError):
            Settings(jwt_secret="short")

    def test_cors_origins_split(self):
        settings = Settings(cors_origins="http://a.test, http://b.test,", jwt_secret=STRONG_SECRET)
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]

    def test_is_sqlite(self):
        assert Settings(database_url="sqlite+aiosqlite:///x.db").is_sqlite is True
        assert Settings(database_url="postgresql+asyncpg://u:p@h/db").is_sqlite is False


class TestProductionCheck:

    def test_development_defaults_flagged(self):
        settings = Settings(jwt_secret=DEV_JWT_SECRET, seed_data=True, admin_password="admin123")

        with pytest.raises(ValueError) as exc_info:
            settings.validate_required_for_production()

        assert "JWT_SECRET" in str(exc_info.value)
        assert "ADMIN_PASSWORD" in str(exc_info.value)

    def test_default_admin_password_ignored_without_seeding(self):
        Settings(jwt_secret=STRONG_SECRET, seed_data=False, admin_password="admin123").validate_required_for_production()

    def test_overridden_values_pass(self):
        Settings(jwt_secret=STRONG_SECRET, admin_password="correct horse").validate_required_for_production()
