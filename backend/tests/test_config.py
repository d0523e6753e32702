"""
Formulario Backend — Configuration Tests
==========================================

What we test:
    ✅ Field validators normalize or reject values
    ✅ Startup checks catch sync drivers and unknown timezones
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from formulario.config import Settings


class TestSettingsValidation:

    def test_log_level_is_uppercased(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(PydanticValidationError):
            Settings(log_level="verbose")

    def test_page_size_is_uppercased(self):
        assert Settings(pdf_page_size="letter").pdf_page_size == "LETTER"

    def test_unknown_page_size(self):
        with pytest.raises(PydanticValidationError):
            Settings(pdf_page_size="A5")

    def test_cors_origins_list(self):
        settings = Settings(cors_origins="https://a.example, https://b.example")
        assert settings.cors_origins_list == ["https://a.example", "https://b.example"]


class TestProductionChecks:

    def test_defaults_pass(self):
        Settings(database_url="postgresql+asyncpg://u:p@db:5432/formulario").validate_required_for_production()

    def test_sync_driver_rejected(self):
        settings = Settings(database_url="postgresql://u:p@db:5432/formulario")
        with pytest.raises(ValueError, match="postgresql"):
            settings.validate_required_for_production()

    def test_unknown_timezone_rejected(self):
        settings = Settings(database_url="sqlite+aiosqlite://", pdf_timezone="Mars/Olympus_Mons")
        with pytest.raises(ValueError, match="PDF_TIMEZONE"):
            settings.validate_required_for_production()
