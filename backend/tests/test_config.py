"""
CampusLog Backend — Configuration and Startup Tests
=====================================================

What:  Tests for Settings validation and build_container().
Why:   A deployment missing a spreadsheet id must refuse to start rather
       than fail on the first request that touches it.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from campuslog.config import Settings
from campuslog.container import build_container
from campuslog.services.local_blob_store import LocalBlobStore
from campuslog.services.sql_table_store import SqlTableStore


def google_settings(**overrides):
    values = dict(
        _env_file=None,
        store_backend="sheets",
        blob_backend="drive",
        google_credentials="",
        google_credentials_file="",
        buslog_spreadsheet_id="",
        generatorlog_spreadsheet_id="",
        filelog_spreadsheet_id="",
        directory_spreadsheet_id="",
        buslog_folder_id="",
        generatorlog_folder_id="",
        filelog_folder_id="",
    )
    values.update(overrides)
    return Settings(**values)


class TestSettings:

    def test_missing_ids_are_all_reported(self):
        with pytest.raises(ValueError) as exc_info:
            google_settings().validate_required_for_production()

        message = str(exc_info.value)
        assert "BUSLOG_SPREADSHEET_ID is not set." in message
        assert "DIRECTORY_SPREADSHEET_ID is not set." in message
        assert "FILELOG_FOLDER_ID is not set." in message
        assert "Neither GOOGLE_CREDENTIALS nor GOOGLE_CREDENTIALS_FILE is set." in message

    def test_complete_google_settings_pass(self):
        google_settings(
            google_credentials_file="credentials.json",
            buslog_spreadsheet_id="s1",
            generatorlog_spreadsheet_id="s2",
            filelog_spreadsheet_id="s3",
            directory_spreadsheet_id="s4",
            buslog_folder_id="f1",
            generatorlog_folder_id="f2",
            filelog_folder_id="f3",
        ).validate_required_for_production()

    def test_local_backends_need_no_ids(self, test_settings):
        test_settings.validate_required_for_production()

    def test_log_level_is_normalised(self):
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None, log_level="LOUD")

    def test_cors_origins_list(self):
        settings = Settings(_env_file=None, cors_origins="http://a.test, http://b.test,")
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]

    def test_public_base_url_trailing_slash(self):
        assert Settings(_env_file=None, public_base_url="http://x.test/").public_base_url == "http://x.test"

    def test_max_file_size_floor(self):
        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None, max_file_size=1024)


class TestBuildContainer:

    @pytest.mark.asyncio
    async def test_database_backend_with_bootstrap(self, tmp_path):
        settings = Settings(
            _env_file=None,
            store_backend="database",
            blob_backend="local",
            database_url=f"sqlite+aiosqlite:///{tmp_path / 'campuslog.db'}",
            storage_root=str(tmp_path / "storage"),
            bootstrap_headers=True,
            buslog_spreadsheet_id="",
            directory_spreadsheet_id="",
        )

        container = await build_container(settings)
        try:
            assert isinstance(container.store, SqlTableStore)
            assert isinstance(container.trip_log.blobs, LocalBlobStore)
            assert container.locations["buslog"] == "buslog"
            assert container.locations["directory"] == "directory"

            rows = await container.store.read_all(container.departments.table)
            assert rows == [list(container.departments.table.header)]
            assert await container.health() == {
                "buslog": True,
                "generatorlog": True,
                "filelog": True,
                "directory": True,
            }
        finally:
            await container.aclose()

    @pytest.mark.asyncio
    async def test_sheets_backend_without_ids_fails(self):
        with pytest.raises(ValueError, match="Configuration validation failed"):
            await build_container(google_settings(google_credentials_file="credentials.json"))
