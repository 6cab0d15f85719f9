from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from photobrowser import errors
from photobrowser.__main__ import (
    EXIT_CONNECTION,
    EXIT_ERROR,
    EXIT_NOT_FOUND,
    EXIT_QUERY,
    EXIT_READ,
    EXIT_STATE,
    EXIT_VALIDATION,
    app,
)
from photobrowser.models import CatalogPage

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_config_files():
    # Keep the developer's own config files and the root logger out of the tests
    with patch("photobrowser.configuration.get_config_files", return_value=[]):
        with patch("photobrowser.__main__.configure_logging"):
            yield


class TestAvailable:
    def test_available(self, fake_library):
        with patch("photobrowser.service.locator.is_supported_platform", return_value=True):
            result = runner.invoke(app, ["--library", str(fake_library.root), "available"])

        assert result.exit_code == 0
        assert "is available" in result.output

    def test_not_available(self):
        with patch("photobrowser.service.locator.is_available", return_value=False):
            result = runner.invoke(app, ["available"])

        assert result.exit_code == EXIT_NOT_FOUND
        assert "not available" in result.output


class TestCatalog:
    def test_lists_photos(self, fake_library):
        for i in range(3):
            fake_library.add_asset(filename=f"IMG_{i}.jpg", directory="A", date_created=float(i))

        result = runner.invoke(app, ["--library", str(fake_library.root), "catalog", "--limit", "2"])

        assert result.exit_code == 0, result.output
        assert "2 photos shown (3 in library)" in result.output

    def test_all_pages(self, fake_library):
        for i in range(5):
            fake_library.add_asset(filename=f"IMG_{i}.jpg", directory="A", date_created=float(i))

        result = runner.invoke(app, ["--library", str(fake_library.root), "catalog", "--limit", "2", "--all"])

        assert result.exit_code == 0, result.output
        assert "5 photos shown (5 in library)" in result.output

    def test_all_pages_from_offset(self, fake_library):
        for i in range(5):
            fake_library.add_asset(filename=f"IMG_{i}.jpg", directory="A", date_created=float(i))

        result = runner.invoke(
            app, ["--library", str(fake_library.root), "catalog", "--limit", "2", "--offset", "3", "--all"]
        )

        assert result.exit_code == 0, result.output
        assert "2 photos shown (5 in library)" in result.output

    def test_all_pages_takes_total_from_the_pages(self, fake_library):
        fake_library.add_asset(filename="IMG_0.jpg", directory="A", date_created=0.0)

        with patch("photobrowser.__main__.PhotoBrowser.list_catalog_photos") as mock_list:
            mock_list.side_effect = lambda limit=None, offset=0: CatalogPage(
                photos=[], total=1, limit=limit or 2, offset=offset
            )
            result = runner.invoke(app, ["--library", str(fake_library.root), "catalog", "--limit", "2", "--all"])

        assert result.exit_code == 0, result.output
        assert mock_list.call_count == 1
        assert mock_list.call_args.kwargs == {"limit": 2, "offset": 0}

    def test_library_not_found(self):
        with patch("photobrowser.catalog.reader.locator.find_library", return_value=None):
            result = runner.invoke(app, ["catalog"])

        assert result.exit_code == EXIT_NOT_FOUND
        assert "Not found" in result.output

    def test_corrupt_library(self, fake_library):
        fake_library.db_path.write_bytes(b"garbage!" * 512)

        result = runner.invoke(app, ["--library", str(fake_library.root), "catalog"])

        assert result.exit_code == EXIT_CONNECTION
        assert "Could not open the Photos library" in result.output

    def test_query_error(self, fake_library):
        fake_library.execute("DROP TABLE ZASSET")

        result = runner.invoke(app, ["--library", str(fake_library.root), "catalog"])

        assert result.exit_code == EXIT_QUERY
        assert "no such table" in result.output

    def test_negative_offset(self, fake_library):
        result = runner.invoke(app, ["--library", str(fake_library.root), "catalog", "--offset", "-1"])

        assert result.exit_code == EXIT_VALIDATION

    def test_shuts_down_on_error(self, fake_library):
        with patch("photobrowser.__main__.PhotoBrowser.shutdown") as mock_shutdown:
            with patch(
                "photobrowser.__main__.PhotoBrowser.list_catalog_photos",
                side_effect=errors.QueryError("Failed to query photos", engine_message="database is locked"),
            ):
                result = runner.invoke(app, ["--library", str(fake_library.root), "catalog"])

        assert result.exit_code == EXIT_QUERY
        mock_shutdown.assert_called_once()


    def test_state_error(self, fake_library):
        with patch(
            "photobrowser.__main__.PhotoBrowser.list_catalog_photos",
            side_effect=errors.StateError("get_photos() requires an open catalog"),
        ):
            result = runner.invoke(app, ["--library", str(fake_library.root), "catalog"])

        assert result.exit_code == EXIT_STATE
        assert "Internal error" in result.output

    def test_unclassified_error(self, fake_library):
        with patch(
            "photobrowser.__main__.PhotoBrowser.list_catalog_photos",
            side_effect=errors.PhotoBrowserError("something else"),
        ):
            result = runner.invoke(app, ["--library", str(fake_library.root), "catalog"])

        assert result.exit_code == EXIT_ERROR
        assert "something else" in result.output


class TestFolder:
    def test_lists_folder(self, tmp_path):
        tmp_path.joinpath("a.jpg").write_bytes(b"x")
        tmp_path.joinpath("b.txt").write_bytes(b"x")

        result = runner.invoke(app, ["folder", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert "1 photos" in result.output

    def test_missing_folder(self, tmp_path):
        result = runner.invoke(app, ["folder", str(tmp_path / "missing")])

        assert result.exit_code == EXIT_NOT_FOUND

    def test_unlistable_folder(self, tmp_path):
        with patch.object(Path, "iterdir", side_effect=PermissionError(13, "Permission denied")):
            result = runner.invoke(app, ["folder", str(tmp_path)])

        assert result.exit_code == EXIT_READ
        assert "Permission denied" in result.output


class TestRead:
    def test_read(self, tmp_path):
        photo = tmp_path / "a.png"
        photo.write_bytes(b"png")

        result = runner.invoke(app, ["read", str(photo)])

        assert result.exit_code == 0
        assert result.output.strip() == "data:image/png;base64,cG5n"

    def test_length_only(self, tmp_path):
        photo = tmp_path / "a.png"
        photo.write_bytes(b"png")

        result = runner.invoke(app, ["read", str(photo), "--length-only"])

        assert result.exit_code == 0
        assert result.output.strip() == str(len("data:image/png;base64,cG5n"))

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["read", str(tmp_path / "missing.jpg")])

        assert result.exit_code == EXIT_NOT_FOUND

    def test_directory(self, tmp_path):
        result = runner.invoke(app, ["read", str(tmp_path)])

        assert result.exit_code == EXIT_VALIDATION
        assert "is a directory" in result.output

    def test_unreadable_file(self, tmp_path):
        photo = tmp_path / "a.png"
        photo.write_bytes(b"png")

        with patch.object(Path, "read_bytes", side_effect=PermissionError(13, "Permission denied")):
            result = runner.invoke(app, ["read", str(photo)])

        assert result.exit_code == EXIT_READ
        assert "Permission denied" in result.output


class TestConfiguration:
    def test_invalid_log_level(self):
        result = runner.invoke(app, ["--log-level", "LOUD", "folder", "."])

        assert result.exit_code == EXIT_VALIDATION
        assert "Configuration error" in result.output
