"""Tests for environment-driven settings."""

import os
from pathlib import Path

import pytest

from meshscout.config import (
    DEFAULT_GEOCODER_URL,
    DEFAULT_OVERPASS_URL,
    Settings,
    load_env_file,
    load_settings,
    parse_env_text,
)
from meshscout.errors import InputValidationError


class TestLoadSettings:
    def test_defaults(self) -> None:
        settings = load_settings({})
        assert settings == Settings()
        assert settings.min_height_m == 9.0
        assert settings.overpass_url == DEFAULT_OVERPASS_URL
        assert settings.geocoder_url == DEFAULT_GEOCODER_URL

    def test_overrides(self) -> None:
        settings = load_settings(
            {
                "MESHSCOUT_MIN_HEIGHT_M": "15",
                "MESHSCOUT_OVERPASS_URL": "https://overpass.example.org/api/interpreter",
                "MESHSCOUT_GEOCODER_URL": "http://geo.local/us/",
                "MESHSCOUT_TIMEOUT_S": "10",
            }
        )
        assert settings.min_height_m == 15.0
        assert settings.overpass_url == "https://overpass.example.org/api/interpreter"
        assert settings.geocoder_url == "http://geo.local/us"
        assert settings.timeout_s == 10.0

    def test_blank_values_use_defaults(self) -> None:
        assert load_settings({"MESHSCOUT_MIN_HEIGHT_M": " "}).min_height_m == 9.0

    @pytest.mark.parametrize("raw", ["tall", "0", "-4", "nan"])
    def test_invalid_min_height(self, raw: str) -> None:
        with pytest.raises(InputValidationError, match="MESHSCOUT_MIN_HEIGHT_M"):
            load_settings({"MESHSCOUT_MIN_HEIGHT_M": raw})


class TestParseEnvText:
    def test_plain_and_exported_pairs(self) -> None:
        text = "MESHSCOUT_TIMEOUT_S=5\nexport MESHSCOUT_MIN_HEIGHT_M = 12\n"
        assert parse_env_text(text) == {"MESHSCOUT_TIMEOUT_S": "5", "MESHSCOUT_MIN_HEIGHT_M": "12"}

    def test_quoted_values_are_verbatim(self) -> None:
        text = "A=' spaced # not a comment '\nB=\"x=y\"\n"
        assert parse_env_text(text) == {"A": " spaced # not a comment ", "B": "x=y"}

    def test_inline_comment_on_unquoted_value(self) -> None:
        assert parse_env_text("URL=http://geo.local/us #local mirror") == {"URL": "http://geo.local/us"}

    def test_mismatched_quotes_are_kept(self) -> None:
        assert parse_env_text("A=\"open") == {"A": "\"open"}

    def test_skips_comments_blank_and_malformed_lines(self) -> None:
        text = "# MESHSCOUT_TIMEOUT_S=1\n\nnot a pair\n=orphan\nbad key=1\n"
        assert parse_env_text(text) == {}

    def test_empty_value(self) -> None:
        assert parse_env_text("A=") == {"A": ""}


class TestLoadEnvFile:
    def test_does_not_override_existing(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text(
            "# comment\nMESHSCOUT_MIN_HEIGHT_M='12'\nMESHSCOUT_TIMEOUT_S=5\nnot a pair\n",
            encoding="utf-8",
        )
        monkeypatch.setenv("MESHSCOUT_MIN_HEIGHT_M", "unset")
        monkeypatch.delenv("MESHSCOUT_MIN_HEIGHT_M")
        monkeypatch.setenv("MESHSCOUT_TIMEOUT_S", "30")

        load_env_file(env_file)

        assert os.environ["MESHSCOUT_MIN_HEIGHT_M"] == "12"
        assert os.environ["MESHSCOUT_TIMEOUT_S"] == "30"

    def test_missing_file_is_ignored(self, tmp_path: Path) -> None:
        load_env_file(tmp_path / "absent.env")
