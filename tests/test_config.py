import os

import pytest

from quran_roots.config import DEFAULT_BATCH_SIZE, DEFAULT_DB_PATH, Settings

ENV_VARS = ["QURAN_ROOTS_DB", "QURAN_ROOTS_INDEX", "QURAN_ROOTS_BATCH_SIZE",
            "QURAN_ROOTS_CACHE_TTL", "QURAN_ROOTS_DB_TIMEOUT", "QURAN_ROOTS_LOG_LEVEL"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    # load_dotenv writes straight into os.environ
    for name in ENV_VARS:
        os.environ.pop(name, None)


class TestSettings:
    def test_defaults(self):
        settings = Settings.from_env(dotenv=False)
        assert settings.db_path == DEFAULT_DB_PATH
        assert settings.batch_size == DEFAULT_BATCH_SIZE == 50
        assert settings.log_level == "INFO"

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("QURAN_ROOTS_DB", "/srv/quran.sqlite")
        monkeypatch.setenv("QURAN_ROOTS_BATCH_SIZE", "20")
        monkeypatch.setenv("QURAN_ROOTS_CACHE_TTL", "60")
        monkeypatch.setenv("QURAN_ROOTS_LOG_LEVEL", "debug")
        settings = Settings.from_env(dotenv=False)
        assert settings.db_path == "/srv/quran.sqlite"
        assert settings.batch_size == 20
        assert settings.cache_ttl == 60
        assert settings.log_level == "DEBUG"

    def test_dotenv_file(self, monkeypatch, tmp_path):
        (tmp_path / ".env").write_text("QURAN_ROOTS_INDEX=idx.json\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        assert Settings.from_env().index_path == "idx.json"

    def test_process_env_beats_dotenv(self, monkeypatch, tmp_path):
        (tmp_path / ".env").write_text("QURAN_ROOTS_DB=from-file\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("QURAN_ROOTS_DB", "from-env")
        assert Settings.from_env().db_path == "from-env"

    def test_not_an_integer(self, monkeypatch):
        monkeypatch.setenv("QURAN_ROOTS_DB_TIMEOUT", "soon")
        with pytest.raises(ValueError, match="QURAN_ROOTS_DB_TIMEOUT"):
            Settings.from_env(dotenv=False)

    def test_batch_size_must_be_positive(self, monkeypatch):
        monkeypatch.setenv("QURAN_ROOTS_BATCH_SIZE", "0")
        with pytest.raises(ValueError):
            Settings.from_env(dotenv=False)

