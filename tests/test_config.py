"""Tests for .env loading and settings."""

from pathlib import Path

import pytest

from ytdigest.config import DEFAULT_MODEL, load_config, load_settings

KEYS = ("DIGEST_LLM_API_KEY", "OPENAI_API_KEY", "DIGEST_LLM_BASE_URL", "DIGEST_LLM_MODEL",
        "YOUTUBE_API_KEY", "DIGEST_OUTPUT_DIR")


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for key in KEYS:
        # setenv first so teardown removes anything the loader adds
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_env_file_fills_settings(clean_env, monkeypatch) -> None:
    (clean_env / ".env").write_text(
        "# keys\nOPENAI_API_KEY='sk-test'\nYOUTUBE_API_KEY=yt-key\nDIGEST_OUTPUT_DIR=digests\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("YOUTUBE_API_KEY", "from-env")
    load_config(force=True)
    settings = load_settings()
    assert settings.llm_api_key == "sk-test"
    assert settings.youtube_api_key == "from-env"
    assert settings.llm_model == DEFAULT_MODEL
    assert settings.output_dir == Path("digests")


def test_fallback_env_dir(clean_env) -> None:
    (clean_env / ".digests").mkdir()
    (clean_env / ".digests" / ".env").write_text("DIGEST_LLM_MODEL=llama3\n", encoding="utf-8")
    load_config(force=True)
    settings = load_settings()
    assert settings.llm_model == "llama3"
    assert settings.llm_api_key is None
