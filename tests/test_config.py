import pytest

import config
from stategraph import ConfigurationError


def test_step_limit_defaults_when_unset(monkeypatch) -> None:
    monkeypatch.delenv("TEAMGRAPH_STEP_LIMIT", raising=False)
    assert config.get_step_limit() == config.DEFAULT_STEP_LIMIT


def test_step_limit_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("TEAMGRAPH_STEP_LIMIT", "150")
    assert config.get_step_limit() == 150


@pytest.mark.parametrize("raw", ["abc", "0", "-3"])
def test_step_limit_rejects_invalid_values(monkeypatch, raw) -> None:
    monkeypatch.setenv("TEAMGRAPH_STEP_LIMIT", raw)
    with pytest.raises(ConfigurationError):
        config.get_step_limit()


def test_missing_api_key_raises(monkeypatch) -> None:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    with pytest.raises(RuntimeError, match="GEMINI_API_KEY"):
        config.get_gemini_api_key()


def test_workspace_dir_is_absolute(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("TEAMGRAPH_WORKSPACE", str(tmp_path / "out"))
    assert config.get_workspace_dir() == (tmp_path / "out").resolve()
