"""配置加载测试"""

from __future__ import annotations

from pathlib import Path

import pytest

import tackle.core.config as cfgmod
from tackle.core.config import Config, default_config_path, get_config, init_config
from tackle.core.exceptions import ConfigError


@pytest.fixture(autouse=True)
def _reset(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(cfgmod, "_current", None)
    monkeypatch.delenv("TACKLE_CONFIG", raising=False)


class TestConfig:
    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        cfg = Config.from_file(tmp_path / "none.yml")
        assert cfg.repositories == []
        assert cfg.max_workers == 8
        assert cfg.git_timeout == 120.0
        assert cfg.hook_timeout is None

    def test_load_values_and_extra(self, tmp_path: Path) -> None:
        f = tmp_path / "config.yml"
        f.write_text(
            "repositories:\n  - https://a.example.com/hooks/\n"
            "git_timeout: 30\nhook_timeout: 600\nlog_level: DEBUG\ncolor: false\n",
            encoding="utf-8",
        )
        cfg = Config.from_file(f)
        assert cfg.repositories == ["https://a.example.com/hooks/"]
        assert cfg.git_timeout == 30
        assert cfg.hook_timeout == 600
        assert cfg.log_level == "DEBUG"
        assert cfg.extra == {"color": False}

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        f = tmp_path / "config.yml"
        f.write_text("repositories: [\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            Config.from_file(f)

    @pytest.mark.parametrize("content", [
        "repositories: https://a.example.com/\n",
        "repositories:\n  - 1\n",
        "max_workers: 0\n",
        "max_workers: many\n",
    ])
    def test_invalid_values(self, tmp_path: Path, content: str) -> None:
        f = tmp_path / "config.yml"
        f.write_text(content, encoding="utf-8")
        with pytest.raises(ConfigError):
            Config.from_file(f)

    def test_env_var_overrides_default_path(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        f = tmp_path / "custom.yml"
        f.write_text("max_workers: 2\n", encoding="utf-8")
        monkeypatch.setenv("TACKLE_CONFIG", str(f))
        assert default_config_path() == f
        assert init_config().max_workers == 2
        assert get_config().max_workers == 2

    def test_get_config_defaults(self) -> None:
        assert get_config().repositories == []

    def test_to_dict(self) -> None:
        assert Config(repositories=["x"]).to_dict()["repositories"] == ["x"]
