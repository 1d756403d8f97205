import os

import pytest
from pydantic import ValidationError

from tidydraws.config.loader import load_config
from tidydraws.config.schema import EngineConfig, EstimationConfig


def test_load_config_merges_overrides(tmp_path, monkeypatch):
    base = """
estimation:
  probs: [0.66, 0.95]
  interval: hdi
  kde_grid_size: 256
logging:
  log_file: "${TIDYDRAWS_LOG_DIR}/run.json"
"""
    override = """
estimation:
  kde_grid_size: 1024
"""
    monkeypatch.setenv("TIDYDRAWS_LOG_DIR", "logs")
    base_path = tmp_path / "base.yaml"
    override_path = tmp_path / "override.yaml"
    base_path.write_text(base, encoding="utf-8")
    override_path.write_text(override, encoding="utf-8")

    cfg = load_config([base_path, override_path])
    assert cfg.estimation.probs == [0.66, 0.95]
    assert cfg.estimation.interval == "hdi"
    assert cfg.estimation.kde_grid_size == 1024
    assert str(cfg.logging.log_file) == "logs/run.json"


def test_load_config_defaults(monkeypatch):
    monkeypatch.delenv("TIDYDRAWS_CONFIG", raising=False)
    cfg = load_config()
    assert cfg == EngineConfig()
    assert cfg.estimation.probs == [0.95]
    assert cfg.estimation.point == "median"


def test_load_config_from_env_var(tmp_path, monkeypatch):
    path = tmp_path / "engine.yaml"
    path.write_text("estimation:\n  point: mode\n", encoding="utf-8")
    monkeypatch.setenv("TIDYDRAWS_CONFIG", str(path))
    assert load_config().estimation.point == "mode"


def test_empty_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == EngineConfig()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"probs": [0.0]},
        {"probs": [1.2]},
        {"probs": []},
        {"point": "max"},
        {"interval": "eti"},
        {"kde_grid_size": 4},
    ],
)
def test_estimation_config_rejects(kwargs):
    with pytest.raises(ValidationError):
        EstimationConfig(**kwargs)


def test_env_var_lists_several_files(tmp_path, monkeypatch):
    first = tmp_path / "first.yaml"
    second = tmp_path / "second.yaml"
    first.write_text("estimation:\n  point: mode\n  probs: [0.8]\n", encoding="utf-8")
    second.write_text("estimation:\n  probs: [0.5, 0.9]\n", encoding="utf-8")
    monkeypatch.setenv("TIDYDRAWS_CONFIG", os.pathsep.join([str(first), str(second)]))

    cfg = load_config()
    assert cfg.estimation.point == "mode"
    assert cfg.estimation.probs == [0.5, 0.9]


def test_non_mapping_file(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 0.95\n", encoding="utf-8")
    with pytest.raises(TypeError, match="mapping"):
        load_config(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yaml")
