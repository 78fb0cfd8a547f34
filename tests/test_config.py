"""
Tests for YAML configuration loading.

Keep this SIMPLE and READABLE.
"""

import pytest

from gd.config import Config, OptimizerConfig, ClusterConfig, get_config


def test_defaults():
    config = Config()
    assert config.optimizer == OptimizerConfig()
    assert config.cluster == ClusterConfig()
    assert config.cluster.port is None
    assert config.config_file is None


def test_load(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "optimizer:\n"
        "  step_size: 0.5\n"
        "  num_iterations: 20\n"
        "  mini_batch_fraction: 0.0\n"
        "  updater: lazy_l1\n"
        "cluster:\n"
        "  port: 9700\n"
        "  num_partitions: 8\n"
    )

    config = Config()
    config.load(str(path))

    assert config.optimizer.step_size == 0.5
    assert config.optimizer.num_iterations == 20
    assert config.optimizer.mini_batch_fraction == 0.0
    assert config.optimizer.updater == 'lazy_l1'
    assert config.optimizer.gradient == 'least_squares'
    assert config.cluster.port == 9700
    assert config.cluster.num_partitions == 8
    assert config.cluster.host == 'localhost'
    assert config.config_file == str(path)


def test_empty_file_keeps_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")

    config = Config()
    config.load(str(path))

    assert config.optimizer == OptimizerConfig()


def test_missing_file():
    with pytest.raises(FileNotFoundError):
        Config().load("/nonexistent/gd.yaml")


def test_unknown_section(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("scheduler:\n  foo: 1\n")

    with pytest.raises(ValueError, match="scheduler"):
        Config().load(str(path))


def test_top_level_must_be_mapping(tmp_path):
    """A list or scalar at the top level is rejected with ValueError."""
    for i, text in enumerate(("- optimizer\n- cluster\n", "just a string\n")):
        path = tmp_path / f"bad{i}.yaml"
        path.write_text(text)

        with pytest.raises(ValueError, match="mapping"):
            Config().load(str(path))


def test_unknown_key(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("optimizer:\n  learning_rate: 0.1\n")

    with pytest.raises(ValueError, match="learning_rate"):
        Config().load(str(path))


def test_load_from_env(tmp_path, monkeypatch):
    path = tmp_path / "env.yaml"
    path.write_text("optimizer:\n  reg_param: 0.25\n")
    monkeypatch.setenv('GD_CONFIG', str(path))

    config = Config()
    config.load_from_env()

    assert config.optimizer.reg_param == 0.25


def test_load_from_env_unset(monkeypatch):
    monkeypatch.delenv('GD_CONFIG', raising=False)
    config = Config()
    config.load_from_env()
    assert config.config_file is None


def test_clear(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("optimizer:\n  step_size: 2.0\n")

    config = Config()
    config.load(str(path))
    config.clear()

    assert config.optimizer.step_size == 1.0
    assert config.config_file is None


def test_global_config():
    assert isinstance(get_config(), Config)
    assert get_config() is get_config()
