import logging

import pytest

from commitment import CommitmentKey
from config import ElectionConfig, SystemConfig, load_config, save_config


@pytest.fixture(autouse=True)
def in_tmp_dir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_defaults():
    config = SystemConfig()
    assert config.election.election_id == "election_2025"
    assert config.election.num_voters == 8
    assert config.log_level == "INFO"
    assert config.log_dir.is_dir()
    assert config.results_dir.is_dir()


def test_debug_mode_forces_debug_level(tmp_path):
    config = SystemConfig(log_dir=tmp_path / "l", results_dir=tmp_path / "r", enable_debug_mode=True)
    assert config.log_level == "DEBUG"


def test_election_config_validation():
    with pytest.raises(ValueError):
        ElectionConfig(election_id="")
    with pytest.raises(ValueError):
        ElectionConfig(num_voters=0)


def test_commitment_key_follows_domain():
    config = ElectionConfig(commitment_domain="custom/v2")
    assert config.commitment_key() == CommitmentKey.derive(b"custom/v2")
    assert config.election_id_bytes() == b"election_2025"


def test_save_and_load_round_trip(tmp_path):
    config = SystemConfig(
        election=ElectionConfig(election_id="city-council", num_voters=12, seed=99),
        log_dir=tmp_path / "logs",
        results_dir=tmp_path / "results",
        log_level="WARNING",
        enable_benchmarking=False,
    )
    path = tmp_path / "conf" / "config.yaml"
    save_config(config, path)

    loaded = load_config(path)
    assert loaded.election == config.election
    assert loaded.log_dir == config.log_dir
    assert loaded.results_dir == config.results_dir
    assert loaded.log_level == "WARNING"
    assert loaded.enable_benchmarking is False


def test_missing_file_gives_defaults(tmp_path):
    config = load_config(tmp_path / "absent.yaml")
    assert config.election == ElectionConfig()


def test_broken_file_gives_defaults_with_warning(tmp_path, caplog):
    path = tmp_path / "broken.yaml"
    path.write_text("election: [unterminated\n")

    with caplog.at_level(logging.WARNING, logger="config.config"):
        config = load_config(path)

    assert config.election == ElectionConfig()
    assert "Could not load config file" in caplog.text


def test_invalid_values_give_defaults(tmp_path):
    path = tmp_path / "invalid.yaml"
    path.write_text("election:\n  num_voters: 0\n")
    assert load_config(path).election.num_voters == 8


@pytest.mark.parametrize("body", [
    "election:\n  num_voters: null\n",
    "election:\n  num_voters:\n",
    "election:\n  num_voters: eight\n",
    "election:\n  num_voters: yes\n",
    "election:\n  election_id: 2025\n",
    "election:\n  seed: abc\n",
    "election: null\n",
    "log_dir: null\n",
    "- just\n- a list\n",
])
def test_wrongly_typed_values_give_defaults(tmp_path, caplog, body):
    path = tmp_path / "typed.yaml"
    path.write_text(body)

    with caplog.at_level(logging.WARNING, logger="config.config"):
        config = load_config(path)

    assert config.election == ElectionConfig()
    assert config.log_dir.name == "logs"
    assert "Using default configuration" in caplog.text


def test_unknown_log_level_gives_defaults(tmp_path, caplog):
    path = tmp_path / "level.yaml"
    path.write_text("log_level: verbose\n")

    with caplog.at_level(logging.WARNING, logger="config.config"):
        config = load_config(path)

    assert config.log_level == "INFO"
    assert "log_level" in caplog.text


def test_log_level_is_normalised_and_checked(tmp_path):
    config = SystemConfig(log_dir=tmp_path / "l", results_dir=tmp_path / "r", log_level="warning")
    assert config.log_level == "WARNING"

    with pytest.raises(ValueError):
        SystemConfig(log_dir=tmp_path / "l", results_dir=tmp_path / "r", log_level="verbose")
    with pytest.raises(ValueError):
        SystemConfig(log_dir=tmp_path / "l", results_dir=tmp_path / "r", log_level=10)


def test_election_config_rejects_wrong_types():
    with pytest.raises(ValueError):
        ElectionConfig(num_voters=None)
    with pytest.raises(ValueError):
        ElectionConfig(num_voters=True)
    with pytest.raises(ValueError):
        ElectionConfig(election_id=2025)
    with pytest.raises(ValueError):
        ElectionConfig(seed="abc")


def test_main_survives_a_mistyped_config(tmp_path, restore_root_logging):
    from main import main

    path = tmp_path / "typed.yaml"
    path.write_text("election:\n  num_voters: null\nlog_level: verbose\n")

    with pytest.raises(SystemExit) as excinfo:
        main(['--config', str(path), '--voters', '2', '--mode', 'benchmark'])
    assert excinfo.value.code == 0
