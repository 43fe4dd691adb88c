import json

import pytest

from config import ElectionConfig, SystemConfig, save_config
from main import ElectionOrchestrator, main


@pytest.fixture
def config(tmp_path):
    return SystemConfig(
        election=ElectionConfig(election_id="test-election", num_voters=4, seed=1234),
        log_dir=tmp_path / "logs",
        results_dir=tmp_path / "results",
    )


def test_run_election_passes_all_checks(config):
    orchestrator = ElectionOrchestrator(config)
    results = orchestrator.run_election(6, negative_checks=True)

    checks = results['integrity_checks']
    assert checks['replay_rejected']
    assert checks['late_vote_rejected']
    assert checks['all_checks_passed']
    assert all(checks.values())

    assert results['election']['accepted_votes'] == 6
    assert results['tally']['opened'] == results['tally']['expected']


def test_seed_fixes_the_vote_values(config):
    first = ElectionOrchestrator(config).run_election(5, negative_checks=False)
    second = ElectionOrchestrator(config).run_election(5, negative_checks=False)
    assert first['tally']['expected'] == second['tally']['expected']


def test_operations_are_timed(config):
    orchestrator = ElectionOrchestrator(config)
    orchestrator.run_election(3, negative_checks=False)
    operations = orchestrator.performance_monitor.get_summary()['operations']
    assert operations['submit_vote']['count'] == 3
    assert operations['build_vote']['count'] == 3
    assert operations['open_tally']['count'] == 1


def test_demo_mode_writes_reports(tmp_path, config, restore_root_logging, capsys):
    config_path = tmp_path / "config.yaml"
    save_config(config, config_path)

    with pytest.raises(SystemExit) as excinfo:
        main(['--config', str(config_path), '--voters', '3'])

    assert excinfo.value.code == 0
    report = json.loads((config.results_dir / "election_report.json").read_text())
    assert report['data']['integrity_checks']['all_checks_passed'] is True
    assert (config.results_dir / "performance_report.txt").exists()
    assert "Integrity Checks" in capsys.readouterr().out


def test_benchmark_mode_saves_metrics(tmp_path, config, restore_root_logging):
    config_path = tmp_path / "config.yaml"
    save_config(config, config_path)

    with pytest.raises(SystemExit) as excinfo:
        main(['--config', str(config_path), '--mode', 'benchmark', '--seed', '7'])

    assert excinfo.value.code == 0
    assert (config.results_dir / "benchmark_metrics.json").exists()


def test_rejects_non_positive_voter_count(tmp_path, config):
    config_path = tmp_path / "config.yaml"
    save_config(config, config_path)
    with pytest.raises(SystemExit) as excinfo:
        main(['--config', str(config_path), '--voters', '0'])
    assert excinfo.value.code == 2
