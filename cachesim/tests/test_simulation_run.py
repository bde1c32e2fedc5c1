import pytest

import run
from cachesim.core.errors import ConfigError, TraceFormatError
from cachesim.data.trace_loader import TraceRecord
from cachesim.simulation import SCENARIOS, Simulation, SimulationConfig


def _write_trace(tmp_path, lines):
    path = tmp_path / 'trace.txt'
    path.write_text(''.join(f'{line}\n' for line in lines))
    return str(path)


def test_simulation_reuses_simulator_and_accumulates_stats():
    sim = Simulation(SimulationConfig(16, 4, 2))
    records = [TraceRecord('0000', 0), TraceRecord('0004', 4)]
    sim.run_trace(records)
    first = sim.simulator
    results = sim.run_trace(records)
    assert sim.simulator is first
    # contents carry over, so the second run hits
    assert [res.hit for _, res in results] == [True, True]
    assert first.stats.accesses == 4


def test_run_trace_multiple_passes():
    sim = Simulation(SimulationConfig(16, 4, 2))
    results = sim.run_trace([TraceRecord('0000', 0)], num_passes=3)
    assert [res.hit for _, res in results] == [False, True, True]


def test_run_file(tmp_path):
    path = _write_trace(tmp_path, ['0000', '0004', '0000'])
    results = Simulation(SimulationConfig(16, 4, 2)).run_file(path)
    assert [(rec.raw, res.outcome.value) for rec, res in results] == [
        ('0000', 'MISS'), ('0004', 'MISS'), ('0000', 'HIT')]


def test_bad_geometry_reported_before_trace_is_read(tmp_path):
    sim = Simulation(SimulationConfig(16, 4, 3))
    with pytest.raises(ConfigError):
        sim.run_file(str(tmp_path / 'missing.txt'))


@pytest.mark.parametrize('name', SCENARIOS)
def test_builtin_scenarios_produce_results(name):
    sim = Simulation(SimulationConfig(256, 16, 2), seed=7)
    results = sim.run_scenario(name)
    assert len(results) > 0
    assert all(len(rec.raw) == 4 for rec, _ in results)
    assert sim.simulator.stats.accesses == len(results)


def test_sequential_sweep_thrashes_lru():
    # a sweep over twice the cache size evicts every line before it is reused
    sim = Simulation(SimulationConfig(64, 16, 4))
    results = sim.run_scenario('Sequential Sweep')
    assert not any(res.hit for _, res in results)


def test_unknown_scenario():
    with pytest.raises(ConfigError):
        Simulation(SimulationConfig(16, 4, 2)).run_scenario('Nope')


def test_cli_prints_results_and_summary(tmp_path, capsys):
    path = _write_trace(tmp_path, ['0000', '0004', '0000'])
    assert run.main(['-s', '16', '-a', '2', '-l', '4', '-f', path]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out == [
        '0000,0,MISS',
        '0004,1,MISS',
        '0000,0,HIT',
        'NUM HITS 1',
        'NUM MISSES 2',
        'HIT RATE 0.333333',
    ]


def test_cli_writes_exports(tmp_path, capsys):
    path = _write_trace(tmp_path, ['0000', '0000'])
    csv_path = tmp_path / 'out.csv'
    json_path = tmp_path / 'out.json'
    stats_path = tmp_path / 'stats.csv'
    code = run.main(['-s', '16', '-a', '2', '-l', '4', '-f', path,
                     '--csv', str(csv_path), '--json', str(json_path), '--stats-csv', str(stats_path)])
    assert code == 0
    assert csv_path.exists() and json_path.exists() and stats_path.exists()


def test_cli_config_error_prints_nothing(tmp_path, capsys):
    path = _write_trace(tmp_path, ['0000'])
    assert run.main(['-s', '16', '-a', '3', '-l', '4', '-f', path]) == 1
    captured = capsys.readouterr()
    assert captured.out == ''
    assert 'error: ' in captured.err


def test_cli_trace_error(tmp_path, capsys):
    path = _write_trace(tmp_path, ['0000', 'xyz!'])
    assert run.main(['-s', '16', '-a', '2', '-l', '4', '-f', path]) == 1
    captured = capsys.readouterr()
    assert captured.out == ''
    assert 'line 2' in captured.err


def test_trace_error_type(tmp_path):
    path = _write_trace(tmp_path, ['12345'])
    with pytest.raises(TraceFormatError):
        Simulation(SimulationConfig(16, 4, 2)).run_file(path)


@pytest.mark.parametrize('passes', [0, -1])
def test_run_trace_rejects_non_positive_passes(passes):
    sim = Simulation(SimulationConfig(16, 4, 2))
    with pytest.raises(ConfigError):
        sim.run_trace([TraceRecord('0000', 0)], num_passes=passes)
    assert sim.simulator is None or sim.simulator.stats.accesses == 0


@pytest.mark.parametrize('passes', ['0', '-1'])
def test_cli_non_positive_passes(tmp_path, capsys, passes):
    path = _write_trace(tmp_path, ['0000', '0004'])
    assert run.main(['-s', '16', '-a', '2', '-l', '4', '-f', path, '--passes', passes]) == 1
    captured = capsys.readouterr()
    assert captured.out == ''
    assert 'passes' in captured.err


@pytest.mark.parametrize('flag', ['--csv', '--stats-csv', '--json'])
def test_cli_unwritable_export_path(tmp_path, capsys, flag):
    path = _write_trace(tmp_path, ['0000', '0000'])
    target = tmp_path / 'nodir' / 'out.file'
    assert run.main(['-s', '16', '-a', '2', '-l', '4', '-f', path, flag, str(target)]) == 1
    captured = capsys.readouterr()
    assert captured.out == ''
    assert 'error: cannot write' in captured.err
    assert 'out.file' in captured.err
