"""Tests for the command-line interface."""

import json
import numpy as np
import pytest
from nbody_sim.cli.main import main


def write_input(path, matrix=None):
    if matrix is None:
        matrix = np.array([
            [5.97e24, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0],
            [7.35e22, 3.844e8, 0.0, 0.0, 0.0, 1022.0, 0.0],
        ])
    np.save(path, matrix)
    return matrix


def test_cli_run(tmp_path, capsys):
    """Test a full run writes the output matrix and prints the timing."""
    input_path = tmp_path / "input.npy"
    output_path = tmp_path / "output.npy"
    matrix = write_input(input_path)
    
    code = main(["60", "6000", "10", str(input_path), str(output_path), "2"])
    
    assert code == 0
    output = np.load(output_path)
    assert output.shape == (10, 6)
    assert np.array_equal(output[0], matrix[:, 1:4].reshape(-1))
    assert "secs" in capsys.readouterr().out


def test_cli_default_threads(tmp_path):
    """Test the thread count is optional."""
    input_path = tmp_path / "input.npy"
    output_path = tmp_path / "output.npy"
    write_input(input_path)
    
    assert main(["1", "10", "3", str(input_path), str(output_path)]) == 0
    assert np.load(output_path).shape == (4, 6)


@pytest.mark.parametrize("args", [
    ["0", "10", "3"],
    ["2", "1", "3"],
    ["1", "10", "0"],
    ["1", "-10", "3"],
])
def test_cli_invalid_parameters(tmp_path, capsys, args):
    """Test invalid parameters exit with status 1 and no output."""
    input_path = tmp_path / "input.npy"
    output_path = tmp_path / "output.npy"
    write_input(input_path)
    
    assert main(args + [str(input_path), str(output_path)]) == 1
    assert not output_path.exists()
    assert "error" in capsys.readouterr().err


def test_cli_invalid_thread_count(tmp_path):
    """Test a non-positive thread count is rejected."""
    input_path = tmp_path / "input.npy"
    output_path = tmp_path / "output.npy"
    write_input(input_path)
    
    assert main(["1", "10", "3", str(input_path), str(output_path), "0"]) == 1
    assert not output_path.exists()


def test_cli_input_errors(tmp_path, capsys):
    """Test missing and malformed input files exit with status 1."""
    output_path = tmp_path / "output.npy"
    
    assert main(["1", "10", "3", str(tmp_path / "missing.npy"), str(output_path)]) == 1
    
    bad = tmp_path / "bad.npy"
    np.save(bad, np.ones((2, 5)))
    assert main(["1", "10", "3", str(bad), str(output_path)]) == 1
    
    empty = tmp_path / "empty.npy"
    np.save(empty, np.zeros((0, 7)))
    assert main(["1", "10", "3", str(empty), str(output_path)]) == 1
    
    assert not output_path.exists()
    assert "error" in capsys.readouterr().err


def test_cli_usage_error_exit_code(tmp_path):
    """Test argument parsing errors exit with status 1."""
    with pytest.raises(SystemExit) as excinfo:
        main(["abc", "10", "3", "in.npy", "out.npy"])
    assert excinfo.value.code == 1
    
    with pytest.raises(SystemExit) as excinfo:
        main(["1", "10"])
    assert excinfo.value.code == 1


def test_cli_save_state_and_report(tmp_path, capsys):
    """Test the final state can be saved, reported and used as input."""
    input_path = tmp_path / "input.npy"
    output_path = tmp_path / "output.npy"
    state_path = tmp_path / "final.npz"
    write_input(input_path)
    
    code = main(["60", "600", "5", str(input_path), str(output_path), "1",
                 "--save-state", str(state_path), "--report"])
    assert code == 0
    assert state_path.exists()
    out = capsys.readouterr().out
    assert "State saved" in out
    assert "|p|" in out
    
    # Resume from the saved state: its first row is the previous final row
    resumed_path = tmp_path / "resumed.npy"
    assert main(["60", "600", "5", str(state_path), str(resumed_path), "1"]) == 0
    assert np.array_equal(np.load(resumed_path)[0], np.load(output_path)[-1])


def test_cli_config_file(tmp_path):
    """Test physics constants are read from a config file."""
    input_path = tmp_path / "input.npy"
    config_path = tmp_path / "config.json"
    write_input(input_path, np.array([
        [1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0],
        [1.0, 1.0, 0.0, 0.0, 0.0, 0.0, 0.0],
    ]))
    
    config_path.write_text(json.dumps({"gravitational_constant": 1.0, "softening": 1e-3}))
    strong = tmp_path / "strong.npy"
    assert main(["0.01", "0.1", "2", str(input_path), str(strong), "--config", str(config_path)]) == 0
    
    weak = tmp_path / "weak.npy"
    assert main(["0.01", "0.1", "2", str(input_path), str(weak)]) == 0
    
    # With G = 1 the bodies move toward each other; with SI G they barely move
    assert np.load(strong)[-1, 0] > 1e-4
    assert abs(np.load(weak)[-1, 0]) < 1e-11


def test_cli_bad_config(tmp_path, capsys):
    """Test invalid config files exit with status 1."""
    input_path = tmp_path / "input.npy"
    output_path = tmp_path / "output.npy"
    write_input(input_path)
    
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"unknown_key": 1}))
    assert main(["1", "10", "3", str(input_path), str(output_path), "--config", str(config_path)]) == 1
    
    assert main(["1", "10", "3", str(input_path), str(output_path),
                 "--config", str(tmp_path / "missing.json")]) == 1
    assert not output_path.exists()


def test_cli_bad_state_suffix(tmp_path, capsys):
    """Test an unsupported --save-state suffix fails before anything is written."""
    input_path = tmp_path / "input.npy"
    output_path = tmp_path / "output.npy"
    state_path = tmp_path / "final.txt"
    write_input(input_path)
    
    code = main(["1", "10", "2", str(input_path), str(output_path), "1",
                 "--save-state", str(state_path)])
    
    assert code == 1
    assert not output_path.exists()
    assert not state_path.exists()
    assert "error" in capsys.readouterr().err


def test_cli_non_integer_chunk_size(tmp_path, capsys):
    """Test a fractional chunk size in the config file exits with status 1."""
    input_path = tmp_path / "input.npy"
    output_path = tmp_path / "output.npy"
    config_path = tmp_path / "config.json"
    write_input(input_path, np.hstack([np.ones((10, 1)), np.arange(60.0).reshape(10, 6)]))
    config_path.write_text(json.dumps({"chunk_size": 2.5}))
    
    assert main(["1", "10", "2", str(input_path), str(output_path), "--config", str(config_path)]) == 1
    assert not output_path.exists()
    assert "chunk_size" in capsys.readouterr().err
