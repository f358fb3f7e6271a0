"""Tests for run parameters and the snapshot recorder."""

import numpy as np
import pytest
from nbody_sim.errors import ParameterError
from nbody_sim.physics.snapshot import RunParameters, SnapshotRecorder


def test_derive_counts():
    """Test derived step and output counts."""
    params = RunParameters.derive(1.0, 10.0, 3)
    
    assert params.num_steps == 10
    assert params.output_steps == 3
    assert params.num_outputs == 4
    assert params.final_time == 9.0


def test_derive_divisible():
    """Test counts when outputs divide the step count."""
    params = RunParameters.derive(0.5, 10.0, 5)
    
    assert params.num_steps == 20
    assert params.output_steps == 4
    assert params.num_outputs == 5


def test_derive_rounds_step_count():
    """Test the step count is rounded to the nearest integer."""
    assert RunParameters.derive(1.0, 2.5, 1).num_steps == 3
    assert RunParameters.derive(1.0, 2.4, 1).num_steps == 2
    assert RunParameters.derive(1.0, 1.0, 1).num_steps == 1


def test_derive_clamps_output_steps():
    """Test more requested outputs than steps records every step."""
    with pytest.warns(UserWarning):
        params = RunParameters.derive(1.0, 5.0, 10)
    
    assert params.output_steps == 1
    assert params.num_outputs == 5


@pytest.mark.parametrize("time_step,total_time,outputs", [
    (0.0, 10.0, 1),
    (-1.0, 10.0, 1),
    (1.0, -10.0, 1),
    (2.0, 1.0, 1),
    (1.0, 10.0, 0),
    (1.0, 10.0, -3),
    (float("nan"), 10.0, 1),
    (1.0, float("inf"), 1),
])
def test_derive_rejects_invalid(time_step, total_time, outputs):
    """Test invalid parameters raise ParameterError."""
    with pytest.raises(ParameterError):
        RunParameters.derive(time_step, total_time, outputs)


def test_recorder_row_layout():
    """Test rows hold concatenated (x, y, z) in body order."""
    params = RunParameters.derive(1.0, 4.0, 2)
    recorder = SnapshotRecorder(params, 2)
    positions = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
    
    assert recorder.output.shape == (params.num_outputs, 6)
    recorder.record_initial(positions)
    assert np.array_equal(recorder.output[0], [1.0, 2.0, 3.0, 4.0, 5.0, 6.0])


def test_recorder_schedule():
    """Test boundary steps are recorded and the last row holds the final state."""
    params = RunParameters.derive(1.0, 10.0, 3)  # 10 steps, every 3, 4 rows
    recorder = SnapshotRecorder(params, 1)
    recorder.record_initial(np.zeros((1, 3)))
    
    written = []
    for t in range(1, params.num_steps):
        if recorder.record_step(t, np.full((1, 3), float(t))):
            written.append(t)
    recorder.finalize(np.full((1, 3), 99.0))
    
    assert written == [3, 6]
    assert recorder.complete
    assert np.array_equal(recorder.output[:, 0], [0.0, 3.0, 6.0, 99.0])


def test_recorder_aligned_last_boundary():
    """Test the last boundary step is left to finalize when steps line up."""
    params = RunParameters.derive(1.0, 10.0, 5)  # 10 steps, every 2, 5 rows
    recorder = SnapshotRecorder(params, 1)
    recorder.record_initial(np.zeros((1, 3)))
    
    assert params.output_steps == 2 and params.num_outputs == 5
    for t in (2, 4, 6):
        assert recorder.record_step(t, np.full((1, 3), float(t)))
    assert not recorder.record_step(8, np.full((1, 3), 8.0))
    recorder.finalize(np.full((1, 3), 9.0))
    
    assert recorder.complete
    assert np.array_equal(recorder.output[:, 0], [0.0, 2.0, 4.0, 6.0, 9.0])


def test_recorder_single_row():
    """Test a single output row keeps the initial positions."""
    params = RunParameters.derive(1.0, 10.0, 1)
    recorder = SnapshotRecorder(params, 1)
    recorder.record_initial(np.ones((1, 3)))
    
    for t in range(1, params.num_steps):
        assert not recorder.record_step(t, np.full((1, 3), 5.0))
    recorder.finalize(np.full((1, 3), 5.0))
    
    assert params.num_outputs == 1
    assert recorder.complete
    assert np.array_equal(recorder.output[0], [1.0, 1.0, 1.0])


def test_recorder_rejects_out_of_order_rows():
    """Test rows cannot be written twice or skipped."""
    params = RunParameters.derive(1.0, 10.0, 5)
    recorder = SnapshotRecorder(params, 1)
    
    with pytest.raises(RuntimeError):
        recorder.record_step(2, np.zeros((1, 3)))
    recorder.record_initial(np.zeros((1, 3)))
    with pytest.raises(RuntimeError):
        recorder.record_initial(np.zeros((1, 3)))


def test_recorder_checks_output_shape():
    """Test a preallocated output must match the derived shape."""
    params = RunParameters.derive(1.0, 10.0, 5)
    
    with pytest.raises(ValueError):
        SnapshotRecorder(params, 2, output=np.zeros((5, 3)))
