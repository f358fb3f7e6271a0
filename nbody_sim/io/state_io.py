"""State I/O for saving and loading body states."""

import numpy as np
import json
from typing import Tuple, Dict, Any, Optional
from pathlib import Path
from nbody_sim.errors import InputError, OutputError
from nbody_sim.physics.bodies import BodyState

STATE_SUFFIXES = ('.npz', '.json')


def save_state(
    state: BodyState,
    output_path: str,
    metadata: Optional[Dict[str, Any]] = None
):
    """Save body state to file.
    
    Args:
        state: Body state
        output_path: Output file path (.npz or .json)
        metadata: Optional metadata dictionary

    Raises:
        OutputError: If the suffix is unsupported or the file cannot be written
    """
    output_path = Path(output_path)
    if output_path.suffix not in STATE_SUFFIXES:
        raise OutputError(f"Unsupported file format: {output_path.suffix}. Use .npz or .json")
    positions, velocities, masses = state.get_state()
    
    try:
        if output_path.suffix == '.npz':
            save_dict = {
                'positions': positions,
                'velocities': velocities,
                'masses': masses
            }
            if metadata:
                # Only scalars survive in npz
                for key, value in metadata.items():
                    if isinstance(value, (int, float, str)):
                        save_dict[f'metadata_{key}'] = value
            np.savez_compressed(output_path, **save_dict)
        
        else:
            state_dict = {
                'positions': positions.tolist(),
                'velocities': velocities.tolist(),
                'masses': masses.tolist(),
                'metadata': metadata or {}
            }
            with open(output_path, 'w') as f:
                json.dump(state_dict, f, indent=2)
    except OSError as exc:
        raise OutputError(f"error writing state {output_path}: {exc}") from exc


def load_state(input_path: str) -> Tuple[BodyState, Dict[str, Any]]:
    """Load body state from file.
    
    Args:
        input_path: Input file path (.npz or .json)
        
    Returns:
        Tuple of (state, metadata)

    Raises:
        InputError: If the file is missing, malformed or has an unsupported suffix
    """
    input_path = Path(input_path)
    if input_path.suffix not in STATE_SUFFIXES:
        raise InputError(f"Unsupported file format: {input_path.suffix}. Use .npz or .json")
    
    try:
        if input_path.suffix == '.npz':
            with np.load(input_path, allow_pickle=False) as data:
                positions = data['positions']
                velocities = data['velocities']
                masses = data['masses']
                metadata = {}
                for key in data.keys():
                    if key.startswith('metadata_'):
                        metadata[key[9:]] = data[key].item()
        
        else:
            with open(input_path, 'r') as f:
                state_dict = json.load(f)
            positions = np.array(state_dict['positions'], dtype=np.float64)
            velocities = np.array(state_dict['velocities'], dtype=np.float64)
            masses = np.array(state_dict['masses'], dtype=np.float64)
            metadata = state_dict.get('metadata', {})
    except (OSError, KeyError, TypeError, ValueError) as exc:
        raise InputError(f"error reading state {input_path}: {exc}") from exc
    
    return BodyState(masses, positions, velocities), metadata
