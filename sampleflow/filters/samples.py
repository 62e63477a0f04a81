"""
Input conversion shared by the filter engines.
"""

import numbers
import numpy as np

from sampleflow.exceptions import FilterProcessingError

# bool, signed int, unsigned int, float
_REAL_KINDS = 'biuf'

def as_sample(value, scalar_type):
    """
    Convert one input sample to the filter's scalar type.

    Raises:
        FilterProcessingError: If the value isn't a real number (None, strings, complex)
    """
    if isinstance(value, np.ndarray):
        value = value[()]
    if not isinstance(value, (numbers.Real, np.bool_)):
        raise FilterProcessingError(f"Sample must be a real number, got {type(value).__name__}")
    return scalar_type(value)

def as_block(values, dtype: np.dtype) -> np.ndarray:
    """
    Convert a block of input samples to a 1D array of the filter's dtype.

    Raises:
        FilterProcessingError: If the block isn't one-dimensional or holds non-real values
    """
    raw = np.asarray(values)
    if raw.dtype.kind not in _REAL_KINDS:
        raise FilterProcessingError(f"Samples must be real numbers, got dtype {raw.dtype}")
    if raw.ndim != 1:
        raise FilterProcessingError(f"Unsupported sample data shape: {raw.shape}")
    return raw.astype(dtype, copy=False)
