"""
Frequency response helpers shared by the filter engines.
"""

import logging
from typing import Tuple
import numpy as np
from scipy import signal

from sampleflow.interfaces import FilterCoefficients

logger = logging.getLogger('sampleflow.filters.response')

def frequency_response(coefficients: FilterCoefficients, frequencies, sample_rate: float):
    """
    Evaluate H(e^{jw}) of a coefficient set at the given frequencies.

    Args:
        coefficients: Filter coefficients
        frequencies: Frequency (or array of frequencies) in Hz
        sample_rate: Sample rate in Hz

    Returns:
        Complex response; a scalar when a scalar frequency was given
    """
    if not sample_rate > 0:
        raise ValueError("Sample rate must be positive")

    freqs = np.asarray(frequencies, dtype=np.float64)
    _, h = signal.freqz(
        coefficients.numerator.astype(np.float64),
        coefficients.denominator.astype(np.float64),
        worN=np.atleast_1d(freqs),
        fs=sample_rate
    )

    if freqs.ndim == 0:
        return h[0]
    return h

def magnitude_phase(coefficients: FilterCoefficients, frequencies,
                    sample_rate: float) -> Tuple[np.ndarray, np.ndarray]:
    """Magnitude and phase (radians) of the response at the given frequencies"""
    h = np.atleast_1d(frequency_response(coefficients, frequencies, sample_rate))
    return np.abs(h), np.angle(h)
