"""
Finite impulse response filter engine.

Computes y[n] = sum(b[k] * x[n-k]) for k in 0..N-1, one sample at a time,
keeping the N-1 most recent inputs in a fixed-size delay line.
"""

import logging
import time
from typing import Sequence, Tuple
import numpy as np

from sampleflow.core.config_manager import get_effective_settings
from sampleflow.interfaces import FilterCoefficients, Precision
from sampleflow.exceptions import FilterError, FilterProcessingError, InvalidConfiguration
from .delay_line import DelayLine
from .samples import as_sample, as_block
from .response import frequency_response, magnitude_phase
from .stats import ProcessingStats

logger = logging.getLogger('sampleflow.filters.fir_filter')

class FIRFilter:
    """
    Stateful FIR filter.

    No feedback path, so the filter is unconditionally stable. Coefficients are
    fixed for the life of the instance unless replaced through reconfigure(),
    which also clears the history.
    """

    def __init__(self, coefficients: Sequence[float], precision=None):
        """
        Initialize FIR filter with its kernel.

        Args:
            coefficients: Kernel b[0..N-1], N >= 1
            precision: Precision, numpy dtype or dtype name; None for the configured default

        Raises:
            InvalidConfiguration: If the kernel is empty or the precision unsupported
        """
        precision = Precision.resolve(precision)
        self._install(FilterCoefficients.fir(coefficients, precision))

        self._stats = ProcessingStats()
        self._track_performance = get_effective_settings().track_performance

        logger.debug(f"Initialized FIR filter (order: {self.order}, precision: {precision.value})")

    @classmethod
    def from_coefficients(cls, coefficients: FilterCoefficients) -> 'FIRFilter':
        """Build a FIR filter from a coefficient set without feedback"""
        if not coefficients.is_fir:
            raise InvalidConfiguration("Coefficient set has a feedback path; use IIRFilter")
        return cls(coefficients.numerator, coefficients.precision)

    def _install(self, coefficients: FilterCoefficients) -> None:
        self._coefficients = coefficients
        self._precision = coefficients.precision
        self._scalar = coefficients.precision.scalar_type
        self._b0 = coefficients.numerator[0]
        self._taps = coefficients.numerator[1:]
        self._history = DelayLine(coefficients.numerator_order, coefficients.precision.dtype)

    def _step(self, x):
        y = self._b0 * x + np.dot(self._taps, self._history.history())
        self._history.push(x)
        return y

    def process(self, data):
        """
        Filter a single sample or a one-dimensional block.

        Args:
            data: Scalar sample or sequence of samples

        Returns:
            Filtered scalar, or array of the same length
        """
        if np.ndim(data) == 0:
            return self.process_sample(data)
        return self.process_block(data)

    def process_sample(self, sample):
        """Filter one sample and advance the delay line"""
        x = as_sample(sample, self._scalar)
        with np.errstate(over='ignore', invalid='ignore'):
            y = self._step(x)
        self._stats.samples_processed += 1
        return y

    def process_block(self, samples: Sequence[float]) -> np.ndarray:
        """
        Filter a block of samples in order.

        Equivalent to calling process_sample() once per input.

        Args:
            samples: One-dimensional input samples

        Returns:
            Filtered samples, same length, in the filter's dtype

        Raises:
            FilterProcessingError: If the input isn't a one-dimensional block of real numbers
        """
        try:
            start_time = time.perf_counter() if self._track_performance else 0.0

            block = as_block(samples, self._precision.dtype)

            output = np.empty(block.size, dtype=self._precision.dtype)
            with np.errstate(over='ignore', invalid='ignore'):
                for i, x in enumerate(block):
                    output[i] = self._step(x)

            elapsed = time.perf_counter() - start_time if self._track_performance else 0.0
            self._stats.record_block(block.size, elapsed)

            return output

        except FilterError:
            raise
        except Exception as e:
            logger.error(f"FIR block processing failed: {e}")
            raise FilterProcessingError(f"FIR block processing error: {e}") from e

    def reset(self) -> None:
        """Zero the delay line, keeping the coefficients"""
        self._history.clear()
        logger.debug("FIR filter state reset")

    def set_initial_conditions(self, history: Sequence[float]) -> None:
        """
        Preload the delay line.

        Args:
            history: Previous inputs, newest first, length N-1

        Raises:
            FilterStateError: If the length doesn't match the filter order
        """
        self._history.load(history)

    def reconfigure(self, coefficients: Sequence[float]) -> None:
        """
        Replace the kernel and clear the history.

        The new kernel is validated first; on failure the filter is unchanged.

        Raises:
            InvalidConfiguration: If the new kernel is empty
        """
        new_coefficients = FilterCoefficients.fir(coefficients, self._precision)
        self._install(new_coefficients)
        logger.debug(f"FIR filter reconfigured (order: {self.order})")

    def frequency_response(self, frequencies, sample_rate: float):
        """Complex response at the given frequencies (Hz)"""
        return frequency_response(self._coefficients, frequencies, sample_rate)

    def get_frequency_response(self, frequencies, sample_rate: float) -> Tuple[np.ndarray, np.ndarray]:
        """
        Get magnitude and phase response at specified frequencies.

        Args:
            frequencies: Frequency points in Hz
            sample_rate: Sample rate in Hz

        Returns:
            Tuple of (magnitude, phase) responses
        """
        return magnitude_phase(self._coefficients, frequencies, sample_rate)

    def get_performance_stats(self) -> dict:
        """Get filter processing statistics"""
        stats = self._stats.as_dict()
        stats.update({
            'is_fir': True,
            'filter_order': self.order,
            'precision': self._precision.value
        })
        return stats

    @property
    def coefficients(self) -> np.ndarray:
        """Kernel b[0..N-1] (read-only)"""
        return self._coefficients.numerator

    @property
    def coefficient_set(self) -> FilterCoefficients:
        return self._coefficients

    @property
    def delay_line(self) -> np.ndarray:
        """Copy of the retained inputs, newest first"""
        return self._history.snapshot()

    @property
    def order(self) -> int:
        return self._coefficients.numerator_order

    @property
    def num_coefficients(self) -> int:
        return self._coefficients.numerator.size

    @property
    def precision(self) -> Precision:
        return self._precision

    @property
    def dtype(self) -> np.dtype:
        return self._precision.dtype

    @property
    def group_delay(self) -> float:
        """(N-1)/2 samples; exact only for symmetric kernels"""
        return self.order / 2.0

    def __repr__(self) -> str:
        return f"FIRFilter(order={self.order}, precision={self._precision.value})"
