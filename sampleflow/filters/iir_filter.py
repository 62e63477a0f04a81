"""
Infinite impulse response filter engine.

Runs the normalized difference equation

    y[n] = sum(b[k] * x[n-k], k=0..M-1) - sum(a[k] * y[n-k], k=1..K-1)

with a[0] == 1 after construction-time normalization. Instability is a property
of the supplied coefficients; the engine executes the recursion as given and
lets overflow or NaN show up in the output rather than raising.
"""

import logging
import time
from typing import Sequence, Tuple
import numpy as np

from sampleflow.core.config_manager import get_effective_settings
from sampleflow.interfaces import FilterCoefficients, Precision
from sampleflow.exceptions import FilterError, FilterProcessingError, FilterStateError
from .delay_line import DelayLine
from .samples import as_sample, as_block
from .response import frequency_response, magnitude_phase
from .stats import ProcessingStats

logger = logging.getLogger('sampleflow.filters.iir_filter')

class IIRFilter:
    """
    Stateful IIR filter.

    Keeps the M-1 most recent inputs and K-1 most recent outputs. Coefficients
    are divided by a[0] once at construction, so the accessors report the
    normalized sequences.
    """

    def __init__(self, feedforward: Sequence[float], feedback: Sequence[float], precision=None):
        """
        Initialize IIR filter with numerator and denominator coefficients.

        Args:
            feedforward: Numerator b[0..M-1], M >= 1
            feedback: Denominator a[0..K-1], K >= 1, a[0] != 0
            precision: Precision, numpy dtype or dtype name; None for the configured default

        Raises:
            InvalidConfiguration: If either sequence is empty, a[0] is zero,
                or the precision is unsupported
        """
        precision = Precision.resolve(precision)
        self._install(FilterCoefficients(feedforward, feedback, precision))

        self._stats = ProcessingStats()
        self._track_performance = get_effective_settings().track_performance

        logger.debug(f"Initialized IIR filter (b order: {self.numerator_order}, "
                     f"a order: {self.denominator_order}, precision: {precision.value})")

    @classmethod
    def from_coefficients(cls, coefficients: FilterCoefficients) -> 'IIRFilter':
        """Build an IIR filter from an existing coefficient set"""
        return cls(coefficients.numerator, coefficients.denominator, coefficients.precision)

    def _install(self, coefficients: FilterCoefficients) -> None:
        dtype = coefficients.precision.dtype
        self._coefficients = coefficients
        self._precision = coefficients.precision
        self._scalar = coefficients.precision.scalar_type
        self._b0 = coefficients.numerator[0]
        self._feedforward_taps = coefficients.numerator[1:]
        self._feedback_taps = coefficients.denominator[1:]
        self._inputs = DelayLine(coefficients.numerator_order, dtype)
        self._outputs = DelayLine(coefficients.denominator_order, dtype)

    def _step(self, x):
        y = (self._b0 * x
             + np.dot(self._feedforward_taps, self._inputs.history())
             - np.dot(self._feedback_taps, self._outputs.history()))
        self._inputs.push(x)
        self._outputs.push(y)
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
        """Filter one sample and advance both delay lines"""
        x = as_sample(sample, self._scalar)
        with np.errstate(over='ignore', invalid='ignore'):
            y = self._step(x)
        self._stats.samples_processed += 1
        return y

    def process_block(self, samples: Sequence[float]) -> np.ndarray:
        """
        Filter a block of samples in order.

        Equivalent to calling process_sample() once per input; there is no
        parallelism across samples because each output feeds the next.

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
            logger.error(f"IIR block processing failed: {e}")
            raise FilterProcessingError(f"IIR block processing error: {e}") from e

    def reset(self) -> None:
        """Zero both delay lines, keeping the coefficients"""
        self._inputs.clear()
        self._outputs.clear()
        logger.debug("IIR filter state reset")

    def set_initial_conditions(self, inputs: Sequence[float], outputs: Sequence[float]) -> None:
        """
        Preload both delay lines.

        Args:
            inputs: Previous inputs, newest first, length M-1
            outputs: Previous outputs, newest first, length K-1

        Raises:
            FilterStateError: If either length doesn't match; neither line is changed
        """
        dtype = self._precision.dtype
        input_history = np.asarray(inputs, dtype=dtype)
        output_history = np.asarray(outputs, dtype=dtype)

        if input_history.shape != (len(self._inputs),):
            raise FilterStateError(
                f"Input history must hold {len(self._inputs)} samples, got shape {input_history.shape}"
            )
        if output_history.shape != (len(self._outputs),):
            raise FilterStateError(
                f"Output history must hold {len(self._outputs)} samples, got shape {output_history.shape}"
            )

        self._inputs.load(input_history)
        self._outputs.load(output_history)

    def reconfigure(self, feedforward: Sequence[float], feedback: Sequence[float]) -> None:
        """
        Replace both coefficient sequences and clear the history.

        The new coefficients are validated first; on failure the filter is unchanged.

        Raises:
            InvalidConfiguration: If either sequence is empty or a[0] is zero
        """
        new_coefficients = FilterCoefficients(feedforward, feedback, self._precision)
        self._install(new_coefficients)
        logger.debug(f"IIR filter reconfigured (order: {self.order})")

    def frequency_response(self, frequencies, sample_rate: float):
        """Complex response B(e^{jw}) / A(e^{jw}) at the given frequencies (Hz)"""
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
            'is_fir': self._coefficients.is_fir,
            'filter_order': self.order,
            'precision': self._precision.value
        })
        return stats

    @property
    def feedforward(self) -> np.ndarray:
        """Normalized numerator b (read-only)"""
        return self._coefficients.numerator

    @property
    def feedback(self) -> np.ndarray:
        """Normalized denominator a, a[0] == 1 (read-only)"""
        return self._coefficients.denominator

    numerator_coefficients = feedforward
    denominator_coefficients = feedback

    @property
    def coefficient_set(self) -> FilterCoefficients:
        return self._coefficients

    @property
    def input_delay_line(self) -> np.ndarray:
        """Copy of the retained inputs, newest first"""
        return self._inputs.snapshot()

    @property
    def output_delay_line(self) -> np.ndarray:
        """Copy of the retained outputs, newest first"""
        return self._outputs.snapshot()

    @property
    def numerator_order(self) -> int:
        return self._coefficients.numerator_order

    @property
    def denominator_order(self) -> int:
        return self._coefficients.denominator_order

    @property
    def order(self) -> int:
        return self._coefficients.order

    @property
    def precision(self) -> Precision:
        return self._precision

    @property
    def dtype(self) -> np.dtype:
        return self._precision.dtype

    def __repr__(self) -> str:
        return (f"IIRFilter(numerator_order={self.numerator_order}, "
                f"denominator_order={self.denominator_order}, precision={self._precision.value})")
