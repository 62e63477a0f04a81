"""
Sample Filter Interfaces

This module defines the value objects and protocols shared by the filter engines.
Precision is the single place where sample-type specific behavior lives; the engines
themselves are written once and instantiated per precision.
"""

from typing import Protocol, Sequence, Union, runtime_checkable
from dataclasses import dataclass
from enum import Enum
import numpy as np

from sampleflow.core.config_manager import get_effective_settings
from sampleflow.exceptions import InvalidConfiguration

class Precision(Enum):
    """Supported floating-point sample types"""
    SINGLE = "float32"
    DOUBLE = "float64"

    @property
    def dtype(self) -> np.dtype:
        """numpy dtype used for coefficients, delay lines and output"""
        return np.dtype(self.value)

    @property
    def scalar_type(self) -> type:
        return self.dtype.type

    @property
    def epsilon(self) -> float:
        """Machine epsilon for this sample type"""
        return float(np.finfo(self.dtype).eps)

    @property
    def tolerance(self) -> float:
        """Recommended absolute/relative tolerance for comparing filter output"""
        override = get_effective_settings().comparison_tolerance
        if override is not None:
            return override
        return float(np.sqrt(self.epsilon))

    @classmethod
    def default(cls) -> 'Precision':
        """Precision configured as the library default"""
        return cls(get_effective_settings().default_precision)

    @classmethod
    def resolve(cls, value: Union['Precision', str, type, np.dtype, None]) -> 'Precision':
        """
        Map a precision-like value onto a Precision member.

        Args:
            value: A Precision, its string value, anything numpy.dtype() accepts,
                or None for the configured default

        Returns:
            Matching Precision member

        Raises:
            InvalidConfiguration: If the value is not a single or double float type
        """
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.default()

        try:
            dtype = np.dtype(value)
        except TypeError as e:
            raise InvalidConfiguration(f"Unsupported sample type: {value!r}") from e

        for member in cls:
            if member.dtype == dtype:
                return member

        raise InvalidConfiguration(
            f"Unsupported sample type {dtype}; expected one of "
            f"{[member.value for member in cls]}"
        )

def _as_coefficient_array(values: Sequence[float], dtype: np.dtype, name: str) -> np.ndarray:
    """Copy a coefficient sequence into a fresh 1D array of the given dtype"""
    try:
        array = np.array(values, dtype=dtype)
    except (TypeError, ValueError) as e:
        raise InvalidConfiguration(f"{name} coefficients must be real numbers: {e}") from e

    if array.ndim != 1:
        raise InvalidConfiguration(f"{name} coefficients must be a one-dimensional sequence")
    if array.size == 0:
        raise InvalidConfiguration(f"{name} coefficients cannot be empty")

    return array

@dataclass(frozen=True, eq=False)
class FilterCoefficients:
    """
    Immutable value object for digital filter coefficients.

    Represents the numerator (feed-forward, b) and denominator (feedback, a)
    coefficients of a filter's z-domain transfer function. The denominator is
    normalized on construction so that a[0] is exactly 1.
    """
    numerator: np.ndarray
    denominator: np.ndarray
    precision: Precision = Precision.DOUBLE

    def __post_init__(self):
        """Validate, normalize and freeze the coefficient arrays"""
        precision = Precision.resolve(self.precision)
        numerator = _as_coefficient_array(self.numerator, precision.dtype, "Feed-forward")
        denominator = _as_coefficient_array(self.denominator, precision.dtype, "Feedback")

        leading = denominator[0]
        if leading == 0:
            raise InvalidConfiguration("Leading feedback coefficient a[0] must be non-zero")

        # Normalize once here so the per-sample path never divides by a[0]
        if leading != 1:
            numerator = numerator / leading
            denominator = denominator / leading

        numerator.flags.writeable = False
        denominator.flags.writeable = False

        object.__setattr__(self, 'precision', precision)
        object.__setattr__(self, 'numerator', numerator)
        object.__setattr__(self, 'denominator', denominator)

    @classmethod
    def fir(cls, numerator: Sequence[float], precision=Precision.DOUBLE) -> 'FilterCoefficients':
        """Build the coefficient set of a pure feed-forward filter (a = [1])"""
        return cls(numerator, [1.0], precision)

    @property
    def numerator_order(self) -> int:
        return self.numerator.size - 1

    @property
    def denominator_order(self) -> int:
        return self.denominator.size - 1

    @property
    def order(self) -> int:
        """Overall filter order (max of numerator and denominator order)"""
        return max(self.numerator_order, self.denominator_order)

    @property
    def is_fir(self) -> bool:
        """True when there is no feedback path"""
        return self.denominator.size == 1

    def __eq__(self, other):
        if not isinstance(other, FilterCoefficients):
            return NotImplemented
        return (
            self.precision is other.precision
            and np.array_equal(self.numerator, other.numerator)
            and np.array_equal(self.denominator, other.denominator)
        )

    __hash__ = None

    def __deepcopy__(self, memo):
        # Re-run validation so the copy owns fresh read-only arrays
        return FilterCoefficients(self.numerator, self.denominator, self.precision)

# Core Processing Interfaces

@runtime_checkable
class ISampleFilter(Protocol):
    """
    Interface for stateful sample-to-sample transforms.

    Both FIR and IIR engines satisfy this structurally; generic pipelines
    should depend on it rather than on either concrete class.
    """

    def process(self, data):
        """
        Filter one sample or a one-dimensional block of samples.

        Args:
            data: A scalar sample or a sequence of samples

        Returns:
            Filtered scalar, or an array the same length as the input
        """
        ...

    def reset(self) -> None:
        """Zero the filter's delay lines, keeping its coefficients"""
        ...
