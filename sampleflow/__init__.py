"""
sampleflow - stateful FIR and IIR filter engines

Filters consume caller-designed coefficients and turn a stream of samples into
filtered samples, one call at a time or in blocks:

    from sampleflow import IIRFilter

    smoother = IIRFilter([1.0], [1.0, -0.5])
    smoother.process(1.0)           # 1.0
    smoother.process([0.0, 0.0])    # array([0.5, 0.25])
"""

from .exceptions import FilterError, InvalidConfiguration, FilterStateError, FilterProcessingError
from .interfaces import Precision, FilterCoefficients, ISampleFilter
from .filters import FIRFilter, IIRFilter, DelayLine

__version__ = "0.1.0"

__all__ = [
    'FIRFilter',
    'IIRFilter',
    'DelayLine',
    'Precision',
    'FilterCoefficients',
    'ISampleFilter',
    'FilterError',
    'InvalidConfiguration',
    'FilterStateError',
    'FilterProcessingError'
]
