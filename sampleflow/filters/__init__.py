"""
Digital Filter Engines

This package provides stateful FIR and IIR filter engines that process
samples one at a time or in blocks, in single or double precision.
"""

from sampleflow.exceptions import FilterError, InvalidConfiguration, FilterStateError, FilterProcessingError
from .delay_line import DelayLine
from .fir_filter import FIRFilter
from .iir_filter import IIRFilter

__all__ = [
    'FIRFilter',
    'IIRFilter',
    'DelayLine',
    'FilterError',
    'InvalidConfiguration',
    'FilterStateError',
    'FilterProcessingError'
]
