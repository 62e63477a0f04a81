"""
Exceptions raised by the sample filtering engines.
"""

class FilterError(Exception):
    """Base class for all filter engine errors"""
    pass

class InvalidConfiguration(FilterError, ValueError):
    """Raised when a coefficient set cannot produce a usable filter"""
    pass

class FilterStateError(FilterError, ValueError):
    """Raised when supplied delay-line contents don't fit the filter"""
    pass

class FilterProcessingError(FilterError):
    """Raised when filter processing fails"""
    pass
