class ProcessorError(Exception):
    """Base exception for all processor-related errors."""


class InvalidStateTransitionError(ProcessorError):
    """Raised when a pipeline run is moved backwards or out of a terminal state."""


class IncompletePipelineError(ProcessorError):
    """Raised when a result is requested from a run that did not produce every part."""
