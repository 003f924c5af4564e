"""Exceptions raised by the stage-transition engine.

Invariant violations indicate a caller or engine bug. They abort the update,
and the caller must not persist anything when one is raised. Malformed user
input never raises; it is downgraded to quality 0 by the quality mapper.
"""


class EngineError(Exception):
    """Base class for all engine errors."""

    pass


class InvariantViolationError(EngineError):
    """Raised when an update would produce an inconsistent learning target."""

    pass


class MissingStageDataError(InvariantViolationError):
    """Raised when data required by the resolved stage variant is absent."""

    pass


class InvalidStageTransitionError(InvariantViolationError):
    """Raised for a (reason, fromStage, toStage) triple outside the transition table."""

    pass


class UnknownUnitError(InvariantViolationError):
    """Raised when a SPLIT-mode evaluation names a unit the target does not have."""

    pass


class EmptyEvaluationBatchError(EngineError, ValueError):
    """Raised when an update is requested without any evaluation."""

    pass
