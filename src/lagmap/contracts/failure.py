"""Centralized failure types for contract violations.

Contracts fail fast, loud, and once. Stage invariants and caller
preconditions raise from the same hierarchy, so callers can handle
structural errors uniformly.
"""


class ContractViolation(RuntimeError):
    """Raised when a pipeline contract is violated.

    This indicates a bug in pipeline logic, not bad user input. It means a
    stage did not produce the invariants it promised.

    Key distinction:
    - pydantic.ValidationError: User/config error
    - PreconditionViolation: Caller passed structurally invalid arrays
    - ContractViolation: Pipeline bug (programmer error)
    - NaN/Inf in outputs: Degenerate numeric input, propagated on purpose
    """
    pass


class PreconditionViolation(ContractViolation, ValueError):
    """Raised when inputs to an operation are structurally invalid.

    Examples: parallel arrays of different lengths, a covariance matrix
    whose size is not p*p, a window that leaves no valid output range.
    Retrying never helps; the caller must fix the input.
    """
    pass
