# Overview: Error taxonomy for the POS engine; every business failure is one of these.

"""
Tagged POS errors.

Services raise these; the HTTP layer turns them into
{"error": ..., "kind": ..., "details": {...}} with the class status code,
so callers branch on `kind` instead of probing response fields.

KINDS:
- VALIDATION_ERROR: bad input, empty cart/name, negative price or quantity
- NOT_FOUND: unknown barcode, product, customer, transaction, held record
- POLICY_VIOLATION: business policy refused the operation (account credit)
"""


class PosError(Exception):
    """Base class for POS engine errors."""
    kind = "POS_ERROR"
    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return {"error": self.message, "kind": self.kind, "details": self.details}


class ValidationError(PosError):
    """Rejected input; no state was changed."""
    kind = "VALIDATION_ERROR"
    status_code = 400


class NotFoundError(PosError):
    kind = "NOT_FOUND"
    status_code = 404


class PolicyViolation(PosError):
    """A business policy refused the operation (e.g. insufficient account credit)."""
    kind = "POLICY_VIOLATION"
    status_code = 409


class ConcurrencyConflict(NotFoundError):
    """
    Lost a first-committer-wins race.

    Reported to the loser exactly like NotFoundError.
    """
