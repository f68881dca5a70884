"""
Workflow error taxonomy.

Services raise these; the exception handler registered in ``main.py`` turns
them into JSON responses with the matching HTTP status code.
"""


class WorkflowError(Exception):
    """Base class for errors reported back to the caller"""
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(WorkflowError):
    """Missing or malformed input"""
    status_code = 400


class ForbiddenError(WorkflowError):
    """Role or ownership check failed"""
    status_code = 403


class NotFoundError(WorkflowError):
    """Entity absent or not owned by the caller"""
    status_code = 404


class ConflictError(WorkflowError):
    """Uniqueness violation"""
    status_code = 409


class InvalidStateError(WorkflowError):
    """Illegal state transition, e.g. approving an already resolved request"""
    status_code = 409
