# tutorbook/core/exceptions.py - Service-level errors raised by billing commands


class TutorbookError(Exception):
    """Base class for errors raised by the billing service"""


class RecordNotFoundError(TutorbookError):
    """A command referenced a student, payment or expense that does not exist"""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} '{record_id}' not found")


class RecordAlreadyPaidError(TutorbookError):
    """Paid records are terminal: they cannot be paid again or edited"""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} '{record_id}' is already paid")


__all__ = ["TutorbookError", "RecordNotFoundError", "RecordAlreadyPaidError"]
