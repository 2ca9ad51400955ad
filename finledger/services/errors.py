from fastapi import HTTPException


class LedgerValidationError(HTTPException):
    """Input rejected before any computation (bad date, amount, enum value)."""

    def __init__(self, detail: str):
        super().__init__(status_code=400, detail=detail)


class LedgerNotFoundError(HTTPException):
    """Entity does not exist for the requesting owner."""

    def __init__(self, detail: str):
        super().__init__(status_code=404, detail=detail)
