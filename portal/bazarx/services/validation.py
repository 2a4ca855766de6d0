"""
Form validation errors raised before any upstream call
"""
from typing import Dict

from fastapi import HTTPException, status


class FormValidationError(Exception):
    """One or more form fields failed validation; ``errors`` maps field -> message"""

    def __init__(self, errors: Dict[str, str]):
        super().__init__("; ".join(errors.values()))
        self.errors = errors

    @property
    def first_message(self) -> str:
        return next(iter(self.errors.values()), "")


def as_http_error(exc: FormValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"message": exc.first_message, "errors": exc.errors},
    )
