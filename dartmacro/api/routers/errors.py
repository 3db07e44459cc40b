"""Map edit-boundary exceptions to HTTP errors."""

from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import HTTPException

from ...shared.errors import MacroNotFoundError, MacroValidationError


@contextmanager
def http_errors() -> Iterator[None]:
    try:
        yield
    except MacroNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except MacroValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
