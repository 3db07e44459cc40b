"""Exceptions raised at the macro edit boundary."""


class MacroValidationError(ValueError):
    """A rule, timer or variable was rejected before it was stored."""


class MacroNotFoundError(KeyError):
    """No record with the requested id exists in the requested scope."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "Record not found"
