from __future__ import annotations


class ValidationError(ValueError):
    """Raised when a weight set or raw score record breaks its invariants.

    Always carries every field-level violation found, never just the first.
    """

    def __init__(self, errors: list[str], message: str = "Validation failed"):
        self.errors = list(errors)
        self.message = message
        super().__init__(f"{message}: " + "; ".join(self.errors))
