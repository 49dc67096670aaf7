class SimplexError(RuntimeError):
    """A solve that ended without reaching an optimal tableau."""


class UnboundedError(SimplexError):
    pass


class IterationLimitError(SimplexError):
    pass


class DuplicateTermError(ValueError):
    """Raised by the strict parse hook when a variable appears twice in one expression."""
