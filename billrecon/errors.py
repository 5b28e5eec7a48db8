class InvalidInputError(TypeError):
    """Raised when the bill list handed to the grouper is not a sequence."""
