class InvalidListingError(TypeError):
    """Raised when a batch does not hold record-like listings."""
