class LPPLError(Exception):
    pass


class InvalidInput(LPPLError, ValueError):
    """Raised before any optimization work when the series or parameters can't be fitted."""
