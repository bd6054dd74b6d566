class PortfolioError(Exception):
    """Base exception for all portfolio related errors."""

    pass


class InvalidInputError(PortfolioError, ValueError):
    """Raised when engine input is out of range (negative value, target outside 0-100, ...)."""

    pass


class AllocationError(PortfolioError):
    """Raised when allocation plan validation fails (e.g., targets sum > 100%)."""

    pass


class PortfolioNotFoundError(PortfolioError, LookupError):
    """Raised when a provider has no portfolio for the requested identifier."""

    pass
