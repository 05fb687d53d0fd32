"""Exceptions for tabburst runs."""


class Error(Exception):
    """Base class for exceptions raised by this package."""

    pass


class SetupError(Error):
    """Raised when a run cannot start: bad URL, browser launch, seed page or login failure.

    Always fatal: the CLI maps it to exit status 1.
    """

    def __init__(self, message: str, reason: str = "setup_failed") -> None:
        super().__init__(message)
        self.reason = reason


class UnknownSiteError(SetupError):
    """Raised when no locator config module exists for the requested site."""

    def __init__(self, name: str, available: list[str]) -> None:
        super().__init__(
            f"Unknown site {name!r} (available: {', '.join(available) or 'none'})",
            reason="unknown_site",
        )
        self.name = name
