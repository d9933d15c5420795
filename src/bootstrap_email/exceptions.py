# src/bootstrap_email/exceptions.py


class BootstrapEmailError(Exception):
    """Base class for all errors raised by bootstrap_email."""


class TemplateNotFoundError(BootstrapEmailError, KeyError):
    """Raised when a pass references a template that was never loaded."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown template '{name}'")

    def __str__(self) -> str:
        # KeyError would otherwise wrap the message in quotes.
        return self.args[0]


class StyleProcessingError(BootstrapEmailError):
    """Raised when a stylesheet cannot be read or compiled."""


class DocumentSourceError(BootstrapEmailError, ValueError):
    """Raised when a document source is neither a readable file nor HTML."""
