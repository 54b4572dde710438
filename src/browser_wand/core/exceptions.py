"""Exception hierarchy for the structured-output pipeline.

Only `ModelRefusalError` is meant to reach callers during normal operation;
transport failures are absorbed at chunk/batch granularity and malformed
output degrades to `Unparsable` results instead of raising.
"""


class BrowserWandError(Exception):
    """Base exception for all browser_wand errors."""


class TransportError(BrowserWandError):
    """Raised when the model invoker itself fails (connectivity, SDK errors)."""


class ModelRefusalError(BrowserWandError):
    """Raised when the model refuses to answer (safety block, recitation)."""

    def __init__(self, reason: str | None = None) -> None:
        """Store the provider-supplied refusal reason, if any."""
        self.reason = reason
        message = "Model refused the request"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class MalformedOutputError(BrowserWandError):
    """Raised when a caller requires structure but only raw text is available."""

    def __init__(self, raw_text: str, message: str | None = None) -> None:
        self.raw_text = raw_text
        preview = raw_text[:80] + ("..." if len(raw_text) > 80 else "")
        super().__init__(message or f"No structured payload in reply: {preview!r}")


class AlignmentError(BrowserWandError):
    """Raised on alignment programming errors (double consumption, bad pairing)."""


class ConfigurationError(BrowserWandError, ValueError):
    """Raised when configuration values fail validation."""
