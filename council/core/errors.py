"""
Error taxonomy for the council.

Routing and configuration errors surface to the caller. Invocation errors
are contained by the dispatcher except under the single strategy. Synthesis
errors never leave the synthesizer.
"""

from typing import Any, Optional


class CouncilError(Exception):
    """Base class for every council error."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details is not None:
            return f"{self.message} ({self.details})"
        return self.message


class ConfigurationError(CouncilError):
    """Invalid configuration detected at construction time."""


class RoutingError(CouncilError):
    """No expert could be selected for a query."""


class InvocationError(CouncilError):
    """An expert failed to answer."""

    def __init__(
        self,
        message: str,
        expert_id: Optional[str] = None,
        query: Optional[str] = None,
        details: Any = None,
    ):
        super().__init__(message, details=details)
        self.expert_id = expert_id
        self.query = query

    def __str__(self) -> str:
        expert = f" [expert: {self.expert_id}]" if self.expert_id else ""
        query = f" [query: {self.query}]" if self.query else ""
        return f"{self.message}{expert}{query}"


class SynthesisError(CouncilError):
    """Oracle-assisted synthesis failed."""


class ToolError(CouncilError):
    """A tool could not be located or executed."""

    def __init__(self, message: str, tool_name: Optional[str] = None, details: Any = None):
        super().__init__(message, details=details)
        self.tool_name = tool_name


class ProviderError(CouncilError):
    """An oracle backend call failed."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        recoverable: bool = False,
        details: Any = None,
    ):
        super().__init__(message, details=details)
        self.provider = provider
        self.status_code = status_code
        self.recoverable = recoverable

    def __str__(self) -> str:
        provider = f" ({self.provider})" if self.provider else ""
        status = f" [HTTP {self.status_code}]" if self.status_code else ""
        return f"{self.message}{provider}{status}"


class AuthenticationError(ProviderError):
    """The backend rejected the credentials."""

    def __init__(self, message: str, provider: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message, provider=provider, status_code=status_code, recoverable=False)


class RateLimitError(ProviderError):
    """The backend asked the caller to slow down."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = 429,
        retry_after: Optional[float] = None,
    ):
        super().__init__(message, provider=provider, status_code=status_code, recoverable=True)
        self.retry_after = retry_after
