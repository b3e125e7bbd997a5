from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class EurekaClientError(Exception):
    """Base class for eureka client exceptions with a canonical error shape."""

    code: int = 1000
    message: str = "Eureka client error"
    data: Any | None = None
    cause: Exception | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", (self.message,))
        if self.cause is not None:
            object.__setattr__(self, "__cause__", self.cause)
            object.__setattr__(self, "__suppress_context__", True)

    def to_error_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly dict describing the error."""
        return {"code": self.code, "message": self.message, "data": self.data}


@dataclass(frozen=True)
class RegisterFailure(EurekaClientError):
    """Raised when the registry rejects a registration or cannot be reached."""

    code: int = 1100
    message: str = "Could not register with Eureka."


@dataclass(frozen=True)
class DeRegisterFailure(EurekaClientError):
    """Raised when the registry does not confirm a de-registration."""

    code: int = 1101
    message: str = "Could not de-register from Eureka."


@dataclass(frozen=True)
class InstanceFailure(EurekaClientError):
    """Raised when no instance can be resolved and no fallback succeeded."""

    code: int = 1200
    message: str = "Could not get instances from Eureka."


@dataclass(frozen=True)
class SelectionError(InstanceFailure):
    """Raised when a discovery strategy is asked to pick from nothing."""

    code: int = 1201
    message: str = "Cannot select an instance from an empty list."


@dataclass(frozen=True)
class TransportError(EurekaClientError):
    """Raised by transports when the request never produced a response."""

    code: int = 1300
    message: str = "Transport error"


@dataclass(frozen=True)
class TransportTimeoutError(TransportError):
    """Raised by transports when the request timed out."""

    code: int = 1301
    message: str = "Transport timeout"


__all__ = [
    "EurekaClientError",
    "RegisterFailure",
    "DeRegisterFailure",
    "InstanceFailure",
    "SelectionError",
    "TransportError",
    "TransportTimeoutError",
]
