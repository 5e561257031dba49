"""Authentication orchestration toolkit.

Multi-method sign-in behind one orchestrator that mirrors every attempt onto
an event bus, plus remember-me credentials and stateless security primitives.
"""

from authhub.config import Settings
from authhub.errors import (
    AuthHubError,
    ConfigurationError,
    MethodUnavailableError,
    OAuthCallbackError,
    ProviderError,
    StorageError,
    ValidationError,
)
from authhub.event_bus import EventBus, EventSubscription
from authhub.events import AuthEvent, AuthEventKind
from authhub.models import AuthMethod, AuthState, Identity
from authhub.orchestrator import AuthOrchestrator
from authhub.providers import AuthProviderRegistry
from authhub.remember_me import RememberMeCredential, RememberMeStore

__version__ = "0.1.0"
__all__ = [
    "AuthEvent",
    "AuthEventKind",
    "AuthHubError",
    "AuthMethod",
    "AuthOrchestrator",
    "AuthProviderRegistry",
    "AuthState",
    "ConfigurationError",
    "EventBus",
    "EventSubscription",
    "Identity",
    "MethodUnavailableError",
    "OAuthCallbackError",
    "ProviderError",
    "RememberMeCredential",
    "RememberMeStore",
    "Settings",
    "StorageError",
    "ValidationError",
    "__version__",
]
