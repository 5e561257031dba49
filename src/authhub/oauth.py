"""OAuth front-channel helpers.

Callback routing uses a ``"<method>_"`` prefix on the ``state`` parameter.
``route_state`` is the only place that knows the convention.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from urllib.parse import parse_qs, urlencode, urlsplit

from authhub.config import OAuthClientConfig
from authhub.errors import ConfigurationError, UnknownProviderError
from authhub.models import AuthMethod

SLACK_AUTHORIZE_URL = "https://slack.com/oauth/v2/authorize"
TEAMS_AUTHORIZE_URL = "https://login.microsoftonline.com/{tenant}/oauth2/v2.0/authorize"
GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"

STATE_NONCE_BYTES = 24


@dataclass(frozen=True)
class OAuthCallback:
    """Query parameters of an authorization redirect."""

    code: str | None
    state: str | None
    error: str | None


def issue_state(method: AuthMethod) -> str:
    """Create a routable state value with a CSPRNG nonce."""
    if not method.is_federated:
        raise ValueError(f"{method} does not use OAuth")
    return f"{method.value}_{secrets.token_urlsafe(STATE_NONCE_BYTES)}"


def route_state(state: str | None, *, uri: str | None = None) -> AuthMethod:
    """Resolve the federated method that issued ``state``.

    Raises:
        UnknownProviderError: If the state is absent or its prefix is not a
            federated method
    """
    if not state:
        raise UnknownProviderError(state, uri=uri)

    prefix, sep, _ = state.partition("_")
    if not sep:
        raise UnknownProviderError(state, uri=uri)
    try:
        method = AuthMethod(prefix)
    except ValueError:
        raise UnknownProviderError(state, uri=uri) from None
    if not method.is_federated:
        raise UnknownProviderError(state, uri=uri)
    return method


def _first(params: dict[str, list[str]], name: str) -> str | None:
    values = params.get(name)
    if not values or not values[0]:
        return None
    return values[0]


def parse_callback(uri: str) -> OAuthCallback:
    """Extract ``code``, ``state`` and ``error`` from a redirect URI.

    Empty values are treated as absent.
    """
    params = parse_qs(urlsplit(uri).query)
    return OAuthCallback(
        code=_first(params, "code"),
        state=_first(params, "state"),
        error=_first(params, "error"),
    )


def build_authorization_url(method: AuthMethod, client: OAuthClientConfig, state: str) -> str:
    """Build the provider's authorization request URL.

    Args:
        method: Federated method to authorize against
        client: Client settings for that provider
        state: Value from ``issue_state``

    Returns:
        Fully query-encoded URL to open in the user agent
    """
    match method:
        case AuthMethod.SLACK:
            query = {
                "client_id": client.client_id,
                "scope": ",".join(client.scopes),
                "redirect_uri": client.redirect_uri,
                "state": state,
                "response_type": "code",
            }
            return f"{SLACK_AUTHORIZE_URL}?{urlencode(query)}"
        case AuthMethod.TEAMS:
            if not client.tenant_id:
                raise ConfigurationError("Teams sign-in requires a tenant id")
            query = {
                "client_id": client.client_id,
                "response_type": "code",
                "redirect_uri": client.redirect_uri,
                "scope": " ".join(client.scopes),
                "response_mode": "query",
                "state": state,
            }
            base = TEAMS_AUTHORIZE_URL.format(tenant=client.tenant_id)
            return f"{base}?{urlencode(query)}"
        case AuthMethod.GOOGLE:
            query = {
                "client_id": client.client_id,
                "response_type": "code",
                "redirect_uri": client.redirect_uri,
                "scope": " ".join(client.scopes),
                "state": state,
            }
            return f"{GOOGLE_AUTHORIZE_URL}?{urlencode(query)}"
    raise ValueError(f"{method} does not use OAuth")
