"""Token verification, credential storage, and logout."""

import sys

from izi import constants
from izi.api import IziClient
from izi.config import Config, clear_config, save_config
from izi.models import User
from izi.util import AuthError, ask_secret, confirm


def require_auth(config: Config) -> str:
    """Return the configured token or raise AuthError."""
    if not config.api_token:
        raise AuthError(constants.NOT_AUTHENTICATED)
    return config.api_token


def authenticate(
    config: Config, token: str | None = None, client: IziClient | None = None
) -> User | None:
    """Run the `izi auth` flow.

    Without a token, an existing login is kept unless the user asks to
    re-authenticate, in which case None is returned. The token is verified
    with the server before anything is stored.
    """
    if not token:
        if config.api_token and not confirm(
            "You are already authenticated. Do you want to re-authenticate?"
        ):
            print("OK using existing authentication", file=sys.stderr)
            return None
        token = ask_secret("Enter your gitizi API token:")

    token = token.strip()
    if not token:
        raise AuthError("Token cannot be empty")

    client = client or IziClient(config)
    try:
        user = client.verify_token(token)
    except AuthError as e:
        raise AuthError(f"{e}\n{constants.GET_TOKEN_HELP}")

    config.api_token = token
    config.username = user.username
    save_config(config)
    return user


def logout(config: Config) -> None:
    """Forget the stored token and username."""
    clear_config()
    config.api_token = None
    config.username = None
