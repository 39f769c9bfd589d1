"""
Authentication Module

Resolves bearer tokens to user ids. Token issuance lives outside this
service; tokens are mapped to users in config/api_tokens.yaml.
"""

import logging
import os
from pathlib import Path
from typing import Protocol

import yaml
from fastapi import Depends, HTTPException, Header, Request, status

logger = logging.getLogger(__name__)

DEV_USER_ID = "dev"


class AuthProvider(Protocol):
    """Capability that maps a bearer token to a user id."""

    def resolve_user_id(self, token: str) -> str | None:
        ...


class TokenAuthProvider:
    """Token to user mapping loaded from api_tokens.yaml."""

    def __init__(self, config_path: Path | str | None = None):
        """Initialize the provider.

        Args:
            config_path: Path to api_tokens.yaml
        """
        if config_path is None:
            config_path = Path(__file__).parent.parent.parent / "config" / "api_tokens.yaml"

        self.config_path = Path(config_path)
        self.tokens: dict[str, str] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load token mappings from YAML."""
        if not self.config_path.exists():
            logger.warning(f"Token file {self.config_path} not found, no tokens accepted")
            return

        with open(self.config_path) as f:
            config = yaml.safe_load(f) or {}

        for entry in config.get("tokens", []):
            token = str(entry.get("token", "")).strip()
            user_id = str(entry.get("user_id", "")).strip()
            if token and user_id:
                self.tokens[token] = user_id

    def resolve_user_id(self, token: str) -> str | None:
        return self.tokens.get(token)


def get_auth_provider(request: Request) -> AuthProvider:
    state = request.app.state
    if state.auth_provider is None:
        state.auth_provider = TokenAuthProvider()
    return state.auth_provider


async def get_optional_user_id(
    authorization: str | None = Header(None),
    provider: AuthProvider = Depends(get_auth_provider),
) -> str | None:
    """Resolve the requesting user, or None if unauthenticated.

    Args:
        authorization: "Bearer <token>" header
        provider: Token resolver

    Returns:
        User id or None
    """
    if not authorization:
        # Development mode: requests without credentials act as the dev user
        if os.getenv("ENVIRONMENT", "development") == "development":
            return DEV_USER_ID
        return None

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None

    return provider.resolve_user_id(token.strip())


async def get_current_user_id(
    user_id: str | None = Depends(get_optional_user_id),
) -> str:
    """Resolve the requesting user.

    Raises:
        HTTPException: If authentication fails
    """
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized - authentication required",
        )
    return user_id
