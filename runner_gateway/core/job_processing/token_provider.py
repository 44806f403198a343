"""
Bearer token acquisition for the runner.

Wraps azure-identity's DefaultAzureCredential (managed identity in the
cloud, developer credentials locally) for a single fixed audience scope.
The synchronous credential is driven through asyncio.to_thread.

Dependencies: azure-identity
System role: Authentication for runner calls
"""

import asyncio
import logging
from typing import Protocol

from azure.identity import DefaultAzureCredential

from runner_gateway.core.exceptions import TokenAcquisitionError

logger = logging.getLogger(__name__)


class TokenProvider(Protocol):
    """Anything that can hand out a bearer token for the runner."""

    async def get_token(self) -> str: ...


class AzureTokenProvider:
    """Fetches runner tokens from an azure-identity credential."""

    def __init__(self, scope: str, credential=None) -> None:
        """
        Initialize token provider.

        Args:
            scope: Audience scope, e.g. ``https://dynamicsessions.io/.default``
            credential: azure-identity TokenCredential (defaults to DefaultAzureCredential)
        """
        self._scope = scope
        self._credential = credential or DefaultAzureCredential()

    async def get_token(self) -> str:
        """
        Acquire a bearer token for the configured scope.

        The credential caches tokens internally, so calling this per attempt
        is cheap until expiry.

        Returns:
            str: Raw bearer token

        Raises:
            TokenAcquisitionError: Credential chain could not produce a token
        """
        try:
            access_token = await asyncio.to_thread(self._credential.get_token, self._scope)
        except Exception as e:
            logger.error(
                f"{__name__}:get_token - {type(e).__name__}: {e}",
                extra={"scope": self._scope},
            )
            raise TokenAcquisitionError(
                f"Failed to acquire runner token: {type(e).__name__}",
                scope=self._scope,
            ) from e
        return access_token.token

    def close(self) -> None:
        close = getattr(self._credential, "close", None)
        if close is not None:
            close()
