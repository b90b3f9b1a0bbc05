"""Base text-generation provider.

Every provider exposes the same single operation:
    complete(system_prompt, user_prompt) → _call_api() → text

Subclasses implement two things only:
  - __init__: validate and store the SDK client
  - _call_api: make one raw API call and return the text response

complete() makes exactly one attempt. Whatever the SDK raises (rate limit,
auth, network) is logged once and re-raised as RemoteFetchFailed so the
caller can show it to the user; the user re-triggers the action to retry.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from codelens_core.errors import RemoteFetchFailed

logger = logging.getLogger(__name__)

_MAX_TOKENS = 8192


class BaseProvider(ABC):
    MODEL: str = ""
    TEMPERATURE: float = 0.2
    MAX_TOKENS: int = _MAX_TOKENS

    def __init__(self, model: str | None = None):
        self.model = model or self.MODEL

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Send one prompt pair and return the stripped text response."""
        try:
            text = self._call_api(system_prompt, user_prompt)
        except Exception as e:
            logger.debug("%s API call failed: %s", self.__class__.__name__, e)
            raise RemoteFetchFailed(f"{self.__class__.__name__} request failed: {e}") from e
        text = (text or "").strip()
        if not text:
            raise RemoteFetchFailed(f"{self.__class__.__name__} returned an empty response.")
        return text

    @abstractmethod
    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        """Make a single API call and return the raw text response.

        Should raise on failure; complete() turns the exception into
        RemoteFetchFailed.
        """
