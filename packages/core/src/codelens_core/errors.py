"""Error kinds surfaced by codelens.

Every error the CLI shows the user derives from CodeLensError so the command
layer can render them uniformly as a single message. UserCancelled and
PersistenceFailed are the two kinds that never reach the user: the first is
translated into an empty result, the second is only logged.
"""

from __future__ import annotations


class CodeLensError(Exception):
    """Base class for all codelens errors."""


class InvalidInput(CodeLensError, ValueError):
    """Empty code, malformed repository URL, or an unusable review mode."""


class UnsupportedPlatform(CodeLensError):
    """No directory-access capability is available in this environment."""


class UserCancelled(CodeLensError):
    """The user dismissed the directory picker."""


class RemoteFetchFailed(CodeLensError):
    """GitHub or the text-generation service returned a failure."""


class DecodeFailed(CodeLensError):
    """Fetched content was not valid base64-encoded UTF-8 text."""


class LocalReadFailed(CodeLensError):
    """A local directory or file could not be read."""


class PersistenceFailed(CodeLensError):
    """The history store could not be read or written."""
