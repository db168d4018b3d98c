"""
agent_credentials.tokens.results

Tagged outcomes of a token acquisition.

Responsibilities:
- Represent success, consent-required and failure as distinct types so callers branch
  on the recoverable consent case explicitly instead of catching it.
"""

from __future__ import annotations

from dataclasses import dataclass

from agent_credentials.models import AccessToken


@dataclass(frozen=True, slots=True)
class TokenAcquired:
    resource: str
    token: AccessToken


@dataclass(frozen=True, slots=True)
class ConsentRequired:
    """
    The user must interact again (consent or step-up). Retrying without that
    interaction cannot succeed.
    """

    resource: str
    # Claims challenge from the provider, forwarded to the client on re-prompt.
    claims: str | None = None
    detail: str = ""


@dataclass(frozen=True, slots=True)
class AcquisitionFailed:
    resource: str
    reason: str


TokenResult = TokenAcquired | ConsentRequired | AcquisitionFailed
