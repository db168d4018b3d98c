"""
agent_credentials.errors

Exception taxonomy for directory, secret and token operations.

Responsibilities:
- Separate fatal kinds (configuration, missing application, creation failures)
  from recoverable ones (consent) so callers can branch on type.
"""

from __future__ import annotations


class CredentialError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(CredentialError):
    """Deployment defect (missing client id, unconfigured managed identity). Never retried."""


# --- Directory ---------------------------------------------------------------


class DirectoryError(CredentialError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFound(DirectoryError):
    pass


class AmbiguousApplication(DirectoryError):
    def __init__(self, client_id: str, matches: int) -> None:
        super().__init__(f"{matches} applications match client id {client_id}")
        self.client_id = client_id
        self.matches = matches


class PrincipalResolutionFailed(CredentialError):
    pass


# --- Secret lifecycle ----------------------------------------------------------


class ApplicationNotFound(CredentialError):
    def __init__(self, client_id: str) -> None:
        super().__init__(
            f"Application with client id {client_id} not found. This could mean the "
            "application doesn't exist or the caller lacks permission to read it."
        )
        self.client_id = client_id


class CredentialCreationFailed(CredentialError):
    pass


# --- Tokens ----------------------------------------------------------------------


class UnknownResource(CredentialError, KeyError):
    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"unknown resource: {self.name}"


class ConsentRequiredError(CredentialError):
    """
    Raised by `TokenBroker.get_token` when the user must interact again.
    Recoverable by re-prompting the user, not by retrying.
    """

    def __init__(self, resource: str, *, claims: str | None = None, detail: str = "") -> None:
        super().__init__(f"consent required for {resource}: {detail}".rstrip(": "))
        self.resource = resource
        self.claims = claims
        self.detail = detail


class TokenAcquisitionFailed(CredentialError):
    def __init__(self, resource: str, reason: str) -> None:
        super().__init__(f"failed to acquire token for {resource}: {reason}")
        self.resource = resource
        self.reason = reason


# --- Module Notes -----------------------------------------------------------
# No retry policy lives here or anywhere else in the package; callers decide.
