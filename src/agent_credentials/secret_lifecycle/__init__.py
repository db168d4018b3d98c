"""
agent_credentials.secret_lifecycle

Client-secret lifecycle package.

Responsibilities:
- Encode/decode the per-principal display-name convention.
- Clean up and mint application secrets through the directory port.
- Decide, once per bootstrap cycle, which secret the process should use.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Ownership of a secret is encoded only in its display name; there is no side index.
