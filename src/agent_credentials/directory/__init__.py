"""
agent_credentials.directory

Identity-directory boundary.

Responsibilities:
- Define the `DirectoryClient` port consumed by the secret lifecycle layer.
- Provide the Microsoft Graph adapter implementing it.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The secret lifecycle code depends on the port (not on HTTP or Graph payload shapes).
