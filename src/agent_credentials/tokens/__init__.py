"""
agent_credentials.tokens

Access-token acquisition package.

Responsibilities:
- Declare the downstream resources and the trust flow each one requires.
- Implement the delegated-user and workload-identity flows.
- Expose per-resource acquisition and best-effort pre-warming through `TokenBroker`.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Tokens are never cached or persisted here; callers hold them for a single use.
