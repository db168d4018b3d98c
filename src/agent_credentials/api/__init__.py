"""
agent_credentials.api

HTTP surface and composition root.

Responsibilities:
- Wire settings, directory adapter, secret resolver and token broker together at startup.
- Expose health probes and the token pre-warm endpoint.
"""

# Package marker.
