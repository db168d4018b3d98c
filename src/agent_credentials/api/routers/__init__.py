"""
agent_credentials.api.routers

FastAPI routers.
"""

# Package marker.
