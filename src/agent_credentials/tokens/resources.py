"""
agent_credentials.tokens.resources

Downstream resource declarations.

Responsibilities:
- Define `ResourceScope` (logical name, ordered scopes, required trust flow).
- Provide the default catalogue (Microsoft Graph, Azure AI services).
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from agent_credentials.errors import UnknownResource


class TrustFlow(enum.StrEnum):
    # Which trust model a resource is acquired under.
    delegated_user = "DELEGATED_USER"
    workload_identity = "WORKLOAD_IDENTITY"


@dataclass(frozen=True, slots=True)
class ResourceScope:
    name: str
    scopes: tuple[str, ...]
    flow: TrustFlow

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("resource name must be non-empty")
        if not self.scopes:
            raise ValueError(f"resource {self.name} declares no scopes")


GRAPH = ResourceScope(
    name="graph",
    scopes=(
        "https://graph.microsoft.com/Files.Read.All",
        "https://graph.microsoft.com/Sites.Read.All",
        "https://graph.microsoft.com/Mail.Send",
        "https://graph.microsoft.com/User.Read",
    ),
    flow=TrustFlow.delegated_user,
)

AZURE_AI = ResourceScope(
    name="azure_ai",
    scopes=("https://cognitiveservices.azure.com/.default",),
    flow=TrustFlow.workload_identity,
)

DEFAULT_RESOURCES: tuple[ResourceScope, ...] = (GRAPH, AZURE_AI)


class ResourceCatalog:
    """
    Immutable name -> ResourceScope lookup, fixed at process start.
    Iteration follows declaration order.
    """

    def __init__(self, resources: Iterable[ResourceScope] = DEFAULT_RESOURCES) -> None:
        by_name: dict[str, ResourceScope] = {}
        for r in resources:
            if r.name in by_name:
                raise ValueError(f"duplicate resource name: {r.name}")
            by_name[r.name] = r
        self._by_name = by_name

    def get(self, name: str) -> ResourceScope:
        try:
            return self._by_name[name]
        except KeyError:
            raise UnknownResource(name) from None

    def names(self) -> list[str]:
        return list(self._by_name)

    def __iter__(self) -> Iterator[ResourceScope]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name
