from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import (
    Any,
    Callable,
    FrozenSet,
    Literal,
    Mapping,
    Optional,
    get_args,
    get_origin,
    get_type_hints,
)


START = "__start__"
END = "__end__"


Router = Callable[[Mapping[str, Any]], Any]


@dataclass(frozen=True)
class StaticEdge:
    source: str
    target: str

    @property
    def targets(self) -> FrozenSet[str]:
        return frozenset([self.target])


@dataclass(frozen=True)
class ConditionalEdge:
    """
    Routes on `router(state)`, looking the key up in `path_map`.

    `keys` is the set of keys the router is known to produce (declared
    explicitly or read from a `Literal[...]` return annotation); `None` when
    the router gives no such guarantee.
    """

    source: str
    router: Router
    path_map: Mapping[Any, str] = field(default_factory=dict)
    keys: Optional[FrozenSet[Any]] = None

    @property
    def targets(self) -> FrozenSet[str]:
        return frozenset(self.path_map.values())

    def unmapped_keys(self) -> FrozenSet[Any]:
        if self.keys is None:
            return frozenset()
        return frozenset(key for key in self.keys if key not in self.path_map)


def router_keys(router: Router) -> Optional[FrozenSet[Any]]:
    """Read the possible keys from a router annotated as returning `Literal[...]`."""
    declared = getattr(router, "route_keys", None)
    if declared is not None:
        return frozenset(declared)
    try:
        hints = get_type_hints(router)
    except (NameError, TypeError):
        return None
    returns = hints.get("return")
    if returns is not None and get_origin(returns) is Literal:
        return frozenset(get_args(returns))
    return None


def freeze_path_map(path_map: Any) -> Mapping[Any, str]:
    if isinstance(path_map, Mapping):
        return MappingProxyType(dict(path_map))
    # A list of node names routes each name to itself.
    return MappingProxyType({name: name for name in path_map})


__all__ = [
    "ConditionalEdge",
    "END",
    "START",
    "StaticEdge",
    "freeze_path_map",
    "router_keys",
]
