from __future__ import annotations

import copy
from dataclasses import dataclass
from types import MappingProxyType
from typing import (
    Annotated,
    Any,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    get_args,
    get_origin,
    get_type_hints,
)

from .errors import ConfigurationError


Reducer = Callable[[Any, Any], Any]
DefaultFactory = Callable[[], Any]


def append(old: Any, new: Any) -> List[Any]:
    """
    Append reducer for ordered logs such as `messages`.

    - `None` leaves the log untouched.
    - A list or tuple is concatenated in order.
    - Anything else (including a string) is appended as a single item.

    Always returns a new list so earlier snapshots are never mutated.
    """
    current = list(old or [])
    if new is None:
        return current
    if isinstance(new, (list, tuple)):
        return current + list(new)
    return current + [new]


def override_if_present(old: Any, new: Any) -> Any:
    """Take `new` unless it is `None`, in which case keep `old`."""
    return old if new is None else new


@dataclass(frozen=True)
class ChannelSpec:
    """Marker placed inside `Annotated[...]` to declare a channel in a TypedDict."""

    reducer: Reducer
    default: Optional[DefaultFactory] = None


def channel(reducer: Reducer, default: Optional[DefaultFactory] = None) -> ChannelSpec:
    return ChannelSpec(reducer=reducer, default=default)


@dataclass(frozen=True)
class Channel:
    name: str
    reducer: Reducer
    default: Optional[DefaultFactory] = None
    annotation: Any = None

    def initial(self) -> Any:
        if self.default is None:
            raise ConfigurationError(f"Channel '{self.name}' has no default")
        return self.default()


class ChannelSchema:
    """
    Named, reducer-governed channels that make up a graph's shared state.

    A schema is built once (`define` or `from_typed_dict`) and then used to
    create one `ChannelStore` per run.
    """

    def __init__(self) -> None:
        self._channels: Dict[str, Channel] = {}
        self._frozen = False

    def define(
        self,
        name: str,
        reducer: Reducer,
        default: Optional[DefaultFactory] = None,
        annotation: Any = None,
    ) -> "ChannelSchema":
        if self._frozen:
            raise ConfigurationError(f"Cannot define channel '{name}' on a compiled schema")
        if name in self._channels:
            raise ConfigurationError(f"Channel '{name}' is already defined")
        if not callable(reducer):
            raise ConfigurationError(f"Reducer for channel '{name}' is not callable")
        if default is not None and not callable(default):
            raise ConfigurationError(
                f"Default for channel '{name}' must be a zero-argument callable"
            )
        self._channels[name] = Channel(name, reducer, default, annotation)
        return self

    @classmethod
    def from_typed_dict(cls, state_type: type) -> "ChannelSchema":
        """
        Build a schema from a TypedDict whose fields are annotated with
        `channel(...)` markers, e.g.

            class TeamState(TypedDict, total=False):
                messages: Annotated[List[BaseMessage], channel(append, list)]
        """
        schema = cls()
        hints = get_type_hints(state_type, include_extras=True)
        for name, hint in hints.items():
            spec = _find_channel_spec(hint)
            if spec is None:
                raise ConfigurationError(
                    f"Field '{name}' of {state_type.__name__} has no channel(...) marker"
                )
            schema.define(name, spec.reducer, spec.default, annotation=get_args(hint)[0])
        return schema

    def frozen_copy(self) -> "ChannelSchema":
        """Copy of this schema that rejects further `define` calls."""
        frozen = ChannelSchema()
        frozen._channels = dict(self._channels)
        frozen._frozen = True
        return frozen

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def names(self) -> List[str]:
        return list(self._channels)

    def __contains__(self, name: object) -> bool:
        return name in self._channels

    def __len__(self) -> int:
        return len(self._channels)

    def get(self, name: str) -> Channel:
        try:
            return self._channels[name]
        except KeyError:
            raise ConfigurationError(f"Unknown channel '{name}'") from None

    def validate(self) -> List[str]:
        """Return a list of problems; empty when the schema is usable."""
        problems = []
        if not self._channels:
            problems.append("State schema defines no channels")
        for name, chan in self._channels.items():
            if chan.default is None:
                problems.append(f"Channel '{name}' has no default")
        return problems

    def unknown(self, names) -> List[str]:
        return [name for name in names if name not in self._channels]

    def create_store(self, initial: Optional[Mapping[str, Any]] = None) -> "ChannelStore":
        problems = self.validate()
        if problems:
            raise ConfigurationError("; ".join(problems))
        initial = dict(initial or {})
        unknown = self.unknown(initial)
        if unknown:
            raise ConfigurationError(
                f"Initial state names undefined channel(s): {', '.join(sorted(unknown))}"
            )
        values = {name: chan.initial() for name, chan in self._channels.items()}
        store = ChannelStore(self, values)
        store.apply(initial)
        return store

    def __repr__(self) -> str:
        return f"ChannelSchema({', '.join(self._channels)})"


def _find_channel_spec(hint: Any) -> Optional[ChannelSpec]:
    if get_origin(hint) is not Annotated:
        return None
    for meta in hint.__metadata__:
        if isinstance(meta, ChannelSpec):
            return meta
    return None


class ChannelStore:
    """Current channel values for a single run."""

    def __init__(self, schema: ChannelSchema, values: Dict[str, Any]):
        self._schema = schema
        self._values = values

    def get(self, name: str) -> Any:
        self._schema.get(name)
        return _detached(self._values[name])

    def merge(self, name: str, value: Any) -> Any:
        chan = self._schema.get(name)
        merged = chan.reducer(self._values[name], value)
        self._values[name] = merged
        return _detached(merged)

    def apply(self, update: Mapping[str, Any]) -> None:
        """
        Merge a partial update. Every key is checked before anything is
        written, so a bad update leaves the store unchanged.
        """
        unknown = self._schema.unknown(update)
        if unknown:
            raise ConfigurationError(
                f"Update names undefined channel(s): {', '.join(sorted(unknown))}"
            )
        merged = dict(self._values)
        for name, value in update.items():
            merged[name] = self._schema.get(name).reducer(merged[name], value)
        self._values = merged

    def snapshot(self) -> Mapping[str, Any]:
        """
        Read-only view of the current values. List, dict and set values are
        copies, so changing them in place never reaches the store.
        """
        return MappingProxyType({name: _detached(value) for name, value in self._values.items()})


def _detached(value: Any) -> Any:
    if isinstance(value, (list, dict, set)):
        return copy.copy(value)
    return value


__all__ = [
    "Channel",
    "ChannelSchema",
    "ChannelSpec",
    "ChannelStore",
    "append",
    "channel",
    "override_if_present",
]
