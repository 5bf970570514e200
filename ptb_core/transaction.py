"""
Ledger transaction boundary.

``TransactionHandle`` is the shape of the ledger SDK's transaction-under-construction
object as the execution builder drives it. ``RecordingTransaction`` implements it in
memory: it records every primitive call and hands back result handles in the same
JSON form the ledger uses (``{"Result": n}``, ``{"NestedResult": [n, k]}``), which is
what the preview endpoint and the tests inspect.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence


class TransactionHandle(ABC):
    """Transaction-construction primitives consumed by the execution builder."""

    @property
    @abstractmethod
    def gas(self) -> Any:
        """Handle for the transaction's gas coin."""

    @abstractmethod
    def move_call(self, target: str, arguments: Sequence[Any],
                  type_arguments: Optional[Sequence[str]] = None) -> Any:
        pass

    @abstractmethod
    def split_coins(self, coin: Any, amounts: Sequence[Any]) -> Any:
        pass

    @abstractmethod
    def transfer_objects(self, objects: Sequence[Any], recipient: Any) -> Any:
        pass

    @abstractmethod
    def merge_coins(self, destination: Any, sources: Sequence[Any]) -> Any:
        pass

    @abstractmethod
    def make_move_vec(self, element_type: str, elements: Sequence[Any]) -> Any:
        pass

    @abstractmethod
    def publish(self, modules: Sequence[str], dependencies: Sequence[str]) -> Any:
        pass


@dataclass(frozen=True)
class GasCoin:
    """The gas coin handle."""

    def to_dict(self) -> Dict[str, Any]:
        return {'GasCoin': True}


@dataclass(frozen=True)
class NestedResultHandle:
    """One value out of a multi-value command result."""
    index: int
    result_index: int

    def to_dict(self) -> Dict[str, Any]:
        return {'NestedResult': [self.index, self.result_index]}


@dataclass(frozen=True)
class ResultHandle:
    """Output of the command recorded at ``index``."""
    index: int

    def __getitem__(self, result_index: int) -> NestedResultHandle:
        if isinstance(result_index, bool) or not isinstance(result_index, int) or result_index < 0:
            raise IndexError(f"Invalid nested result index: {result_index!r}")
        return NestedResultHandle(self.index, result_index)

    def to_dict(self) -> Dict[str, Any]:
        return {'Result': self.index}


@dataclass(frozen=True)
class EmptyResult:
    """Placeholder for a command whose primitive returned nothing."""
    position: int

    def __getitem__(self, result_index: int) -> 'EmptyResult':
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {'Empty': self.position}


def encode_value(value: Any) -> Any:
    """JSON-friendly form of a primitive argument."""
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [encode_value(item) for item in value]
    return value


@dataclass
class TransactionCall:
    """A single primitive invocation recorded by RecordingTransaction."""
    primitive: str
    arguments: Dict[str, Any] = field(default_factory=dict)
    result: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'primitive': self.primitive,
            'arguments': {key: encode_value(value) for key, value in self.arguments.items()},
            'result': encode_value(self.result),
        }


class RecordingTransaction(TransactionHandle):
    """In-memory transaction that records primitive calls in order."""

    def __init__(self):
        self.calls: List[TransactionCall] = []
        self._gas = GasCoin()

    @property
    def gas(self) -> GasCoin:
        return self._gas

    def _record(self, primitive: str, **arguments: Any) -> ResultHandle:
        result = ResultHandle(len(self.calls))
        self.calls.append(TransactionCall(primitive, arguments, result))
        return result

    def move_call(self, target: str, arguments: Sequence[Any],
                  type_arguments: Optional[Sequence[str]] = None) -> ResultHandle:
        return self._record('moveCall', target=target, arguments=list(arguments),
                            type_arguments=list(type_arguments) if type_arguments else None)

    def split_coins(self, coin: Any, amounts: Sequence[Any]) -> ResultHandle:
        return self._record('splitCoins', coin=coin, amounts=list(amounts))

    def transfer_objects(self, objects: Sequence[Any], recipient: Any) -> ResultHandle:
        return self._record('transferObjects', objects=list(objects), recipient=recipient)

    def merge_coins(self, destination: Any, sources: Sequence[Any]) -> ResultHandle:
        return self._record('mergeCoins', destination=destination, sources=list(sources))

    def make_move_vec(self, element_type: str, elements: Sequence[Any]) -> ResultHandle:
        return self._record('makeMoveVec', type=element_type, elements=list(elements))

    def publish(self, modules: Sequence[str], dependencies: Sequence[str]) -> ResultHandle:
        return self._record('publish', modules=list(modules), dependencies=list(dependencies))

    def to_dict(self) -> Dict[str, Any]:
        return {'commands': [call.to_dict() for call in self.calls]}
