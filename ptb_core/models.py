"""
Core data models for the PTB builder.

This module defines the closed set of argument and command variants that make up a
Programmable Transaction Block, along with their JSON shape as exchanged with the
browser UI. Every variant is a frozen dataclass so a command handed out by a block
can never be edited behind the block's back.
"""

from collections.abc import Mapping
from dataclasses import dataclass, fields
from types import MappingProxyType
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Type
from enum import Enum

from .exceptions import CommandFormatError


class ArgumentKind(Enum):
    """Where an argument's value comes from."""
    INPUT = "input"
    GAS = "gas"
    OBJECT = "object"
    RESULT = "result"


class CommandType(Enum):
    """Enumeration of supported PTB commands."""
    MOVE_CALL = "MoveCall"
    TRANSFER_OBJECTS = "TransferObjects"
    SPLIT_COINS = "SplitCoins"
    MERGE_COINS = "MergeCoins"
    MAKE_MOVE_VEC = "MakeMoveVec"
    PUBLISH = "Publish"


def _freeze(value: Any) -> Any:
    """Convert nested lists to tuples and dicts to read-only mappings."""
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    return value


def _thaw(value: Any) -> Any:
    """Inverse of _freeze, for JSON output. Always returns fresh containers."""
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    return value


# =============================================================================
# ARGUMENTS
# =============================================================================

@dataclass(frozen=True)
class Argument:
    """Base class for every argument variant."""
    kind: ClassVar[ArgumentKind]

    def to_dict(self) -> Dict[str, Any]:
        raise NotImplementedError


@dataclass(frozen=True)
class InputArgument(Argument):
    """A literal value supplied directly by the caller."""
    value: Any = None
    kind: ClassVar[ArgumentKind] = ArgumentKind.INPUT

    def __post_init__(self):
        object.__setattr__(self, 'value', _freeze(self.value))

    @property
    def plain_value(self) -> Any:
        """The literal with tuples turned back into lists."""
        return _thaw(self.value)

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.kind.value, 'value': self.plain_value}


@dataclass(frozen=True)
class GasArgument(Argument):
    """The transaction's gas coin."""
    kind: ClassVar[ArgumentKind] = ArgumentKind.GAS

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.kind.value, 'value': 'gas'}


@dataclass(frozen=True)
class ObjectArgument(Argument):
    """A reference to an on-ledger object by id."""
    object_id: str = ""
    kind: ClassVar[ArgumentKind] = ArgumentKind.OBJECT

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.kind.value, 'value': self.object_id}


@dataclass(frozen=True)
class ResultArgument(Argument):
    """The output of an earlier command, by that command's position.

    ``result_index`` picks a single value out of a multi-value result,
    e.g. the second coin produced by a SplitCoins command.
    """
    result_from: int = 0
    result_index: Optional[int] = None
    kind: ClassVar[ArgumentKind] = ArgumentKind.RESULT

    def to_dict(self) -> Dict[str, Any]:
        data = {'type': self.kind.value, 'value': '', 'resultFrom': self.result_from}
        if self.result_index is not None:
            data['resultIndex'] = self.result_index
        return data


def _require_int(data: Dict[str, Any], key: str) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise CommandFormatError(f"Result argument requires an integer '{key}'", {'argument': data})
    return value


def argument_from_dict(data: Dict[str, Any]) -> Argument:
    """Decode an argument from its JSON shape."""
    if isinstance(data, Argument):
        return data
    if not isinstance(data, dict):
        raise CommandFormatError(f"Argument must be an object, got {type(data).__name__}")

    arg_type = data.get('type')
    if arg_type == ArgumentKind.INPUT.value:
        return InputArgument(value=data.get('value'))
    if arg_type == ArgumentKind.GAS.value:
        return GasArgument()
    if arg_type == ArgumentKind.OBJECT.value:
        object_id = data.get('value')
        return ObjectArgument(object_id='' if object_id is None else str(object_id))
    if arg_type == ArgumentKind.RESULT.value:
        result_index = data.get('resultIndex')
        return ResultArgument(
            result_from=_require_int(data, 'resultFrom'),
            result_index=_require_int(data, 'resultIndex') if result_index is not None else None,
        )
    raise CommandFormatError(f"Unknown argument type: {arg_type!r}", {'argument': data})


class PTBArgs:
    """Shorthand constructors for arguments."""

    @staticmethod
    def input(value: Any) -> InputArgument:
        return InputArgument(value=value)

    @staticmethod
    def result(from_index: int, result_index: Optional[int] = None) -> ResultArgument:
        return ResultArgument(result_from=from_index, result_index=result_index)

    @staticmethod
    def gas() -> GasArgument:
        return GasArgument()

    @staticmethod
    def object(object_id: str) -> ObjectArgument:
        return ObjectArgument(object_id=object_id)


# =============================================================================
# COMMANDS
# =============================================================================

def _argument_tuple(values, field_name: str) -> Tuple[Argument, ...]:
    if isinstance(values, (str, bytes)) or not hasattr(values, '__iter__'):
        raise TypeError(f"'{field_name}' must be a sequence of arguments")
    values = tuple(values)
    for value in values:
        if not isinstance(value, Argument):
            raise TypeError(f"'{field_name}' must contain Argument instances, got {type(value).__name__}")
    return values


def _string_tuple(values, field_name: str) -> Tuple[str, ...]:
    if isinstance(values, (str, bytes)) or not hasattr(values, '__iter__'):
        raise TypeError(f"'{field_name}' must be a sequence of strings")
    return tuple(str(value) for value in values)


def _single_argument(value, field_name: str) -> Argument:
    if not isinstance(value, Argument):
        raise TypeError(f"'{field_name}' must be an Argument, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class Command:
    """Base class for every PTB command. Position is never stored here."""
    id: str = ""
    command_type: ClassVar[CommandType]

    @property
    def type_name(self) -> str:
        return self.command_type.value

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]

    def to_dict(self) -> Dict[str, Any]:
        raise NotImplementedError


@dataclass(frozen=True)
class MoveCallCommand(Command):
    """Call a Move function identified as ``package::module::function``."""
    target: str = ""
    arguments: Tuple[Argument, ...] = ()
    type_arguments: Optional[Tuple[str, ...]] = None
    command_type: ClassVar[CommandType] = CommandType.MOVE_CALL

    def __post_init__(self):
        object.__setattr__(self, 'arguments', _argument_tuple(self.arguments, 'arguments'))
        if self.type_arguments is not None:
            type_arguments = _string_tuple(self.type_arguments, 'type_arguments')
            object.__setattr__(self, 'type_arguments', type_arguments or None)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'type': self.type_name,
            'target': self.target,
            'arguments': [arg.to_dict() for arg in self.arguments],
        }
        if self.type_arguments:
            data['typeArguments'] = list(self.type_arguments)
        return data


@dataclass(frozen=True)
class TransferObjectsCommand(Command):
    """Send one or more objects to a recipient address."""
    objects: Tuple[Argument, ...] = ()
    recipient: Argument = InputArgument(value="")
    command_type: ClassVar[CommandType] = CommandType.TRANSFER_OBJECTS

    def __post_init__(self):
        object.__setattr__(self, 'objects', _argument_tuple(self.objects, 'objects'))
        _single_argument(self.recipient, 'recipient')

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'type': self.type_name,
            'objects': [arg.to_dict() for arg in self.objects],
            'recipient': self.recipient.to_dict(),
        }


@dataclass(frozen=True)
class SplitCoinsCommand(Command):
    """Split new coins with the given amounts off a source coin."""
    coin: Argument = GasArgument()
    amounts: Tuple[Argument, ...] = ()
    command_type: ClassVar[CommandType] = CommandType.SPLIT_COINS

    def __post_init__(self):
        _single_argument(self.coin, 'coin')
        object.__setattr__(self, 'amounts', _argument_tuple(self.amounts, 'amounts'))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'type': self.type_name,
            'coin': self.coin.to_dict(),
            'amounts': [arg.to_dict() for arg in self.amounts],
        }


@dataclass(frozen=True)
class MergeCoinsCommand(Command):
    """Merge source coins into a destination coin."""
    destination: Argument = GasArgument()
    sources: Tuple[Argument, ...] = ()
    command_type: ClassVar[CommandType] = CommandType.MERGE_COINS

    def __post_init__(self):
        _single_argument(self.destination, 'destination')
        object.__setattr__(self, 'sources', _argument_tuple(self.sources, 'sources'))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'type': self.type_name,
            'destination': self.destination.to_dict(),
            'sources': [arg.to_dict() for arg in self.sources],
        }


@dataclass(frozen=True)
class MakeMoveVecCommand(Command):
    """Build a Move vector of the given element type."""
    element_type: str = ""
    objects: Tuple[Argument, ...] = ()
    command_type: ClassVar[CommandType] = CommandType.MAKE_MOVE_VEC

    def __post_init__(self):
        object.__setattr__(self, 'objects', _argument_tuple(self.objects, 'objects'))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'type': self.type_name,
            'type_': self.element_type,
            'objects': [arg.to_dict() for arg in self.objects],
        }


@dataclass(frozen=True)
class PublishCommand(Command):
    """Publish compiled modules (base64 encoded) with their dependencies."""
    modules: Tuple[str, ...] = ()
    dependencies: Tuple[str, ...] = ()
    command_type: ClassVar[CommandType] = CommandType.PUBLISH

    def __post_init__(self):
        object.__setattr__(self, 'modules', _string_tuple(self.modules, 'modules'))
        object.__setattr__(self, 'dependencies', _string_tuple(self.dependencies, 'dependencies'))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'type': self.type_name,
            'modules': list(self.modules),
            'dependencies': list(self.dependencies),
        }


COMMAND_CLASSES: Dict[CommandType, Type[Command]] = {
    CommandType.MOVE_CALL: MoveCallCommand,
    CommandType.TRANSFER_OBJECTS: TransferObjectsCommand,
    CommandType.SPLIT_COINS: SplitCoinsCommand,
    CommandType.MERGE_COINS: MergeCoinsCommand,
    CommandType.MAKE_MOVE_VEC: MakeMoveVecCommand,
    CommandType.PUBLISH: PublishCommand,
}


def _argument_list(data: Dict[str, Any], key: str) -> List[Argument]:
    values = data.get(key, [])
    if not isinstance(values, list):
        raise CommandFormatError(f"'{key}' must be a list", {'command': data})
    return [argument_from_dict(value) for value in values]


def command_from_dict(data: Dict[str, Any]) -> Command:
    """Decode a command from its JSON shape."""
    if isinstance(data, Command):
        return data
    if not isinstance(data, dict):
        raise CommandFormatError(f"Command must be an object, got {type(data).__name__}")

    try:
        command_type = CommandType(data.get('type'))
    except ValueError:
        raise CommandFormatError(f"Unknown command type: {data.get('type')!r}", {'command': data})

    command_id = str(data.get('id', ''))
    try:
        if command_type is CommandType.MOVE_CALL:
            return MoveCallCommand(
                id=command_id,
                target=str(data.get('target', '')),
                arguments=_argument_list(data, 'arguments'),
                type_arguments=data.get('typeArguments'),
            )
        if command_type is CommandType.TRANSFER_OBJECTS:
            return TransferObjectsCommand(
                id=command_id,
                objects=_argument_list(data, 'objects'),
                recipient=argument_from_dict(data.get('recipient', {'type': 'input', 'value': ''})),
            )
        if command_type is CommandType.SPLIT_COINS:
            return SplitCoinsCommand(
                id=command_id,
                coin=argument_from_dict(data.get('coin', {'type': 'gas'})),
                amounts=_argument_list(data, 'amounts'),
            )
        if command_type is CommandType.MERGE_COINS:
            return MergeCoinsCommand(
                id=command_id,
                destination=argument_from_dict(data.get('destination', {'type': 'gas'})),
                sources=_argument_list(data, 'sources'),
            )
        if command_type is CommandType.MAKE_MOVE_VEC:
            return MakeMoveVecCommand(
                id=command_id,
                element_type=str(data.get('type_', '')),
                objects=_argument_list(data, 'objects'),
            )
        if command_type is CommandType.PUBLISH:
            return PublishCommand(
                id=command_id,
                modules=data.get('modules', []),
                dependencies=data.get('dependencies', []),
            )
    except TypeError as e:
        raise CommandFormatError(str(e), {'command': data})

    raise TypeError(f"Unhandled command type: {command_type}")
