"""
Argument Reference Resolver.

Turns symbolic arguments into either a structural descriptor (for the validator) or
a concrete value (for the execution builder and code emitter). All three consumers
share ``reference_error`` so they can never disagree on whether a Result reference
is legal.
"""

from dataclasses import dataclass
from typing import Any, Iterator, Optional, Sequence

from .exceptions import ResultReferenceError
from .models import (
    Argument, ArgumentKind, Command, InputArgument, GasArgument, ObjectArgument,
    ResultArgument, MoveCallCommand, TransferObjectsCommand, SplitCoinsCommand,
    MergeCoinsCommand, MakeMoveVecCommand, PublishCommand,
)


@dataclass(frozen=True)
class ArgumentDescriptor:
    """Validation-time view of an argument."""
    kind: ArgumentKind
    position: int
    literal: Any = None
    source_position: Optional[int] = None
    result_index: Optional[int] = None
    error: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.error is None


def reference_error(argument: Argument, position: int, available: int) -> Optional[str]:
    """Return why a Result argument is illegal at ``position``, or None.

    ``available`` is the number of results that exist to draw from: the command
    count when validating, the size of the result table when executing.
    """
    if not isinstance(argument, ResultArgument):
        return None

    source = argument.result_from
    if source < 0:
        return f"Invalid result reference #{source + 1} (out of range)"
    if source == position:
        return f"Cannot reference its own result #{source + 1}"
    if source > position:
        return f"Cannot reference result from later command #{source + 1}"
    if source >= available:
        return f"Invalid result reference #{source + 1} (out of range)"
    if argument.result_index is not None and argument.result_index < 0:
        return f"Invalid nested index {argument.result_index} for result #{source + 1}"
    return None


def iter_arguments(command: Command) -> Iterator[Argument]:
    """Yield every argument of a command in canonical order."""
    if isinstance(command, MoveCallCommand):
        yield from command.arguments
    elif isinstance(command, TransferObjectsCommand):
        yield from command.objects
        yield command.recipient
    elif isinstance(command, SplitCoinsCommand):
        yield command.coin
        yield from command.amounts
    elif isinstance(command, MergeCoinsCommand):
        yield command.destination
        yield from command.sources
    elif isinstance(command, MakeMoveVecCommand):
        yield from command.objects
    elif isinstance(command, PublishCommand):
        return
    else:
        raise TypeError(f"Unknown command type: {type(command).__name__}")


class ArgumentResolver:
    """Resolves arguments without side effects."""

    def describe(self, argument: Argument, position: int, command_count: int) -> ArgumentDescriptor:
        """Structural descriptor for the validator."""
        if isinstance(argument, InputArgument):
            return ArgumentDescriptor(ArgumentKind.INPUT, position, literal=argument.value)
        if isinstance(argument, GasArgument):
            return ArgumentDescriptor(ArgumentKind.GAS, position)
        if isinstance(argument, ObjectArgument):
            return ArgumentDescriptor(ArgumentKind.OBJECT, position, literal=argument.object_id)
        if isinstance(argument, ResultArgument):
            return ArgumentDescriptor(
                ArgumentKind.RESULT,
                position,
                source_position=argument.result_from,
                result_index=argument.result_index,
                error=reference_error(argument, position, command_count),
            )
        raise TypeError(f"Unknown argument type: {type(argument).__name__}")

    def resolve(self, argument: Argument, position: int, results: Sequence[Any], gas: Any) -> Any:
        """Concrete value for the execution builder.

        Raises ResultReferenceError when a Result argument points outside the
        results produced so far.
        """
        if isinstance(argument, InputArgument):
            return argument.plain_value
        if isinstance(argument, GasArgument):
            return gas
        if isinstance(argument, ObjectArgument):
            return argument.object_id
        if isinstance(argument, ResultArgument):
            error = reference_error(argument, position, len(results))
            if error:
                raise ResultReferenceError(
                    f"Command {position + 1}: {error}",
                    command_index=position,
                    result_from=argument.result_from,
                )
            handle = results[argument.result_from]
            if argument.result_index is not None:
                handle = handle[argument.result_index]
            return handle
        raise TypeError(f"Unknown argument type: {type(argument).__name__}")
