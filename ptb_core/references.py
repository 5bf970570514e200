"""
Helpers the builder UI uses to offer and describe argument references.
"""

from typing import List, Union

from .models import (
    Argument, ArgumentKind, GasArgument, InputArgument, ObjectArgument, ResultArgument,
)


def get_available_references(position: int) -> List[Argument]:
    """Arguments a command at ``position`` may reference: gas plus every earlier result."""
    references: List[Argument] = [GasArgument()]
    references.extend(ResultArgument(result_from=index) for index in range(max(position, 0)))
    return references


def format_reference(argument: Argument) -> str:
    """Short human-readable label for an argument."""
    if isinstance(argument, GasArgument):
        return "Gas"
    if isinstance(argument, ResultArgument):
        label = f"Result({argument.result_from})"
        if argument.result_index is not None:
            label = f"NestedResult({argument.result_from}, {argument.result_index})"
        return f"{label} - Output from Step {argument.result_from + 1}"
    if isinstance(argument, ObjectArgument):
        return f"Object {argument.object_id or '(unset)'}"
    if isinstance(argument, InputArgument):
        value = argument.plain_value
        return f"Input {value!r}" if value not in (None, '') else "Input (empty)"
    raise TypeError(f"Unknown argument type: {type(argument).__name__}")


def is_type_compatible(argument: Union[Argument, ArgumentKind, str], parameter_type: str) -> bool:
    """Loose check that an argument kind can feed a Move parameter type."""
    if isinstance(argument, Argument):
        kind = argument.kind
    elif isinstance(argument, ArgumentKind):
        kind = argument
    else:
        kind = ArgumentKind(argument)

    parameter_type = parameter_type.strip()
    if '&' in parameter_type:
        return kind in (ArgumentKind.OBJECT, ArgumentKind.RESULT)
    if 'Coin' in parameter_type:
        return kind in (ArgumentKind.GAS, ArgumentKind.RESULT)
    if parameter_type == 'address':
        return kind is ArgumentKind.INPUT
    return True
