"""
Graph Validator for PTB command lists.

Validation never raises and never mutates the block. It reports structural
problems as errors (the block cannot be submitted) and suspicious but legal
shapes as warnings.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Set

from .config import BuilderConfig
from .models import (
    ArgumentKind, Command, CommandType, InputArgument, ResultArgument,
    MoveCallCommand, TransferObjectsCommand, SplitCoinsCommand, MergeCoinsCommand,
    MakeMoveVecCommand, PublishCommand,
)
from .exceptions import ModuleInterfaceError
from .move_types import literal_text, validate_move_type
from .references import format_reference, is_type_compatible
from .resolver import ArgumentResolver, iter_arguments


logger = logging.getLogger(__name__)

# Commands whose output is normally consumed by a later command.
RESULT_PRODUCING_TYPES = frozenset({
    CommandType.MOVE_CALL,
    CommandType.SPLIT_COINS,
    CommandType.MAKE_MOVE_VEC,
    CommandType.PUBLISH,
})

_INTEGER_PATTERN = re.compile(r'^\s*[+-]?\d+\s*$')


@dataclass
class ValidationReport:
    """Outcome of validating a block."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            'isValid': self.is_valid,
            'errors': list(self.errors),
            'warnings': list(self.warnings),
        }


def _numeric_amount(value: Any) -> Optional[int]:
    """Interpret a split amount literal as an integer, or None if it is not one.

    Coin amounts are u64, so floats only count when they are whole numbers.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str) and _INTEGER_PATTERN.match(value):
        return int(value)
    return None


class GraphValidator:
    """Checks a PTB command list against the ledger's structural rules.

    When ``interfaces`` is given (anything with ``get(package_id, network)``
    returning a ModuleInterface, normally a ModuleInterfaceCache), MoveCall
    arguments are also checked against the called function's signature.
    """

    def __init__(self, config: Optional[BuilderConfig] = None,
                 resolver: Optional[ArgumentResolver] = None,
                 interfaces=None):
        self.config = config or BuilderConfig()
        self.resolver = resolver or ArgumentResolver()
        self.interfaces = interfaces

    def validate(self, block) -> ValidationReport:
        """Validate a PTBlock (or a plain command sequence).

        The command list is snapshotted on entry, so the report always describes
        the block as it was when validation started.
        """
        commands = self._snapshot(block)
        report = ValidationReport()

        for position, command in enumerate(commands):
            self._check_command(command, self._prefix(position, command), report)

        for position, command in enumerate(commands):
            self._check_references(command, position, len(commands), report)

        self._check_unused_results(commands, report)

        logger.debug("Validated %d commands: %d errors, %d warnings",
                     len(commands), len(report.errors), len(report.warnings))
        return report

    @staticmethod
    def _snapshot(block) -> Sequence[Command]:
        if hasattr(block, 'get_commands'):
            return block.get_commands()
        return tuple(block)

    @staticmethod
    def _prefix(position: int, command: Command) -> str:
        return f"Command {position + 1} ({command.type_name}): "

    # =========================================================================
    # PASS 1 - per-command structure
    # =========================================================================

    def _check_command(self, command: Command, prefix: str, report: ValidationReport):
        if isinstance(command, MoveCallCommand):
            self._check_move_call(command, prefix, report)
        elif isinstance(command, TransferObjectsCommand):
            self._check_transfer_objects(command, prefix, report)
        elif isinstance(command, SplitCoinsCommand):
            self._check_split_coins(command, prefix, report)
        elif isinstance(command, MergeCoinsCommand):
            if not command.sources:
                report.errors.append(f"{prefix}Must specify at least one source coin to merge")
        elif isinstance(command, MakeMoveVecCommand):
            if not command.element_type or not command.element_type.strip():
                report.errors.append(f"{prefix}Vector type is required")
            if not command.objects:
                report.warnings.append(f"{prefix}Creating empty vector")
        elif isinstance(command, PublishCommand):
            if not command.modules:
                report.errors.append(f"{prefix}Must specify at least one module to publish")
        else:
            raise TypeError(f"Unknown command type: {type(command).__name__}")

    def _check_move_call(self, command: MoveCallCommand, prefix: str, report: ValidationReport):
        target = command.target or ""
        if '::' not in target:
            report.errors.append(
                f"{prefix}Invalid target format. Expected 'package::module::function'")
        else:
            parts = target.split('::')
            if len(parts) != 3:
                report.errors.append(
                    f"{prefix}Target must have exactly 3 parts: package::module::function")
            elif any(part.strip() == '' for part in parts):
                report.errors.append(f"{prefix}Target parts cannot be empty")
            elif self.interfaces is not None:
                self._check_signature(command, parts, prefix, report)

        if not command.arguments:
            report.warnings.append(
                f"{prefix}No arguments provided. Ensure this function doesn't require parameters.")

    def _check_signature(self, command: MoveCallCommand, parts: List[str], prefix: str,
                         report: ValidationReport):
        package_id, module, name = parts
        try:
            interface = self.interfaces.get(package_id, self.config.network)
        except ModuleInterfaceError as e:
            logger.warning("Skipping signature check for %s: %s", command.target, e)
            report.warnings.append(f"{prefix}Could not load module interface for {package_id}")
            return

        function = interface.get_function(module, name)
        if function is None:
            report.errors.append(f"{prefix}Function {module}::{name} not found in package {package_id}")
            return

        type_argument_count = len(command.type_arguments or ())
        if type_argument_count != len(function.type_parameters):
            report.errors.append(
                f"{prefix}Expected {len(function.type_parameters)} type arguments, "
                f"got {type_argument_count}")

        parameters = function.user_parameters
        if len(command.arguments) != len(parameters):
            report.errors.append(
                f"{prefix}Expected {len(parameters)} arguments, got {len(command.arguments)}")

        for index, (argument, parameter) in enumerate(zip(command.arguments, parameters)):
            if not is_type_compatible(argument, parameter):
                report.warnings.append(
                    f"{prefix}Argument {index + 1} ({format_reference(argument)}) "
                    f"may not match parameter type {parameter}")
                continue
            if not isinstance(argument, InputArgument):
                continue
            if isinstance(argument.value, str) and not argument.value.strip():
                continue  # reported as an empty input in the reference pass
            result = validate_move_type(literal_text(argument.plain_value), parameter)
            if not result.is_valid:
                report.errors.append(f"{prefix}Argument {index + 1}: {result.error}")

    def _check_transfer_objects(self, command: TransferObjectsCommand, prefix: str,
                                report: ValidationReport):
        if not command.objects:
            report.errors.append(f"{prefix}Must specify at least one object to transfer")

        recipient = command.recipient
        if isinstance(recipient, InputArgument):
            if recipient.value is None:
                report.errors.append(f"{prefix}Recipient address is required")
            elif not isinstance(recipient.value, str):
                report.errors.append(f"{prefix}Recipient address must be a string")
            elif recipient.value.strip() and not recipient.value.startswith(self.config.address_prefix):
                report.warnings.append(
                    f"{prefix}Recipient address should start with '{self.config.address_prefix}'")

    def _check_split_coins(self, command: SplitCoinsCommand, prefix: str, report: ValidationReport):
        if not command.amounts:
            report.errors.append(f"{prefix}Must specify at least one split amount")
            return

        for index, amount in enumerate(command.amounts):
            if not isinstance(amount, InputArgument):
                continue
            if isinstance(amount.value, str) and not amount.value.strip():
                continue  # reported as an empty input in the reference pass
            value = _numeric_amount(amount.value)
            if value is None:
                report.errors.append(f"{prefix}Split amount {index + 1} must be a number")
            elif value <= 0:
                report.errors.append(f"{prefix}Split amount {index + 1} must be greater than 0")

    # =========================================================================
    # PASS 2 - argument references
    # =========================================================================

    def _check_references(self, command: Command, position: int, command_count: int,
                          report: ValidationReport):
        prefix = self._prefix(position, command)
        for argument in iter_arguments(command):
            descriptor = self.resolver.describe(argument, position, command_count)

            if descriptor.kind is ArgumentKind.RESULT:
                if descriptor.error:
                    report.errors.append(f"{prefix}{descriptor.error}")
            elif descriptor.kind is ArgumentKind.OBJECT:
                object_id = descriptor.literal
                if isinstance(object_id, str) and len(object_id) != self.config.object_id_length:
                    report.warnings.append(
                        f"{prefix}Object ID should be {self.config.object_id_length} characters "
                        f"long (including {self.config.address_prefix})")
            elif descriptor.kind is ArgumentKind.INPUT:
                if isinstance(descriptor.literal, str) and descriptor.literal.strip() == '':
                    report.errors.append(f"{prefix}Input argument cannot be empty")

    # =========================================================================
    # PASS 3 - whole-block advisories
    # =========================================================================

    def _check_unused_results(self, commands: Sequence[Command], report: ValidationReport):
        used: Set[int] = set()
        for command in commands:
            for argument in iter_arguments(command):
                if isinstance(argument, ResultArgument):
                    used.add(argument.result_from)

        last = len(commands) - 1
        for position, command in enumerate(commands):
            if (command.command_type in RESULT_PRODUCING_TYPES
                    and position not in used and position < last):
                report.warnings.append(
                    f"{self._prefix(position, command)}Result not used by any subsequent commands")


def validate(block, config: Optional[BuilderConfig] = None) -> ValidationReport:
    """Validate a block with a default validator."""
    return GraphValidator(config).validate(block)
