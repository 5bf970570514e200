"""
Procedural Code Emitter - renders a PTB as source code that rebuilds it.

Each emitter walks the commands in block order, binds the output of the command at
position i to ``result{i}``, and renders arguments through the same reference rule
the execution builder uses. The emitted text is for export and sharing only.
"""

import json
import logging
from typing import Any, Dict, List, Type

from .exceptions import ResultReferenceError, UnsupportedLanguageError
from .models import (
    Argument, Command, InputArgument, GasArgument, ObjectArgument, ResultArgument,
    MoveCallCommand, TransferObjectsCommand, SplitCoinsCommand, MergeCoinsCommand,
    MakeMoveVecCommand, PublishCommand,
)
from .resolver import reference_error


logger = logging.getLogger(__name__)


class CodeEmitter:
    """Base class holding the language-independent traversal."""

    language = ""
    indent_size = 4
    gas_expression = "tx.gas"

    def emit(self, block) -> str:
        """Render the whole block as a self-contained program."""
        commands = block.get_commands() if hasattr(block, 'get_commands') else tuple(block)

        lines = self._preamble()
        for position, command in enumerate(commands):
            lines.extend(self._statement(command, position))
        lines.extend(self._closing())

        logger.debug("Emitted %s for %d commands", self.language, len(commands))
        return "\n".join(lines) + "\n"

    @staticmethod
    def result_name(position: int) -> str:
        return f"result{position}"

    def render_argument(self, argument: Argument, position: int) -> str:
        if isinstance(argument, InputArgument):
            return self.literal(argument.plain_value)
        if isinstance(argument, GasArgument):
            return self.gas_expression
        if isinstance(argument, ObjectArgument):
            return self.literal(argument.object_id)
        if isinstance(argument, ResultArgument):
            # Only results of already-emitted commands are bound at this point.
            error = reference_error(argument, position, position)
            if error:
                raise ResultReferenceError(f"Command {position + 1}: {error}",
                                           command_index=position,
                                           result_from=argument.result_from)
            name = self.result_name(argument.result_from)
            if argument.result_index is not None:
                return f"{name}[{argument.result_index}]"
            return name
        raise TypeError(f"Unknown argument type: {type(argument).__name__}")

    def render_list(self, arguments, position: int) -> str:
        return "[" + ", ".join(self.render_argument(arg, position) for arg in arguments) + "]"

    def string_list(self, values) -> str:
        return "[" + ", ".join(self.literal(value) for value in values) + "]"

    def indent(self, level: int = 1) -> str:
        return " " * (self.indent_size * level)

    def _statement(self, command: Command, position: int) -> List[str]:
        if isinstance(command, MoveCallCommand):
            return self._move_call(command, position)
        if isinstance(command, TransferObjectsCommand):
            return self._transfer_objects(command, position)
        if isinstance(command, SplitCoinsCommand):
            return self._split_coins(command, position)
        if isinstance(command, MergeCoinsCommand):
            return self._merge_coins(command, position)
        if isinstance(command, MakeMoveVecCommand):
            return self._make_move_vec(command, position)
        if isinstance(command, PublishCommand):
            return self._publish(command, position)
        raise TypeError(f"Unknown command type: {type(command).__name__}")

    # Language hooks

    def literal(self, value: Any) -> str:
        raise NotImplementedError

    def _preamble(self) -> List[str]:
        raise NotImplementedError

    def _closing(self) -> List[str]:
        raise NotImplementedError

    def _move_call(self, command: MoveCallCommand, position: int) -> List[str]:
        raise NotImplementedError

    def _transfer_objects(self, command: TransferObjectsCommand, position: int) -> List[str]:
        raise NotImplementedError

    def _split_coins(self, command: SplitCoinsCommand, position: int) -> List[str]:
        raise NotImplementedError

    def _merge_coins(self, command: MergeCoinsCommand, position: int) -> List[str]:
        raise NotImplementedError

    def _make_move_vec(self, command: MakeMoveVecCommand, position: int) -> List[str]:
        raise NotImplementedError

    def _publish(self, command: PublishCommand, position: int) -> List[str]:
        raise NotImplementedError


class TypeScriptEmitter(CodeEmitter):
    """Emits code for the IOTA TypeScript SDK's Transaction builder."""

    language = "typescript"
    indent_size = 2

    def literal(self, value: Any) -> str:
        return json.dumps(value)

    def _preamble(self) -> List[str]:
        return [
            'import { Transaction } from "@iota/iota-sdk/transactions";',
            '',
            'export async function executePTB() {',
            f'{self.indent()}const tx = new Transaction();',
            '',
        ]

    def _closing(self) -> List[str]:
        return [f'{self.indent()}return tx;', '}']

    def _bind(self, position: int, expression: str) -> List[str]:
        return [f'{self.indent()}const {self.result_name(position)} = {expression};', '']

    def _move_call(self, command: MoveCallCommand, position: int) -> List[str]:
        pad = self.indent(2)
        lines = [
            f'{self.indent()}const {self.result_name(position)} = tx.moveCall({{',
            f'{pad}target: {self.literal(command.target)},',
            f'{pad}arguments: {self.render_list(command.arguments, position)},',
        ]
        if command.type_arguments:
            lines.append(f'{pad}typeArguments: {self.string_list(command.type_arguments)},')
        lines.extend([f'{self.indent()}}});', ''])
        return lines

    def _transfer_objects(self, command: TransferObjectsCommand, position: int) -> List[str]:
        objects = self.render_list(command.objects, position)
        recipient = self.render_argument(command.recipient, position)
        return self._bind(position, f'tx.transferObjects({objects}, {recipient})')

    def _split_coins(self, command: SplitCoinsCommand, position: int) -> List[str]:
        coin = self.render_argument(command.coin, position)
        amounts = self.render_list(command.amounts, position)
        return self._bind(position, f'tx.splitCoins({coin}, {amounts})')

    def _merge_coins(self, command: MergeCoinsCommand, position: int) -> List[str]:
        destination = self.render_argument(command.destination, position)
        sources = self.render_list(command.sources, position)
        return self._bind(position, f'tx.mergeCoins({destination}, {sources})')

    def _make_move_vec(self, command: MakeMoveVecCommand, position: int) -> List[str]:
        elements = self.render_list(command.objects, position)
        return self._bind(
            position,
            f'tx.makeMoveVec({{ type: {self.literal(command.element_type)}, elements: {elements} }})',
        )

    def _publish(self, command: PublishCommand, position: int) -> List[str]:
        pad = self.indent(2)
        return [
            f'{self.indent()}const {self.result_name(position)} = tx.publish({{',
            f'{pad}modules: {self.string_list(command.modules)},',
            f'{pad}dependencies: {self.string_list(command.dependencies)},',
            f'{self.indent()}}});',
            '',
        ]


class PythonEmitter(CodeEmitter):
    """Emits a Python function that drives any TransactionHandle."""

    language = "python"

    def literal(self, value: Any) -> str:
        return repr(value)

    def _preamble(self) -> List[str]:
        return [
            '"""Rebuild the programmable transaction block."""',
            '',
            'from ptb_core.transaction import RecordingTransaction',
            '',
            '',
            'def build_ptb(tx=None):',
            f'{self.indent()}tx = tx if tx is not None else RecordingTransaction()',
            '',
        ]

    def _closing(self) -> List[str]:
        return ['', f'{self.indent()}return tx']

    def _bind(self, position: int, expression: str) -> List[str]:
        return [f'{self.indent()}{self.result_name(position)} = {expression}']

    def _move_call(self, command: MoveCallCommand, position: int) -> List[str]:
        arguments = self.render_list(command.arguments, position)
        type_arguments = self.string_list(command.type_arguments) if command.type_arguments else 'None'
        return self._bind(
            position,
            f'tx.move_call({self.literal(command.target)}, {arguments}, {type_arguments})',
        )

    def _transfer_objects(self, command: TransferObjectsCommand, position: int) -> List[str]:
        objects = self.render_list(command.objects, position)
        recipient = self.render_argument(command.recipient, position)
        return self._bind(position, f'tx.transfer_objects({objects}, {recipient})')

    def _split_coins(self, command: SplitCoinsCommand, position: int) -> List[str]:
        coin = self.render_argument(command.coin, position)
        amounts = self.render_list(command.amounts, position)
        return self._bind(position, f'tx.split_coins({coin}, {amounts})')

    def _merge_coins(self, command: MergeCoinsCommand, position: int) -> List[str]:
        destination = self.render_argument(command.destination, position)
        sources = self.render_list(command.sources, position)
        return self._bind(position, f'tx.merge_coins({destination}, {sources})')

    def _make_move_vec(self, command: MakeMoveVecCommand, position: int) -> List[str]:
        elements = self.render_list(command.objects, position)
        return self._bind(position,
                          f'tx.make_move_vec({self.literal(command.element_type)}, {elements})')

    def _publish(self, command: PublishCommand, position: int) -> List[str]:
        modules = self.string_list(command.modules)
        dependencies = self.string_list(command.dependencies)
        return self._bind(position, f'tx.publish({modules}, {dependencies})')


EMITTERS: Dict[str, Type[CodeEmitter]] = {
    TypeScriptEmitter.language: TypeScriptEmitter,
    PythonEmitter.language: PythonEmitter,
}


def get_emitter(language: str) -> CodeEmitter:
    """Instantiate the emitter registered for ``language``."""
    if not isinstance(language, str):
        raise UnsupportedLanguageError(repr(language), sorted(EMITTERS))
    emitter_cls = EMITTERS.get(language.lower().strip())
    if emitter_cls is None:
        raise UnsupportedLanguageError(language, sorted(EMITTERS))
    return emitter_cls()


def emit(block, language: str = "typescript") -> str:
    """Render ``block`` as source code in ``language``."""
    return get_emitter(language).emit(block)
