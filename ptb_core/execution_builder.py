"""
Execution Builder - replays a PTB onto a ledger transaction object.

Commands are applied strictly in block order. The result table is local to one
build() call and grows by exactly one entry per command, so entry i always holds
the handle of the command at position i.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

from .exceptions import ResultReferenceError
from .models import (
    Command, MoveCallCommand, TransferObjectsCommand, SplitCoinsCommand,
    MergeCoinsCommand, MakeMoveVecCommand, PublishCommand,
)
from .resolver import ArgumentResolver
from .transaction import EmptyResult, RecordingTransaction, TransactionHandle


@dataclass
class BuiltTransaction:
    """A driven transaction plus the per-command result handles."""
    transaction: TransactionHandle
    results: Tuple[Any, ...]

    def result_for(self, position: int) -> Any:
        return self.results[position]


class ExecutionBuilder:
    """Drives a TransactionHandle from a PTB command list.

    The builder assumes the block already passed validation. It only performs
    the reference check needed to avoid reading outside the result table and
    raises ResultReferenceError when that check fails. Errors raised by the
    transaction primitives themselves are propagated unchanged.
    """

    def __init__(self, transaction_factory: Callable[[], TransactionHandle] = RecordingTransaction,
                 resolver: Optional[ArgumentResolver] = None):
        self.logger = logging.getLogger(__name__)
        self.transaction_factory = transaction_factory
        self.resolver = resolver or ArgumentResolver()

    def build(self, block, transaction: Optional[TransactionHandle] = None) -> BuiltTransaction:
        """
        Apply every command of ``block`` to ``transaction``.

        Args:
            block: PTBlock or sequence of commands; snapshotted on entry
            transaction: Handle to drive. A new one is created from the
                factory when omitted.

        Returns:
            BuiltTransaction: the driven handle and the result table

        Raises:
            ResultReferenceError: If a Result argument points outside the
                results produced so far
        """
        commands = block.get_commands() if hasattr(block, 'get_commands') else tuple(block)
        tx = transaction if transaction is not None else self.transaction_factory()
        results: List[Any] = []

        for position, command in enumerate(commands):
            try:
                result = self._apply(command, position, tx, results)
            except ResultReferenceError as e:
                self.logger.error("Build aborted at command %d (%s): %s",
                                  position + 1, command.type_name, e)
                raise
            results.append(result if result is not None else EmptyResult(position))
            self.logger.debug("Applied %s command %s at position %d",
                              command.type_name, command.id, position)

        return BuiltTransaction(transaction=tx, results=tuple(results))

    def _apply(self, command: Command, position: int, tx: TransactionHandle,
               results: List[Any]) -> Any:
        def resolve(argument):
            return self.resolver.resolve(argument, position, results, tx.gas)

        if isinstance(command, MoveCallCommand):
            arguments = [resolve(arg) for arg in command.arguments]
            type_arguments = list(command.type_arguments) if command.type_arguments else None
            return tx.move_call(command.target, arguments, type_arguments)
        if isinstance(command, TransferObjectsCommand):
            objects = [resolve(arg) for arg in command.objects]
            return tx.transfer_objects(objects, resolve(command.recipient))
        if isinstance(command, SplitCoinsCommand):
            coin = resolve(command.coin)
            return tx.split_coins(coin, [resolve(arg) for arg in command.amounts])
        if isinstance(command, MergeCoinsCommand):
            destination = resolve(command.destination)
            return tx.merge_coins(destination, [resolve(arg) for arg in command.sources])
        if isinstance(command, MakeMoveVecCommand):
            elements = [resolve(arg) for arg in command.objects]
            return tx.make_move_vec(command.element_type, elements)
        if isinstance(command, PublishCommand):
            return tx.publish(list(command.modules), list(command.dependencies))
        raise TypeError(f"Unknown command type: {type(command).__name__}")
