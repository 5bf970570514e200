"""
PTB Core - the Programmable Transaction Block builder behind the browser IDE.

This package keeps an ordered command graph, validates it against the ledger's
structural rules, replays it onto a ledger transaction object, and emits an
equivalent procedural program.
"""

__version__ = "0.1.0"
__author__ = "PTB Studio Development Team"

from .models import (
    ArgumentKind, CommandType, Argument, InputArgument, GasArgument, ObjectArgument,
    ResultArgument, PTBArgs, Command, MoveCallCommand, TransferObjectsCommand,
    SplitCoinsCommand, MergeCoinsCommand, MakeMoveVecCommand, PublishCommand,
    argument_from_dict, command_from_dict,
)
from .exceptions import (
    PTBError, ResultReferenceError, CommandUpdateError, CommandFormatError,
    TemplateError, UnsupportedLanguageError, ModuleInterfaceError,
)
from .config import BuilderConfig
from .templates import PTBTemplate, get_predefined_templates
from .block import PTBlock
from .resolver import ArgumentResolver, ArgumentDescriptor, iter_arguments, reference_error
from .validator import GraphValidator, ValidationReport, validate
from .transaction import TransactionHandle, RecordingTransaction
from .execution_builder import ExecutionBuilder, BuiltTransaction
from .code_emitter import CodeEmitter, TypeScriptEmitter, PythonEmitter, emit
from .module_interface import ModuleInterfaceCache, ModuleInterface, JsonRpcModuleFetcher
from .move_types import TypeCheckResult, validate_move_type, literal_text
from .references import get_available_references, format_reference, is_type_compatible

__all__ = [
    "ArgumentKind",
    "CommandType",
    "Argument",
    "InputArgument",
    "GasArgument",
    "ObjectArgument",
    "ResultArgument",
    "PTBArgs",
    "Command",
    "MoveCallCommand",
    "TransferObjectsCommand",
    "SplitCoinsCommand",
    "MergeCoinsCommand",
    "MakeMoveVecCommand",
    "PublishCommand",
    "argument_from_dict",
    "command_from_dict",
    # Errors
    "PTBError",
    "ResultReferenceError",
    "CommandUpdateError",
    "CommandFormatError",
    "TemplateError",
    "UnsupportedLanguageError",
    "ModuleInterfaceError",
    # Builder
    "BuilderConfig",
    "PTBTemplate",
    "get_predefined_templates",
    "PTBlock",
    "ArgumentResolver",
    "ArgumentDescriptor",
    "iter_arguments",
    "reference_error",
    "GraphValidator",
    "ValidationReport",
    "validate",
    "TransactionHandle",
    "RecordingTransaction",
    "ExecutionBuilder",
    "BuiltTransaction",
    "CodeEmitter",
    "TypeScriptEmitter",
    "PythonEmitter",
    "emit",
    # Module interfaces
    "ModuleInterfaceCache",
    "ModuleInterface",
    "JsonRpcModuleFetcher",
    # Builder form helpers
    "TypeCheckResult",
    "validate_move_type",
    "literal_text",
    "get_available_references",
    "format_reference",
    "is_type_compatible",
]
