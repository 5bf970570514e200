"""
PTB Routes - HTTP adapter between the browser builder and ptb_core.

The host application registers ``ptb_bp``; this module owns no server.

Routes:
    POST /api/ptb/validate     validate a command list
    POST /api/ptb/code         emit procedural source for a command list
    POST /api/ptb/preview      validate, then replay onto a recording transaction
    GET  /api/ptb/templates    predefined templates
    GET  /api/ptb/references   arguments a command at ?position=N may reference
    POST /api/ptb/check-type   check a literal against a Move type
"""

import logging
from typing import Any, Dict, List, Tuple

from flask import Blueprint, current_app, jsonify, request

from ptb_core.code_emitter import emit
from ptb_core.config import BuilderConfig
from ptb_core.exceptions import CommandFormatError, PTBError
from ptb_core.execution_builder import ExecutionBuilder
from ptb_core.models import Command, command_from_dict
from ptb_core.move_types import literal_text, validate_move_type
from ptb_core.references import format_reference, get_available_references
from ptb_core.templates import get_predefined_templates
from ptb_core.transaction import RecordingTransaction
from ptb_core.validator import GraphValidator

ptb_bp = Blueprint('ptb', __name__)

logger = logging.getLogger(__name__)


def _config() -> BuilderConfig:
    """App-level config if the host set one, otherwise the environment."""
    config = current_app.config.get('PTB_CONFIG')
    if isinstance(config, BuilderConfig):
        return config
    return BuilderConfig.from_env()


def _interfaces():
    """Module interface cache for MoveCall signature checks, if the host set one."""
    return current_app.config.get('PTB_MODULE_CACHE')


def _read_commands() -> Tuple[List[Command], Dict[str, Any]]:
    data = request.get_json(force=True, silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise CommandFormatError(
            f"Request body must be a JSON object, got {type(data).__name__}")
    commands = data.get('commands')
    if not isinstance(commands, list):
        raise CommandFormatError("'commands' must be a list")
    return [command_from_dict(item) for item in commands], data


def _error_response(error: PTBError, status: int = 400):
    logger.warning("Rejected PTB request on %s: %s", request.path, error)
    return jsonify({'success': False, 'error': str(error), 'details': error.details}), status


# ─────────────────────────────────────────────────────────────────────
# ROUTES
# ─────────────────────────────────────────────────────────────────────

@ptb_bp.route('/api/ptb/validate', methods=['POST'])
def ptb_validate():
    """Validate a command list.

    Body: ``{ "commands": [ ... ] }``
    """
    try:
        commands, _ = _read_commands()
    except PTBError as e:
        return _error_response(e)

    report = GraphValidator(_config(), interfaces=_interfaces()).validate(commands)
    return jsonify({'success': True, **report.to_dict()})


@ptb_bp.route('/api/ptb/code', methods=['POST'])
def ptb_code():
    """Emit source code that rebuilds the transaction.

    Body: ``{ "commands": [ ... ], "language": "typescript" | "python" }``
    """
    try:
        commands, data = _read_commands()
        language = data.get('language') or _config().default_language
        code = emit(commands, language)
    except PTBError as e:
        return _error_response(e)

    return jsonify({'success': True, 'language': language, 'code': code})


@ptb_bp.route('/api/ptb/preview', methods=['POST'])
def ptb_preview():
    """Replay a valid command list onto a recording transaction.

    Returns the primitive calls in order, with result handles in ledger JSON form.
    """
    try:
        commands, _ = _read_commands()
    except PTBError as e:
        return _error_response(e)

    report = GraphValidator(_config(), interfaces=_interfaces()).validate(commands)
    if not report.is_valid:
        return jsonify({'success': False, 'error': 'Validation failed', **report.to_dict()}), 400

    try:
        built = ExecutionBuilder(RecordingTransaction).build(commands)
    except PTBError as e:
        return _error_response(e)

    return jsonify({
        'success': True,
        'warnings': report.warnings,
        'transaction': built.transaction.to_dict(),
    })


@ptb_bp.route('/api/ptb/templates', methods=['GET'])
def ptb_templates():
    """Return the predefined templates."""
    return jsonify({
        'success': True,
        'templates': [template.to_dict() for template in get_predefined_templates()],
    })


@ptb_bp.route('/api/ptb/references', methods=['GET'])
def ptb_references():
    """List the arguments a command at ``?position=N`` may reference."""
    try:
        position = request.args.get('position', type=int)
        if position is None or position < 0:
            raise CommandFormatError("'position' must be a non-negative integer")
    except PTBError as e:
        return _error_response(e)

    return jsonify({
        'success': True,
        'references': [
            {'argument': argument.to_dict(), 'label': format_reference(argument)}
            for argument in get_available_references(position)
        ],
    })


@ptb_bp.route('/api/ptb/check-type', methods=['POST'])
def ptb_check_type():
    """Check a literal against a Move type.

    Body: ``{ "value": "255", "type": "u8" }``
    """
    data = request.get_json(force=True, silent=True) or {}
    try:
        if not isinstance(data, dict):
            raise CommandFormatError(
                f"Request body must be a JSON object, got {type(data).__name__}")
        move_type = data.get('type')
        if not isinstance(move_type, str) or not move_type.strip():
            raise CommandFormatError("'type' must be a non-empty string")
    except PTBError as e:
        return _error_response(e)

    result = validate_move_type(literal_text(data.get('value')), move_type)
    return jsonify({
        'success': True,
        'isValid': result.is_valid,
        'error': result.error,
        'suggestion': result.suggestion,
    })


def register_ptb_routes(app, config: BuilderConfig = None, module_cache=None):
    """Register the PTB blueprint, optionally pinning the builder config.

    Passing a ``module_cache`` (a ModuleInterfaceCache) turns on MoveCall
    signature checks in validate and preview.
    """
    if config is not None:
        app.config['PTB_CONFIG'] = config
    if module_cache is not None:
        app.config['PTB_MODULE_CACHE'] = module_cache
    app.register_blueprint(ptb_bp)
    logger.info("PTB routes registered under /api/ptb")
