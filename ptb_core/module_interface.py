"""
Module interface lookup with an explicit TTL cache.

The builder's move-call form needs the public and entry functions of a deployed
package. Fetching them costs a JSON-RPC round trip, so results are cached per
(package id, network) for a fixed time-to-live and can be invalidated explicitly,
e.g. right after the user republishes a package.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests

from .config import BuilderConfig, FULLNODE_URLS
from .exceptions import ModuleInterfaceError


@dataclass
class ModuleFunction:
    """A callable function exposed by a Move module."""
    name: str
    module: str
    visibility: str = "public"
    is_entry: bool = False
    parameters: List[str] = field(default_factory=list)
    return_types: List[str] = field(default_factory=list)
    type_parameters: List[str] = field(default_factory=list)

    @property
    def user_parameters(self) -> List[str]:
        """Parameters the caller supplies; the trailing TxContext is injected by the ledger."""
        return [p for p in self.parameters if 'txcontext' not in p.lower()]

    def target(self, package_id: str) -> str:
        return f"{package_id}::{self.module}::{self.name}"


@dataclass
class MoveModule:
    """One module of a published package."""
    name: str
    address: str
    functions: List[ModuleFunction] = field(default_factory=list)
    structs: Dict[str, List[Tuple[str, str]]] = field(default_factory=dict)


@dataclass
class ModuleInterface:
    """The callable surface of a published package."""
    package_id: str
    modules: List[MoveModule] = field(default_factory=list)

    def get_function(self, module: str, name: str) -> Optional[ModuleFunction]:
        for move_module in self.modules:
            if move_module.name != module:
                continue
            for function in move_module.functions:
                if function.name == name:
                    return function
        return None

    def targets(self) -> List[str]:
        """Every ``package::module::function`` target in the package."""
        return [
            function.target(self.package_id)
            for move_module in self.modules
            for function in move_module.functions
        ]


# =============================================================================
# NORMALIZED MODULE CONVERSION
# =============================================================================

_PRIMITIVES = {
    'Bool': 'bool', 'U8': 'u8', 'U16': 'u16', 'U32': 'u32', 'U64': 'u64',
    'U128': 'u128', 'U256': 'u256', 'Address': 'address', 'Signer': 'signer',
}


def normalized_type_to_string(move_type: Any) -> str:
    """Render a normalized Move type (as returned by the RPC) as source syntax."""
    if move_type is None:
        return 'unknown'
    if isinstance(move_type, str):
        return _PRIMITIVES.get(move_type, move_type)
    if not isinstance(move_type, dict):
        return 'unknown'

    if 'Vector' in move_type:
        return f"vector<{normalized_type_to_string(move_type['Vector'])}>"
    if 'Reference' in move_type:
        return f"&{normalized_type_to_string(move_type['Reference'])}"
    if 'MutableReference' in move_type:
        return f"&mut {normalized_type_to_string(move_type['MutableReference'])}"
    if 'Struct' in move_type:
        struct = move_type['Struct']
        name = f"{struct.get('address')}::{struct.get('module')}::{struct.get('name')}"
        type_arguments = struct.get('typeArguments') or struct.get('type_arguments') or []
        if type_arguments:
            name += '<' + ', '.join(normalized_type_to_string(t) for t in type_arguments) + '>'
        return name
    if 'TypeParameter' in move_type:
        return f"T{move_type['TypeParameter']}"
    return 'unknown'


def _convert_function(name: str, data: Dict[str, Any], module_name: str) -> ModuleFunction:
    parameters = [normalized_type_to_string(p) for p in data.get('parameters', [])]
    return_types = [normalized_type_to_string(t) for t in data.get('return', [])]
    visibility = str(data.get('visibility', 'Public')).lower()
    return ModuleFunction(
        name=name,
        module=module_name,
        visibility=visibility,
        is_entry=bool(data.get('isEntry', data.get('is_entry', False))),
        parameters=parameters,
        return_types=return_types,
        type_parameters=[f"T{index}" for index, _ in enumerate(data.get('typeParameters', []))],
    )


def parse_normalized_modules(package_id: str, normalized: Dict[str, Any]) -> ModuleInterface:
    """Convert an ``iota_getNormalizedMoveModulesByPackage`` result.

    Only public and entry functions are kept since nothing else is callable
    from a transaction block.
    """
    modules = []
    for module_name, module_data in sorted(normalized.items()):
        exposed = module_data.get('exposedFunctions') or module_data.get('exposed_functions') or {}
        functions = [
            _convert_function(function_name, function_data, module_name)
            for function_name, function_data in sorted(exposed.items())
            if function_data.get('visibility') == 'Public'
            or function_data.get('isEntry') or function_data.get('is_entry')
        ]
        structs = {
            struct_name: [
                (field_data.get('name', ''),
                 normalized_type_to_string(field_data.get('type') or field_data.get('type_')))
                for field_data in struct_data.get('fields', [])
            ]
            for struct_name, struct_data in (module_data.get('structs') or {}).items()
        }
        modules.append(MoveModule(
            name=module_name,
            address=module_data.get('address', package_id),
            functions=functions,
            structs=structs,
        ))
    return ModuleInterface(package_id=package_id, modules=modules)


# =============================================================================
# FETCHER
# =============================================================================

class JsonRpcModuleFetcher:
    """Fetches a package's normalized modules from a full node over JSON-RPC."""

    METHOD = 'iota_getNormalizedMoveModulesByPackage'

    def __init__(self, config: Optional[BuilderConfig] = None,
                 session: Optional[requests.Session] = None, timeout: float = 30.0):
        self.logger = logging.getLogger(__name__)
        self.config = config or BuilderConfig()
        self.session = session or requests.Session()
        self.timeout = timeout

    def endpoint(self, network: str) -> str:
        if self.config.rpc_url:
            return self.config.rpc_url
        if network not in FULLNODE_URLS:
            raise ModuleInterfaceError(f"Unknown network: {network}", '', network)
        return FULLNODE_URLS[network]

    def __call__(self, package_id: str, network: str) -> ModuleInterface:
        url = self.endpoint(network)
        payload = {'jsonrpc': '2.0', 'id': 1, 'method': self.METHOD, 'params': [package_id]}
        self.logger.info("Fetching modules for package %s on %s", package_id, network)

        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as e:
            self.logger.error("Module fetch for %s failed: %s", package_id, e)
            raise ModuleInterfaceError(
                f"Failed to fetch module interface for package {package_id}: {e}",
                package_id, network,
            )

        if body.get('error'):
            message = body['error'].get('message', 'Unknown error')
            self.logger.error("Module fetch for %s returned an error: %s", package_id, message)
            raise ModuleInterfaceError(
                f"Failed to fetch module interface for package {package_id}: {message}",
                package_id, network, {'error': body['error']},
            )

        return parse_normalized_modules(package_id, body.get('result') or {})


# =============================================================================
# CACHE
# =============================================================================

@dataclass
class _CacheEntry:
    value: ModuleInterface
    stored_at: float


class ModuleInterfaceCache:
    """Per-(package, network) cache of module interfaces with a fixed TTL."""

    def __init__(self, fetcher: Optional[Callable[[str, str], ModuleInterface]] = None,
                 config: Optional[BuilderConfig] = None,
                 ttl: Optional[float] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.logger = logging.getLogger(__name__)
        self.config = config or BuilderConfig()
        self.fetcher = fetcher or JsonRpcModuleFetcher(self.config)
        self.ttl = self.config.module_cache_ttl if ttl is None else ttl
        self.clock = clock
        self._entries: Dict[Tuple[str, str], _CacheEntry] = {}

    def get(self, package_id: str, network: Optional[str] = None) -> ModuleInterface:
        """Cached interface for a package, fetching it when missing or expired."""
        key = (package_id, network or self.config.network)
        entry = self._entries.get(key)
        now = self.clock()
        if entry is not None and now - entry.stored_at < self.ttl:
            return entry.value

        value = self.fetcher(*key)
        self._entries[key] = _CacheEntry(value=value, stored_at=now)
        self.logger.debug("Cached module interface for %s on %s", *key)
        return value

    def invalidate(self, package_id: Optional[str] = None, network: Optional[str] = None) -> int:
        """Drop cached entries matching the filters (all entries when none given).

        Returns the number of entries removed.
        """
        doomed = [
            key for key in self._entries
            if (package_id is None or key[0] == package_id)
            and (network is None or key[1] == network)
        ]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def __contains__(self, key: Tuple[str, str]) -> bool:
        entry = self._entries.get(key)
        return entry is not None and self.clock() - entry.stored_at < self.ttl

    def __len__(self) -> int:
        return len(self._entries)
