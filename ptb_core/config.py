"""
Configuration for the PTB builder core.
"""

import os
from dataclasses import dataclass
from typing import Optional


FULLNODE_URLS = {
    'mainnet': 'https://api.mainnet.iota.cafe',
    'testnet': 'https://api.testnet.iota.cafe',
    'devnet': 'https://api.devnet.iota.cafe',
    'localnet': 'http://127.0.0.1:9000',
}

SUPPORTED_LANGUAGES = ('typescript', 'python')


@dataclass
class BuilderConfig:
    """Ledger conventions and service settings used by the builder."""
    network: str = 'testnet'
    address_prefix: str = '0x'
    object_id_length: int = 66  # "0x" + 64 hex characters
    module_cache_ttl: float = 300.0
    rpc_url: Optional[str] = None
    default_language: str = 'typescript'

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.rpc_url and self.network not in FULLNODE_URLS:
            raise ValueError(f"Unknown network '{self.network}' and no rpc_url given")
        if self.object_id_length <= len(self.address_prefix):
            raise ValueError("object_id_length must be longer than the address prefix")
        if self.module_cache_ttl < 0:
            raise ValueError("module_cache_ttl must be non-negative")
        if self.default_language not in SUPPORTED_LANGUAGES:
            raise ValueError(f"default_language must be one of {', '.join(SUPPORTED_LANGUAGES)}")

    def fullnode_url(self) -> str:
        """Return the JSON-RPC endpoint for the configured network."""
        return self.rpc_url or FULLNODE_URLS[self.network]

    @classmethod
    def from_env(cls) -> 'BuilderConfig':
        """Build a config from PTB_* environment variables, falling back to defaults."""
        defaults = cls()

        def _env(name: str) -> str:
            return os.environ.get(name, '').strip()

        ttl = _env('PTB_MODULE_CACHE_TTL')
        id_length = _env('PTB_OBJECT_ID_LENGTH')
        return cls(
            network=_env('PTB_NETWORK') or defaults.network,
            address_prefix=_env('PTB_ADDRESS_PREFIX') or defaults.address_prefix,
            object_id_length=int(id_length) if id_length else defaults.object_id_length,
            module_cache_ttl=float(ttl) if ttl else defaults.module_cache_ttl,
            rpc_url=_env('PTB_RPC_URL') or None,
            default_language=_env('PTB_CODE_LANGUAGE') or defaults.default_language,
        )
