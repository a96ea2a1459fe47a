"""
Deployment configuration.

Everything that must agree between sender and recipient lives here: the
destination chain, the inbox contract, the protocol context label and the
cipher strategy. Values come from STEALTHPAY_* environment variables.

    STEALTHPAY_CHAIN_ID           destination chain id         (270)
    STEALTHPAY_CONTRACT_ADDRESS   inbox contract on that chain (zero address)
    STEALTHPAY_CONTEXT            protocol context label       (private-pay:v1)
    STEALTHPAY_CIPHER             aes-gcm | chacha20-poly1305 | keystream
    STEALTHPAY_SCAN_WINDOW        newest records per scan      (20)
    STEALTHPAY_SCAN_WORKERS       parallel ciphertext fetches  (4)
    STEALTHPAY_LOG_LEVEL          logging level name           (INFO)
"""

import os
import logging
from dataclasses import dataclass

from .aad import DEFAULT_CONTEXT_LABEL, DepositContext
from .ciphers import CIPHERS, DEFAULT_CIPHER, get_cipher
from .engine import EncryptionEngine
from .errors import ConfigError
from .hexutil import ZERO_ADDRESS, parse_address, to_hex

DEFAULT_CHAIN_ID     = 270
DEFAULT_SCAN_WINDOW  = 20
DEFAULT_SCAN_WORKERS = 4


@dataclass(frozen=True)
class ProtocolConfig:
    chain_id:         int = DEFAULT_CHAIN_ID
    contract_address: str = to_hex(ZERO_ADDRESS)
    context_label:    str = DEFAULT_CONTEXT_LABEL
    cipher:           str = DEFAULT_CIPHER
    scan_window:      int = DEFAULT_SCAN_WINDOW
    scan_workers:     int = DEFAULT_SCAN_WORKERS
    log_level:        str = "INFO"

    def __post_init__(self):
        if self.chain_id < 0:
            raise ConfigError("chain_id must be non-negative.")
        try:
            parse_address(self.contract_address, "contract address")
        except (TypeError, ValueError) as exc:
            raise ConfigError(str(exc)) from exc
        if self.cipher not in CIPHERS:
            raise ConfigError(f"Unknown cipher {self.cipher!r}.")
        if self.scan_window < 1 or self.scan_workers < 1:
            raise ConfigError("scan_window and scan_workers must be at least 1.")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ConfigError(f"Unknown log level {self.log_level!r}.")

    @classmethod
    def from_env(cls, environ=None) -> "ProtocolConfig":
        env = os.environ if environ is None else environ
        return cls(
            chain_id=_int(env, "STEALTHPAY_CHAIN_ID", DEFAULT_CHAIN_ID),
            contract_address=env.get("STEALTHPAY_CONTRACT_ADDRESS", to_hex(ZERO_ADDRESS)),
            context_label=env.get("STEALTHPAY_CONTEXT", DEFAULT_CONTEXT_LABEL),
            cipher=env.get("STEALTHPAY_CIPHER", DEFAULT_CIPHER),
            scan_window=_int(env, "STEALTHPAY_SCAN_WINDOW", DEFAULT_SCAN_WINDOW),
            scan_workers=_int(env, "STEALTHPAY_SCAN_WORKERS", DEFAULT_SCAN_WORKERS),
            log_level=env.get("STEALTHPAY_LOG_LEVEL", "INFO"),
        )

    def deposit_context(self) -> DepositContext:
        return DepositContext.create(self.chain_id, self.contract_address,
                                     self.context_label)

    def engine(self) -> EncryptionEngine:
        return EncryptionEngine(get_cipher(self.cipher))

    def configure_logging(self):
        logging.basicConfig(level=self.log_level.upper(),
                            format="%(asctime)s %(name)s %(levelname)s %(message)s")


def _int(env, name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw, 0)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}.") from None
