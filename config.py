import os
from dotenv import load_dotenv
from dataclasses import dataclass
from functools import lru_cache

from eth_utils import is_hex_address
from web3 import Web3

from core.domain.entities.safe_entities import WalletTemplateConfig

load_dotenv()


class ConfigError(RuntimeError):
    """Missing or malformed process configuration; fatal at startup."""


@dataclass(frozen=True)
class Settings:
    # signing / chain
    RPC_URL: str
    BACKEND_PRIVATE_KEY: str
    RPC_TIMEOUT_SEC: float

    # Safe template
    FALLBACK_ADDRESS: str
    MASTER_COPY_CONTRACT_ADDRESS: str
    PROXY_FACTORY_CONTRACT_ADDRESS: str
    SALT_NONCE: str

    # http server
    ADDRESS: str = "0.0.0.0"
    PORT: int = 8080

    # generic
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"


def _parse_float(name: str, raw: str, default: float) -> float:
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc


def _parse_port(raw: str) -> int:
    if not raw:
        return 8080
    if not raw.isdigit() or not 0 < int(raw) < 65536:
        raise ConfigError(f"PORT must be an integer in 1..65535, got {raw!r}")
    return int(raw)


@lru_cache()
def get_settings() -> Settings:
    return Settings(
        RPC_URL=os.getenv("RPC_URL", ""),
        BACKEND_PRIVATE_KEY=os.getenv("BACKEND_PRIVATE_KEY", ""),
        RPC_TIMEOUT_SEC=_parse_float("RPC_TIMEOUT_SEC", os.getenv("RPC_TIMEOUT_SEC", ""), 30.0),

        FALLBACK_ADDRESS=os.getenv("FALLBACK_ADDRESS", ""),
        MASTER_COPY_CONTRACT_ADDRESS=os.getenv("MASTER_COPY_CONTRACT_ADDRESS", ""),
        PROXY_FACTORY_CONTRACT_ADDRESS=os.getenv("PROXY_FACTORY_CONTRACT_ADDRESS", ""),
        SALT_NONCE=os.getenv("SALT_NONCE", ""),

        ADDRESS=os.getenv("ADDRESS", "0.0.0.0"),
        PORT=_parse_port(os.getenv("PORT", "")),

        ENV=os.getenv("ENV", "dev"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
    )


def _require(name: str, value: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ConfigError(f"{name} must be set")
    return value


def _require_address(name: str, value: str) -> str:
    value = _require(name, value)
    if not is_hex_address(value):
        raise ConfigError(f"{name} is not a valid address: {value!r}")
    return Web3.to_checksum_address(value)


def parse_salt_nonce(value: str) -> bytes:
    """
    Hex string (0x optional) read as a big-endian uint256, so at most 32 bytes.
    An odd number of digits is left-padded with one zero.
    """
    raw = _require("SALT_NONCE", value)
    if raw[:2].lower() == "0x":
        raw = raw[2:]
    if len(raw) % 2:
        raw = "0" + raw
    try:
        nonce = bytes.fromhex(raw)
    except ValueError as exc:
        raise ConfigError(f"SALT_NONCE is not hex: {value!r}") from exc
    if not nonce or len(nonce) > 32:
        raise ConfigError(f"SALT_NONCE must be 1..32 bytes, got {len(nonce)}")
    return nonce


def load_wallet_template(s: Settings) -> WalletTemplateConfig:
    return WalletTemplateConfig(
        fallback_handler=_require_address("FALLBACK_ADDRESS", s.FALLBACK_ADDRESS),
        master_copy=_require_address("MASTER_COPY_CONTRACT_ADDRESS", s.MASTER_COPY_CONTRACT_ADDRESS),
        proxy_factory=_require_address("PROXY_FACTORY_CONTRACT_ADDRESS", s.PROXY_FACTORY_CONTRACT_ADDRESS),
        salt_nonce=parse_salt_nonce(s.SALT_NONCE),
    )
