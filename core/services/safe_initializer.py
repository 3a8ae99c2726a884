from __future__ import annotations

import logging

from eth_abi import encode
from eth_abi.exceptions import EncodingError
from eth_utils import function_signature_to_4byte_selector

from core.domain.entities.safe_entities import WalletTemplateConfig
from core.services.exceptions import BadParamsError

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
THRESHOLD = 1

SETUP_SIGNATURE = "setup(address[],uint256,address,bytes,address,address,uint256,address)"
SETUP_SELECTOR = function_signature_to_4byte_selector(SETUP_SIGNATURE)
SETUP_ARG_TYPES = [
    "address[]",  # owners
    "uint256",    # threshold
    "address",    # to
    "bytes",      # data
    "address",    # fallbackHandler
    "address",    # paymentToken
    "uint256",    # payment
    "address",    # paymentReceiver
]


def build_initializer(owner: str, config: WalletTemplateConfig) -> bytes:
    """
    Call data for `Safe.setup` with `owner` as the single owner.

    Everything except the owner and the fallback handler is fixed: threshold 1,
    no setup delegate call, no payment.
    """
    args = [
        [owner],
        THRESHOLD,
        ZERO_ADDRESS,
        b"",
        config.fallback_handler,
        ZERO_ADDRESS,
        0,
        ZERO_ADDRESS,
    ]
    try:
        encoded = SETUP_SELECTOR + encode(SETUP_ARG_TYPES, args)
    except EncodingError as exc:
        raise BadParamsError(f"setup encoding failed: {exc}") from exc

    logger.debug("Encoded initializer: 0x%s", encoded.hex())
    return encoded
