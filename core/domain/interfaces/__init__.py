from .chain_gateway_interface import SafeChainGatewayInterface
from .safe_interface import SafeInterface

__all__ = [
    "SafeChainGatewayInterface",
    "SafeInterface",
]
