"""
Decryption oracle module.

Provides the request registry, the block clock used for request expiry,
the FIFO decryption gateway and a bounded polling helper.
"""
from .clock import BLOCK_INTERVAL_S, BlockClock, ManualClock
from .gateway import (
    GATEWAY_INTERVAL_MS,
    GATEWAY_TIMEOUT,
    DecryptCallback,
    Gateway,
    GatewayTask,
)
from .polling import wait_for_decryption
from .request import (
    NO_PENDING_REQUEST,
    DecryptionRequest,
    PendingRequest,
    RequestRegistry,
)

__all__ = [
    "BLOCK_INTERVAL_S",
    "BlockClock",
    "ManualClock",
    "GATEWAY_INTERVAL_MS",
    "GATEWAY_TIMEOUT",
    "DecryptCallback",
    "Gateway",
    "GatewayTask",
    "wait_for_decryption",
    "NO_PENDING_REQUEST",
    "DecryptionRequest",
    "PendingRequest",
    "RequestRegistry",
]
