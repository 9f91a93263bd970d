"""Fee and gas utilities for transferproof."""

import math
from decimal import Decimal

from transferproof.core.logging import get_logger
from transferproof.core.networks import NETWORKS
from transferproof.core.types import Network

logger = get_logger("utils.gas")

WEI_PER_NATIVE = Decimal(10) ** 18


def get_network_gas_token(network: Network) -> str:
    """Get the native gas token symbol for a network."""
    info = NETWORKS.get(network)
    if info is None:
        return "Unknown"
    return info.native_symbol


def format_native(amount_wei: int) -> Decimal:
    """Convert a wei amount into whole native units."""
    return Decimal(amount_wei) / WEI_PER_NATIVE


def apply_gas_buffer(estimate: int, buffer: float = 0.2) -> int:
    """
    Add a safety margin to a gas estimate.

    Args:
        estimate: Gas units returned by eth_estimateGas
        buffer: Fractional margin, 0.2 adds 20%

    Returns:
        Buffered gas limit, floored to an integer
    """
    if estimate < 0:
        raise ValueError("Gas estimate must not be negative")
    if buffer < 0:
        raise ValueError("Gas buffer must not be negative")
    return math.floor(estimate * (1 + buffer))


def check_fee_coverage(
    network: Network,
    balance_wei: int,
    fee_wei: int,
    operation: str = "attestation request",
) -> tuple[bool, str]:
    """
    Check if a balance covers a fee.

    Args:
        network: The Flare network
        balance_wei: Current native balance
        fee_wei: Fee about to be attached
        operation: Description of the operation (for error message)

    Returns:
        Tuple of (is_covered, error_message)
        error_message is empty string if covered
    """
    token = get_network_gas_token(network)

    if balance_wei < fee_wei:
        error_msg = (
            f"Insufficient balance for {operation} on {network.value}. "
            f"Required: {format_native(fee_wei)} {token}, "
            f"Available: {format_native(balance_wei)} {token}"
        )
        logger.warning(error_msg)
        return False, error_msg

    logger.debug(
        f"Fee check passed: {format_native(balance_wei)} {token} >= "
        f"{format_native(fee_wei)} {token} on {network.value}"
    )
    return True, ""
