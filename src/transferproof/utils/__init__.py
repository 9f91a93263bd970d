"""Utility modules for transferproof."""

from transferproof.utils.gas import (
    apply_gas_buffer,
    check_fee_coverage,
    format_native,
    get_network_gas_token,
)

__all__ = [
    "apply_gas_buffer",
    "check_fee_coverage",
    "format_native",
    "get_network_gas_token",
]
