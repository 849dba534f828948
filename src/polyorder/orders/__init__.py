"""Order construction and signing engine."""

from polyorder.orders.assembler import AssemblerConfig, BookSource, OrderAssembler
from polyorder.orders.identity import ContractConfig, OrderBuilder, contract_config, generate_salt
from polyorder.orders.numeric import normalize_price, normalize_size, to_base_units
from polyorder.orders.signer import address_for_key, sign_order, sign_typed_data

__all__ = [
    "AssemblerConfig",
    "BookSource",
    "OrderAssembler",
    "ContractConfig",
    "OrderBuilder",
    "contract_config",
    "generate_salt",
    "normalize_price",
    "normalize_size",
    "to_base_units",
    "address_for_key",
    "sign_order",
    "sign_typed_data",
]
