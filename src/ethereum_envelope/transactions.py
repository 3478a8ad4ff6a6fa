"""
Transactions are atomic units of work created externally to Ethereum and
submitted to be executed. If Ethereum is viewed as a state machine,
transactions are the events that move between states.

This module defines the unsigned transaction variants and their field
schemas. The wire order of a variant's fields is the declaration order of
its dataclass fields; fields marked with `wire=False` metadata are carried in
memory only.
"""

from dataclasses import Field, dataclass, field, fields
from typing import (
    Any,
    Dict,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
    get_type_hints,
)

from ethereum_types.bytes import Bytes, FixedBytes
from ethereum_types.frozen import modify, slotted_freezable
from ethereum_types.numeric import U64, U256, FixedUnsigned

from . import rlp
from .base_types import (
    U128,
    AccessList,
    Address,
    ChainId,
    To,
)
from .exceptions import GasPriceOverflowError


@slotted_freezable
@dataclass
class LegacyTransaction:
    """
    Untyped transaction. When `chain_id` is set the signature is bound to it
    as described in [EIP-155]; the chain id itself never appears among the
    encoded fields.

    [EIP-155]: https://eips.ethereum.org/EIPS/eip-155
    """

    nonce: U64
    gas_price: U128
    gas: U64
    to: To
    value: U256
    data: Bytes
    chain_id: Optional[ChainId] = field(metadata={"wire": False})


@slotted_freezable
@dataclass
class AccessListTransaction:
    """
    The transaction type added in EIP-2930 to support access lists.
    """

    chain_id: ChainId
    nonce: U64
    gas_price: U128
    gas: U64
    to: To
    value: U256
    data: Bytes
    access_list: AccessList


@slotted_freezable
@dataclass
class FeeMarketTransaction:
    """
    The transaction type added in EIP-1559.
    """

    chain_id: ChainId
    nonce: U64
    max_priority_fee_per_gas: U128
    max_fee_per_gas: U128
    gas: U64
    to: To
    value: U256
    data: Bytes
    access_list: AccessList


Transaction = Union[
    LegacyTransaction,
    AccessListTransaction,
    FeeMarketTransaction,
]

TransactionT = TypeVar("TransactionT", bound=Transaction)


#
# Field schema
#


def wire_fields(tx_class: type) -> Tuple[Field, ...]:
    """
    The fields of `tx_class` that are serialized, in wire order.
    """
    return tuple(f for f in fields(tx_class) if f.metadata.get("wire", True))


def fields_len(tx: Transaction) -> int:
    """
    Outputs the length of the transaction's fields, without a RLP header.

    Parameters
    ----------
    tx :
        Transaction of interest.

    Returns
    -------
    length : `int`
        Sum of the encoded lengths of every wire field.
    """
    return sum(
        rlp.encoded_length(getattr(tx, f.name)) for f in wire_fields(type(tx))
    )


def encode_fields(tx: Transaction) -> Bytes:
    """
    Encodes only the transaction's fields, without a RLP header.

    Parameters
    ----------
    tx :
        Transaction to encode.

    Returns
    -------
    encoded : `ethereum_types.bytes.Bytes`
        The concatenated encodings of the wire fields, in wire order.
    """
    return b"".join(
        rlp.encode(getattr(tx, f.name)) for f in wire_fields(type(tx))
    )


def decode_field_values(
    tx_class: type, buffer: Bytes
) -> Tuple[Dict[str, Any], Bytes]:
    """
    Decodes the wire fields of `tx_class` from the start of `buffer`.

    NOTE: This assumes a RLP list header has already been decoded, and _just_
    decodes the fields, in wire order.

    Returns
    -------
    values : `Dict[str, Any]`
        Decoded values keyed by field name.
    rest : `ethereum_types.bytes.Bytes`
        The bytes following the last field.
    """
    hints = get_type_hints(tx_class)
    values: Dict[str, Any] = {}
    for wire_field in wire_fields(tx_class):
        values[wire_field.name], buffer = rlp.decode_item_to(
            hints[wire_field.name], buffer
        )
    return values, buffer


def decode_fields(
    tx_class: Type[TransactionT], buffer: Bytes, **extra: Any
) -> Tuple[TransactionT, Bytes]:
    """
    Decodes a transaction of type `tx_class` from its fields.

    The record is only built once every field decoded successfully. Fields
    that are not on the wire are taken from `extra`.

    Parameters
    ----------
    tx_class :
        The transaction variant to decode.
    buffer :
        Bytes starting with the first field.
    extra :
        Values of the fields marked `wire=False`.

    Returns
    -------
    tx : `Transaction`
        The decoded transaction.
    rest : `ethereum_types.bytes.Bytes`
        The bytes following the last field.
    """
    values, rest = decode_field_values(tx_class, buffer)
    return tx_class(**values, **extra), rest


#
# In-memory footprint
#


def access_list_size(access_list: AccessList) -> int:
    """
    Heuristic for the in-memory size of an access list, in bytes.
    """
    size = 0
    for access in access_list:
        size += Address.LENGTH
        size += len(access.slots) * 32
    return size


def transaction_size(tx: Transaction) -> int:
    """
    Heuristic for the in-memory size of a transaction, in bytes.

    Used for telemetry only, it has no bearing on the encoding.
    """
    hints = get_type_hints(type(tx))
    size = 0
    for tx_field in fields(tx):
        size += _value_size(hints[tx_field.name], getattr(tx, tx_field.name))
    return size


def _value_size(annotation: object, value: Any) -> int:
    if annotation == To:
        return 1 + Address.LENGTH
    elif annotation == AccessList:
        return access_list_size(value)
    elif annotation == Optional[ChainId]:
        return 8
    elif isinstance(annotation, type) and issubclass(annotation, FixedBytes):
        return annotation.LENGTH
    elif isinstance(annotation, type) and issubclass(annotation, FixedUnsigned):
        return (int(annotation.MAX_VALUE).bit_length() + 7) // 8
    else:
        return len(value)


#
# Accessors
#


def transaction_chain_id(tx: Transaction) -> Optional[ChainId]:
    """
    Chain the transaction is bound to, if any.
    """
    return tx.chain_id


def transaction_gas_price(tx: Transaction) -> Optional[U256]:
    """
    The fixed gas price of the transaction, or `None` for fee market
    transactions, whose price is only known relative to a block.
    """
    if isinstance(tx, FeeMarketTransaction):
        return None
    return U256(tx.gas_price)


def _set(tx: TransactionT, name: str, value: Any) -> TransactionT:
    def apply(new_tx: Any) -> None:
        setattr(new_tx, name, value)

    return modify(tx, apply)


def set_chain_id(tx: TransactionT, chain_id: Optional[ChainId]) -> TransactionT:
    """
    Copy of `tx` bound to `chain_id`. Only legacy transactions accept `None`.
    """
    if chain_id is None and not isinstance(tx, LegacyTransaction):
        raise TypeError(f"`{type(tx).__name__}` requires a chain id")
    return _set(tx, "chain_id", chain_id)


def set_nonce(tx: TransactionT, nonce: U64) -> TransactionT:
    """
    Copy of `tx` with `nonce`.
    """
    return _set(tx, "nonce", nonce)


def set_gas_limit(tx: TransactionT, gas: U64) -> TransactionT:
    """
    Copy of `tx` with the gas limit `gas`.
    """
    return _set(tx, "gas", gas)


def set_to(tx: TransactionT, to: To) -> TransactionT:
    """
    Copy of `tx` sent to `to`.
    """
    return _set(tx, "to", to)


def set_value(tx: TransactionT, value: U256) -> TransactionT:
    """
    Copy of `tx` transferring `value`.
    """
    return _set(tx, "value", value)


def set_input(tx: TransactionT, data: Bytes) -> TransactionT:
    """
    Copy of `tx` with the call data or init code `data`.
    """
    return _set(tx, "data", Bytes(data))


def set_access_list(tx: TransactionT, access_list: AccessList) -> TransactionT:
    """
    Copy of `tx` declaring `access_list`.
    """
    if isinstance(tx, LegacyTransaction):
        raise TypeError("legacy transactions have no access list")
    return _set(tx, "access_list", tuple(access_list))


def set_gas_price(tx: TransactionT, gas_price: U256) -> TransactionT:
    """
    Copy of `tx` paying `gas_price` per unit of gas.

    For fee market transactions this sets `max_fee_per_gas`, the highest
    price the sender accepts.

    Parameters
    ----------
    tx :
        Transaction to update.
    gas_price :
        The new price.

    Returns
    -------
    tx : `Transaction`
        The updated copy.

    Raises
    ------
    GasPriceOverflowError
        When `gas_price` does not fit in 128 bits.
    """
    if int(gas_price) > int(U128.MAX_VALUE):
        raise GasPriceOverflowError(int(gas_price))

    price = U128(int(gas_price))
    if isinstance(tx, FeeMarketTransaction):
        return _set(tx, "max_fee_per_gas", price)
    return _set(tx, "gas_price", price)

