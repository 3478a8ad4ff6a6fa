"""
Typed Transaction Envelope
^^^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

[EIP-2718] wraps every non-legacy transaction as `type_byte ‖ payload`, where
the payload is the RLP list of the transaction's fields. Legacy transactions
are the bare list.

The unsigned encoding produced here is also the exact preimage that gets
hashed for signing. For [EIP-155] legacy transactions it carries the chain id
followed by two zeros after the regular fields.

[EIP-2718]: https://eips.ethereum.org/EIPS/eip-2718
[EIP-155]: https://eips.ethereum.org/EIPS/eip-155
"""

from typing import Tuple

from ethereum_types.bytes import Bytes
from ethereum_types.numeric import U64, Uint

from . import rlp
from .exceptions import (
    InputTooShort,
    ListLengthMismatch,
    RLPDecodingError,
    UnexpectedString,
)
from .registry import TransactionType, transaction_type_of
from .signature import Signature, rlp_vrs_len
from .transactions import (
    LegacyTransaction,
    Transaction,
    decode_field_values,
    encode_fields,
    fields_len,
)

EIP155_SUFFIX_ZEROS = rlp.encode(Uint(0)) + rlp.encode(Uint(0))


def type_prefix(tx: Transaction) -> Bytes:
    """
    The type byte of `tx`, or nothing for legacy transactions.
    """
    tx_type = transaction_type_of(tx).tx_type
    if tx_type is None:
        return b""
    return bytes([tx_type])


def _eip155_suffix(tx: Transaction) -> Bytes:
    if isinstance(tx, LegacyTransaction) and tx.chain_id is not None:
        return rlp.encode(tx.chain_id) + EIP155_SUFFIX_ZEROS
    return b""


def payload_length(tx: Transaction) -> int:
    """
    Length of the unsigned list payload: the fields, plus the [EIP-155]
    suffix for chain-bound legacy transactions.

    [EIP-155]: https://eips.ethereum.org/EIPS/eip-155
    """
    return fields_len(tx) + len(_eip155_suffix(tx))


def length(tx: Transaction) -> int:
    """
    Length of the unsigned RLP list, header included, type byte excluded.
    """
    payload = payload_length(tx)
    return rlp.length_of_length(payload) + payload


def encode(tx: Transaction) -> Bytes:
    """
    Encodes an unsigned transaction: its type byte followed by the RLP list
    of its fields.

    Parameters
    ----------
    tx :
        Transaction to encode.

    Returns
    -------
    encoded : `ethereum_types.bytes.Bytes`
        `type_byte ‖ rlp_list_header ‖ fields`.
    """
    header = rlp.Header(is_list=True, payload_length=payload_length(tx))
    return (
        type_prefix(tx)
        + rlp.encode_header(header)
        + encode_fields(tx)
        + _eip155_suffix(tx)
    )


def decode(
    transaction_type: TransactionType, buffer: Bytes
) -> Tuple[Transaction, Bytes]:
    """
    Decodes an unsigned transaction whose type byte has already been
    consumed.

    Parameters
    ----------
    transaction_type :
        The variant selected by the type byte.
    buffer :
        Bytes starting with the RLP list header.

    Returns
    -------
    tx : `Transaction`
        The decoded transaction.
    rest : `ethereum_types.bytes.Bytes`
        The bytes following the list.
    """
    header, rest = rlp.decode_header(buffer)
    if not header.is_list:
        raise UnexpectedString(
            f"`{transaction_type.name}` transaction must be a list"
        )
    if header.payload_length > len(rest):
        raise InputTooShort(
            f"list announces {header.payload_length} byte(s), "
            f"only {len(rest)} remain"
        )

    payload = rest[: header.payload_length]
    rest = rest[header.payload_length :]

    tx_class = transaction_type.transaction_class
    values, payload = decode_field_values(tx_class, payload)

    if tx_class is LegacyTransaction:
        values["chain_id"] = None
        if payload:
            values["chain_id"], payload = rlp.decode_uint(U64, payload)
            for _ in range(2):
                zero, payload = rlp.decode_uint(Uint, payload)
                if zero != 0:
                    raise RLPDecodingError(
                        "chain id must be followed by two zeros"
                    )

    if payload:
        raise ListLengthMismatch(
            f"`{transaction_type.name}` transaction left {len(payload)} "
            "byte(s) unconsumed"
        )

    return tx_class(**values), rest


def payload_len_with_signature_without_header(
    tx: Transaction, signature: Signature
) -> int:
    """
    Output the length of the signed transaction encoding, _without_ a RLP
    string header.

    This is the length of `type_byte ‖ rlp_list(fields ‖ v, r, s)`, the form
    that gets hashed and gossiped.
    """
    payload = fields_len(tx) + rlp_vrs_len(signature)
    # 'transaction type byte length' + 'header length' + 'payload length'
    return (
        len(type_prefix(tx)) + rlp.length_of_length(payload) + payload
    )


def payload_len_with_signature(tx: Transaction, signature: Signature) -> int:
    """
    Output the length of the signed transaction encoding as an item of a
    block's transaction list.

    Typed transactions are wrapped in a RLP string header there; legacy
    transactions are the list itself.
    """
    length_without_header = payload_len_with_signature_without_header(
        tx, signature
    )
    if isinstance(tx, LegacyTransaction):
        return length_without_header
    return rlp.length_of_length(length_without_header) + length_without_header
