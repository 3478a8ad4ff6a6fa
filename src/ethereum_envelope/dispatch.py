"""
Transaction Dispatch
^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Routes raw transaction bytes to the decoder of the right variant, and back.

Two byte forms exist for a signed transaction:

- the [EIP-2718] *raw* form, `type_byte ‖ rlp_list`, or the bare list for
  legacy transactions. This is what gets hashed.
- the *network* form used as an item of a block's or a message's transaction
  list, where typed transactions are additionally wrapped in an RLP string.

The first byte of the raw form decides the variant: anything in
`[0xc0, 0xff]` opens an RLP list, so the transaction is legacy; anything
else is a type byte.

[EIP-2718]: https://eips.ethereum.org/EIPS/eip-2718
"""

from typing import Union

from ethereum_types.bytes import Bytes

from . import envelope, registry, rlp
from .config import DEFAULT_CONFIG, CodecConfig
from .exceptions import (
    EnvelopeException,
    InputTooShort,
    InvalidChainIdError,
    UnexpectedLength,
    UnexpectedList,
    UnsupportedTransactionType,
)
from .logger import setup_logger
from .signing import SignedTransaction, decode_signed, encode_sealed
from .transactions import (
    LegacyTransaction,
    Transaction,
    transaction_chain_id,
)

logger = setup_logger(__name__)


def _select_type(
    tx_type: int, config: CodecConfig
) -> registry.TransactionType:
    transaction_type = registry.lookup_transaction_type(tx_type)
    if not config.is_enabled(tx_type):
        raise UnsupportedTransactionType(tx_type)
    return transaction_type


def _check_chain(signed: SignedTransaction, config: CodecConfig) -> None:
    chain_id = transaction_chain_id(signed.transaction)
    if chain_id is not None and int(chain_id) != config.chain_id:
        raise InvalidChainIdError(
            f"transaction for chain {int(chain_id)}, "
            f"expected {config.chain_id}"
        )


def decode_transaction(
    raw: Bytes, config: CodecConfig = DEFAULT_CONFIG
) -> SignedTransaction:
    """
    Decodes a signed transaction from its raw [EIP-2718] form.

    Parameters
    ----------
    raw :
        The complete encoding, nothing may follow it.
    config :
        Decides which typed variants are accepted, and the chain the
        transaction must be bound to. Unprotected legacy transactions are
        bound to no chain and always pass.

    Returns
    -------
    signed : `ethereum_envelope.signing.SignedTransaction`
        The decoded transaction, with its hash.

    [EIP-2718]: https://eips.ethereum.org/EIPS/eip-2718
    """
    try:
        if len(raw) == 0:
            raise InputTooShort("cannot decode transaction from empty input")

        if raw[0] >= rlp.LIST_SHORT_OFFSET:
            transaction_type, body = registry.LEGACY, raw
        else:
            transaction_type, body = _select_type(raw[0], config), raw[1:]

        signed, rest = decode_signed(transaction_type, body)
        if rest:
            raise UnexpectedLength(
                f"{len(rest)} trailing byte(s) after transaction"
            )
        _check_chain(signed, config)
    except EnvelopeException as e:
        logger.debug("rejected transaction %s: %s", raw[:8].hex(), e)
        raise

    return signed


def encode_transaction(signed: SignedTransaction) -> Bytes:
    """
    The raw [EIP-2718] form of `signed`.

    [EIP-2718]: https://eips.ethereum.org/EIPS/eip-2718
    """
    return encode_sealed(signed.transaction, signed.signature)


def encode_envelope(signed: SignedTransaction) -> Bytes:
    """
    Encodes `signed` as an item of a transaction list. Typed transactions
    are wrapped in an RLP string; legacy transactions are the list itself.

    Parameters
    ----------
    signed :
        Transaction to encode.

    Returns
    -------
    encoded : `ethereum_types.bytes.Bytes`
        The network form of the transaction.
    """
    raw = encode_transaction(signed)
    if isinstance(signed.transaction, LegacyTransaction):
        return raw
    return rlp.encode_bytes(raw)


def decode_envelope(
    buffer: Bytes, config: CodecConfig = DEFAULT_CONFIG
) -> SignedTransaction:
    """
    Decodes a transaction from its network form.

    Parameters
    ----------
    buffer :
        The complete item, nothing may follow it.
    config :
        Decides which typed variants are accepted.

    Returns
    -------
    signed : `ethereum_envelope.signing.SignedTransaction`
        The decoded transaction, with its hash.
    """
    header, _ = rlp.decode_header(buffer)
    if header.is_list:
        return decode_transaction(buffer, config)

    raw, rest = rlp.decode_bytes(buffer)
    if rest:
        raise UnexpectedLength(f"{len(rest)} trailing byte(s) after envelope")
    if len(raw) == 0:
        raise InputTooShort("empty transaction envelope")
    if raw[0] >= rlp.LIST_SHORT_OFFSET:
        raise UnexpectedList("legacy transactions must not be wrapped")
    return decode_transaction(raw, config)


def envelope_length(signed: SignedTransaction) -> int:
    """
    Length of `encode_envelope(signed)`, computed without encoding.
    """
    return envelope.payload_len_with_signature(
        signed.transaction, signed.signature
    )


def transaction_type_of(
    tx: Union[Transaction, SignedTransaction]
) -> registry.TransactionType:
    """
    The variant of an unsigned or a signed transaction.
    """
    if isinstance(tx, SignedTransaction):
        tx = tx.transaction
    return registry.transaction_type_of(tx)
