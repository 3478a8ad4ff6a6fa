"""
Signing and Sealing
^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

An unsigned transaction becomes a `SignedTransaction` exactly once: its
signing preimage is hashed, the digest is signed, and the transaction, the
signature and the hash of the sealed encoding are frozen together.

Two different hashes are involved and must not be confused:

- the *signing hash* is `keccak256` of the unsigned encoding and is what the
  signer signs;
- the *transaction hash* is `keccak256` of the sealed encoding, signature
  included, and identifies the transaction.
"""

from dataclasses import dataclass
from typing import Tuple

from ethereum_types.bytes import Bytes, Bytes32
from ethereum_types.frozen import slotted_freezable
from ethereum_types.numeric import U256

from . import envelope, rlp
from .base_types import Address
from .crypto.elliptic_curve import SECP256K1N, secp256k1_recover, secp256k1_sign
from .crypto.hash import Hash32, keccak256
from .exceptions import (
    InvalidChainIdError,
    InvalidSignatureError,
    ListLengthMismatch,
    UnexpectedString,
)
from .registry import TransactionType
from .signature import (
    Signature,
    decode_legacy_vrs,
    decode_vrs,
    encode_vrs,
    legacy_v,
    rlp_vrs_len,
    signature_chain_id,
    with_parity_bool,
    y_parity,
)
from .transactions import (
    LegacyTransaction,
    Transaction,
    decode_field_values,
    encode_fields,
    fields_len,
)


@slotted_freezable
@dataclass
class SignedTransaction:
    """
    A transaction sealed with its signature and the hash of the sealed
    encoding.
    """

    transaction: Transaction
    signature: Signature
    hash: Hash32


def signing_preimage(tx: Transaction) -> Bytes:
    """
    The exact bytes that are hashed to produce the digest a signer signs.

    For typed transactions this is `type_byte ‖ rlp(fields)`. Legacy
    transactions hash `rlp(fields)`, extended with `chain_id, 0, 0` when they
    are bound to a chain.
    """
    return envelope.encode(tx)


def signing_hash(tx: Transaction) -> Hash32:
    """
    Compute the hash of a transaction used in its signature.

    Parameters
    ----------
    tx :
        Transaction of interest.

    Returns
    -------
    hash : `ethereum_envelope.crypto.hash.Hash32`
        Hash of the signing preimage.
    """
    return keccak256(signing_preimage(tx))


def normalize_signature(tx: Transaction, signature: Signature) -> Signature:
    """
    The signature as it is stored alongside `tx`.

    Typed transactions keep only the y-parity, whatever convention `v` came
    in. Legacy transactions get `v` re-derived from the parity and their own
    chain id.
    """
    if isinstance(tx, LegacyTransaction):
        return Signature(
            r=signature.r,
            s=signature.s,
            v=legacy_v(y_parity(signature), tx.chain_id),
        )
    return with_parity_bool(signature)


def encode_with_signature(tx: Transaction, signature: Signature) -> Bytes:
    """
    Encodes the transaction's fields followed by the signature in a single
    RLP list, without the type byte.

    Parameters
    ----------
    tx :
        Transaction to encode.
    signature :
        Signature to append, written as is.

    Returns
    -------
    encoded : `ethereum_types.bytes.Bytes`
        `rlp_list_header ‖ fields ‖ v ‖ r ‖ s`.
    """
    payload_length = fields_len(tx) + rlp_vrs_len(signature)
    header = rlp.Header(is_list=True, payload_length=payload_length)
    return rlp.encode_header(header) + encode_fields(tx) + encode_vrs(signature)


def encode_sealed(tx: Transaction, signature: Signature) -> Bytes:
    """
    The full sealed wire form, `type_byte ‖ encode_with_signature(...)`.
    """
    return envelope.type_prefix(tx) + encode_with_signature(tx, signature)


def into_signed(tx: Transaction, signature: Signature) -> SignedTransaction:
    """
    Seal `tx` with `signature`.

    The signature is normalized first (see :func:`normalize_signature`); a
    typed transaction given a signature with a legacy `v` has it converted,
    never rejected. The hash is taken over the normalized sealed encoding.

    Parameters
    ----------
    tx :
        The unsigned transaction.
    signature :
        A signature over `signing_hash(tx)`.

    Returns
    -------
    signed : `SignedTransaction`
        The immutable sealed transaction.
    """
    signature = normalize_signature(tx, signature)
    tx_hash = keccak256(encode_sealed(tx, signature))
    return SignedTransaction(transaction=tx, signature=signature, hash=tx_hash)


def decode_signed(
    transaction_type: TransactionType, buffer: Bytes
) -> Tuple[SignedTransaction, Bytes]:
    """
    Decodes a signed transaction whose type byte has already been consumed.

    Parameters
    ----------
    transaction_type :
        The variant selected by the type byte.
    buffer :
        Bytes starting with the RLP list header.

    Returns
    -------
    signed : `SignedTransaction`
        The sealed transaction, with its hash.
    rest : `ethereum_types.bytes.Bytes`
        The bytes following the list.
    """
    header, rest = rlp.decode_header(buffer)
    if not header.is_list:
        raise UnexpectedString(
            f"signed `{transaction_type.name}` transaction must be a list"
        )

    payload = rest[: header.payload_length]
    rest = rest[header.payload_length :]

    tx_class = transaction_type.transaction_class
    values, payload = decode_field_values(tx_class, payload)

    if tx_class is LegacyTransaction:
        signature, payload = decode_legacy_vrs(payload)
        values["chain_id"] = signature_chain_id(signature)
    else:
        signature, payload = decode_vrs(payload)

    if payload:
        raise ListLengthMismatch(
            f"signed `{transaction_type.name}` transaction left "
            f"{len(payload)} byte(s) unconsumed"
        )

    return into_signed(tx_class(**values), signature), rest


def _check_chain_id(tx: Transaction) -> None:
    if tx.chain_id is not None and tx.chain_id == 0:
        raise InvalidChainIdError("chain id 0 cannot be signed for")


def sign_transaction(tx: Transaction, secret_key: Bytes32) -> SignedTransaction:
    """
    Sign `tx` with `secret_key` and seal it.

    Parameters
    ----------
    tx :
        The unsigned transaction.
    secret_key :
        The sender's 32-byte private key.

    Returns
    -------
    signed : `SignedTransaction`
        The sealed transaction.
    """
    _check_chain_id(tx)
    r, s, recovery_id = secp256k1_sign(signing_hash(tx), secret_key)
    return into_signed(tx, Signature(r=r, s=s, v=recovery_id))


def recover_sender(signed: SignedTransaction) -> Address:
    """
    Extracts the sender address from a transaction.

    The sender's public key is recovered from the signature and the signing
    hash of the transaction; the address is the last 20 bytes of its hash.

    Parameters
    ----------
    signed :
        Transaction of interest.

    Returns
    -------
    sender : `ethereum_envelope.base_types.Address`
        The address of the account that signed the transaction.
    """
    tx = signed.transaction
    r, s = signed.signature.r, signed.signature.s
    if U256(0) >= r or r >= SECP256K1N:
        raise InvalidSignatureError("bad r")
    if U256(0) >= s or s > SECP256K1N // U256(2):
        raise InvalidSignatureError("bad s")
    _check_chain_id(tx)

    public_key = secp256k1_recover(
        r, s, U256(int(y_parity(signed.signature))), signing_hash(tx)
    )
    return Address(keccak256(public_key)[12:32])
