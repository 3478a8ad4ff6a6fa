"""
ECDSA signatures attached to transactions.

A signature is the pair `r`, `s` plus a recovery value `v`. Over time three
conventions for `v` have been used:

- plain y-parity, `0` or `1`, used by every [EIP-2718] typed transaction;
- `27 + parity`, used by unprotected legacy transactions;
- `35 + 2 * chain_id + parity`, used by [EIP-155] legacy transactions.

A `Signature` may carry any of them. Typed transactions only ever store the
normalized form produced by :func:`with_parity_bool`.

[EIP-2718]: https://eips.ethereum.org/EIPS/eip-2718
[EIP-155]: https://eips.ethereum.org/EIPS/eip-155
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from ethereum_types.bytes import Bytes
from ethereum_types.frozen import slotted_freezable
from ethereum_types.numeric import U64, U256

from . import rlp
from .exceptions import InvalidSignatureError

V_OFFSET_PRE155 = 27
V_OFFSET_EIP155 = 35


@slotted_freezable
@dataclass
class Signature:
    """
    The `r`, `s` and `v` values of a secp256k1 signature.
    """

    r: U256
    s: U256
    v: U256


def y_parity(signature: Signature) -> bool:
    """
    Parity of the y-coordinate of the signature's ephemeral point, whatever
    convention `signature.v` is written in.

    Parameters
    ----------
    signature :
        Signature of interest.

    Returns
    -------
    parity : `bool`
        `True` when the y-coordinate is odd.
    """
    v = int(signature.v)
    if v in (0, 1):
        return v == 1
    elif v in (V_OFFSET_PRE155, V_OFFSET_PRE155 + 1):
        return v == V_OFFSET_PRE155 + 1
    elif v >= V_OFFSET_EIP155:
        return (v - V_OFFSET_EIP155) % 2 == 1
    else:
        raise InvalidSignatureError(f"bad v `{v}`")


def signature_chain_id(signature: Signature) -> Optional[U64]:
    """
    Chain id embedded in an [EIP-155] `v`, or `None` for the other forms.

    [EIP-155]: https://eips.ethereum.org/EIPS/eip-155
    """
    v = int(signature.v)
    if v < V_OFFSET_EIP155:
        return None
    try:
        return U64((v - V_OFFSET_EIP155) // 2)
    except OverflowError as e:
        raise InvalidSignatureError(f"chain id in v `{v}` exceeds 64 bits") from e


def with_parity_bool(signature: Signature) -> Signature:
    """
    Drop any chain id or legacy offset from `signature.v`, leaving only the
    y-parity (`0` or `1`).
    """
    parity = y_parity(signature)
    return Signature(r=signature.r, s=signature.s, v=U256(int(parity)))


def legacy_v(parity: bool, chain_id: Optional[U64]) -> U256:
    """
    The `v` value a legacy transaction carries for `parity`, with [EIP-155]
    replay protection when `chain_id` is given.

    [EIP-155]: https://eips.ethereum.org/EIPS/eip-155
    """
    if chain_id is None:
        return U256(V_OFFSET_PRE155 + int(parity))
    return U256(V_OFFSET_EIP155 + 2 * int(chain_id) + int(parity))


def rlp_vrs_len(signature: Signature) -> int:
    """
    Length of the `v`, `r` and `s` encodings, without a list header.
    """
    return (
        rlp.encoded_length(signature.v)
        + rlp.encoded_length(signature.r)
        + rlp.encoded_length(signature.s)
    )


def encode_vrs(signature: Signature) -> Bytes:
    """
    Encodes `v`, `r` and `s`, in that order, without a list header.
    """
    return (
        rlp.encode_uint(signature.v)
        + rlp.encode_uint(signature.r)
        + rlp.encode_uint(signature.s)
    )


def decode_vrs(buffer: Bytes) -> Tuple[Signature, Bytes]:
    """
    Decodes a typed transaction's signature, whose `v` must be a plain
    y-parity.

    Parameters
    ----------
    buffer :
        Bytes starting with the encoded y-parity.

    Returns
    -------
    signature : `Signature`
        The decoded signature.
    rest : `ethereum_types.bytes.Bytes`
        The bytes following `s`.
    """
    parity, buffer = rlp.decode_bool(buffer)
    r, buffer = rlp.decode_uint(U256, buffer)
    s, buffer = rlp.decode_uint(U256, buffer)
    return Signature(r=r, s=s, v=U256(int(parity))), buffer


def decode_legacy_vrs(buffer: Bytes) -> Tuple[Signature, Bytes]:
    """
    Decodes a legacy transaction's signature, whose `v` must be `27`, `28` or
    an [EIP-155] value.

    [EIP-155]: https://eips.ethereum.org/EIPS/eip-155
    """
    v, buffer = rlp.decode_uint(U256, buffer)
    r, buffer = rlp.decode_uint(U256, buffer)
    s, buffer = rlp.decode_uint(U256, buffer)

    if int(v) not in (27, 28) and int(v) < V_OFFSET_EIP155:
        raise InvalidSignatureError(f"bad legacy v `{int(v)}`")

    signature = Signature(r=r, s=s, v=v)
    # Rejects chain ids wider than 64 bits.
    signature_chain_id(signature)
    return signature, buffer
