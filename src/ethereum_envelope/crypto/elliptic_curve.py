"""
Elliptic Curves
^^^^^^^^^^^^^^^

Thin wrappers around `coincurve` for producing recoverable secp256k1
signatures over a 32-byte digest and recovering the signer's public key.
"""

from typing import Tuple

import coincurve
from ethereum_types.bytes import Bytes, Bytes32
from ethereum_types.numeric import U256

from ..exceptions import InvalidSignatureError
from .hash import Hash32

SECP256K1B = U256(7)
SECP256K1P = U256(
    0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
)
SECP256K1N = U256(
    0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
)


def secp256k1_sign(msg_hash: Hash32, secret_key: Bytes32) -> Tuple[U256, U256, U256]:
    """
    Sign `msg_hash` with `secret_key`.

    The digest is signed as is; no further hashing is applied.

    Parameters
    ----------
    msg_hash :
        Digest to sign.
    secret_key :
        The 32-byte private key.

    Returns
    -------
    signature : `Tuple[U256, U256, U256]`
        The `r`, `s` and recovery id (`0` or `1`) of the signature.
    """
    private_key = coincurve.PrivateKey(bytes(secret_key))
    signature = private_key.sign_recoverable(bytes(msg_hash), hasher=None)

    return (
        U256.from_be_bytes(signature[0:32]),
        U256.from_be_bytes(signature[32:64]),
        U256(signature[64]),
    )


def secp256k1_recover(
    r: U256, s: U256, y_parity: U256, msg_hash: Hash32
) -> Bytes:
    """
    Recovers the public key from a given signature.

    Parameters
    ----------
    r :
        The x-coordinate of the signature's ephemeral point.
    s :
        The signature proof.
    y_parity :
        Parity of the y-coordinate of the ephemeral point (`0` or `1`).
    msg_hash :
        Hash of the message being recovered.

    Returns
    -------
    public_key : `ethereum_types.bytes.Bytes`
        Recovered public key, 64 bytes without the `0x04` prefix.
    """
    p = int(SECP256K1P)
    is_square = pow(pow(int(r), 3, p) + int(SECP256K1B), (p - 1) // 2, p)

    if is_square != 1:
        raise InvalidSignatureError(
            "r is not the x-coordinate of a point on the secp256k1 curve"
        )

    r_bytes = r.to_be_bytes32()
    s_bytes = s.to_be_bytes32()

    signature = bytearray([0] * 65)
    signature[0:32] = r_bytes
    signature[32:64] = s_bytes
    signature[64] = int(y_parity)

    # If the recovery algorithm returns the point at infinity,
    # the signature is considered invalid
    # the below function will raise a ValueError.
    try:
        public_key = coincurve.PublicKey.from_signature_and_message(
            bytes(signature), bytes(msg_hash), hasher=None
        )
    except ValueError as e:
        raise InvalidSignatureError from e

    return public_key.format(compressed=False)[1:]


def public_key_from_secret(secret_key: Bytes32) -> Bytes:
    """
    Uncompressed public key (64 bytes, no prefix) belonging to `secret_key`.
    """
    private_key = coincurve.PrivateKey(bytes(secret_key))
    return private_key.public_key.format(compressed=False)[1:]
