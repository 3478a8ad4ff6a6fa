"""
Cryptographic primitives consumed by the codec: keccak-256 hashing and
secp256k1 signing and public key recovery.
"""
