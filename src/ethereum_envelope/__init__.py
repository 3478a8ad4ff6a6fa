"""
Ethereum Transaction Envelope
^^^^^^^^^^^^^^^^^^^^^^^^^^^^^
Encoding, decoding, signing and hashing of Ethereum transactions.

Every transaction variant is carried in an [EIP-2718] envelope: a type byte
followed by the RLP encoding of the transaction's fields, or the bare RLP
list for untyped legacy transactions. This package implements the strict,
canonical RLP codec those envelopes are built on, the legacy, [EIP-2930]
access list and [EIP-1559] fee market variants, and the dispatcher that
routes raw bytes to the right decoder.

[EIP-2718]: https://eips.ethereum.org/EIPS/eip-2718
[EIP-2930]: https://eips.ethereum.org/EIPS/eip-2930
[EIP-1559]: https://eips.ethereum.org/EIPS/eip-1559
"""

__version__ = "0.1.0"
