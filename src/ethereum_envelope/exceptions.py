"""
Error types raised while encoding, decoding, signing and dispatching
transactions.
"""

from typing import Final


class EnvelopeException(Exception):
    """
    Base class for all exceptions _expected_ to be thrown during normal
    operation.
    """


class RLPException(EnvelopeException):
    """
    Common base class for all RLP exceptions.
    """


class RLPEncodingError(RLPException):
    """
    Indicates that RLP encoding failed.
    """


class RLPDecodingError(RLPException):
    """
    Indicates that RLP decoding failed.
    """

    def __str__(self) -> str:
        message = [super().__str__()]
        current: BaseException = self
        while isinstance(current, RLPDecodingError) and current.__cause__:
            current = current.__cause__
            if isinstance(current, RLPDecodingError):
                as_str = super(RLPDecodingError, current).__str__()
            else:
                as_str = str(current)
            message.append(f"\tbecause {as_str}")
        return "\n".join(message)


class MalformedHeader(RLPDecodingError):
    """
    A length prefix is not in its canonical form, for example a long-form
    length with a leading zero byte or one that would fit the short form.
    """


class NonCanonicalSingleByte(MalformedHeader):
    """
    A single byte below `0x80` was wrapped in a string header instead of being
    encoded as itself.
    """


class InputTooShort(RLPDecodingError):
    """
    The buffer ended before the bytes promised by a header.
    """


class NonCanonicalInt(RLPDecodingError):
    """
    An integer was encoded with a leading zero byte.
    """


class IntegerOverflow(RLPDecodingError):
    """
    An integer does not fit the type it is being decoded into.
    """


class UnexpectedString(RLPDecodingError):
    """
    A list was expected, but a string was found.
    """


class UnexpectedList(RLPDecodingError):
    """
    A string was expected, but a list was found.
    """


class UnexpectedLength(RLPDecodingError):
    """
    A fixed size value had the wrong number of bytes, or bytes were left over
    after a complete item.
    """


class ListLengthMismatch(RLPDecodingError):
    """
    The items of a list did not consume exactly the payload announced by its
    header.
    """


class NestingTooDeep(RLPDecodingError):
    """
    Lists are nested deeper than the generic decoder follows.
    """


class InvalidTransaction(EnvelopeException):
    """
    Thrown when a transaction being processed is found to be invalid.
    """


class UnsupportedTransactionType(InvalidTransaction):
    """
    Unknown or disabled [EIP-2718] transaction type byte.

    [EIP-2718]: https://eips.ethereum.org/EIPS/eip-2718
    """

    transaction_type: Final[int]
    """
    The type byte of the transaction that caused the error.
    """

    def __init__(self, transaction_type: int):
        super().__init__(f"unsupported transaction type `{transaction_type}`")
        self.transaction_type = transaction_type


class InvalidSignatureError(InvalidTransaction):
    """
    Thrown when a transaction has an invalid signature.
    """


class InvalidChainIdError(InvalidTransaction):
    """
    Thrown when a transaction is bound to chain id zero, or to a chain other
    than the configured one.
    """


class GasPriceOverflowError(InvalidTransaction):
    """
    A gas price does not fit in 128 bits.
    """

    gas_price: Final[int]
    """
    The rejected value.
    """

    def __init__(self, gas_price: int):
        super().__init__(f"gas price `{gas_price}` exceeds 128 bits")
        self.gas_price = gas_price
