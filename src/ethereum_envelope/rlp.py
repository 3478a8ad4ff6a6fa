"""
.. _rlp:

Recursive Length Prefix (RLP) Encoding
^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Defines the serialization and deserialization format used for transactions.

Every item is either a byte string or a list of items. Both are preceded by a
header announcing whether a list follows and how many payload bytes it spans.
Decoding is strict: only the unique canonical encoding of a value is
accepted, and every violation is reported with its own exception type (see
:mod:`ethereum_envelope.exceptions`).

The decoding functions are streaming: they take a buffer and return the
decoded value together with the bytes that follow it.
"""

from dataclasses import dataclass, fields, is_dataclass
from typing import (
    Any,
    ClassVar,
    Dict,
    List,
    Protocol,
    Sequence,
    Tuple,
    Type,
    TypeAlias,
    TypeVar,
    Union,
    cast,
    get_args,
    get_origin,
    get_type_hints,
)

from ethereum_types.bytes import Bytes, FixedBytes
from ethereum_types.frozen import slotted_freezable
from ethereum_types.numeric import FixedUnsigned, Uint

from .crypto.hash import Hash32, keccak256
from .exceptions import (
    InputTooShort,
    IntegerOverflow,
    ListLengthMismatch,
    MalformedHeader,
    NestingTooDeep,
    NonCanonicalInt,
    NonCanonicalSingleByte,
    RLPDecodingError,
    RLPEncodingError,
    UnexpectedLength,
    UnexpectedList,
    UnexpectedString,
)


class RLP(Protocol):
    """
    [`Protocol`] that describes the requirements to be RLP-encodable.

    [`Protocol`]: https://docs.python.org/3/library/typing.html#typing.Protocol
    """

    __dataclass_fields__: ClassVar[Dict]


Simple: TypeAlias = Union[Sequence["Simple"], bytes]

Extended: TypeAlias = Union[
    Sequence["Extended"], bytearray, bytes, Uint, FixedUnsigned, str, bool, RLP
]

STRING_SHORT_OFFSET = 0x80
STRING_LONG_OFFSET = 0xB7
LIST_SHORT_OFFSET = 0xC0
LIST_LONG_OFFSET = 0xF7
SHORT_PAYLOAD_LIMIT = 0x38

MAX_NESTING_DEPTH = 256
"""
Deepest list nesting `decode` follows before giving up.
"""


@slotted_freezable
@dataclass
class Header:
    """
    Decoded RLP prefix: the kind of item and the size of its payload.
    """

    is_list: bool
    payload_length: int


#
# RLP Encode
#


def length_of_length(payload_length: int) -> int:
    """
    Number of bytes taken by a header announcing `payload_length` bytes.

    Parameters
    ----------
    payload_length :
        Size of the payload that follows the header.

    Returns
    -------
    header_length : `int`
        `1` for short payloads, otherwise `1` plus the size of the big endian
        length.
    """
    if payload_length < SHORT_PAYLOAD_LIMIT:
        return 1
    return 1 + len(Uint(payload_length).to_be_bytes())


def encode_header(header: Header) -> Bytes:
    """
    Encodes a string or list header.

    Parameters
    ----------
    header :
        The kind of item and the length of the payload that will follow.

    Returns
    -------
    encoded : `ethereum_types.bytes.Bytes`
        The header bytes.
    """
    if header.is_list:
        short_offset, long_offset = LIST_SHORT_OFFSET, LIST_LONG_OFFSET
    else:
        short_offset, long_offset = STRING_SHORT_OFFSET, STRING_LONG_OFFSET

    if header.payload_length < SHORT_PAYLOAD_LIMIT:
        return bytes([short_offset + header.payload_length])

    # length of the payload represented as big endian bytes
    payload_length_as_be = Uint(header.payload_length).to_be_bytes()
    return bytes([long_offset + len(payload_length_as_be)]) + payload_length_as_be


def encode(raw_data: Extended) -> Bytes:
    """
    Encodes `raw_data` into a sequence of bytes using RLP.

    Parameters
    ----------
    raw_data :
        A `Bytes`, `Uint`, `U256`, `bool`, dataclass or sequence of `RLP`
        encodable objects.

    Returns
    -------
    encoded : `ethereum_types.bytes.Bytes`
        The RLP encoded bytes representing `raw_data`.
    """
    if isinstance(raw_data, Sequence):
        if isinstance(raw_data, (bytearray, bytes)):
            return encode_bytes(raw_data)
        elif isinstance(raw_data, str):
            return encode_bytes(raw_data.encode())
        else:
            return encode_list([encode(item) for item in raw_data])
    elif isinstance(raw_data, (Uint, FixedUnsigned)):
        return encode_uint(raw_data)
    elif isinstance(raw_data, bool):
        if raw_data:
            return encode_bytes(b"\x01")
        else:
            return encode_bytes(b"")
    elif is_dataclass(raw_data) and not isinstance(raw_data, type):
        return encode(field_values(raw_data))
    else:
        raise RLPEncodingError(
            "RLP Encoding of type {} is not supported".format(type(raw_data))
        )


def encode_uint(value: Union[Uint, FixedUnsigned]) -> Bytes:
    """
    Encodes an unsigned integer as its minimal big endian byte string.

    Zero is the empty string, so it encodes as `0x80`.
    """
    return encode_bytes(value.to_be_bytes())


def encode_bytes(raw_bytes: Bytes) -> Bytes:
    """
    Encodes `raw_bytes`, a sequence of bytes, using RLP.

    Parameters
    ----------
    raw_bytes :
        Bytes to encode with RLP.

    Returns
    -------
    encoded : `ethereum_types.bytes.Bytes`
        The RLP encoded bytes representing `raw_bytes`.
    """
    if len(raw_bytes) == 1 and raw_bytes[0] < STRING_SHORT_OFFSET:
        return bytes(raw_bytes)

    header = Header(is_list=False, payload_length=len(raw_bytes))
    return encode_header(header) + bytes(raw_bytes)


def encode_list(encoded_items: Sequence[Bytes]) -> Bytes:
    """
    Wraps already encoded items in a list header.

    Parameters
    ----------
    encoded_items :
        RLP encodings of the list items, in order.

    Returns
    -------
    encoded : `ethereum_types.bytes.Bytes`
        The RLP encoded list.
    """
    joined_encodings = b"".join(encoded_items)
    header = Header(is_list=True, payload_length=len(joined_encodings))
    return encode_header(header) + joined_encodings


def field_values(raw_data: Any) -> Tuple[Any, ...]:
    """
    Values of the dataclass fields of `raw_data`, in declaration order.
    """
    return tuple(getattr(raw_data, f.name) for f in fields(raw_data))


def encoded_length(raw_data: Extended) -> int:
    """
    Length of `encode(raw_data)`, computed without encoding.

    Parameters
    ----------
    raw_data :
        Any value accepted by :func:`encode`.

    Returns
    -------
    length : `int`
        Number of bytes in the encoding of `raw_data`.
    """
    if isinstance(raw_data, Sequence):
        if isinstance(raw_data, (bytearray, bytes)):
            return _encoded_bytes_length(raw_data)
        elif isinstance(raw_data, str):
            return _encoded_bytes_length(raw_data.encode())
        else:
            payload_length = sum(encoded_length(item) for item in raw_data)
            return length_of_length(payload_length) + payload_length
    elif isinstance(raw_data, (Uint, FixedUnsigned)):
        return _encoded_bytes_length(raw_data.to_be_bytes())
    elif isinstance(raw_data, bool):
        return 1
    elif is_dataclass(raw_data) and not isinstance(raw_data, type):
        return encoded_length(field_values(raw_data))
    else:
        raise RLPEncodingError(
            "RLP Encoding of type {} is not supported".format(type(raw_data))
        )


def _encoded_bytes_length(raw_bytes: Bytes) -> int:
    if len(raw_bytes) == 1 and raw_bytes[0] < STRING_SHORT_OFFSET:
        return 1
    return length_of_length(len(raw_bytes)) + len(raw_bytes)


#
# RLP Decode
#


def decode_header(buffer: Bytes) -> Tuple[Header, Bytes]:
    """
    Reads the header at the start of `buffer`.

    A single byte below `0x80` is its own encoding and has no prefix; it is
    reported as a one byte string and left in the returned buffer.

    Parameters
    ----------
    buffer :
        Bytes starting with an RLP item.

    Returns
    -------
    header : `Header`
        Kind and payload length of the item.
    rest : `ethereum_types.bytes.Bytes`
        `buffer` without the prefix, starting with the payload.
    """
    if len(buffer) == 0:
        raise InputTooShort("cannot decode header of empty bytestring")

    prefix = buffer[0]

    if prefix < STRING_SHORT_OFFSET:
        return Header(is_list=False, payload_length=1), buffer

    is_list = prefix >= LIST_SHORT_OFFSET
    if is_list:
        short_offset, long_offset = LIST_SHORT_OFFSET, LIST_LONG_OFFSET
    else:
        short_offset, long_offset = STRING_SHORT_OFFSET, STRING_LONG_OFFSET

    if prefix <= long_offset:
        payload_length = prefix - short_offset
        rest = buffer[1:]
    else:
        # This is the length of the big endian representation of the
        # payload length.
        length_length = prefix - long_offset
        if 1 + length_length > len(buffer):
            raise InputTooShort(
                f"header needs {length_length} length byte(s), "
                f"got {len(buffer) - 1}"
            )
        if buffer[1] == 0:
            raise MalformedHeader("leading zero in payload length")
        payload_length = int.from_bytes(buffer[1 : 1 + length_length], "big")
        if payload_length < SHORT_PAYLOAD_LIMIT:
            raise MalformedHeader(
                f"long form header used for {payload_length} byte payload"
            )
        rest = buffer[1 + length_length :]

    if payload_length > len(rest):
        raise InputTooShort(
            f"header announces {payload_length} byte(s), "
            f"only {len(rest)} remain"
        )

    if not is_list and payload_length == 1 and rest[0] < STRING_SHORT_OFFSET:
        raise NonCanonicalSingleByte(
            f"byte {rest[0]:#04x} must be encoded as itself"
        )

    return Header(is_list=is_list, payload_length=payload_length), rest


def decode_bytes(buffer: Bytes) -> Tuple[Bytes, Bytes]:
    """
    Decodes a byte string from the start of `buffer`.

    Parameters
    ----------
    buffer :
        Bytes starting with an RLP string.

    Returns
    -------
    raw_bytes : `ethereum_types.bytes.Bytes`
        The string payload.
    rest : `ethereum_types.bytes.Bytes`
        The bytes following the string.
    """
    header, rest = decode_header(buffer)
    if header.is_list:
        raise UnexpectedList("expected a string, found a list")
    return rest[: header.payload_length], rest[header.payload_length :]


def decode_list(buffer: Bytes) -> Tuple[Bytes, Bytes]:
    """
    Decodes a list header from the start of `buffer`.

    Parameters
    ----------
    buffer :
        Bytes starting with an RLP list.

    Returns
    -------
    payload : `ethereum_types.bytes.Bytes`
        The concatenated encodings of the list items.
    rest : `ethereum_types.bytes.Bytes`
        The bytes following the list.
    """
    header, rest = decode_header(buffer)
    if not header.is_list:
        raise UnexpectedString("expected a list, found a string")
    return rest[: header.payload_length], rest[header.payload_length :]


UintT = TypeVar("UintT", bound=Union[Uint, FixedUnsigned])


def decode_uint(class_: Type[UintT], buffer: Bytes) -> Tuple[UintT, Bytes]:
    """
    Decodes an unsigned integer of type `class_` from the start of `buffer`.

    Parameters
    ----------
    class_ :
        `Uint` or a fixed size unsigned integer type.
    buffer :
        Bytes starting with an RLP string.

    Returns
    -------
    value : `UintT`
        The decoded integer.
    rest : `ethereum_types.bytes.Bytes`
        The bytes following the integer.
    """
    raw_bytes, rest = decode_bytes(buffer)
    if len(raw_bytes) > 0 and raw_bytes[0] == 0:
        raise NonCanonicalInt(
            f"leading zero in `{class_.__name__}` encoding"
        )
    try:
        value = class_.from_be_bytes(raw_bytes)
    except (ValueError, OverflowError) as e:
        raise IntegerOverflow(
            f"{len(raw_bytes)} byte(s) do not fit in `{class_.__name__}`"
        ) from e
    return value, rest


def decode_bool(buffer: Bytes) -> Tuple[bool, Bytes]:
    """
    Decodes a boolean, encoded as the integer `0` or `1`.
    """
    raw_bytes, rest = decode_bytes(buffer)
    if raw_bytes == b"":
        return False, rest
    elif raw_bytes == b"\x01":
        return True, rest
    elif raw_bytes[0] == 0:
        raise NonCanonicalInt("leading zero in boolean encoding")
    else:
        raise IntegerOverflow(f"boolean out of range: 0x{raw_bytes.hex()}")


FixedBytesT = TypeVar("FixedBytesT", bound=FixedBytes)


def decode_fixed_bytes(
    class_: Type[FixedBytesT], buffer: Bytes
) -> Tuple[FixedBytesT, Bytes]:
    """
    Decodes a byte string that must be exactly `class_.LENGTH` bytes long.
    """
    raw_bytes, rest = decode_bytes(buffer)
    if len(raw_bytes) != class_.LENGTH:
        raise UnexpectedLength(
            f"`{class_.__name__}` needs {class_.LENGTH} byte(s), "
            f"got {len(raw_bytes)}"
        )
    return class_(raw_bytes), rest


def decode_item(buffer: Bytes, depth: int = 0) -> Tuple[Simple, Bytes]:
    """
    Decodes the untyped item (string or nested list of strings) at the start
    of `buffer`. Lists nested deeper than `MAX_NESTING_DEPTH` are refused.
    """
    header, rest = decode_header(buffer)
    payload = rest[: header.payload_length]
    rest = rest[header.payload_length :]

    if not header.is_list:
        return payload, rest

    if depth >= MAX_NESTING_DEPTH:
        raise NestingTooDeep(
            f"lists nested deeper than {MAX_NESTING_DEPTH} levels"
        )

    items: List[Simple] = []
    while payload:
        item, payload = decode_item(payload, depth + 1)
        items.append(item)
    return items, rest


def decode(encoded_data: Bytes) -> Simple:
    """
    Decodes an integer, byte sequence, or list of RLP encodable objects
    from the byte sequence `encoded_data`, using RLP.

    Parameters
    ----------
    encoded_data :
        A sequence of bytes, in RLP form.

    Returns
    -------
    decoded_data : `Simple`
        Object decoded from `encoded_data`.
    """
    decoded, rest = decode_item(encoded_data)
    if rest:
        raise UnexpectedLength(f"{len(rest)} trailing byte(s) after item")
    return decoded


U = TypeVar("U", bound=Extended)


def decode_to(cls: Type[U], encoded_data: Bytes) -> U:
    """
    Decode the bytes in `encoded_data` to an object of type `cls`. `cls` can be
    a `Bytes` subclass, a dataclass, `Uint`, `U256`, `bool` or `Tuple[cls]`.

    Parameters
    ----------
    cls: `Type[U]`
        The type to decode to.
    encoded_data :
        A sequence of bytes, in RLP form.

    Returns
    -------
    decoded_data : `U`
        Object decoded from `encoded_data`.
    """
    decoded, rest = decode_item_to(cls, encoded_data)
    if rest:
        raise UnexpectedLength(f"{len(rest)} trailing byte(s) after item")
    return cast(U, decoded)


def decode_item_to(class_: object, buffer: Bytes) -> Tuple[Any, Bytes]:
    """
    Decodes one item of type `class_` from the start of `buffer`.

    `class_` may be any type accepted by :func:`decode_to`, or a `Union` or
    `Tuple` annotation over such types.

    Returns
    -------
    value :
        The decoded value.
    rest : `ethereum_types.bytes.Bytes`
        The bytes following the item.
    """
    if not isinstance(class_, type):
        return _decode_annotation(class_, buffer)
    elif is_dataclass(class_):
        return _decode_dataclass(class_, buffer)
    elif issubclass(class_, (Uint, FixedUnsigned)):
        return decode_uint(class_, buffer)
    elif issubclass(class_, FixedBytes):
        return decode_fixed_bytes(class_, buffer)
    elif class_ is bool:
        return decode_bool(buffer)
    elif issubclass(class_, (bytes, bytearray)):
        raw_bytes, rest = decode_bytes(buffer)
        return class_(raw_bytes), rest
    else:
        raise NotImplementedError(class_)


def _decode_dataclass(cls: type, buffer: Bytes) -> Tuple[Any, Bytes]:
    assert is_dataclass(cls)
    hints = get_type_hints(cls)
    payload, rest = decode_list(buffer)

    values: Dict[str, Any] = {}
    for target_field in fields(cls):
        values[target_field.name], payload = decode_item_to(
            hints[target_field.name], payload
        )

    if payload:
        raise ListLengthMismatch(
            f"`{cls.__name__}` left {len(payload)} byte(s) unconsumed"
        )

    return cls(**values), rest


def _decode_annotation(annotation: object, buffer: Bytes) -> Tuple[Any, Bytes]:
    origin = get_origin(annotation)
    if origin is Union:
        return _decode_union(annotation, buffer)
    elif origin in (Tuple, tuple):
        return _decode_tuple(annotation, buffer)
    else:
        raise NotImplementedError(f"RLP non-type {annotation!r}")


def _decode_union(annotation: object, buffer: Bytes) -> Tuple[Any, Bytes]:
    successes = []
    failures: List[RLPDecodingError] = []
    for argument in get_args(annotation):
        try:
            successes.append(decode_item_to(argument, buffer))
        except RLPDecodingError as e:
            failures.append(e)

    if len(successes) == 1:
        return successes[0]
    elif successes:
        raise RLPDecodingError("multiple matching union variants")

    # Report the common failure kind when every variant agrees on it.
    kinds = {type(failure) for failure in failures}
    kind = kinds.pop() if len(kinds) == 1 else RLPDecodingError
    raise kind(f"no matching union variant in {annotation!r}") from failures[0]


def _decode_tuple(annotation: object, buffer: Bytes) -> Tuple[Any, Bytes]:
    arguments = list(get_args(annotation))
    payload, rest = decode_list(buffer)
    decoded = []

    if arguments and arguments[-1] is Ellipsis:
        while payload:
            item, payload = decode_item_to(arguments[0], payload)
            decoded.append(item)
    else:
        for argument in arguments:
            item, payload = decode_item_to(argument, payload)
            decoded.append(item)
        if payload:
            raise ListLengthMismatch(
                f"tuple of {len(arguments)} left {len(payload)} byte(s) "
                "unconsumed"
            )

    return tuple(decoded), rest


def rlp_hash(data: Extended) -> Hash32:
    """
    Obtain the keccak-256 hash of the rlp encoding of the passed in data.

    Parameters
    ----------
    data :
        The data for which we need the rlp hash.

    Returns
    -------
    hash : `Hash32`
        The rlp hash of the passed in data.
    """
    return keccak256(encode(data))
