"""
Value types shared by every transaction variant.
"""

from dataclasses import dataclass
from typing import ClassVar, Tuple, Union

from ethereum_types.bytes import Bytes0, Bytes20, Bytes32
from ethereum_types.frozen import slotted_freezable
from ethereum_types.numeric import U64, FixedUnsigned, _max_value

Address = Bytes20
StorageKey = Bytes32
ChainId = U64

To = Union[Bytes0, Address]
"""
Recipient of a transaction: `Bytes0()` for contract creation, otherwise the
called account.
"""


class U128(FixedUnsigned):
    """
    Unsigned integer, which can represent `0` to `2 ** 128 - 1`, inclusive.
    """

    MAX_VALUE: ClassVar["U128"]
    """
    Largest value that can be represented by this integer type.
    """


U128.MAX_VALUE = _max_value(U128, 128)


@slotted_freezable
@dataclass
class Access:
    """
    A single access list entry: an account and the storage keys the
    transaction declares it will touch.
    """

    account: Address
    slots: Tuple[StorageKey, ...]


AccessList = Tuple[Access, ...]


def is_contract_creation(to: To) -> bool:
    """
    Whether `to` denotes the creation of a new contract.
    """
    return isinstance(to, Bytes0)
