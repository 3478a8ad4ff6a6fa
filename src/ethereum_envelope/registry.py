"""
Transaction Types
^^^^^^^^^^^^^^^^^

The closed set of transaction variants known to the codec, keyed both by
[EIP-2718] type byte and by unsigned transaction class.

[EIP-2718]: https://eips.ethereum.org/EIPS/eip-2718
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from ethereum_types.frozen import slotted_freezable

from .exceptions import UnsupportedTransactionType
from .logger import setup_logger
from .transactions import (
    AccessListTransaction,
    FeeMarketTransaction,
    LegacyTransaction,
    Transaction,
)

logger = setup_logger(__name__)

MAX_TRANSACTION_TYPE = 0x7F
"""
Largest type byte; anything above collides with RLP list and string headers.
"""


@slotted_freezable
@dataclass
class TransactionType:
    """
    A registered transaction variant.
    """

    name: str
    tx_type: Optional[int]
    """
    The type byte written before the envelope, or `None` for untyped legacy
    transactions.
    """
    transaction_class: type


LEGACY = TransactionType("legacy", None, LegacyTransaction)
ACCESS_LIST = TransactionType("eip2930", 0x01, AccessListTransaction)
FEE_MARKET = TransactionType("eip1559", 0x02, FeeMarketTransaction)

_by_type_byte: Dict[int, TransactionType] = {}
_by_class: Dict[type, TransactionType] = {LegacyTransaction: LEGACY}


def register_transaction_type(transaction_type: TransactionType) -> None:
    """
    Make a typed variant known to the envelope and the dispatcher.

    Parameters
    ----------
    transaction_type :
        The variant to add. Its type byte and class must not be registered
        already.
    """
    tx_type = transaction_type.tx_type
    if tx_type is None or not 0 <= tx_type <= MAX_TRANSACTION_TYPE:
        raise ValueError(f"invalid transaction type byte `{tx_type}`")
    if tx_type in _by_type_byte:
        raise ValueError(f"transaction type `{tx_type}` already registered")
    if transaction_type.transaction_class in _by_class:
        raise ValueError(
            f"`{transaction_type.transaction_class.__name__}` already registered"
        )

    _by_type_byte[tx_type] = transaction_type
    _by_class[transaction_type.transaction_class] = transaction_type
    logger.debug(
        "registered transaction type %#04x (%s)", tx_type, transaction_type.name
    )


def lookup_transaction_type(tx_type: int) -> TransactionType:
    """
    The typed variant registered under `tx_type`.
    """
    try:
        return _by_type_byte[tx_type]
    except KeyError:
        raise UnsupportedTransactionType(tx_type) from None


def transaction_type_of(tx: Transaction) -> TransactionType:
    """
    The variant an unsigned transaction belongs to.
    """
    try:
        return _by_class[type(tx)]
    except KeyError:
        raise TypeError(
            f"`{type(tx).__name__}` is not a registered transaction"
        ) from None


def registered_transaction_types() -> Tuple[TransactionType, ...]:
    """
    Every typed variant, ordered by type byte.
    """
    return tuple(_by_type_byte[key] for key in sorted(_by_type_byte))


register_transaction_type(ACCESS_LIST)
register_transaction_type(FEE_MARKET)
