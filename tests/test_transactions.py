import pytest
from ethereum_types.bytes import Bytes, Bytes0, Bytes32
from ethereum_types.numeric import U64, U256

from ethereum_envelope import rlp
from ethereum_envelope.base_types import U128, Access, is_contract_creation
from ethereum_envelope.exceptions import GasPriceOverflowError
from ethereum_envelope.transactions import (
    AccessListTransaction,
    FeeMarketTransaction,
    LegacyTransaction,
    decode_fields,
    encode_fields,
    fields_len,
    set_access_list,
    set_chain_id,
    set_gas_limit,
    set_gas_price,
    set_input,
    set_nonce,
    set_to,
    set_value,
    transaction_chain_id,
    transaction_gas_price,
    transaction_size,
    wire_fields,
)
from ethereum_envelope.utils.hexadecimal import hex_to_address, hex_to_bytes32

address1 = hex_to_address("0x00000000219ab540356cbb839cbe05303d7705fa")
address2 = hex_to_address("0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2")
key1 = hex_to_bytes32("0x01")
key2 = hex_to_bytes32("0x02")

access_list = (Access(account=address1, slots=(key1, key2)),)

legacy_transaction = LegacyTransaction(
    nonce=U64(1),
    gas_price=U128(2),
    gas=U64(3),
    to=Bytes0(),
    value=U256(4),
    data=Bytes(b"foo"),
    chain_id=None,
)

access_list_transaction = AccessListTransaction(
    chain_id=U64(1),
    nonce=U64(1),
    gas_price=U128(2),
    gas=U64(3),
    to=address2,
    value=U256(4),
    data=Bytes(b"bar"),
    access_list=access_list,
)

transaction_1559 = FeeMarketTransaction(
    chain_id=U64(1),
    nonce=U64(1),
    max_priority_fee_per_gas=U128(7),
    max_fee_per_gas=U128(2),
    gas=U64(3),
    to=address2,
    value=U256(4),
    data=Bytes(b"bar"),
    access_list=(),
)


@pytest.mark.parametrize(
    "tx",
    [legacy_transaction, access_list_transaction, transaction_1559],
)
def test_fields_roundtrip(tx: object) -> None:
    encoded = encode_fields(tx)
    assert len(encoded) == fields_len(tx)

    extra = {"chain_id": None} if isinstance(tx, LegacyTransaction) else {}
    decoded, rest = decode_fields(type(tx), encoded, **extra)
    assert decoded == tx
    assert rest == b""


def test_legacy_chain_id_is_not_a_wire_field() -> None:
    names = [f.name for f in wire_fields(LegacyTransaction)]
    assert names == ["nonce", "gas_price", "gas", "to", "value", "data"]
    bound = set_chain_id(legacy_transaction, U64(5))
    assert encode_fields(bound) == encode_fields(legacy_transaction)


def test_access_list_wire_order() -> None:
    names = [f.name for f in wire_fields(AccessListTransaction)]
    assert names == [
        "chain_id",
        "nonce",
        "gas_price",
        "gas",
        "to",
        "value",
        "data",
        "access_list",
    ]


def test_encode_fields_access_list() -> None:
    expected = b"".join(
        [
            rlp.encode(U64(1)),
            rlp.encode(U64(1)),
            rlp.encode(U128(2)),
            rlp.encode(U64(3)),
            rlp.encode(address2),
            rlp.encode(U256(4)),
            rlp.encode(b"bar"),
            rlp.encode([[address1, [key1, key2]]]),
        ]
    )
    assert encode_fields(access_list_transaction) == expected


def test_transactions_are_frozen() -> None:
    with pytest.raises(AttributeError):
        legacy_transaction.nonce = U64(2)  # type: ignore[misc]


def test_setters_return_copies() -> None:
    tx = set_nonce(access_list_transaction, U64(9))
    tx = set_gas_limit(tx, U64(50000))
    tx = set_to(tx, Bytes0())
    tx = set_value(tx, U256(10))
    tx = set_input(tx, b"\x00\x01")
    tx = set_access_list(tx, [])

    assert tx.nonce == U64(9)
    assert tx.gas == U64(50000)
    assert tx.to == Bytes0()
    assert tx.value == U256(10)
    assert tx.data == b"\x00\x01"
    assert tx.access_list == ()
    assert access_list_transaction.nonce == U64(1)
    assert access_list_transaction.access_list == access_list


def test_set_chain_id() -> None:
    assert transaction_chain_id(legacy_transaction) is None
    assert transaction_chain_id(set_chain_id(legacy_transaction, U64(3))) == 3
    assert set_chain_id(access_list_transaction, U64(3)).chain_id == 3

    with pytest.raises(TypeError):
        set_chain_id(access_list_transaction, None)


def test_set_access_list_on_legacy() -> None:
    with pytest.raises(TypeError):
        set_access_list(legacy_transaction, access_list)


def test_set_gas_price() -> None:
    assert set_gas_price(legacy_transaction, U256(10)).gas_price == U128(10)
    assert set_gas_price(access_list_transaction, U256(10)).gas_price == 10

    tx = set_gas_price(transaction_1559, U256(10))
    assert tx.max_fee_per_gas == U128(10)
    assert tx.max_priority_fee_per_gas == U128(7)


def test_set_gas_price_max_value() -> None:
    tx = set_gas_price(legacy_transaction, U256(2**128 - 1))
    assert tx.gas_price == U128.MAX_VALUE


def test_set_gas_price_overflow() -> None:
    with pytest.raises(GasPriceOverflowError) as exc_info:
        set_gas_price(legacy_transaction, U256(2**128))
    assert exc_info.value.gas_price == 2**128
    assert legacy_transaction.gas_price == U128(2)


def test_u128_range() -> None:
    with pytest.raises(OverflowError):
        U128(2**128)
    assert U128.from_be_bytes(b"\xff" * 16) == U128.MAX_VALUE
    with pytest.raises(ValueError):
        U128.from_be_bytes(b"\x01" * 17)


def test_transaction_gas_price() -> None:
    assert transaction_gas_price(legacy_transaction) == U256(2)
    assert transaction_gas_price(transaction_1559) is None


def test_contract_creation() -> None:
    assert is_contract_creation(legacy_transaction.to)
    assert not is_contract_creation(access_list_transaction.to)


def test_transaction_size() -> None:
    # nonce, gas_price, gas, to, value, data, chain_id
    assert transaction_size(legacy_transaction) == 8 + 16 + 8 + 21 + 32 + 3 + 8
    assert transaction_size(access_list_transaction) > transaction_size(
        set_access_list(access_list_transaction, ())
    )


def test_storage_key_padding() -> None:
    assert key1 == Bytes32(b"\x00" * 31 + b"\x01")
