import pytest
from ethereum_types.bytes import Bytes, Bytes0, Bytes20, Bytes32
from ethereum_types.numeric import U64, U256

from ethereum_envelope import envelope, rlp
from ethereum_envelope.base_types import U128, Access
from ethereum_envelope.crypto.elliptic_curve import (
    SECP256K1N,
    public_key_from_secret,
)
from ethereum_envelope.crypto.hash import keccak256
from ethereum_envelope.exceptions import (
    InputTooShort,
    IntegerOverflow,
    InvalidChainIdError,
    InvalidSignatureError,
    ListLengthMismatch,
    UnexpectedString,
)
from ethereum_envelope.registry import ACCESS_LIST, FEE_MARKET, LEGACY
from ethereum_envelope.signature import (
    Signature,
    legacy_v,
    signature_chain_id,
    with_parity_bool,
    y_parity,
)
from ethereum_envelope.signing import (
    SignedTransaction,
    decode_signed,
    encode_sealed,
    encode_with_signature,
    into_signed,
    recover_sender,
    sign_transaction,
    signing_hash,
)
from ethereum_envelope.transactions import (
    AccessListTransaction,
    FeeMarketTransaction,
    LegacyTransaction,
    set_access_list,
    set_chain_id,
    set_gas_limit,
    set_gas_price,
    set_input,
    set_nonce,
    set_to,
    set_value,
)
from ethereum_envelope.utils.hexadecimal import (
    hex_to_address,
    hex_to_bytes,
    hex_to_bytes32,
)

access_list_transaction = AccessListTransaction(
    chain_id=U64(1),
    nonce=U64(0),
    gas_price=U128(1),
    gas=U64(2),
    to=Bytes20(b"\x00" * 20),
    value=U256(3),
    data=Bytes(b"\x01\x02"),
    access_list=(),
)

signature = Signature(
    r=U256(0x840CFC572845F5786E702984C2A582528CAD4B49B2A10B9DB1BE7FCA90058565),
    s=U256(0x25E7109CEB98168D95B09B18BBF6B685130E0562F233877D492B94EEE0C5B6D1),
    v=U256(0),
)

signature_hex = (
    "80"
    "a0840cfc572845f5786e702984c2a582528cad4b49b2a10b9db1be7fca90058565"
    "a025e7109ceb98168d95b09b18bbf6b685130e0562f233877d492b94eee0c5b6d1"
)

sealed_vector = hex_to_bytes(
    "01f861" + "01800102" + "94" + "00" * 20 + "03820102c0" + signature_hex
)

eip155_transaction = LegacyTransaction(
    nonce=U64(9),
    gas_price=U128(20 * 10**9),
    gas=U64(21000),
    to=hex_to_address("0x3535353535353535353535353535353535353535"),
    value=U256(10**18),
    data=Bytes(b""),
    chain_id=U64(1),
)

eip155_sealed = hex_to_bytes(
    "f86c098504a817c800825208943535353535353535353535353535353535353535"
    "880de0b6b3a76400008025a028ef61340bd939bc2195fe537567866003e1a15d3c71"
    "ff63e1590620aa636276a067cbe9d8997f761aecb703304b3800ccf555c9f3dc6421"
    "4b297fb1966a3b6d83"
)

transaction_1559 = FeeMarketTransaction(
    chain_id=U64(5),
    nonce=U64(3),
    max_priority_fee_per_gas=U128(10**9),
    max_fee_per_gas=U128(30 * 10**9),
    gas=U64(50000),
    to=Bytes0(),
    value=U256(0),
    data=Bytes(b"\x60\x00"),
    access_list=(),
)

access_list_with_keys = AccessListTransaction(
    chain_id=U64(1),
    nonce=U64(4),
    gas_price=U128(10**9),
    gas=U64(80000),
    to=Bytes20(b"\x44" * 20),
    value=U256(5),
    data=Bytes(bytes(range(100))),
    access_list=(
        Access(
            account=Bytes20(b"\x11" * 20),
            slots=(Bytes32(b"\x01" * 32), Bytes32(b"\x02" * 32)),
        ),
        Access(account=Bytes20(b"\x22" * 20), slots=()),
    ),
)

secret_key_1 = hex_to_bytes32("0x01")
address_of_key_1 = hex_to_address("0x7e5f4552091a69125d5dfcb7b8c2659029395bdf")


#
# Signature conventions
#


@pytest.mark.parametrize(
    "v, parity, chain_id",
    [
        (0, False, None),
        (1, True, None),
        (27, False, None),
        (28, True, None),
        (37, False, 1),
        (38, True, 1),
        (35 + 2 * 5 + 1, True, 5),
    ],
)
def test_signature_conventions(v: int, parity: bool, chain_id: object) -> None:
    sig = Signature(r=signature.r, s=signature.s, v=U256(v))
    assert y_parity(sig) is parity
    assert signature_chain_id(sig) == chain_id
    assert with_parity_bool(sig).v == U256(int(parity))


@pytest.mark.parametrize("v", [2, 26, 29, 34])
def test_bad_v(v: int) -> None:
    with pytest.raises(InvalidSignatureError):
        y_parity(Signature(r=signature.r, s=signature.s, v=U256(v)))


def test_legacy_v() -> None:
    assert legacy_v(False, None) == U256(27)
    assert legacy_v(True, None) == U256(28)
    assert legacy_v(True, U64(1)) == U256(38)


#
# Sealing
#


def test_sealed_vector() -> None:
    signed = into_signed(access_list_transaction, signature)
    assert encode_sealed(signed.transaction, signed.signature) == sealed_vector
    assert signed.hash == keccak256(sealed_vector)


def test_sealed_vector_contract_creation() -> None:
    tx = set_to(access_list_transaction, Bytes0())
    expected = hex_to_bytes(
        "01f84d" + "01800102" + "80" + "03820102c0" + signature_hex
    )
    assert encode_sealed(tx, signature) == expected


def test_decode_sealed_vector() -> None:
    signed, rest = decode_signed(ACCESS_LIST, sealed_vector[1:])
    assert rest == b""
    assert signed.transaction == access_list_transaction
    assert signed.signature == signature
    assert signed.hash == keccak256(sealed_vector)


@pytest.mark.parametrize("v", [0, 27, 37])
def test_typed_signature_normalization(v: int) -> None:
    sig = Signature(r=signature.r, s=signature.s, v=U256(v))
    signed = into_signed(access_list_transaction, sig)
    assert signed.signature == signature
    assert encode_sealed(signed.transaction, signed.signature) == sealed_vector


@pytest.mark.parametrize("v", [0, 27, 37])
def test_legacy_signature_normalization(v: int) -> None:
    sig = Signature(r=signature.r, s=signature.s, v=U256(v))
    signed = into_signed(eip155_transaction, sig)
    assert signed.signature.v == U256(37)

    unprotected = into_signed(set_chain_id(eip155_transaction, None), sig)
    assert unprotected.signature.v == U256(27)


def test_signed_transaction_is_frozen() -> None:
    signed = into_signed(access_list_transaction, signature)
    assert isinstance(signed, SignedTransaction)
    with pytest.raises(AttributeError):
        signed.hash = keccak256(b"")  # type: ignore[misc]


@pytest.mark.parametrize(
    "change",
    [
        pytest.param(lambda tx: set_chain_id(tx, U64(2)), id="chain_id"),
        pytest.param(lambda tx: set_nonce(tx, U64(5)), id="nonce"),
        pytest.param(lambda tx: set_gas_price(tx, U256(2)), id="gas_price"),
        pytest.param(lambda tx: set_gas_limit(tx, U64(80001)), id="gas"),
        pytest.param(lambda tx: set_to(tx, Bytes0()), id="to"),
        pytest.param(lambda tx: set_value(tx, U256(6)), id="value"),
        pytest.param(lambda tx: set_input(tx, Bytes(b"\x00" * 100)), id="data"),
        pytest.param(
            lambda tx: set_access_list(tx, tx.access_list[:1]),
            id="access_list",
        ),
    ],
)
def test_hash_changes_with_field(change: object) -> None:
    signed = into_signed(access_list_with_keys, signature)
    changed = into_signed(change(access_list_with_keys), signature)
    assert signed.hash != changed.hash
    assert into_signed(access_list_with_keys, signature).hash == signed.hash


@pytest.mark.parametrize(
    "changed_signature",
    [
        pytest.param(
            Signature(r=U256(1), s=signature.s, v=signature.v), id="r"
        ),
        pytest.param(
            Signature(r=signature.r, s=U256(1), v=signature.v), id="s"
        ),
        pytest.param(
            Signature(r=signature.r, s=signature.s, v=U256(1)), id="y_parity"
        ),
    ],
)
def test_hash_changes_with_signature(changed_signature: Signature) -> None:
    signed = into_signed(access_list_with_keys, signature)
    changed = into_signed(access_list_with_keys, changed_signature)
    assert signed.hash != changed.hash


def test_sealed_long_form() -> None:
    sealed = encode_sealed(access_list_with_keys, signature)
    assert sealed[0] == 0x01
    # more than 55 bytes of payload: long list header
    assert sealed[1] > rlp.LIST_LONG_OFFSET
    assert len(sealed) == envelope.payload_len_with_signature_without_header(
        access_list_with_keys, signature
    )
    assert len(rlp.encode_bytes(sealed)) == envelope.payload_len_with_signature(
        access_list_with_keys, signature
    )

    signed, rest = decode_signed(ACCESS_LIST, sealed[1:])
    assert rest == b""
    assert signed == into_signed(access_list_with_keys, signature)
    assert signed.transaction.access_list[0].slots == (
        Bytes32(b"\x01" * 32),
        Bytes32(b"\x02" * 32),
    )
    assert signed.hash == keccak256(sealed)


def test_eip155_vector() -> None:
    signed, rest = decode_signed(LEGACY, eip155_sealed)
    assert rest == b""
    assert signed.transaction == eip155_transaction
    assert signed.signature.v == U256(37)
    assert signed.hash == keccak256(eip155_sealed)
    assert encode_sealed(signed.transaction, signed.signature) == eip155_sealed


def test_eip155_signing_hash() -> None:
    assert signing_hash(eip155_transaction) == hex_to_bytes32(
        "0xdaf5a779ae972f972197303d7b574746c7ef83eadac0f2791ad23db92e4c8e53"
    )


def test_eip155_sign() -> None:
    secret_key = Bytes32(b"\x46" * 32)
    signed = sign_transaction(eip155_transaction, secret_key)
    assert encode_sealed(signed.transaction, signed.signature) == eip155_sealed


#
# Decoding failures
#


def test_decode_signed_truncated() -> None:
    for end in range(1, len(sealed_vector) - 1):
        with pytest.raises(InputTooShort):
            decode_signed(ACCESS_LIST, sealed_vector[1:end])


def test_decode_signed_requires_list() -> None:
    with pytest.raises(UnexpectedString):
        decode_signed(ACCESS_LIST, hex_to_bytes("83010203"))


def test_decode_signed_extra_item() -> None:
    body = encode_with_signature(access_list_transaction, signature)
    payload = body[2:] + b"\x01"
    with pytest.raises(ListLengthMismatch):
        decode_signed(ACCESS_LIST, bytes([0xF8, len(payload)]) + payload)


def test_decode_signed_rejects_legacy_v_in_typed() -> None:
    body = encode_with_signature(
        access_list_transaction,
        Signature(r=signature.r, s=signature.s, v=U256(27)),
    )
    with pytest.raises(IntegerOverflow):
        decode_signed(ACCESS_LIST, body)


@pytest.mark.parametrize("v", [0, 1, 29, 34])
def test_decode_signed_rejects_bad_legacy_v(v: int) -> None:
    body = encode_with_signature(
        eip155_transaction, Signature(r=signature.r, s=signature.s, v=U256(v))
    )
    with pytest.raises(InvalidSignatureError):
        decode_signed(LEGACY, body)


def test_decode_signed_legacy_chain_id_overflow() -> None:
    v = U256(35 + 2 * 2**64)
    body = encode_with_signature(
        eip155_transaction, Signature(r=signature.r, s=signature.s, v=v)
    )
    with pytest.raises(InvalidSignatureError):
        decode_signed(LEGACY, body)


#
# Signing and recovery
#


@pytest.mark.parametrize(
    "tx",
    [
        access_list_transaction,
        access_list_with_keys,
        transaction_1559,
        eip155_transaction,
        set_chain_id(eip155_transaction, None),
    ],
)
def test_sign_and_recover(tx: object) -> None:
    signed = sign_transaction(tx, secret_key_1)
    assert recover_sender(signed) == address_of_key_1


def test_signed_roundtrip() -> None:
    signed = sign_transaction(transaction_1559, secret_key_1)
    sealed = encode_sealed(signed.transaction, signed.signature)
    decoded, rest = decode_signed(FEE_MARKET, sealed[1:])
    assert rest == b""
    assert decoded == signed
    assert recover_sender(decoded) == address_of_key_1


def test_sign_chain_id_zero() -> None:
    with pytest.raises(InvalidChainIdError):
        sign_transaction(set_chain_id(access_list_transaction, U64(0)), secret_key_1)


@pytest.mark.parametrize(
    "r, s",
    [
        (0, 1),
        (int(SECP256K1N), 1),
        (1, 0),
        (1, int(SECP256K1N) // 2 + 1),
    ],
)
def test_recover_rejects_out_of_range(r: int, s: int) -> None:
    signed = into_signed(
        access_list_transaction, Signature(r=U256(r), s=U256(s), v=U256(0))
    )
    with pytest.raises(InvalidSignatureError):
        recover_sender(signed)


def test_recover_other_transaction() -> None:
    signed = sign_transaction(access_list_transaction, secret_key_1)
    forged = into_signed(set_nonce(access_list_transaction, U64(7)), signed.signature)
    assert recover_sender(forged) != address_of_key_1


def test_address_of_secret_key() -> None:
    public_key = public_key_from_secret(secret_key_1)
    assert len(public_key) == 64
    assert keccak256(public_key)[12:32] == address_of_key_1
