import pytest

from jackpot_pool.addresses import Address, is_valid_address, parse_address


def test_from_payload_builds_prefixed_address() -> None:
    address = Address.from_payload("AU", b"alice")

    assert str(address).startswith("AU")
    assert address.kind == "AU"
    assert address.is_contract_address is False
    assert parse_address(str(address)) == ("AU", b"alice")


def test_contract_prefix_is_detected() -> None:
    assert Address.from_payload("AS", b"pool").is_contract_address is True


def test_to_bytes_and_back_preserves_address() -> None:
    address = Address.from_payload("AS", b"\x01\x02\x03")

    assert Address.from_bytes(address.to_bytes()) == address


def test_invalid_checksum_is_rejected() -> None:
    text = str(Address.from_payload("AU", b"alice"))
    tampered = text[:-1] + ("2" if text[-1] != "2" else "3")

    assert is_valid_address(tampered) is False
    with pytest.raises(ValueError):
        Address(tampered)


@pytest.mark.parametrize("text", ["", "AU", "XX11111", "AU0OIl"])
def test_malformed_addresses_are_rejected(text: str) -> None:
    assert is_valid_address(text) is False


def test_unknown_kind_is_rejected() -> None:
    with pytest.raises(ValueError):
        Address.from_payload("AX", b"alice")
