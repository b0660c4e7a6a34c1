"""
Ethereum domain model: addresses, accounts and contracts.

Values here are validated once, at construction, and are immutable afterwards.
Frozen dataclasses keep the shapes plain; __post_init__ is the only validation
point, so an unvalidated Address or a bytecode-less Contract cannot exist.
"""

from __future__ import annotations

from dataclasses import dataclass

from evm_callgraph.exceptions import (
    AddressIncorrectLengthError,
    AddressNotPrefixedError,
    NotAContractError,
)

ADDRESS_PREFIX = "0x"
ADDRESS_LENGTH = 42  # "0x" + 40 hex chars

# Display-only scaling for Account.__str__. Not derived from chain decimals.
DISPLAY_BALANCE_DIVISOR = 10**8


@dataclass(frozen=True)
class Address:
    """
    A 42-character account identifier: "0x" followed by 40 characters.

    Only the prefix and the length are checked. The body is not verified
    to be hexadecimal and no EIP-55 checksum casing is enforced.

    Raises:
        AddressNotPrefixedError: value does not start with "0x"
        AddressIncorrectLengthError: value is not exactly 42 characters
    """

    value: str

    def __post_init__(self) -> None:
        if not self.value.startswith(ADDRESS_PREFIX):
            raise AddressNotPrefixedError(self.value)
        length = len(self.value)
        if length != ADDRESS_LENGTH:
            raise AddressIncorrectLengthError(self.value, length)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, repr=False)
class Account:
    """On-chain account state. An empty `code` means an externally owned account."""

    address: Address
    nonce: int
    balance: int  # wei
    code: bytes

    def is_eoa(self) -> bool:
        return len(self.code) == 0

    def __str__(self) -> str:
        kind = "EOA" if self.is_eoa() else "Contract"
        return f"{kind} @ {self.address} ({self.balance // DISPLAY_BALANCE_DIVISOR} ETH)"

    def __repr__(self) -> str:
        return str(self)


@dataclass(frozen=True)
class Contract:
    """
    Metadata for a deployed contract, wrapping the Account it lives at.

    Only `bytecode` decides whether this is a contract; the wrapped
    account's own `code` field is not consulted.

    Raises:
        NotAContractError: bytecode is empty
    """

    account: Account
    bytecode: str
    source: str | None = None
    abi: str | None = None
    name: str | None = None

    def __post_init__(self) -> None:
        if not self.bytecode:
            raise NotAContractError(str(self.account))

    @property
    def address(self) -> Address:
        return self.account.address
