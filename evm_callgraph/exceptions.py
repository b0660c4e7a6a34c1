"""
Custom exception hierarchy for evm_callgraph.

Each exception maps to a CLI exit code and a JSON error_code field.
cli.py catches all EvmCallgraphError subclasses and formats them as JSON output.

Exit code mapping:
  1 — EvmCallgraphError (generic error)
  2 — ClientError, JSONError (unexpected upstream payload)
  3 — HTTPError (timeout, connection refused, non-2xx)
  4 — DomainError (invalid address, not a contract)
  5 — ConfigError (missing API key, malformed config)
"""


class EvmCallgraphError(Exception):
    """Base exception for all evm_callgraph errors."""

    exit_code: int = 1
    error_code: str = "unknown_error"

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


# ── Domain errors ─────────────────────────────────────────────────────────────


class DomainError(EvmCallgraphError):
    """A value failed domain-model validation."""

    exit_code = 4
    error_code = "domain_error"


class AddressNotPrefixedError(DomainError):
    """Address string does not start with 0x."""

    error_code = "address_not_prefixed"

    def __init__(self, address: str) -> None:
        super().__init__(
            f"Not a valid hex address: {address} is not prefixed by 0x",
            details={"address": address},
        )
        self.address = address


class AddressIncorrectLengthError(DomainError):
    """Address string is not exactly 42 characters long."""

    error_code = "address_incorrect_length"

    def __init__(self, address: str, length: int) -> None:
        super().__init__(
            f"Not a valid hex address: {address} is not exactly 42 in length. Got: {length}",
            details={"address": address, "length": length},
        )
        self.address = address
        self.length = length


class NotAContractError(DomainError):
    """Contract construction was attempted with empty bytecode."""

    error_code = "not_a_contract"

    def __init__(self, account: str) -> None:
        super().__init__(
            f"Address {account} is not a contract",
            details={"account": account},
        )
        self.account = account


# ── Client errors ─────────────────────────────────────────────────────────────


class ClientError(EvmCallgraphError):
    """Explorer API call failed."""

    exit_code = 2
    error_code = "client_error"


class HTTPError(ClientError):
    """Transport failure: connection refused, timeout or non-2xx status."""

    exit_code = 3
    error_code = "http_error"


class JSONError(ClientError):
    """Response body is not valid JSON or does not match the envelope shape."""

    error_code = "json_error"


# ── Config errors ─────────────────────────────────────────────────────────────


class ConfigError(EvmCallgraphError):
    """Config file or environment is missing or malformed."""

    exit_code = 5
    error_code = "config_error"


class ConfigMissingError(ConfigError):
    """A required setting (the Etherscan API key) is not configured."""

    error_code = "config_missing"


class ConfigInvalidError(ConfigError):
    """Config file exists but contains invalid TOML or invalid values."""

    error_code = "config_invalid"
