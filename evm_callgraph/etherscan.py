"""
Etherscan API client for contract metadata.

Fetches verified source code and ABI for a contract address.

API docs: https://docs.etherscan.io/api-endpoints/contracts

Design decisions:
- Uses a synchronous httpx client; one GET per call, no retry, no pagination.
- The API key is embedded in a base URL computed once at construction.
  Per-call query parameters are merged onto it.
- The HTTP agent is injectable (Client.with_custom_http) so tests and callers
  can supply their own transport, timeout, proxy or TLS policy.
- Envelope status is reported, not enforced: a status "0" reply is returned
  to the caller as a Response, not raised.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Generic, Protocol, TypeVar, runtime_checkable

import httpx

from evm_callgraph.eth import Address
from evm_callgraph.exceptions import HTTPError, JSONError

logger = logging.getLogger(__name__)

# Etherscan API base URL
ETHERSCAN_BASE = "https://api.etherscan.io/api"

# Default per-request timeout for the built-in HTTP agent
DEFAULT_TIMEOUT = 5.0

STATUS_OK = "1"

T = TypeVar("T")


@dataclass
class Response(Generic[T]):
    """
    Envelope shared by every Etherscan reply: {status, message, result}.

    `result` is always a list. A bare-string result on a successful reply
    (getabi does this) becomes a one-element list. A bare-string result on a
    failed reply ("Invalid API Key", "Contract source code not verified")
    is kept in `detail` and `result` is empty.
    """

    status: str
    message: str
    result: list[T] = field(default_factory=list)
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    def to_dict(self) -> dict:
        """Serialize for JSON output."""
        d: dict[str, Any] = {
            "status": self.status,
            "message": self.message,
            "result": [r.to_dict() if hasattr(r, "to_dict") else str(r) for r in self.result],
        }
        if self.detail is not None:
            d["detail"] = self.detail
        return d


@dataclass
class SourceCode:
    """One element of a getsourcecode result."""

    source: str
    constructor_args: str
    contract_name: str
    abi: str = ""
    compiler_version: str = ""
    optimization_used: str = ""
    runs: str = ""
    evm_version: str = ""
    license_type: str = ""
    proxy: str = ""
    implementation: str = ""

    # Etherscan field name → attribute name
    REQUIRED_FIELDS = {
        "SourceCode": "source",
        "ConstructorArguments": "constructor_args",
        "ContractName": "contract_name",
    }
    OPTIONAL_FIELDS = {
        "ABI": "abi",
        "CompilerVersion": "compiler_version",
        "OptimizationUsed": "optimization_used",
        "Runs": "runs",
        "EVMVersion": "evm_version",
        "LicenseType": "license_type",
        "Proxy": "proxy",
        "Implementation": "implementation",
    }

    @classmethod
    def from_dict(cls, raw: Any) -> SourceCode:
        """
        Build from a raw API result element.

        Raises:
            JSONError: element is not an object or lacks a required field
        """
        if not isinstance(raw, dict):
            raise JSONError(
                f"Expected a source code object, got {type(raw).__name__}",
                details={"element": repr(raw)[:200]},
            )
        kwargs: dict[str, str] = {}
        for api_name, attr in cls.REQUIRED_FIELDS.items():
            if api_name not in raw:
                raise JSONError(
                    f"Source code object is missing field {api_name!r}",
                    details={"field": api_name},
                )
            kwargs[attr] = str(raw[api_name])
        for api_name, attr in cls.OPTIONAL_FIELDS.items():
            if api_name in raw:
                kwargs[attr] = str(raw[api_name])
        return cls(**kwargs)

    @property
    def is_verified(self) -> bool:
        return bool(self.source)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ABI:
    """Opaque contract interface description. Not parsed."""

    value: str

    @classmethod
    def from_result(cls, raw: Any) -> ABI:
        """
        Build from a raw API result element.

        getabi returns the ABI as a bare string. A getsourcecode-shaped
        object is accepted too and contributes its "ABI" field.

        Raises:
            JSONError: element is neither a string nor an object with "ABI"
        """
        if isinstance(raw, str):
            return cls(raw)
        if isinstance(raw, dict) and "ABI" in raw:
            return cls(str(raw["ABI"]))
        raise JSONError(
            f"Expected an ABI string, got {type(raw).__name__}",
            details={"element": repr(raw)[:200]},
        )

    def __str__(self) -> str:
        return self.value


@runtime_checkable
class HTTPAgent(Protocol):
    """
    The transport capability the client needs: perform a GET.

    httpx.Client satisfies this. The returned object must support
    raise_for_status() and json() the way httpx.Response does.
    """

    def get(self, url: httpx.URL) -> httpx.Response:
        ...


class Client:
    """
    Synchronous Etherscan contract API client.

    Stateless after construction and safe to reuse across many calls.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = ETHERSCAN_BASE,
        timeout: float = DEFAULT_TIMEOUT,
        http: HTTPAgent | None = None,
    ) -> None:
        self._api_key = api_key
        self.url = httpx.URL(base_url).copy_merge_params({"apikey": api_key})
        self._owns_http = http is None
        self._http: HTTPAgent = http if http is not None else httpx.Client(timeout=timeout)

    @classmethod
    def with_custom_http(
        cls, api_key: str, http: HTTPAgent, base_url: str = ETHERSCAN_BASE
    ) -> Client:
        """Create a client that sends requests through a caller-supplied agent."""
        return cls(api_key, base_url=base_url, http=http)

    @property
    def api_key(self) -> str:
        return self._api_key

    def get_source_code(self, address: Address | str) -> Response[SourceCode]:
        """
        Fetch verified source code for `address` (action=getsourcecode).

        Raises:
            AddressNotPrefixedError, AddressIncorrectLengthError: `address`
                is a str that is not a valid address
            HTTPError: connection failure, timeout or non-2xx status
            JSONError: body is not JSON or not a source code envelope
        """
        data = self._get("getsourcecode", _as_address(address))
        return _parse_envelope(data, SourceCode.from_dict)

    def get_abi(self, address: Address | str) -> Response[ABI]:
        """
        Fetch the ABI for `address` (action=getabi).

        Raises:
            AddressNotPrefixedError, AddressIncorrectLengthError: `address`
                is a str that is not a valid address
            HTTPError: connection failure, timeout or non-2xx status
            JSONError: body is not JSON or not an ABI envelope
        """
        data = self._get("getabi", _as_address(address))
        return _parse_envelope(data, ABI.from_result)

    def close(self) -> None:
        """Close the HTTP agent if this client created it."""
        if self._owns_http and isinstance(self._http, httpx.Client):
            self._http.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ──────────────────────────────────────────────────────────────
    # Private helpers
    # ──────────────────────────────────────────────────────────────

    def _get(self, action: str, address: Address) -> Any:
        url = self.url.copy_merge_params(
            {"module": "contract", "action": action, "address": str(address)}
        )
        logger.debug("GET %s", url.copy_set_param("apikey", mask_api_key(self._api_key)))

        try:
            resp = self._http.get(url)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.warning("Etherscan %s returned HTTP %d", action, status_code)
            raise HTTPError(
                f"Etherscan returned HTTP {status_code}",
                details={"action": action, "status_code": status_code},
            ) from e
        except httpx.HTTPError as e:
            logger.warning("Etherscan %s failed: %s", action, type(e).__name__)
            raise HTTPError(
                f"Cannot reach Etherscan: {type(e).__name__}: {e}",
                details={"action": action},
            ) from e

        try:
            return resp.json()
        except ValueError as e:
            logger.warning("Etherscan %s returned a non-JSON body", action)
            raise JSONError(
                f"Invalid JSON from Etherscan: {e}", details={"action": action}
            ) from e


def mask_api_key(key: str) -> str:
    """
    Mask an API key for safe display.

    'abcdefg123' → 'abcd****'
    '' → '****'
    """
    if not key:
        return "****"
    if len(key) <= 4:
        return "****"
    return key[:4] + "****"


def _as_address(address: Address | str) -> Address:
    if isinstance(address, Address):
        return address
    return Address(address)


def _parse_envelope(data: Any, parse_item: Callable[[Any], T]) -> Response[T]:
    """Validate the {status, message, result} envelope and parse each result element."""
    if not isinstance(data, dict):
        raise JSONError(f"Expected a JSON object envelope, got {type(data).__name__}")

    missing = [k for k in ("status", "message", "result") if k not in data]
    if missing:
        raise JSONError(
            f"Envelope is missing field(s): {', '.join(missing)}",
            details={"missing": missing},
        )

    status = str(data["status"])
    message = str(data["message"])
    raw = data["result"]

    if isinstance(raw, list):
        return Response(status, message, [parse_item(item) for item in raw])
    if status != STATUS_OK and isinstance(raw, str):
        return Response(status, message, [], detail=raw)
    return Response(status, message, [parse_item(raw)])
