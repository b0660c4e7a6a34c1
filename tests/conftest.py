"""Pytest fixtures shared across all evm_callgraph tests."""

from __future__ import annotations

import json
from typing import Any, Callable, Iterator

import httpx
import pytest

from evm_callgraph.config import APIConfig, EvmCallgraphConfig
from evm_callgraph.eth import Account, Address

# ── Constants ─────────────────────────────────────────────────────────────────

USDC_ADDR = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
VITALIK_ADDR = "0xd8da6bf26964af9d7eed9e03e53415d37aa96045"
ETHERSCAN_API_KEY = "test_etherscan_key_12345"


# ── Config fixtures ───────────────────────────────────────────────────────────


@pytest.fixture
def sample_config() -> EvmCallgraphConfig:
    """Minimal valid config for tests."""
    return EvmCallgraphConfig(api=APIConfig(etherscan_api_key=ETHERSCAN_API_KEY))


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Keep the developer's real key and config file out of every test."""
    monkeypatch.delenv("ETHERSCAN_API", raising=False)
    monkeypatch.delenv("EVM_CALLGRAPH_BASE_URL", raising=False)
    monkeypatch.delenv("EVM_CALLGRAPH_TIMEOUT", raising=False)
    monkeypatch.delenv("EVM_CALLGRAPH_CONFIG", raising=False)
    monkeypatch.setenv("EVM_CALLGRAPH_CONFIG_PATH", str(tmp_path / "absent.toml"))


# ── Model fixtures ────────────────────────────────────────────────────────────


@pytest.fixture
def eoa_account() -> Account:
    """Externally owned account holding 800_000_000 wei."""
    return Account(address=Address(VITALIK_ADDR), nonce=7, balance=800_000_000, code=b"")


@pytest.fixture
def contract_account() -> Account:
    return Account(address=Address(USDC_ADDR), nonce=1, balance=0, code=b"\x60\x80\x60\x40")


# ── API response fixtures ─────────────────────────────────────────────────────


@pytest.fixture
def full_source_code_envelope() -> dict:
    """Realistic getsourcecode envelope for a verified proxy contract."""
    return {
        "status": "1",
        "message": "OK",
        "result": [
            {
                "SourceCode": "pragma solidity 0.6.12;\ncontract FiatTokenProxy {}",
                "ABI": '[{"inputs":[],"stateMutability":"nonpayable","type":"constructor"}]',
                "ContractName": "FiatTokenProxy",
                "CompilerVersion": "v0.6.12+commit.27d51765",
                "OptimizationUsed": "0",
                "Runs": "200",
                "ConstructorArguments": "0000000000000000000000000882477e7895bdc5cea7cb1552ed914ab157fe56",
                "EVMVersion": "Default",
                "Library": "",
                "LicenseType": "",
                "Proxy": "1",
                "Implementation": "0x43506849d7c04f9138d1a2050bbf3a0c054402dd",
                "SwarmSource": "",
            }
        ],
    }


@pytest.fixture
def abi_envelope() -> dict:
    """getabi envelope: result is the ABI as a bare JSON string."""
    return {
        "status": "1",
        "message": "OK",
        "result": '[{"constant":true,"inputs":[],"name":"name","outputs":[{"name":"","type":"string"}],"type":"function"}]',
    }


@pytest.fixture
def not_verified_envelope() -> dict:
    return {
        "status": "0",
        "message": "NOTOK",
        "result": "Contract source code not verified",
    }


# ── HTTP fixtures ─────────────────────────────────────────────────────────────


class RecordingClient(httpx.Client):
    """httpx.Client that exposes the requests its mock transport saw."""

    requests: list[httpx.Request]


@pytest.fixture
def mock_http() -> Iterator[Callable[..., RecordingClient]]:
    """
    Factory for an httpx.Client backed by MockTransport.

    Every request is appended to the returned client's `.requests` list.
    """
    clients: list[RecordingClient] = []

    def _make(
        body: Any = None,
        status_code: int = 200,
        raw: bytes | None = None,
        error: type[httpx.TransportError] | None = None,
    ) -> RecordingClient:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if error is not None:
                raise error("simulated transport failure", request=request)
            content = raw if raw is not None else json.dumps(body).encode()
            return httpx.Response(status_code, content=content)

        client = RecordingClient(transport=httpx.MockTransport(handler))
        client.requests = requests
        clients.append(client)
        return client

    yield _make

    for c in clients:
        c.close()
