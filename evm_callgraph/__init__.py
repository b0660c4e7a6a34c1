"""evm_callgraph: contract source code and ABI lookups against Etherscan."""

from evm_callgraph.eth import Account, Address, Contract
from evm_callgraph.etherscan import ABI, Client, Response, SourceCode

__version__ = "0.1.0"

__all__ = [
    "ABI",
    "Account",
    "Address",
    "Client",
    "Contract",
    "Response",
    "SourceCode",
    "__version__",
]
