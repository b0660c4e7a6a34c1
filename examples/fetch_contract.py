"""Fetch source code and ABI for one contract.

Reads the Etherscan API key from ETHERSCAN_API and exits with an error if
it is not set.
"""

import os

from evm_callgraph import Address, Client

USDC = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"


def main():
    api_key = os.environ["ETHERSCAN_API"]
    addr = Address(USDC)

    with Client(api_key) as client:
        source = client.get_source_code(addr)
        abi = client.get_abi(addr)

    print(f"getsourcecode: status={source.status} message={source.message}")
    for item in source.result:
        print(f"  {item.contract_name} ({item.compiler_version or 'unknown compiler'})")

    print(f"getabi: status={abi.status} message={abi.message}")
    for item in abi.result:
        print(f"  {len(str(item))} characters of ABI")


if __name__ == "__main__":
    main()
