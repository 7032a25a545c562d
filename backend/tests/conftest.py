"""Shared fixtures for the contractviz test suite."""

import json
import os

# Must be set before contractviz.config is first imported
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest  # noqa: E402


VAULT_SOURCE = """// SPDX-License-Identifier: MIT
pragma solidity ^0.8.0;

import "./Ownable.sol";

contract Vault is Ownable, ERC20("Vault", "VLT") {
    uint256 public totalDeposits;
    address private admin;
    uint256 public constant FEE = 5;

    event Deposited(address indexed account, uint256 amount);
    event Withdrawn(address indexed account, uint256 amount) anonymous;

    modifier onlyAdmin() {
        require(msg.sender == admin, "not admin");
        _;
    }

    function deposit() public payable {
        totalDeposits = totalDeposits + msg.value;
        emit Deposited(msg.sender, msg.value);
    }

    function withdraw(uint256 amount) external onlyOwner {
        totalDeposits = totalDeposits - amount;
        emit Withdrawn(msg.sender, amount);
    }

    function setAdmin(address newAdmin) public onlyOwner {
        admin = newAdmin;
    }

    function balance() public view returns (uint256) {
        return totalDeposits;
    }
}
"""

GETTER_SOURCE = "contract Foo { function bar() public view returns (uint256) {} }"

GUARDED_SOURCE = "contract Box { function lock() public { onlyOwner; } }"

DOOMED_SOURCE = """contract Doomed {
    function ping() public { }
    function destroy() public { selfdestruct(payable(msg.sender)); }
    function later() public { }
}
"""

SIMPLE_STORAGE_ABI = [
    {
        "inputs": [],
        "name": "retrieve",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "uint256", "name": "num", "type": "uint256"}],
        "name": "store",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]


@pytest.fixture
def vault_source() -> str:
    return VAULT_SOURCE


@pytest.fixture
def getter_source() -> str:
    return GETTER_SOURCE


@pytest.fixture
def guarded_source() -> str:
    return GUARDED_SOURCE


@pytest.fixture
def doomed_source() -> str:
    return DOOMED_SOURCE


@pytest.fixture
def simple_storage_abi() -> list:
    return json.loads(json.dumps(SIMPLE_STORAGE_ABI))


@pytest.fixture
def simple_storage_text() -> str:
    return json.dumps(SIMPLE_STORAGE_ABI, indent=2)


@pytest.fixture
def all_sources(simple_storage_text: str) -> list[str]:
    """Every sample input, for properties that must hold across all of them."""
    return [VAULT_SOURCE, GETTER_SOURCE, GUARDED_SOURCE, DOOMED_SOURCE, simple_storage_text]
