import pytest

RISKY_TOKEN = """\
// SPDX-License-Identifier: MIT
pragma solidity ^0.8.0;

import "@openzeppelin/contracts/access/Ownable.sol";

contract RiskyToken is Ownable {
    mapping(address => bool) public blacklist;

    function mint(address to, uint256 amount) external onlyOwner {
        _mint(to, amount);
    }

    function withdraw() external onlyOwner {
        (bool ok, ) = payable(msg.sender).call{value: address(this).balance}("");
    }

    function kill() external {
        require(tx.origin == owner());
        selfdestruct(payable(owner()));
    }
}
"""

CLEAN_TOKEN = """\
pragma solidity ^0.8.0;

/* Plain fixed-supply token. */
contract Plain {
    // balances
    mapping(address => uint256) public balanceOf;

    // supply fixed at construction
    constructor(uint256 supply) {
        balanceOf[msg.sender] = supply;
    }
}
"""


@pytest.fixture
def risky_source() -> str:
    return RISKY_TOKEN


@pytest.fixture
def clean_source() -> str:
    return CLEAN_TOKEN


@pytest.fixture
def safe_signals() -> dict:
    return {
        "honeypot": False,
        "sellTax": "5%",
        "buyTax": "2%",
        "topHolderShare": "15%",
        "liquidityLocked": True,
        "liquidityLockShare": "70%",
        "verified": True,
    }
