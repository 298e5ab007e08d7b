"""
Blockchain data sources.
"""

from coffre.infrastructure.blockchain.etherscan_client import EtherscanClient
from coffre.infrastructure.blockchain.web3_chain_oracle import Web3ChainOracle

__all__ = ["Web3ChainOracle", "EtherscanClient"]
