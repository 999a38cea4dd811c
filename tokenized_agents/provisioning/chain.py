"""
chain.py — Base chain access: balance reads and the registry write.
"""

import logging

import requests
from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.exceptions import Web3Exception

from .config import DEFAULT_RPC, REGISTRY_ADDRESS
from .errors import RemoteReadError, RemoteWriteError

log = logging.getLogger("spawn.chain")

REGISTRY_ABI = [
    {
        "inputs": [
            {"internalType": "string", "name": "repoUrl", "type": "string"},
            {"internalType": "string", "name": "name", "type": "string"},
        ],
        "name": "register",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]

RECEIPT_TIMEOUT = 300


class ChainClient:
    """Minimal web3 wrapper. One instance per run."""

    def __init__(self, rpc_url: str = DEFAULT_RPC, registry_address: str = REGISTRY_ADDRESS,
                 w3: Web3 | None = None):
        self.rpc_url = rpc_url
        self.w3 = w3 or Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": 30}))
        self.registry = self.w3.eth.contract(
            address=Web3.to_checksum_address(registry_address), abi=REGISTRY_ABI,
        )

    def get_balance(self, address: str) -> int:
        try:
            return self.w3.eth.get_balance(Web3.to_checksum_address(address))
        except (Web3Exception, ValueError, requests.RequestException) as exc:
            raise RemoteReadError(f"balance check failed: {exc}", f"check BASE_RPC ({self.rpc_url})") from exc

    def register(self, account: LocalAccount, repo_url: str, name: str) -> dict:
        """Submit register(repoUrl, name) and wait for the receipt."""
        try:
            tx = self.registry.functions.register(repo_url, name).build_transaction({
                "from": account.address,
                "nonce": self.w3.eth.get_transaction_count(account.address),
                "chainId": self.w3.eth.chain_id,
            })
            signed = account.sign_transaction(tx)
            tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
            log.info(f"  tx: {Web3.to_hex(tx_hash)}")
            receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=RECEIPT_TIMEOUT)
        except (Web3Exception, ValueError, requests.RequestException) as exc:
            raise RemoteWriteError(f"registration failed: {exc}") from exc
        if receipt["status"] != 1:
            raise RemoteWriteError(f"registration reverted: {Web3.to_hex(tx_hash)}")
        return receipt
