"""
Tests for the chain client (web3 mocked).
"""

from unittest.mock import MagicMock

import pytest
import requests
from web3.exceptions import TimeExhausted

from tokenized_agents.provisioning.chain import ChainClient
from tokenized_agents.provisioning.errors import RemoteReadError, RemoteWriteError

ADDRESS = "0x" + "ab" * 20
TX_HASH = bytes.fromhex("ef" * 32)


@pytest.fixture
def w3():
    w3 = MagicMock()
    w3.eth.get_transaction_count.return_value = 0
    w3.eth.chain_id = 8453
    w3.eth.send_raw_transaction.return_value = TX_HASH
    w3.eth.wait_for_transaction_receipt.return_value = {"status": 1, "transactionHash": TX_HASH}
    return w3


@pytest.fixture
def account():
    account = MagicMock()
    account.address = ADDRESS
    return account


def test_get_balance(w3):
    w3.eth.get_balance.return_value = 12345
    assert ChainClient(w3=w3).get_balance(ADDRESS) == 12345


def test_unreachable_rpc_is_remote_read_error(w3):
    w3.eth.get_balance.side_effect = requests.ConnectionError("connection refused")
    client = ChainClient("http://localhost:8545", w3=w3)
    with pytest.raises(RemoteReadError, match="connection refused") as exc_info:
        client.get_balance(ADDRESS)
    assert "localhost:8545" in exc_info.value.advice


def test_register_signs_and_waits(w3, account):
    client = ChainClient(w3=w3)
    receipt = client.register(account, "https://github.com/octo/daimon", "Nova")
    assert receipt["status"] == 1
    client.registry.functions.register.assert_called_once_with("https://github.com/octo/daimon", "Nova")
    account.sign_transaction.assert_called_once()
    w3.eth.wait_for_transaction_receipt.assert_called_once()


def test_reverted_registration(w3, account):
    w3.eth.wait_for_transaction_receipt.return_value = {"status": 0, "transactionHash": TX_HASH}
    with pytest.raises(RemoteWriteError, match="reverted"):
        ChainClient(w3=w3).register(account, "https://github.com/octo/daimon", "Nova")


def test_receipt_timeout_is_remote_write_error(w3, account):
    w3.eth.wait_for_transaction_receipt.side_effect = TimeExhausted("no receipt")
    with pytest.raises(RemoteWriteError, match="registration failed"):
        ChainClient(w3=w3).register(account, "https://github.com/octo/daimon", "Nova")
