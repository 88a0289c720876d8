"""Integration tests for the pool HTTP API."""

import pytest

from pairswap import __version__
from pairswap.api.endpoints import get_faucet_enabled
from pairswap.api.main import app
from tests.helpers import ALICE, BOB, CAROL, DAI, STARTING_BALANCE, USDC, WETH, WETH_CHECKSUM

PAIR_URL = f"/pairs/{WETH}/{USDC}"


@pytest.fixture
def pair(client):
    """WETH/USDC pool created over HTTP."""
    response = client.post("/pairs", json={"asset_a": WETH, "asset_b": USDC})
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def two_lp_pair(client, pair):
    """Pool after ALICE deposits (100, 400) and BOB deposits (10, 40)."""
    client.post(f"{PAIR_URL}/liquidity", json={"provider": ALICE, "amount_a": "100", "amount_b": "400"})
    client.post(f"{PAIR_URL}/liquidity", json={"provider": BOB, "amount_a": "10", "amount_b": "40"})
    return pair


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "version": __version__}


class TestPairs:
    def test_create_pair(self, pair):
        assert pair["asset_a"] == WETH
        assert pair["asset_b"] == USDC
        assert pair["reserve_a"] == "0"
        assert pair["reserve_b"] == "0"
        assert pair["total_supply"] == "0"
        assert pair["pool_id"].startswith("0x")

    def test_create_normalizes_checksummed_address(self, client):
        response = client.post("/pairs", json={"asset_a": WETH_CHECKSUM, "asset_b": DAI})
        assert response.status_code == 201
        assert response.json()["asset_a"] == WETH

    def test_duplicate_pair_conflicts(self, client, pair):
        response = client.post("/pairs", json={"asset_a": USDC, "asset_b": WETH})
        assert response.status_code == 409
        assert response.json()["error"] == "DuplicatePair"

    def test_identical_assets_rejected(self, client):
        response = client.post("/pairs", json={"asset_a": WETH, "asset_b": WETH_CHECKSUM})
        assert response.status_code == 400
        assert response.json()["error"] == "IdenticalAsset"

    def test_missing_field_is_422(self, client):
        response = client.post("/pairs", json={"asset_a": WETH})
        assert response.status_code == 422

    def test_list_pairs(self, client, pair):
        client.post("/pairs", json={"asset_a": DAI, "asset_b": USDC})
        response = client.get("/pairs")
        assert response.status_code == 200
        assert [p["asset_a"] for p in response.json()] == [WETH, DAI]

    def test_get_pair_either_order(self, client, pair):
        assert client.get(PAIR_URL).json() == pair
        assert client.get(f"/pairs/{USDC}/{WETH}").json() == pair

    def test_get_pool_by_id(self, client, pair):
        response = client.get(f"/pools/{pair['pool_id']}")
        assert response.status_code == 200
        assert response.json() == pair

    def test_unknown_pool_id_is_404(self, client):
        response = client.get("/pools/0x" + "00" * 20)
        assert response.status_code == 404
        assert response.json()["error"] == "PairNotFound"

    def test_unknown_pair_is_404(self, client):
        response = client.get(f"/pairs/{WETH}/{DAI}")
        assert response.status_code == 404
        assert response.json()["error"] == "PairNotFound"


class TestLiquidity:
    def test_first_and_second_deposit(self, client, pair):
        response = client.post(
            f"{PAIR_URL}/liquidity",
            json={"provider": ALICE, "amount_a": "100", "amount_b": "400"},
        )
        assert response.status_code == 200
        assert response.json()["minted_shares"] == "200"

        response = client.post(
            f"{PAIR_URL}/liquidity",
            json={"provider": BOB, "amount_a": "10", "amount_b": "40"},
        )
        data = response.json()
        assert data["minted_shares"] == "20"
        assert data["pair"]["reserve_a"] == "110"
        assert data["pair"]["reserve_b"] == "440"
        assert data["pair"]["total_supply"] == "220"

    def test_amounts_follow_stored_order(self, client, pair):
        """Reversed URL order does not swap amount_a and amount_b."""
        response = client.post(
            f"/pairs/{USDC}/{WETH}/liquidity",
            json={"provider": ALICE, "amount_a": "100", "amount_b": "400"},
        )
        assert response.json()["pair"]["reserve_a"] == "100"

    def test_zero_amount_is_400(self, client, pair):
        response = client.post(
            f"{PAIR_URL}/liquidity",
            json={"provider": ALICE, "amount_a": "0", "amount_b": "400"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "ZeroAmount"

    @pytest.mark.parametrize("amount", ["-1", "1.5", "lots"])
    def test_malformed_amount_is_422(self, client, pair, amount):
        response = client.post(
            f"{PAIR_URL}/liquidity",
            json={"provider": ALICE, "amount_a": amount, "amount_b": "400"},
        )
        assert response.status_code == 422

    def test_unfunded_provider_is_402(self, client, pair):
        response = client.post(
            f"{PAIR_URL}/liquidity",
            json={"provider": "dave", "amount_a": "100", "amount_b": "400"},
        )
        assert response.status_code == 402
        assert response.json()["error"] == "TransferError"
        assert client.get(PAIR_URL).json()["reserve_a"] == "0"

    def test_remove_liquidity(self, client, two_lp_pair):
        response = client.post(
            f"{PAIR_URL}/liquidity/remove",
            json={"provider": BOB, "share_amount": "20"},
        )
        assert response.status_code == 200
        data = response.json()
        assert (data["amount_a"], data["amount_b"]) == ("10", "40")
        assert data["pair"]["total_supply"] == "200"

    def test_remove_more_than_held_is_409(self, client, two_lp_pair):
        response = client.post(
            f"{PAIR_URL}/liquidity/remove",
            json={"provider": BOB, "share_amount": "21"},
        )
        assert response.status_code == 409
        assert response.json()["error"] == "InsufficientShares"

    def test_share_balance(self, client, two_lp_pair):
        response = client.get(f"{PAIR_URL}/shares/{BOB}")
        assert response.json()["shares"] == "20"
        assert response.json()["total_supply"] == "220"


    def test_pool_custody_account_cannot_deposit(self, client, two_lp_pair):
        response = client.post(
            f"{PAIR_URL}/liquidity",
            json={"provider": two_lp_pair["pool_id"], "amount_a": "100", "amount_b": "4"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "InvalidAccount"
        assert client.get(PAIR_URL).json()["reserve_a"] == "110"


class TestSwap:
    def test_quote(self, client, two_lp_pair):
        response = client.get(f"{PAIR_URL}/quote", params={"from_asset": WETH, "amount_in": 10})
        assert response.status_code == 200
        data = response.json()
        assert data["amount_out"] == "36"
        assert data["to_asset"] == USDC

    def test_quote_zero_is_400(self, client, two_lp_pair):
        response = client.get(f"{PAIR_URL}/quote", params={"from_asset": WETH, "amount_in": 0})
        assert response.status_code == 400

    def test_quote_empty_pool_is_409(self, client, pair):
        response = client.get(f"{PAIR_URL}/quote", params={"from_asset": WETH, "amount_in": 10})
        assert response.status_code == 409
        assert response.json()["error"] == "NoLiquidity"

    def test_swap(self, client, two_lp_pair):
        response = client.post(
            f"{PAIR_URL}/swap",
            json={"trader": CAROL, "from_asset": WETH, "amount_in": "10", "min_amount_out": "36"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["amount_out"] == "36"
        assert data["pair"]["reserve_a"] == "120"
        assert data["pair"]["reserve_b"] == "404"

        balance = client.get(f"/accounts/{CAROL}/balances/{USDC}").json()
        assert balance["balance"] == str(STARTING_BALANCE + 36)

    def test_slippage_is_409(self, client, two_lp_pair):
        response = client.post(
            f"{PAIR_URL}/swap",
            json={"trader": CAROL, "from_asset": WETH, "amount_in": "10", "min_amount_out": "37"},
        )
        assert response.status_code == 409
        assert response.json()["error"] == "SlippageExceeded"
        assert client.get(PAIR_URL).json()["reserve_a"] == "110"

    def test_asset_not_in_pool_is_400(self, client, two_lp_pair):
        response = client.post(
            f"{PAIR_URL}/swap",
            json={"trader": CAROL, "from_asset": DAI, "amount_in": "10"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "InvalidAsset"


class TestEvents:
    def test_poll_events(self, client, two_lp_pair):
        client.post(f"{PAIR_URL}/swap", json={"trader": CAROL, "from_asset": WETH, "amount_in": "10"})

        data = client.get("/events").json()
        assert [e["event"] for e in data["events"]] == [
            "PairCreated",
            "LiquidityAdded",
            "LiquidityAdded",
            "Swap",
        ]
        assert data["last_seq"] == 4
        swap = data["events"][-1]["data"]
        assert swap["amount_in"] == "10"
        assert swap["amount_out"] == "36"
        assert swap["trader"] == CAROL

        newer = client.get("/events", params={"since": 4}).json()
        assert newer == {"events": [], "last_seq": 4}

    def test_failed_operations_not_logged(self, client, two_lp_pair):
        client.post(
            f"{PAIR_URL}/swap",
            json={"trader": CAROL, "from_asset": WETH, "amount_in": "10", "min_amount_out": "999"},
        )
        assert client.get("/events").json()["last_seq"] == 3


class TestAccounts:
    def test_credit_and_balance(self, client):
        response = client.post("/accounts/dave/credit", json={"asset": DAI, "amount": "500"})
        assert response.status_code == 200
        assert response.json()["balance"] == "500"
        assert client.get(f"/accounts/dave/balances/{DAI}").json()["balance"] == "500"

    def test_credit_disabled_is_403(self, client):
        app.dependency_overrides[get_faucet_enabled] = lambda: False
        response = client.post("/accounts/dave/credit", json={"asset": DAI, "amount": "500"})
        assert response.status_code == 403
        assert client.get(f"/accounts/dave/balances/{DAI}").json()["balance"] == "0"
