"""Tests for incentive accounting: supply, stakes, rewards and slashing."""

import pytest

from coldchain_ledger.common.errors import ErrorCategory, IncentiveError
from coldchain_ledger.incentives.accounting import IncentiveAccounting
from coldchain_ledger.incentives.models import StakeRole, apply_rate
from tests.conftest import AUTHORITY, OUTSIDER, STAKER, ctx, make_settings

GENESIS = 100_000_000_000_000
POOL = "ST2POOL"


def _conserved(book: IncentiveAccounting) -> int:
    return book.circulating_supply() + book.total_supply


@pytest.fixture
def book(incentives):
    """Authority bound, genesis minted to the authority, staker funded."""
    incentives.set_authority(ctx(AUTHORITY), AUTHORITY)
    incentives.mint_initial_supply(ctx(AUTHORITY), AUTHORITY)
    incentives.transfer_tokens(ctx(AUTHORITY), 1_000_000, STAKER)
    return incentives


def _stake(book, amount=500_000, batch_id=1, role="distributor", height=1000, caller=STAKER):
    return book.stake_tokens(ctx(caller, height), batch_id, amount, role)


class TestInitialSupply:
    def test_mint_initial_supply(self, incentives):
        incentives.set_authority(ctx(AUTHORITY), AUTHORITY)
        result = incentives.mint_initial_supply(ctx(AUTHORITY), POOL)
        assert result.ok is True
        assert incentives.get_balance(POOL) == GENESIS
        assert incentives.total_supply == 0

    def test_mint_is_one_shot(self, incentives):
        incentives.set_authority(ctx(AUTHORITY), AUTHORITY)
        incentives.mint_initial_supply(ctx(AUTHORITY), POOL)
        result = incentives.mint_initial_supply(ctx(AUTHORITY), OUTSIDER)
        assert result.code is IncentiveError.SUPPLY_ALREADY_MINTED
        assert incentives.get_balance(OUTSIDER) == 0

    def test_mint_is_one_shot_with_empty_genesis(self):
        book = IncentiveAccounting(make_settings(genesis_supply=0))
        book.set_authority(ctx(AUTHORITY), AUTHORITY)
        assert book.mint_initial_supply(ctx(AUTHORITY), POOL).ok is True
        result = book.mint_initial_supply(ctx(AUTHORITY), POOL)
        assert result.code is IncentiveError.SUPPLY_ALREADY_MINTED

    def test_mint_requires_authority(self, incentives):
        assert incentives.mint_initial_supply(ctx(AUTHORITY), POOL).value is False
        incentives.set_authority(ctx(AUTHORITY), AUTHORITY)
        assert incentives.mint_initial_supply(ctx(OUTSIDER), POOL).code is IncentiveError.NOT_AUTHORIZED
        assert incentives.total_supply == GENESIS


class TestTransferTokens:
    def test_transfer(self, book):
        assert book.transfer_tokens(ctx(STAKER), 250, OUTSIDER).ok is True
        assert book.get_balance(OUTSIDER) == 250
        assert book.get_balance(STAKER) == 999_750

    def test_overdraw_rejected(self, book):
        result = book.transfer_tokens(ctx(STAKER), 1_000_001, OUTSIDER)
        assert result.code is IncentiveError.INSUFFICIENT_BALANCE
        assert result.category is ErrorCategory.INSUFFICIENT_RESOURCE

    def test_non_positive_amount(self, book):
        assert book.transfer_tokens(ctx(STAKER), 0, OUTSIDER).code is IncentiveError.INVALID_AMOUNT


class TestStakeTokens:
    def test_stake(self, book):
        result = _stake(book)
        assert result.ok is True
        assert result.value == 0

        stake = book.get_stake(0)
        assert stake.batch_id == 1
        assert stake.amount == 500_000
        assert stake.role is StakeRole.DISTRIBUTOR
        assert stake.start_height == 1000
        assert stake.claimed is False
        assert book.get_total_staked("distributor") == 500_000
        assert book.get_balance(STAKER) == 500_000
        assert book.get_stakes_for_batch(1) == [0]

    def test_stake_count(self, book):
        _stake(book, amount=100, batch_id=1, role="manufacturer")
        _stake(book, amount=100, batch_id=2, role="distributor")
        assert book.get_stake_count() == 2

    @pytest.mark.parametrize(
        "kwargs, code",
        [
            ({"batch_id": 0}, IncentiveError.INVALID_BATCH_ID),
            ({"amount": 0}, IncentiveError.INVALID_AMOUNT),
            ({"role": "invalid"}, IncentiveError.INVALID_ROLE),
            ({"amount": 2_000_000}, IncentiveError.INSUFFICIENT_BALANCE),
        ],
    )
    def test_invalid_stake(self, book, kwargs, code):
        result = _stake(book, **kwargs)
        assert result.code is code
        assert book.get_stake_count() == 0
        assert book.get_balance(STAKER) == 1_000_000

    def test_balance_checked_before_authority(self, incentives):
        result = incentives.stake_tokens(ctx(STAKER), 1, 500_000, "distributor")
        assert result.code is IncentiveError.INSUFFICIENT_BALANCE

    def test_max_stakes_exceeded(self):
        book = IncentiveAccounting(make_settings(max_stakes=1))
        book.set_authority(ctx(AUTHORITY), AUTHORITY)
        book.mint_initial_supply(ctx(AUTHORITY), STAKER)
        assert _stake(book).ok is True
        result = _stake(book)
        assert result.code is IncentiveError.MAX_STAKES_EXCEEDED
        assert book.get_total_staked("distributor") == 500_000


class TestClaimReward:
    def test_claim_before_lock(self, book):
        _stake(book)
        result = book.claim_reward(ctx(STAKER, 21159), 0)
        assert result.ok is False
        assert result.code is IncentiveError.STAKE_LOCKED
        assert result.category is ErrorCategory.TEMPORAL

    def test_claim_at_unlock_height(self, book):
        _stake(book)
        before = book.get_balance(STAKER)
        result = book.claim_reward(ctx(STAKER, 21160), 0)
        assert result.ok is True
        assert result.value == 500_000 * 100 // 10000
        assert book.get_balance(STAKER) == before + 5000
        assert book.get_stake(0).claimed is True
        # Claiming does not release the pledge from the role pool
        assert book.get_total_staked("distributor") == 500_000

    def test_second_claim_rejected(self, book):
        _stake(book)
        book.claim_reward(ctx(STAKER, 30000), 0)
        result = book.claim_reward(ctx(STAKER, 30001), 0)
        assert result.code is IncentiveError.REWARD_ALREADY_CLAIMED

    def test_only_staker_can_claim(self, book):
        _stake(book)
        result = book.claim_reward(ctx(OUTSIDER, 30000), 0)
        assert result.value is False
        assert result.code is IncentiveError.NOT_AUTHORIZED

    def test_unknown_stake(self, book):
        assert book.claim_reward(ctx(STAKER, 30000), 4).code is IncentiveError.STAKE_NOT_FOUND

    def test_reward_floors(self, book):
        _stake(book, amount=99)
        assert book.claim_reward(ctx(STAKER, 30000), 0).value == 0

    def test_authority_cannot_fund_reward(self):
        book = IncentiveAccounting(make_settings())
        book.set_authority(ctx(AUTHORITY), AUTHORITY)
        book.mint_initial_supply(ctx(AUTHORITY), STAKER)
        _stake(book, amount=100)
        book.set_reward_rate(ctx(AUTHORITY), 10000)
        # Authority holds only the 100 pledged; a 100% reward is exactly fundable
        assert book.claim_reward(ctx(STAKER, 30000), 0).value == 100
        _stake(book, amount=100, height=30000)
        result = book.claim_reward(ctx(STAKER, 60000), 1)
        assert result.ok is True
        _stake(book, amount=200, height=60000)
        book.transfer_tokens(ctx(AUTHORITY), 200, OUTSIDER)
        result = book.claim_reward(ctx(STAKER, 90000), 2)
        assert result.code is IncentiveError.INSUFFICIENT_REWARDS
        assert book.get_stake(2).claimed is False


class TestSlashStake:
    def test_slash(self, book):
        _stake(book)
        staker_before = book.get_balance(STAKER)
        result = book.slash_stake(ctx(AUTHORITY), 0, 2000)
        assert result.ok is True
        assert result.value == 100_000
        assert book.get_balance(STAKER) == staker_before + 400_000
        assert book.get_total_staked("distributor") == 0
        assert book.get_stake(0).claimed is True

    def test_full_penalty_returns_nothing(self, book):
        _stake(book)
        assert book.slash_stake(ctx(AUTHORITY), 0, 10000).value == 500_000
        assert book.get_balance(STAKER) == 500_000

    def test_non_authority(self, book):
        _stake(book)
        result = book.slash_stake(ctx(STAKER), 0, 2000)
        assert result.ok is False
        assert result.value is False
        assert book.get_stake(0).claimed is False

    def test_penalty_rate_above_basis(self, book):
        _stake(book)
        assert book.slash_stake(ctx(AUTHORITY), 0, 10001).code is IncentiveError.INVALID_PENALTY

    def test_slash_after_claim(self, book):
        _stake(book)
        book.claim_reward(ctx(STAKER, 30000), 0)
        result = book.slash_stake(ctx(AUTHORITY), 0, 2000)
        assert result.code is IncentiveError.REWARD_ALREADY_CLAIMED
        assert book.get_total_staked("distributor") == 500_000

    def test_claim_after_slash(self, book):
        _stake(book)
        book.slash_stake(ctx(AUTHORITY), 0, 2000)
        assert book.claim_reward(ctx(STAKER, 30000), 0).code is IncentiveError.REWARD_ALREADY_CLAIMED


class TestRewardRate:
    def test_set_reward_rate(self, book):
        assert book.set_reward_rate(ctx(AUTHORITY), 200).ok is True
        assert book.reward_rate == 200

    def test_reward_rate_bounds_and_authority(self, book):
        assert book.set_reward_rate(ctx(AUTHORITY), 10001).code is IncentiveError.INVALID_RATE
        assert book.set_reward_rate(ctx(STAKER), 200).code is IncentiveError.NOT_AUTHORIZED
        assert book.reward_rate == 100


class TestConservation:
    def test_supply_is_conserved_across_operations(self, incentives):
        assert _conserved(incentives) == GENESIS
        incentives.set_authority(ctx(AUTHORITY), AUTHORITY)
        incentives.mint_initial_supply(ctx(AUTHORITY), AUTHORITY)
        assert _conserved(incentives) == GENESIS
        incentives.transfer_tokens(ctx(AUTHORITY), 3_000_000, STAKER)
        _stake(incentives, amount=1_000_000)
        _stake(incentives, amount=700_001, role="provider")
        incentives.stake_tokens(ctx(STAKER, 1000), 1, 5_000_000, "provider")  # rejected
        incentives.claim_reward(ctx(STAKER, 25000), 0)
        incentives.slash_stake(ctx(AUTHORITY), 1, 3333)
        assert _conserved(incentives) == GENESIS
        assert all(balance >= 0 for balance in incentives.balances().values())


def test_apply_rate_floors():
    assert apply_rate(500_000, 2000) == 100_000
    assert apply_rate(7, 3333) == 2
    assert apply_rate(1, 9999) == 0
