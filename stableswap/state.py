"""Pool and farming state records.

These are the only mutable records in the system. The engine owns them and
hands them to the operation modules by reference; nothing here talks to the
ledger.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple


class Side(str, Enum):
    """One of the two pool assets."""

    A = "a"
    B = "b"

    @property
    def other(self) -> Side:
        return Side.B if self is Side.A else Side.A


class SwapDirection(str, Enum):
    """Which asset is sold into the pool."""

    A_TO_B = "a_to_b"
    B_TO_A = "b_to_a"

    @property
    def side_in(self) -> Side:
        return Side.A if self is SwapDirection.A_TO_B else Side.B

    @property
    def side_out(self) -> Side:
        return self.side_in.other


class RampPhase(str, Enum):
    """Amplification change state machine: IDLE -> COMMITTED -> RAMPING."""

    IDLE = "idle"
    COMMITTED = "committed"
    RAMPING = "ramping"


class VaultHoldings(NamedTuple):
    """Ledger holdings of the two pool vaults, read before an operation."""

    a: int
    b: int

    def for_side(self, side: Side) -> int:
        return self.a if side is Side.A else self.b


@dataclass
class Pool:
    """Two-asset StableSwap pool record.

    Attributes:
        pool_id: Arena handle of this pool
        authority: Identity allowed to run admin operations
        asset_a: Ledger asset id of the first token
        asset_b: Ledger asset id of the second token
        lp_asset: Ledger asset id of the pool-share token
        vault_a: Ledger account holding asset A (None until init_vaults)
        vault_b: Ledger account holding asset B (None until init_vaults)
        amplification: Base amplification, refreshed on ramp start/stop
        initial_amplification: Ramp start value
        target_amplification: Ramp end value
        ramp_start_time: Ramp window start (unix seconds, 0 when idle)
        ramp_stop_time: Ramp window end (unix seconds, 0 when idle)
        swap_fee_bps: Trading fee in basis points
        admin_fee_percent: Admin share of every fee, in percent
        balance_a: Tracked balance of asset A
        balance_b: Tracked balance of asset B
        lp_supply: Outstanding LP tokens, including MINIMUM_LIQUIDITY
        admin_fees_a: Admin fees owed in asset A
        admin_fees_b: Admin fees owed in asset B
        total_volume_a: Cumulative asset A sold into the pool
        total_volume_b: Cumulative asset B sold into the pool
        trade_count: Number of swaps and migrations executed
        paused: Blocks swaps and deposits, never withdrawals
        pending_authority: Proposed new authority
        authority_transfer_time: When the authority transfer was initiated
        pending_amp_commit: sha256 commit of the next ramp parameters
        amp_commit_time: When the ramp commit was submitted
    """

    pool_id: int
    authority: str
    asset_a: str
    asset_b: str
    lp_asset: str
    amplification: int
    initial_amplification: int
    target_amplification: int
    swap_fee_bps: int
    admin_fee_percent: int
    vault_a: str | None = None
    vault_b: str | None = None
    ramp_start_time: int = 0
    ramp_stop_time: int = 0
    balance_a: int = 0
    balance_b: int = 0
    lp_supply: int = 0
    admin_fees_a: int = 0
    admin_fees_b: int = 0
    total_volume_a: int = 0
    total_volume_b: int = 0
    trade_count: int = 0
    paused: bool = False
    pending_authority: str | None = None
    authority_transfer_time: int | None = None
    pending_amp_commit: bytes | None = None
    amp_commit_time: int | None = None

    @property
    def vaults_initialized(self) -> bool:
        return self.vault_a is not None and self.vault_b is not None

    def balance(self, side: Side) -> int:
        return self.balance_a if side is Side.A else self.balance_b

    def set_balance(self, side: Side, value: int) -> None:
        if side is Side.A:
            self.balance_a = value
        else:
            self.balance_b = value

    def admin_fees(self, side: Side) -> int:
        return self.admin_fees_a if side is Side.A else self.admin_fees_b

    def set_admin_fees(self, side: Side, value: int) -> None:
        if side is Side.A:
            self.admin_fees_a = value
        else:
            self.admin_fees_b = value

    def add_volume(self, side: Side, amount: int) -> None:
        if side is Side.A:
            self.total_volume_a += amount
        else:
            self.total_volume_b += amount

    def asset(self, side: Side) -> str:
        return self.asset_a if side is Side.A else self.asset_b

    def vault(self, side: Side) -> str | None:
        return self.vault_a if side is Side.A else self.vault_b

    def ramp_phase(self, now: int) -> RampPhase:
        """Current state of the amplification change state machine."""
        if self.pending_amp_commit is not None:
            return RampPhase.COMMITTED
        if self.ramp_stop_time != 0 and now < self.ramp_stop_time:
            return RampPhase.RAMPING
        return RampPhase.IDLE


@dataclass
class FarmingPeriod:
    """A fixed reward window paying `reward_asset` to staked LP tokens.

    `acc_reward_per_share` is scaled by ACC_REWARD_PRECISION.
    """

    farm_id: int
    pool_id: int
    reward_asset: str
    start_time: int
    end_time: int
    reward_per_second: int
    total_rewards: int
    reward_account: str
    stake_account: str
    last_update_time: int
    distributed_rewards: int = 0
    acc_reward_per_share: int = 0
    total_staked: int = 0


@dataclass
class UserFarmingPosition:
    """A user's stake in one farming period."""

    owner: str
    farm_id: int
    lp_staked: int = 0
    reward_debt: int = 0
    pending_rewards: int = 0
