"""StableSwapEngine: the operation surface over pools, farms and a ledger.

The engine owns every Pool, FarmingPeriod and UserFarmingPosition record,
addressed by integer handles. Each operation runs as one unit of work:

1. take the pool's re-entrant lock
2. snapshot the pool and its farming records
3. validate and mutate through the operation modules
4. settle token movements through a LedgerJournal
5. if anything raised, restore the snapshot and reverse the journal

Callers' balances are checked on the ledger before any mutation, summed per
asset, and every outbound transfer is covered by a vault whose holdings were
checked against the tracked balance.
"""

from __future__ import annotations

import copy
import itertools
import threading
import time
from collections import defaultdict
from collections.abc import Callable, Iterator
from contextlib import contextmanager

import structlog

from stableswap import admin, amplification, farming, liquidity, migration
from stableswap import swap as swap_ops
from stableswap.config import DEFAULT_POOL_CONFIG, PoolConfig
from stableswap.constants import MAX_AMPLIFICATION, MIN_AMPLIFICATION, MINIMUM_LIQUIDITY
from stableswap.errors import (
    AlreadyInitialized,
    FarmNotFound,
    IdenticalAssets,
    InsufficientFunds,
    InvalidAmplification,
    PoolNotFound,
    PoolNotInitialized,
)
from stableswap.ledger import LedgerAccount, LedgerJournal
from stableswap.state import (
    FarmingPeriod,
    Pool,
    Side,
    SwapDirection,
    UserFarmingPosition,
    VaultHoldings,
)

logger = structlog.get_logger()

Clock = Callable[[], int]


def _system_clock() -> int:
    return int(time.time())


def vault_account(pool_id: int, side: Side) -> str:
    return f"pool/{pool_id}/vault_{side.value}"


def lp_asset_id(pool_id: int) -> str:
    return f"pool/{pool_id}/lp"


def locked_liquidity_account(pool_id: int) -> str:
    """Holder of the MINIMUM_LIQUIDITY shares minted on the first deposit."""
    return f"pool/{pool_id}/locked"


def farm_reward_account(farm_id: int) -> str:
    return f"farm/{farm_id}/rewards"


def farm_stake_account(farm_id: int) -> str:
    return f"farm/{farm_id}/stake"


class StableSwapEngine:
    """Thread-safe arena of StableSwap pools settled against a ledger.

    Args:
        ledger: Token custody; any LedgerAccount implementation
        config: Limits applied to every pool
        clock: Returns the current unix time in seconds
    """

    def __init__(
        self,
        ledger: LedgerAccount,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
        clock: Clock | None = None,
    ) -> None:
        self.ledger = ledger
        self.config = config
        self._clock = clock or _system_clock

        self._pools: dict[int, Pool] = {}
        self._locks: dict[int, threading.RLock] = {}
        self._farms: dict[int, FarmingPeriod] = {}
        self._positions: dict[tuple[int, str], UserFarmingPosition] = {}

        self._registry_lock = threading.Lock()
        self._pool_ids = itertools.count(1)
        self._farm_ids = itertools.count(1)

    def now(self) -> int:
        return self._clock()

    # --- Internals ---

    def _pool(self, pool_id: int) -> Pool:
        try:
            return self._pools[pool_id]
        except KeyError:
            raise PoolNotFound(f"Pool {pool_id} does not exist") from None

    def _lock(self, pool_id: int) -> threading.RLock:
        with self._registry_lock:
            try:
                return self._locks[pool_id]
            except KeyError:
                raise PoolNotFound(f"Pool {pool_id} does not exist") from None

    def _farm(self, farm_id: int) -> FarmingPeriod:
        try:
            return self._farms[farm_id]
        except KeyError:
            raise FarmNotFound(f"Farm {farm_id} does not exist") from None

    def _farm_pool_id(self, farm_id: int) -> int:
        with self._registry_lock:
            farm = self._farms.get(farm_id)
            if farm is None:
                raise FarmNotFound(f"Farm {farm_id} does not exist")
            return farm.pool_id

    def _farm_ids_for(self, pool_id: int) -> list[int]:
        with self._registry_lock:
            return [farm_id for farm_id, farm in self._farms.items() if farm.pool_id == pool_id]

    def _restore(
        self,
        pool_snapshot: Pool,
        farm_snapshot: dict[int, FarmingPeriod],
        position_snapshot: dict[tuple[int, str], UserFarmingPosition],
    ) -> None:
        pool_id = pool_snapshot.pool_id
        with self._registry_lock:
            self._pools[pool_id] = pool_snapshot
            # farms created inside the failed operation disappear
            for farm_id in [f for f, farm in self._farms.items() if farm.pool_id == pool_id]:
                if farm_id not in farm_snapshot:
                    del self._farms[farm_id]
            self._farms.update(farm_snapshot)
            for key in [k for k in self._positions if k[0] not in self._farms or k[0] in farm_snapshot]:
                del self._positions[key]
            self._positions.update(position_snapshot)

    @contextmanager
    def _transaction(self, pool_id: int, operation: str) -> Iterator[tuple[Pool, LedgerJournal]]:
        """Run the body atomically against `pool_id`.

        Yields the live pool and the journal all token movements must go
        through. Every farming record of the pool is included in the
        snapshot, so farm operations roll back together with the pool.
        """
        with self._lock(pool_id):
            pool = self._pool(pool_id)
            farm_ids = self._farm_ids_for(pool_id)
            pool_snapshot = copy.deepcopy(pool)
            with self._registry_lock:
                farm_snapshot = {fid: copy.deepcopy(self._farms[fid]) for fid in farm_ids}
                position_snapshot = {
                    key: copy.deepcopy(pos) for key, pos in self._positions.items() if key[0] in farm_ids
                }
            journal = LedgerJournal(self.ledger)
            try:
                yield pool, journal
            except Exception as err:
                self._restore(pool_snapshot, farm_snapshot, position_snapshot)
                journal.rollback()
                logger.debug(
                    "operation_rejected",
                    operation=operation,
                    pool_id=pool_id,
                    error=type(err).__name__,
                    code=getattr(err, "code", None),
                    detail=str(err),
                )
                raise

    def _require_initialized(self, pool: Pool) -> None:
        if not pool.vaults_initialized:
            raise PoolNotInitialized(f"Pool {pool.pool_id} vaults are not initialized")

    def _vault_holdings(self, pool: Pool) -> VaultHoldings:
        return VaultHoldings(
            a=self.ledger.balance_of(pool.vault_a, pool.asset_a),
            b=self.ledger.balance_of(pool.vault_b, pool.asset_b),
        )

    def _require_funds(self, account: str, *requirements: tuple[str, int]) -> None:
        """Check `account` covers every (asset, amount) pair, summed per asset."""
        needed: defaultdict[str, int] = defaultdict(int)
        for asset, amount in requirements:
            needed[asset] += amount
        for asset, amount in needed.items():
            held = self.ledger.balance_of(account, asset)
            if held < amount:
                raise InsufficientFunds(f"{account} holds {held} {asset}, needs {amount}")

    def _mint_lp(
        self, journal: LedgerJournal, pool: Pool, caller: str, lp_minted: int, first_deposit: bool
    ) -> None:
        if first_deposit:
            journal.mint(pool.lp_asset, locked_liquidity_account(pool.pool_id), MINIMUM_LIQUIDITY)
        journal.mint(pool.lp_asset, caller, lp_minted)

    def _position(self, farm_id: int, owner: str) -> UserFarmingPosition:
        with self._registry_lock:
            return self._positions.setdefault(
                (farm_id, owner), UserFarmingPosition(owner=owner, farm_id=farm_id)
            )

    # --- Pool lifecycle ---

    def create_pool(self, authority: str, asset_a: str, asset_b: str, amplification: int) -> int:
        """Register a new pool and return its handle.

        Raises:
            IdenticalAssets: asset_a and asset_b are the same
            InvalidAmplification: amplification outside [1, 10000]
        """
        if asset_a == asset_b:
            raise IdenticalAssets(f"Pool assets must differ, got {asset_a!r} twice")
        if not MIN_AMPLIFICATION <= amplification <= MAX_AMPLIFICATION:
            raise InvalidAmplification(
                f"Amplification {amplification} outside [{MIN_AMPLIFICATION}, {MAX_AMPLIFICATION}]"
            )
        with self._registry_lock:
            pool_id = next(self._pool_ids)
            self._pools[pool_id] = Pool(
                pool_id=pool_id,
                authority=authority,
                asset_a=asset_a,
                asset_b=asset_b,
                lp_asset=lp_asset_id(pool_id),
                amplification=amplification,
                initial_amplification=amplification,
                target_amplification=amplification,
                swap_fee_bps=self.config.default_swap_fee_bps,
                admin_fee_percent=self.config.admin_fee_percent,
            )
            self._locks[pool_id] = threading.RLock()

        logger.info(
            "pool_created",
            pool_id=pool_id,
            authority=authority,
            asset_a=asset_a,
            asset_b=asset_b,
            amplification=amplification,
        )
        return pool_id

    def init_vaults(self, pool_id: int, caller: str) -> None:
        """Assign the pool's vault accounts. Authority only, once."""
        with self._transaction(pool_id, "init_vaults") as (pool, _):
            admin.require_authority(pool, caller)
            if pool.vaults_initialized:
                raise AlreadyInitialized(f"Pool {pool_id} vaults already initialized")
            pool.vault_a = vault_account(pool_id, Side.A)
            pool.vault_b = vault_account(pool_id, Side.B)
            logger.info("vaults_initialized", pool_id=pool_id, vault_a=pool.vault_a, vault_b=pool.vault_b)

    # --- Liquidity ---

    def add_liquidity(self, pool_id: int, caller: str, amount_a: int, amount_b: int, min_lp: int) -> int:
        """Deposit both assets; returns LP minted to `caller`."""
        with self._transaction(pool_id, "add_liquidity") as (pool, journal):
            self._require_initialized(pool)
            self._require_funds(caller, (pool.asset_a, amount_a), (pool.asset_b, amount_b))

            result = liquidity.add_liquidity(
                pool,
                amount_a,
                amount_b,
                min_lp,
                vault=self._vault_holdings(pool),
                now=self.now(),
                config=self.config,
            )

            if amount_a:
                journal.transfer(pool.asset_a, caller, pool.vault_a, amount_a)
            if amount_b:
                journal.transfer(pool.asset_b, caller, pool.vault_b, amount_b)
            self._mint_lp(journal, pool, caller, result.lp_minted, result.first_deposit)
            return result.lp_minted

    def remove_liquidity(
        self, pool_id: int, caller: str, lp_amount: int, min_a: int, min_b: int
    ) -> tuple[int, int]:
        """Burn LP for both assets; returns the net (amount_a, amount_b) paid."""
        with self._transaction(pool_id, "remove_liquidity") as (pool, journal):
            self._require_initialized(pool)
            self._require_funds(caller, (pool.lp_asset, lp_amount))

            result = liquidity.remove_liquidity(pool, lp_amount, min_a, min_b)

            journal.burn(pool.lp_asset, caller, lp_amount)
            if result.amount_a:
                journal.transfer(pool.asset_a, pool.vault_a, caller, result.amount_a)
            if result.amount_b:
                journal.transfer(pool.asset_b, pool.vault_b, caller, result.amount_b)
            return result.amount_a, result.amount_b

    def add_liquidity_single_sided(
        self, pool_id: int, caller: str, amount: int, side: Side, min_lp: int
    ) -> int:
        """Deposit one asset at face value; returns LP minted."""
        side = Side(side)
        with self._transaction(pool_id, "add_liquidity_single_sided") as (pool, journal):
            self._require_initialized(pool)
            self._require_funds(caller, (pool.asset(side), amount))

            result = migration.add_liquidity_single_sided(
                pool, amount, side, min_lp, vault=self._vault_holdings(pool), config=self.config
            )

            journal.transfer(pool.asset(side), caller, pool.vault(side), amount)
            self._mint_lp(journal, pool, caller, result.lp_minted, result.first_deposit)
            return result.lp_minted

    # --- Trading ---

    def _swap(
        self,
        pool_id: int,
        caller: str,
        amount_in: int,
        min_amount_out: int,
        deadline: int,
        direction: SwapDirection,
    ) -> int:
        with self._transaction(pool_id, f"swap_{direction.value}") as (pool, journal):
            self._require_initialized(pool)
            side_in, side_out = direction.side_in, direction.side_out
            self._require_funds(caller, (pool.asset(side_in), amount_in))

            result = swap_ops.swap(
                pool,
                amount_in,
                min_amount_out,
                deadline,
                direction,
                vault=self._vault_holdings(pool),
                now=self.now(),
                config=self.config,
            )

            journal.transfer(pool.asset(side_in), caller, pool.vault(side_in), amount_in)
            journal.transfer(pool.asset(side_out), pool.vault(side_out), caller, result.amount_out)
            return result.amount_out

    def swap_a_to_b(self, pool_id: int, caller: str, amount_in: int, min_amount_out: int, deadline: int) -> int:
        return self._swap(pool_id, caller, amount_in, min_amount_out, deadline, SwapDirection.A_TO_B)

    def swap_b_to_a(self, pool_id: int, caller: str, amount_in: int, min_amount_out: int, deadline: int) -> int:
        return self._swap(pool_id, caller, amount_in, min_amount_out, deadline, SwapDirection.B_TO_A)

    def _migrate(
        self,
        pool_id: int,
        caller: str,
        amount_in: int,
        min_amount_out: int,
        deadline: int,
        direction: SwapDirection,
    ) -> int:
        with self._transaction(pool_id, f"migrate_{direction.value}") as (pool, journal):
            self._require_initialized(pool)
            side_in, side_out = direction.side_in, direction.side_out
            self._require_funds(caller, (pool.asset(side_in), amount_in))

            result = migration.migrate(
                pool,
                amount_in,
                min_amount_out,
                deadline,
                direction,
                vault=self._vault_holdings(pool),
                now=self.now(),
                config=self.config,
            )

            journal.transfer(pool.asset(side_in), caller, pool.vault(side_in), amount_in)
            journal.transfer(pool.asset(side_out), pool.vault(side_out), caller, result.amount_out)
            return result.amount_out

    def migrate_a_to_b(self, pool_id: int, caller: str, amount_in: int, min_amount_out: int, deadline: int) -> int:
        return self._migrate(pool_id, caller, amount_in, min_amount_out, deadline, SwapDirection.A_TO_B)

    def migrate_b_to_a(self, pool_id: int, caller: str, amount_in: int, min_amount_out: int, deadline: int) -> int:
        return self._migrate(pool_id, caller, amount_in, min_amount_out, deadline, SwapDirection.B_TO_A)

    # --- Amplification ---

    def commit_amp_ramp(self, pool_id: int, caller: str, commit_hash: bytes) -> None:
        with self._transaction(pool_id, "commit_amp_ramp") as (pool, _):
            admin.require_authority(pool, caller)
            amplification.commit_amp_ramp(pool, commit_hash, self.now())

    def ramp_amplification(
        self, pool_id: int, caller: str, target_amplification: int, ramp_duration: int, salt: bytes
    ) -> int:
        with self._transaction(pool_id, "ramp_amplification") as (pool, _):
            admin.require_authority(pool, caller)
            return amplification.ramp_amplification(
                pool, target_amplification, ramp_duration, salt, self.now(), self.config
            )

    def stop_ramp(self, pool_id: int, caller: str) -> int:
        with self._transaction(pool_id, "stop_ramp") as (pool, _):
            admin.require_authority(pool, caller)
            return amplification.stop_ramp(pool, self.now())

    # --- Admin ---

    def update_swap_fee(self, pool_id: int, caller: str, new_fee_bps: int) -> None:
        with self._transaction(pool_id, "update_swap_fee") as (pool, _):
            admin.require_authority(pool, caller)
            admin.update_swap_fee(pool, new_fee_bps, self.config)

    def set_paused(self, pool_id: int, caller: str, paused: bool) -> None:
        with self._transaction(pool_id, "set_paused") as (pool, _):
            admin.require_authority(pool, caller)
            admin.set_paused(pool, paused)

    def withdraw_admin_fees(self, pool_id: int, caller: str) -> tuple[int, int]:
        """Pay withdrawable admin fees to the authority; returns (a, b)."""
        with self._transaction(pool_id, "withdraw_admin_fees") as (pool, journal):
            admin.require_authority(pool, caller)
            self._require_initialized(pool)

            amount_a, amount_b = admin.withdraw_admin_fees(pool, self._vault_holdings(pool))

            if amount_a:
                journal.transfer(pool.asset_a, pool.vault_a, caller, amount_a)
            if amount_b:
                journal.transfer(pool.asset_b, pool.vault_b, caller, amount_b)
            return amount_a, amount_b

    def initiate_authority_transfer(self, pool_id: int, caller: str, new_authority: str) -> None:
        with self._transaction(pool_id, "initiate_authority_transfer") as (pool, _):
            admin.require_authority(pool, caller)
            admin.initiate_authority_transfer(pool, new_authority, self.now())

    def complete_authority_transfer(self, pool_id: int, caller: str) -> None:
        with self._transaction(pool_id, "complete_authority_transfer") as (pool, _):
            admin.complete_authority_transfer(pool, caller, self.now(), self.config)

    def cancel_authority_transfer(self, pool_id: int, caller: str) -> None:
        with self._transaction(pool_id, "cancel_authority_transfer") as (pool, _):
            admin.require_authority(pool, caller)
            admin.cancel_authority_transfer(pool)

    # --- Farming ---

    def create_farming_period(
        self,
        pool_id: int,
        caller: str,
        reward_asset: str,
        start_time: int,
        end_time: int,
        total_rewards: int,
    ) -> int:
        """Fund a farming period from the authority; returns its farm_id."""
        with self._transaction(pool_id, "create_farming_period") as (pool, journal):
            admin.require_authority(pool, caller)
            self._require_funds(caller, (reward_asset, total_rewards))

            with self._registry_lock:
                farm_id = next(self._farm_ids)
            period = farming.create_farming_period(
                farm_id,
                pool_id,
                reward_asset,
                start_time,
                end_time,
                total_rewards,
                self.now(),
                reward_account=farm_reward_account(farm_id),
                stake_account=farm_stake_account(farm_id),
                config=self.config,
            )
            with self._registry_lock:
                self._farms[farm_id] = period

            journal.transfer(reward_asset, caller, period.reward_account, total_rewards)
            logger.info(
                "farming_period_created",
                farm_id=farm_id,
                pool_id=pool_id,
                reward_asset=reward_asset,
                start=start_time,
                end=end_time,
                reward_per_second=period.reward_per_second,
            )
            return farm_id

    def stake_lp(self, farm_id: int, caller: str, amount: int) -> None:
        pool_id = self._farm_pool_id(farm_id)
        with self._transaction(pool_id, "stake_lp") as (pool, journal):
            period = self._farm(farm_id)
            self._require_funds(caller, (pool.lp_asset, amount))
            farming.stake(period, self._position(farm_id, caller), amount, self.now())
            journal.transfer(pool.lp_asset, caller, period.stake_account, amount)

    def unstake_lp(self, farm_id: int, caller: str, amount: int) -> None:
        pool_id = self._farm_pool_id(farm_id)
        with self._transaction(pool_id, "unstake_lp") as (pool, journal):
            period = self._farm(farm_id)
            farming.unstake(period, self._position(farm_id, caller), amount, self.now())
            journal.transfer(pool.lp_asset, period.stake_account, caller, amount)

    def claim_farming_rewards(self, farm_id: int, caller: str) -> int:
        pool_id = self._farm_pool_id(farm_id)
        with self._transaction(pool_id, "claim_farming_rewards") as (_, journal):
            period = self._farm(farm_id)
            amount = farming.claim(period, self._position(farm_id, caller), self.now())
            journal.transfer(period.reward_asset, period.reward_account, caller, amount)
            return amount

    # --- Reads ---

    def get_pool(self, pool_id: int) -> Pool:
        with self._lock(pool_id):
            return copy.deepcopy(self._pool(pool_id))

    def list_pools(self) -> list[int]:
        with self._registry_lock:
            return sorted(self._pools)

    def get_farm(self, farm_id: int) -> FarmingPeriod:
        with self._lock(self._farm_pool_id(farm_id)):
            return copy.deepcopy(self._farm(farm_id))

    def get_position(self, farm_id: int, owner: str) -> UserFarmingPosition:
        """Copy of `owner`'s position; an empty one if they never staked."""
        with self._lock(self._farm_pool_id(farm_id)):
            position = self._positions.get((farm_id, owner))
            if position is None:
                return UserFarmingPosition(owner=owner, farm_id=farm_id)
            return copy.deepcopy(position)

    def pending_rewards(self, farm_id: int, owner: str) -> int:
        with self._lock(self._farm_pool_id(farm_id)):
            position = self._positions.get((farm_id, owner))
            if position is None:
                return 0
            return farming.pending_rewards(self._farm(farm_id), position, self.now())

    def current_amplification(self, pool_id: int) -> int:
        with self._lock(pool_id):
            return amplification.get_current_amplification(self._pool(pool_id), self.now())

    def quote_swap(self, pool_id: int, amount_in: int, direction: SwapDirection) -> swap_ops.SwapResult:
        with self._lock(pool_id):
            return swap_ops.quote_swap(self._pool(pool_id), amount_in, SwapDirection(direction), self.now())

    def quote_migration(self, pool_id: int, amount_in: int) -> migration.MigrationResult:
        with self._lock(pool_id):
            return migration.quote_migration(amount_in, self._pool(pool_id).admin_fee_percent)

