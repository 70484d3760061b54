"""
Challenge Service
=================

Purpose
-------
Daily challenges: a handful of goals per UTC day ("score 500+ in neon_tap
three times"), per-player progress driven by recorded scores, a coin reward
per completed challenge and an XP bonus for clearing the whole day.

Progress
--------
Every ``score.recorded`` event is one run. A run advances each of today's
challenges whose game matches (or that accepts any game) and whose target
it meets in the game's score direction. Progress is capped at
``target_plays``; claimed challenges stop moving.

Claims
------
- ``claim_reward`` flips ``is_claimed`` with a conditional UPDATE
  (``is_claimed = false AND current_progress >= target_plays``) and credits
  the coins in the same transaction. A second claim matches no row and is
  reported as ``ALREADY_CLAIMED``.
- ``claim_daily_bonus`` needs every challenge of the day claimed. The
  ``(player_id, bonus_date)`` unique constraint makes it once per day even
  when two claims race.

Both claims lock the player row first, so claims and progress updates for
one player run one at a time.

Outcomes
--------
Claims return ``ClaimResult(success=False, reason=<error code>)`` for domain
failures, like shop purchases. ``TransientStorageError`` is raised.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from arcade.core.database.base import utc_now
from arcade.core.database.service import DatabaseService, violates_unique_constraint
from arcade.core.event.types import EventPayload, ListenerPriority
from arcade.core.logging.logger import LogContext, get_logger
from arcade.core.validation.input_validator import InputValidator
from arcade.database.models import (
    ChallengeProgress,
    DailyBonusClaim,
    DailyChallenge,
    Game,
    Player,
    TransactionLog,
    TransactionType,
)
from arcade.database.models.progression.challenge import DAILY_BONUS_UNIQUE_CONSTRAINT
from arcade.modules.leaderboard.service import utc_midnight
from arcade.modules.shared.base_repository import BaseRepository
from arcade.modules.shared.base_service import BaseService
from arcade.modules.shared.constants import (
    DEFAULT_DAILY_CHALLENGE_COUNT,
    DEFAULT_DAILY_XP_BONUS,
    EVENT_CHALLENGE_PROGRESSED,
    EVENT_CHALLENGE_REWARD_CLAIMED,
    EVENT_DAILY_BONUS_CLAIMED,
    EVENT_SCORE_RECORDED,
)
from arcade.modules.shared.exceptions import (
    AlreadyClaimedError,
    ArcadeDomainException,
    InvalidOperationError,
    NotFoundError,
)
from arcade.modules.shared.formulas import is_better_score

if TYPE_CHECKING:
    from logging import Logger

    from arcade.core.config.manager import ConfigManager
    from arcade.core.event.bus import EventBus

STATUS_NONE = "none"
STATUS_PENDING = "pending"
STATUS_CLAIMABLE = "claimable"
STATUS_ALL_DONE = "all_done"


def challenge_day(now: Optional[datetime] = None) -> date:
    """The UTC calendar day challenges are scheduled on."""
    return utc_midnight(now).date()


def run_meets_target(
    challenge: DailyChallenge, game_id: str, value: float, lower_is_better: bool
) -> bool:
    """
    True if a run counts toward ``challenge``.

    Reaching the target exactly counts; otherwise the value must beat it in
    the game's direction.
    """
    if challenge.target_game_id is not None and challenge.target_game_id != game_id:
        return False
    if value == challenge.target_score:
        return True
    return is_better_score(value, challenge.target_score, lower_is_better)


def challenge_status(entries: Sequence[Dict[str, Any]]) -> str:
    """
    Summarize a day's board.

    - ``none``: nothing scheduled
    - ``all_done``: every challenge claimed
    - ``claimable``: at least one complete and unclaimed
    - ``pending``: otherwise
    """
    if not entries:
        return STATUS_NONE
    if all(entry["is_claimed"] for entry in entries):
        return STATUS_ALL_DONE
    if any(entry["is_complete"] and not entry["is_claimed"] for entry in entries):
        return STATUS_CLAIMABLE
    return STATUS_PENDING


@dataclass(frozen=True)
class ClaimResult:
    """
    Outcome of a reward claim.

    ``reward_id`` is the challenge id, or ``daily_bonus:<date>`` for the XP
    bonus. Balances are set only on success.
    """

    success: bool
    reward_id: str
    coins_awarded: int = 0
    xp_awarded: int = 0
    new_balance: Optional[int] = None
    new_xp: Optional[int] = None
    reason: Optional[str] = None
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ChallengeService(BaseService):
    """
    Service for daily challenges.

    Public Methods
    --------------
    - schedule_challenge() -> Add a challenge to a day
    - get_today_challenges() -> Today's board, with a player's progress
    - get_challenge_status() -> none / pending / claimable / all_done
    - evaluate_run() -> Advance progress from one run
    - claim_reward() -> Take a completed challenge's coins (ClaimResult)
    - claim_daily_bonus() -> Take the full-clear XP bonus (ClaimResult)
    - register_listeners() -> Drive evaluate_run from ``score.recorded``
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        super().__init__(config_manager, event_bus, logger)

        self._challenge_repo = BaseRepository(
            DailyChallenge, get_logger(f"{__name__}.DailyChallengeRepository")
        )
        self._progress_repo = BaseRepository(
            ChallengeProgress, get_logger(f"{__name__}.ChallengeProgressRepository")
        )
        self._bonus_repo = BaseRepository(
            DailyBonusClaim, get_logger(f"{__name__}.DailyBonusClaimRepository")
        )
        self._player_repo = BaseRepository(Player, get_logger(f"{__name__}.PlayerRepository"))
        self._game_repo = BaseRepository(Game, get_logger(f"{__name__}.GameRepository"))
        self._audit_repo = BaseRepository(
            TransactionLog, get_logger(f"{__name__}.TransactionLogRepository")
        )

    def register_listeners(self) -> str:
        """Subscribe ``on_score_recorded``; returns the listener identifier."""
        return self._events.subscribe(
            EVENT_SCORE_RECORDED,
            self.on_score_recorded,
            priority=ListenerPriority.NORMAL,
        )

    async def on_score_recorded(self, payload: EventPayload) -> List[Dict[str, Any]]:
        return await self.evaluate_run(
            payload["player_id"], payload["game_id"], payload["value"]
        )

    # ========================================================================
    # PUBLIC API - Scheduling
    # ========================================================================

    async def schedule_challenge(
        self,
        challenge_id: str,
        title: str,
        active_date: date,
        target_score: Any,
        *,
        target_plays: Any = 1,
        reward_coins: Any = 0,
        target_game_id: Optional[str] = None,
        description: str = "",
    ) -> Dict[str, Any]:
        """
        Add a challenge to ``active_date``.

        Raises:
            ValidationError: If a field is malformed
            NotFoundError: If ``target_game_id`` names no game
            InvalidOperationError: If the id is taken
        """
        challenge_id = InputValidator.validate_entity_id(challenge_id, "challenge_id")
        title = InputValidator.validate_string(title, "title", min_length=1, max_length=100)
        target_score = InputValidator.validate_score_value(target_score, "target_score")
        target_plays = InputValidator.validate_positive_integer(target_plays, "target_plays")
        reward_coins = InputValidator.validate_non_negative_integer(
            reward_coins, "reward_coins"
        )
        if target_game_id is not None:
            target_game_id = InputValidator.validate_game_id(target_game_id, "target_game_id")

        async with DatabaseService.get_transaction() as session:
            if target_game_id is not None and await self._game_repo.get(
                session, target_game_id
            ) is None:
                raise NotFoundError("Game", target_game_id)
            if await self._challenge_repo.get(session, challenge_id) is not None:
                raise InvalidOperationError(
                    "schedule_challenge", f"Challenge id already exists: {challenge_id}"
                )

            challenge = self._challenge_repo.add(
                session,
                DailyChallenge(
                    id=challenge_id,
                    title=title,
                    description=description,
                    active_date=active_date,
                    target_game_id=target_game_id,
                    target_score=target_score,
                    target_plays=target_plays,
                    reward_coins=reward_coins,
                ),
            )
            await self._challenge_repo.flush(session)
            entry = self._entry(challenge, None)

        self.log_operation(
            "schedule_challenge",
            challenge_id=challenge_id,
            active_date=active_date.isoformat(),
        )
        return entry

    # ========================================================================
    # PUBLIC API - Read Operations
    # ========================================================================

    async def get_today_challenges(
        self, player_id: Optional[str] = None, now: Optional[datetime] = None
    ) -> List[Dict[str, Any]]:
        """
        Today's challenges, oldest first, at most ``challenges.daily_count``.

        Without a player every entry shows zero progress.
        """
        if player_id is not None:
            player_id = InputValidator.validate_player_id(player_id)
        today = challenge_day(now)

        async with DatabaseService.get_session() as session:
            return await self._board(session, player_id, today)

    async def get_challenge_status(
        self, player_id: str, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """``{date, status, completed, claimed, total, bonus_claimed}`` for today."""
        player_id = InputValidator.validate_player_id(player_id)
        today = challenge_day(now)

        async with DatabaseService.get_session() as session:
            entries = await self._board(session, player_id, today)
            bonus_claimed = await self._bonus_repo.exists(
                session,
                DailyBonusClaim.player_id == player_id,
                DailyBonusClaim.bonus_date == today,
            )

        return {
            "date": today.isoformat(),
            "status": challenge_status(entries),
            "completed": sum(1 for entry in entries if entry["is_complete"]),
            "claimed": sum(1 for entry in entries if entry["is_claimed"]),
            "total": len(entries),
            "bonus_claimed": bonus_claimed,
        }

    # ========================================================================
    # PUBLIC API - Write Operations
    # ========================================================================

    async def evaluate_run(
        self,
        player_id: str,
        game_id: str,
        value: Any,
        now: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """
        Count one run toward today's challenges.

        Returns:
            Entries of the challenges that advanced (empty when none did)

        Raises:
            ValidationError: If ids or value are malformed
            NotFoundError: If the player or game does not exist
        """
        player_id = InputValidator.validate_player_id(player_id)
        game_id = InputValidator.validate_game_id(game_id)
        value = InputValidator.validate_score_value(value)
        today = challenge_day(now)

        async with DatabaseService.get_transaction() as session:
            game = await self._game_repo.get(session, game_id)
            if game is None:
                raise NotFoundError("Game", game_id)
            if await self._player_repo.get(session, player_id, for_update=True) is None:
                raise NotFoundError("Player", player_id)

            qualifying = [
                challenge
                for challenge in await self._todays_challenges(session, today)
                if run_meets_target(challenge, game_id, value, game.lower_is_better)
            ]
            if not qualifying:
                return []

            progress = await self._progress_by_challenge(
                session, player_id, [challenge.id for challenge in qualifying]
            )
            advanced: List[Dict[str, Any]] = []
            for challenge in qualifying:
                row = progress.get(challenge.id)
                if row is None:
                    row = self._progress_repo.add(
                        session,
                        ChallengeProgress(
                            player_id=player_id,
                            challenge_id=challenge.id,
                            current_progress=0,
                            is_claimed=False,
                        ),
                    )
                if row.is_claimed or row.current_progress >= challenge.target_plays:
                    continue
                row.current_progress = min(row.current_progress + 1, challenge.target_plays)
                advanced.append(self._entry(challenge, row))

            await self._progress_repo.flush(session)

        if advanced:
            self.log_operation(
                "evaluate_run",
                player_id=player_id,
                game_id=game_id,
                advanced=[entry["challenge_id"] for entry in advanced],
            )
            await self.emit_event(
                EVENT_CHALLENGE_PROGRESSED,
                {"player_id": player_id, "game_id": game_id, "challenges": advanced},
            )
        return advanced

    async def claim_reward(
        self, player_id: str, challenge_id: str, now: Optional[datetime] = None
    ) -> ClaimResult:
        """
        Credit a completed challenge's coins, once.

        Example:
            >>> result = await challenges.claim_reward("p1", "tap_500")
            >>> result.success, result.coins_awarded
            (True, 100)
        """
        async with LogContext(
            player_id=player_id, component="challenges", operation="claim_reward"
        ):
            try:
                player_id = InputValidator.validate_player_id(player_id)
                challenge_id = InputValidator.validate_entity_id(challenge_id, "challenge_id")
                coins, old_balance, new_balance = await self._execute_claim(
                    player_id, challenge_id, challenge_day(now)
                )
            except ArcadeDomainException as exc:
                return self._rejected("claim_reward", player_id, challenge_id, exc)

            self.log_operation(
                "claim_reward",
                player_id=player_id,
                challenge_id=challenge_id,
                coins=coins,
                old_balance=old_balance,
                new_balance=new_balance,
            )
            await self.emit_event(
                EVENT_CHALLENGE_REWARD_CLAIMED,
                {
                    "player_id": player_id,
                    "challenge_id": challenge_id,
                    "coins": coins,
                    "new_balance": new_balance,
                },
            )
            return ClaimResult(
                success=True,
                reward_id=challenge_id,
                coins_awarded=coins,
                new_balance=new_balance,
            )

    async def claim_daily_bonus(
        self, player_id: str, now: Optional[datetime] = None
    ) -> ClaimResult:
        """Grant ``challenges.daily_xp_bonus`` XP once all of today's challenges are claimed."""
        today = challenge_day(now)
        reward_id = f"daily_bonus:{today.isoformat()}"

        async with LogContext(
            player_id=player_id, component="challenges", operation="claim_daily_bonus"
        ):
            try:
                player_id = InputValidator.validate_player_id(player_id)
                xp, new_xp = await self._execute_daily_bonus(player_id, today, reward_id)
            except ArcadeDomainException as exc:
                return self._rejected("claim_daily_bonus", player_id, reward_id, exc)

            self.log_operation("claim_daily_bonus", player_id=player_id, xp=xp, new_xp=new_xp)
            await self.emit_event(
                EVENT_DAILY_BONUS_CLAIMED,
                {"player_id": player_id, "date": today.isoformat(), "xp": xp, "new_xp": new_xp},
            )
            return ClaimResult(success=True, reward_id=reward_id, xp_awarded=xp, new_xp=new_xp)

    # ========================================================================
    # PRIVATE - Transaction Steps
    # ========================================================================

    async def _execute_claim(
        self, player_id: str, challenge_id: str, today: date
    ) -> Tuple[int, int, int]:
        """
        Returns:
            (coins, old_balance, new_balance)

        Raises:
            NotFoundError, InvalidOperationError, AlreadyClaimedError,
            TransientStorageError
        """
        async with DatabaseService.get_transaction() as session:
            todays = {c.id: c for c in await self._todays_challenges(session, today)}
            challenge = todays.get(challenge_id)
            if challenge is None:
                if await self._challenge_repo.get(session, challenge_id) is None:
                    raise NotFoundError("Challenge", challenge_id)
                raise InvalidOperationError("claim_reward", "Challenge is not active today")

            player = await self._player_repo.get(session, player_id, for_update=True)
            if player is None:
                raise NotFoundError("Player", player_id)

            result = await session.execute(
                update(ChallengeProgress)
                .where(
                    ChallengeProgress.player_id == player_id,
                    ChallengeProgress.challenge_id == challenge_id,
                    ChallengeProgress.is_claimed.is_(False),
                    ChallengeProgress.current_progress >= challenge.target_plays,
                )
                .values(is_claimed=True, claimed_at=utc_now())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                progress = await self._progress_repo.find_one_where(
                    session,
                    ChallengeProgress.player_id == player_id,
                    ChallengeProgress.challenge_id == challenge_id,
                )
                if progress is not None and progress.is_claimed:
                    raise AlreadyClaimedError(player_id, challenge_id)
                raise InvalidOperationError("claim_reward", "Challenge is not complete")

            coins = int(challenge.reward_coins)
            old_balance = int(player.coins)
            await session.execute(
                update(Player)
                .where(Player.id == player_id)
                .values(coins=Player.coins + coins)
                .execution_options(synchronize_session=False)
            )
            await session.refresh(player, ["coins"])
            new_balance = int(player.coins)

            self._audit_repo.add(
                session,
                TransactionLog(
                    player_id=player_id,
                    transaction_type=TransactionType.CHALLENGE_REWARD.value,
                    details={
                        "challenge_id": challenge_id,
                        "coins": coins,
                        "old_balance": old_balance,
                        "new_balance": new_balance,
                    },
                    context="challenges.claim_reward",
                ),
            )

        return coins, old_balance, new_balance

    async def _execute_daily_bonus(
        self, player_id: str, today: date, reward_id: str
    ) -> Tuple[int, int]:
        """
        Returns:
            (xp_awarded, new_xp)

        Raises:
            NotFoundError, InvalidOperationError, AlreadyClaimedError,
            TransientStorageError
        """
        xp = self.get_int_config("challenges.daily_xp_bonus", DEFAULT_DAILY_XP_BONUS)

        async with DatabaseService.get_transaction() as session:
            player = await self._player_repo.get(session, player_id, for_update=True)
            if player is None:
                raise NotFoundError("Player", player_id)

            if await self._bonus_repo.exists(
                session,
                DailyBonusClaim.player_id == player_id,
                DailyBonusClaim.bonus_date == today,
            ):
                raise AlreadyClaimedError(player_id, reward_id)

            status = challenge_status(await self._board(session, player_id, today))
            if status != STATUS_ALL_DONE:
                raise InvalidOperationError(
                    "claim_daily_bonus", f"Daily challenges are not all claimed ({status})"
                )

            self._bonus_repo.add(
                session,
                DailyBonusClaim(player_id=player_id, bonus_date=today, xp_awarded=xp),
            )
            try:
                await self._bonus_repo.flush(session)
            except IntegrityError as exc:
                if not violates_unique_constraint(
                    exc, DailyBonusClaim.__table__, DAILY_BONUS_UNIQUE_CONSTRAINT
                ):
                    raise
                raise AlreadyClaimedError(player_id, reward_id) from exc

            await session.execute(
                update(Player)
                .where(Player.id == player_id)
                .values(xp=Player.xp + xp)
                .execution_options(synchronize_session=False)
            )
            await session.refresh(player, ["xp"])
            new_xp = int(player.xp)

            self._audit_repo.add(
                session,
                TransactionLog(
                    player_id=player_id,
                    transaction_type=TransactionType.DAILY_XP_BONUS.value,
                    details={"date": today.isoformat(), "xp": xp, "new_xp": new_xp},
                    context="challenges.claim_daily_bonus",
                ),
            )

        return xp, new_xp

    # ========================================================================
    # PRIVATE HELPERS
    # ========================================================================

    async def _todays_challenges(
        self, session: AsyncSession, today: date
    ) -> List[DailyChallenge]:
        limit = self.get_int_config(
            "challenges.daily_count", DEFAULT_DAILY_CHALLENGE_COUNT, minimum=1
        )
        return await self._challenge_repo.find_many_where(
            session,
            DailyChallenge.active_date == today,
            order_by=[DailyChallenge.created_at.asc(), DailyChallenge.id.asc()],
            limit=limit,
        )

    async def _progress_by_challenge(
        self, session: AsyncSession, player_id: str, challenge_ids: List[str]
    ) -> Dict[str, ChallengeProgress]:
        rows = await self._progress_repo.find_many_where(
            session,
            ChallengeProgress.player_id == player_id,
            ChallengeProgress.challenge_id.in_(challenge_ids),
        )
        return {row.challenge_id: row for row in rows}

    async def _board(
        self, session: AsyncSession, player_id: Optional[str], today: date
    ) -> List[Dict[str, Any]]:
        challenges = await self._todays_challenges(session, today)
        progress: Dict[str, ChallengeProgress] = {}
        if player_id is not None and challenges:
            progress = await self._progress_by_challenge(
                session, player_id, [challenge.id for challenge in challenges]
            )
        return [self._entry(challenge, progress.get(challenge.id)) for challenge in challenges]

    def _rejected(
        self, operation: str, player_id: str, reward_id: str, exc: ArcadeDomainException
    ) -> ClaimResult:
        self.log.info(
            f"Claim rejected: {exc.error_code}",
            extra={
                "operation": operation,
                "player_id": player_id,
                "reward_id": reward_id,
                "reason": exc.error_code,
                "details": exc.details,
            },
        )
        return ClaimResult(
            success=False,
            reward_id=reward_id,
            reason=exc.error_code,
            message=exc.message,
        )

    @staticmethod
    def _entry(
        challenge: DailyChallenge, progress: Optional[ChallengeProgress]
    ) -> Dict[str, Any]:
        current = progress.current_progress if progress is not None else 0
        return {
            "challenge_id": challenge.id,
            "title": challenge.title,
            "description": challenge.description,
            "active_date": challenge.active_date.isoformat(),
            "target_game_id": challenge.target_game_id,
            "target_score": challenge.target_score,
            "target_plays": challenge.target_plays,
            "reward_coins": challenge.reward_coins,
            "current_progress": current,
            "is_complete": current >= challenge.target_plays,
            "is_claimed": bool(progress is not None and progress.is_claimed),
        }
