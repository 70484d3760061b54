"""
Pytest Configuration and Fixtures for the Arcade test suite
============================================================

Purpose
-------
Centralized fixtures for unit and integration tests.

Responsibilities
----------------
- Force a testing environment before any ``arcade`` module reads Config
- SQLite (aiosqlite) database per test for integration tests
- Service fixtures wired to a real EventBus and ConfigManager
- Mock EventBus / ConfigManager for unit tests
- Seeding helpers for players, games, scores, avatars and challenges

Architecture Notes
------------------
- Unit tests use mocks (fast, isolated)
- Integration tests use a fresh SQLite file per test (clean slate)
- PostgreSQL-only behavior lives in tests/integration/test_postgres_concurrency.py
  and uses testcontainers
"""

from __future__ import annotations

import os

os.environ["TESTING"] = "true"
os.environ["ENVIRONMENT"] = "testing"
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ["LOG_TO_FILE"] = "false"
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import date, datetime  # noqa: E402
from typing import AsyncGenerator, Iterable, Optional  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402

from arcade.core.config.config import Config  # noqa: E402
from arcade.core.config.manager import ConfigManager  # noqa: E402
from arcade.core.database.bootstrap import create_schema  # noqa: E402
from arcade.core.database.service import DatabaseService  # noqa: E402
from arcade.core.event.bus import EventBus  # noqa: E402
from arcade.core.logging.logger import get_logger  # noqa: E402
from arcade.database.models import (  # noqa: E402
    Avatar,
    ChallengeProgress,
    DailyChallenge,
    Game,
    Player,
    PlayerAvatar,
    ScoreRecord,
    ShopItem,
)
from arcade.modules.avatar.service import AvatarService  # noqa: E402
from arcade.modules.challenges.service import ChallengeService  # noqa: E402
from arcade.modules.leaderboard.service import LeaderboardService  # noqa: E402
from arcade.modules.profile.service import ProfileService  # noqa: E402
from arcade.modules.scores.service import ScoreService  # noqa: E402
from arcade.modules.shop.service import ShopService  # noqa: E402

logger = get_logger(__name__)


# ============================================================================
# CONFIGURATION FIXTURES
# ============================================================================


@pytest.fixture
def config_manager():
    """Real ConfigManager with overrides cleared after each test."""
    yield ConfigManager
    ConfigManager.clear_overrides()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


# ============================================================================
# DATABASE FIXTURES (Integration Tests)
# ============================================================================


@pytest_asyncio.fixture
async def database(tmp_path) -> AsyncGenerator[None, None]:
    """
    Initialize DatabaseService against a fresh SQLite file with all tables.

    Scope: function (clean slate per test)
    """
    original_url = Config.DATABASE_URL
    Config.DATABASE_URL = f"sqlite+aiosqlite:///{tmp_path / 'arcade.db'}"
    Config.TESTING = True

    await DatabaseService.initialize()
    await create_schema()

    yield

    await DatabaseService.shutdown()
    # The init lock must not outlive the test's event loop
    DatabaseService._init_lock = None
    Config.DATABASE_URL = original_url


# ============================================================================
# SERVICE FIXTURES
# ============================================================================


@pytest.fixture
def score_service(config_manager, event_bus) -> ScoreService:
    return ScoreService(config_manager, event_bus, get_logger("tests.scores"))


@pytest.fixture
def leaderboard_service(config_manager, event_bus, score_service) -> LeaderboardService:
    return LeaderboardService(
        config_manager, event_bus, get_logger("tests.leaderboard"), score_service
    )


@pytest.fixture
def avatar_service(config_manager, event_bus) -> AvatarService:
    return AvatarService(config_manager, event_bus, get_logger("tests.avatar"))


@pytest.fixture
def profile_service(
    config_manager, event_bus, score_service, leaderboard_service, avatar_service
) -> ProfileService:
    return ProfileService(
        config_manager,
        event_bus,
        get_logger("tests.profile"),
        score_service,
        leaderboard_service,
        avatar_cache=avatar_service.image_cache,
    )


@pytest.fixture
def shop_service(config_manager, event_bus) -> ShopService:
    return ShopService(config_manager, event_bus, get_logger("tests.shop"))


@pytest.fixture
def challenge_service(config_manager, event_bus) -> ChallengeService:
    return ChallengeService(config_manager, event_bus, get_logger("tests.challenges"))


# ============================================================================
# SEEDING HELPERS
# ============================================================================


class Seeder:
    """Writes fixture rows through DatabaseService transactions."""

    async def player(
        self,
        player_id: str,
        coins: int = 0,
        xp: int = 0,
        display_name: Optional[str] = None,
    ) -> None:
        async with DatabaseService.get_transaction() as session:
            session.add(
                Player(
                    id=player_id,
                    display_name=display_name or player_id.upper(),
                    coins=coins,
                    xp=xp,
                )
            )

    async def game(
        self, game_id: str, lower_is_better: bool = False, name: Optional[str] = None
    ) -> None:
        async with DatabaseService.get_transaction() as session:
            session.add(
                Game(
                    id=game_id,
                    name=name or game_id.replace("_", " ").title(),
                    lower_is_better=lower_is_better,
                )
            )

    async def scores(
        self,
        player_id: str,
        game_id: str,
        values: Iterable[float],
        achieved_at: Optional[datetime] = None,
    ) -> None:
        async with DatabaseService.get_transaction() as session:
            for value in values:
                record = ScoreRecord(player_id=player_id, game_id=game_id, value=value)
                if achieved_at is not None:
                    record.achieved_at = achieved_at
                session.add(record)

    async def avatar(
        self,
        avatar_id: str,
        price: Optional[int] = None,
        active: bool = True,
        image_url: Optional[str] = None,
        tier: str = "Rookie",
    ) -> None:
        async with DatabaseService.get_transaction() as session:
            session.add(
                Avatar(
                    id=avatar_id,
                    name=avatar_id.replace("_", " ").title(),
                    tier=tier,
                    image_url=image_url,
                )
            )
            await session.flush()
            if price is not None:
                session.add(ShopItem(avatar_id=avatar_id, price=price, is_active=active))

    async def ownership(self, player_id: str, avatar_id: str, source: str = "grant") -> None:
        async with DatabaseService.get_transaction() as session:
            session.add(
                PlayerAvatar(player_id=player_id, avatar_id=avatar_id, acquired_via=source)
            )

    async def coins_of(self, player_id: str) -> int:
        async with DatabaseService.get_session() as session:
            player = await session.get(Player, player_id)
            return player.coins

    async def challenge(
        self,
        challenge_id: str,
        active_date: date,
        target_score: float = 100,
        target_plays: int = 1,
        reward_coins: int = 50,
        target_game_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> None:
        async with DatabaseService.get_transaction() as session:
            challenge = DailyChallenge(
                id=challenge_id,
                title=challenge_id.replace("_", " ").title(),
                active_date=active_date,
                target_score=target_score,
                target_plays=target_plays,
                reward_coins=reward_coins,
                target_game_id=target_game_id,
            )
            if created_at is not None:
                challenge.created_at = created_at
                challenge.updated_at = created_at
            session.add(challenge)

    async def progress(
        self, player_id: str, challenge_id: str, current: int, claimed: bool = False
    ) -> None:
        async with DatabaseService.get_transaction() as session:
            session.add(
                ChallengeProgress(
                    player_id=player_id,
                    challenge_id=challenge_id,
                    current_progress=current,
                    is_claimed=claimed,
                )
            )

    async def xp_of(self, player_id: str) -> int:
        async with DatabaseService.get_session() as session:
            player = await session.get(Player, player_id)
            return player.xp


@pytest.fixture
def seeder() -> Seeder:
    """Seeder bound to whichever database DatabaseService is initialized on."""
    return Seeder()


@pytest.fixture
def seed(database, seeder) -> Seeder:
    return seeder


# ============================================================================
# MOCK FIXTURES (Unit Tests)
# ============================================================================


@pytest.fixture
def mock_event_bus(mocker):
    """Mock EventBus with an awaitable publish."""
    mock_bus = mocker.MagicMock()
    mock_bus.publish = mocker.AsyncMock(return_value=[])
    mock_bus.subscribe = mocker.MagicMock()
    return mock_bus


@pytest.fixture
def mock_config_manager(mocker):
    """Mock ConfigManager that answers every key with the call-site default."""
    mock_config = mocker.MagicMock()
    mock_config.get = mocker.MagicMock(side_effect=lambda key, default=None: default)
    return mock_config
