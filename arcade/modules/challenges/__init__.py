from arcade.modules.challenges.service import (
    ChallengeService,
    ClaimResult,
    challenge_status,
    run_meets_target,
)

__all__ = ["ChallengeService", "ClaimResult", "challenge_status", "run_meets_target"]
