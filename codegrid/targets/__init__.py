__all__ = [
    "Goal",
    "TargetRecord",
    "TargetGenerator",
    "generate_random_target",
    "generate_challenge_target",
    "generate_matrix_target",
    "generate_pixel_target",
    "generate_goal",
    "generate_challenge",
    "goal_max_score",
]

from .generator import (
    Goal,
    TargetGenerator,
    TargetRecord,
    generate_challenge,
    generate_challenge_target,
    generate_goal,
    generate_matrix_target,
    generate_pixel_target,
    generate_random_target,
    goal_max_score,
)
