"""Scoring helpers for Klondike."""

from __future__ import annotations

from typing import NamedTuple

WASTE_MOVE_POINTS = 5
REVEAL_POINTS = 20
FOUNDATION_POINTS = 50
RECYCLE_PENALTY = 50
TIME_PENALTY = 2
TIME_PENALTY_INTERVAL = 10


class ScoreProjection(NamedTuple):
    display_score: int
    display_time: str


def display_score(raw_score: int, recycle_count: int, elapsed_seconds: int) -> int:
    """Return the score shown to the player, never below zero."""

    penalty = recycle_count * RECYCLE_PENALTY
    penalty += (elapsed_seconds // TIME_PENALTY_INTERVAL) * TIME_PENALTY
    return max(0, raw_score - penalty)


def display_time(elapsed_seconds: int) -> str:
    minutes, seconds = divmod(max(0, int(elapsed_seconds)), 60)
    return f"{minutes:02d}:{seconds:02d}"


def move_points(source_kind: str, target_kind: str, card_count: int, flipped: bool) -> int:
    """Raw points earned by one applied move."""

    points = 0
    if source_kind == "waste":
        points += WASTE_MOVE_POINTS * card_count
    if target_kind == "foundation":
        points += FOUNDATION_POINTS * card_count
    if flipped:
        points += REVEAL_POINTS
    return points


def project(state) -> ScoreProjection:
    return ScoreProjection(
        display_score(state.score, state.recycle_count, state.elapsed_seconds),
        display_time(state.elapsed_seconds),
    )
