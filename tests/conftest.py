"""Shared snapshot builders for the snake agent tests."""

from __future__ import annotations

import pytest


def _make_snake(cells):
    body = [{"x": x, "y": y} for x, y in cells]
    return {
        "head": dict(body[0]),
        "body": body,
        "direction": {"x": 0, "y": 0},
        "length": len(body),
    }


def _make_state(snakes=(), food=(0, 0), width=10, height=10, obstacles=()):
    return {
        "food": {"x": food[0], "y": food[1]},
        "width": width,
        "height": height,
        "obstacles": [{"x": x, "y": y} for x, y in obstacles],
        "snakes": list(snakes),
    }


@pytest.fixture
def make_snake():
    return _make_snake


@pytest.fixture
def make_state():
    return _make_state


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
