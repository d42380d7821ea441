import random
from collections import Counter

import pytest

from models import Prize
from services.wheel import select_prize

from conftest import SAMPLE_WEIGHTS


def _prizes(weights):
    return [Prize(id=i + 1, name=f"P{i + 1}", type="discount", value=10, probability=w, is_active=True)
            for i, w in enumerate(weights)]


def test_empty_list_returns_none():
    assert select_prize([]) is None


@pytest.mark.parametrize("seed", range(20))
def test_always_returns_member_of_input(seed):
    rng = random.Random(seed)
    weights = [rng.uniform(0.1, 50) for _ in range(rng.randint(1, 12))]
    prizes = _prizes(weights)
    for _ in range(200):
        assert select_prize(prizes, rng=rng) in prizes


def test_frequencies_follow_weights():
    prizes = _prizes(SAMPLE_WEIGHTS)
    total = sum(SAMPLE_WEIGHTS)
    rng = random.Random(1234)
    draws = 100_000

    counts = Counter(select_prize(prizes, rng=rng).id for _ in range(draws))

    for prize, weight in zip(prizes, SAMPLE_WEIGHTS):
        observed = counts[prize.id] / draws
        assert abs(observed - weight / total) < 0.01, prize.name


def test_weights_need_not_sum_to_100():
    prizes = _prizes([1, 3])
    rng = random.Random(7)
    draws = 40_000
    counts = Counter(select_prize(prizes, rng=rng).id for _ in range(draws))
    assert abs(counts[2] / draws - 0.75) < 0.01


def test_zero_weight_prize_never_wins():
    prizes = _prizes([0, 5, 0, 5])
    rng = random.Random(99)
    winners = {select_prize(prizes, rng=rng).id for _ in range(5_000)}
    assert winners == {2, 4}


class _EdgeRandom:
    """Always returns the largest float below 1.0."""

    def random(self):
        return 1.0 - 2 ** -53


def test_draw_at_upper_edge_returns_last_positive_prize():
    prizes = _prizes([0.1, 0.2, 0.3])
    assert select_prize(prizes, rng=_EdgeRandom()) is prizes[-1]


def test_rounding_never_lands_on_trailing_zero_weight():
    prizes = _prizes([27.4, 25.8, 19.61, 19.4, 0])
    winner = select_prize(prizes, rng=_EdgeRandom())
    assert winner is prizes[3]
    assert winner.probability > 0


@pytest.mark.parametrize("seed", range(50))
def test_upper_edge_winner_always_has_weight(seed):
    rng = random.Random(seed)
    weights = [round(rng.uniform(0.01, 40), 2) for _ in range(rng.randint(1, 8))] + [0, 0]
    rng.shuffle(weights)
    weights.append(0)
    winner = select_prize(_prizes(weights), rng=_EdgeRandom())
    assert winner.probability > 0


def test_degenerate_weights_fall_back_to_last_prize():
    prizes = _prizes([0, 0, 0])
    assert select_prize(prizes) is prizes[-1]
