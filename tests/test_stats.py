from models import Vote
from services.stats_service import average, compute_vote_stats, round_one_decimal


def _votes(*values):
    return [Vote(voter_id=f"p-{i}", voter_name=f"P{i}", value=v) for i, v in enumerate(values)]


def test_empty_votes():
    stats = compute_vote_stats([])
    assert stats.average == 0
    assert stats.most_common is None
    assert stats.distribution == {}
    assert stats.vote_count == 0


def test_average_rounds_to_one_decimal():
    assert compute_vote_stats(_votes(2, 4, 4)).average == 3.3
    assert compute_vote_stats(_votes(2, 2, 4)).average == 2.7


def test_round_half_up():
    assert round_one_decimal(0.25) == 0.3
    assert round_one_decimal(2.45) == 2.5
    assert average([]) is None


def test_distribution_counts_each_value():
    stats = compute_vote_stats(_votes(8, 4, 8, 16))
    assert stats.distribution == {8: 2, 4: 1, 16: 1}
    assert stats.most_common == 8
    assert stats.vote_count == 4


def test_mode_tie_goes_to_first_seen_value():
    assert compute_vote_stats(_votes(4, 8)).most_common == 4
    assert compute_vote_stats(_votes(8, 4)).most_common == 8
    assert compute_vote_stats(_votes(16, 2, 2, 16)).most_common == 16
