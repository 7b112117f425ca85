"""Unit tests for the linear vesting schedule"""
import pytest

from linear_vesting.services.schedule import VestingSchedule

START = 1_000
TOTAL = 1_000_000


def make_schedule(cliff_offset: int = 0, duration: int = 100, total: int = TOTAL) -> VestingSchedule:
    return VestingSchedule(total_amount=total, start_ts=START, cliff_ts=START + cliff_offset, duration=duration)


class TestVestedAmount:
    """Tests for the vested amount curve"""

    def test_nothing_vested_at_start(self):
        assert make_schedule().vested_amount(START) == 0

    def test_linear_midpoint(self):
        assert make_schedule().vested_amount(START + 50) == 500_000

    def test_floor_division_never_rounds_up(self):
        schedule = make_schedule(total=10, duration=3)
        assert schedule.vested_amount(START + 1) == 3
        assert schedule.vested_amount(START + 2) == 6
        assert schedule.vested_amount(START + 3) == 10

    def test_full_vesting_at_end(self):
        assert make_schedule().vested_amount(START + 100) == TOTAL

    @pytest.mark.parametrize("past_end", [1, 1_000, 10**12])
    def test_full_vesting_clamps_after_end(self, past_end):
        assert make_schedule().vested_amount(START + 100 + past_end) == TOTAL

    def test_before_start_is_zero(self):
        assert make_schedule().vested_amount(START - 10) == 0

    def test_large_amounts_do_not_lose_precision(self):
        total = 2**64 - 1
        schedule = make_schedule(total=total, duration=3)
        assert schedule.vested_amount(START + 1) == total // 3
        assert schedule.vested_amount(START + 3) == total


class TestCliff:
    """Tests for cliff behaviour"""

    def test_zero_before_cliff(self):
        schedule = make_schedule(cliff_offset=30)
        assert schedule.is_before_cliff(START + 29)
        assert schedule.vested_amount(START + 29) == 0

    def test_vesting_counts_from_start_once_cliff_passes(self):
        schedule = make_schedule(cliff_offset=30)
        assert not schedule.is_before_cliff(START + 30)
        assert schedule.vested_amount(START + 30) == 300_000

    def test_cliff_beyond_duration_jumps_to_full(self):
        schedule = make_schedule(cliff_offset=150)
        assert schedule.vested_amount(START + 100) == 0
        assert schedule.vested_amount(START + 149) == 0
        assert schedule.vested_amount(START + 150) == TOTAL

    def test_cliff_equal_to_end_jumps_to_full(self):
        schedule = make_schedule(cliff_offset=100)
        assert schedule.vested_amount(START + 99) == 0
        assert schedule.vested_amount(START + 100) == TOTAL

    def test_cliff_before_start_behaves_as_no_cliff(self):
        schedule = make_schedule(cliff_offset=-50)
        assert not schedule.is_before_cliff(START - 10)
        assert schedule.vested_amount(START - 10) == 0
        assert schedule.vested_amount(START + 25) == 250_000


class TestScheduleProperties:
    """Monotonicity, path independence and helpers"""

    def test_monotonic_non_decreasing(self):
        schedule = make_schedule(cliff_offset=17, total=999_983, duration=97)
        amounts = [schedule.vested_amount(t) for t in range(START - 5, START + 120)]
        assert amounts == sorted(amounts)

    def test_per_second_increments_sum_to_total(self):
        schedule = make_schedule(total=1_000_003, duration=7)
        increments = [
            schedule.vested_amount(START + i) - schedule.vested_amount(START + i - 1)
            for i in range(1, 8)
        ]
        assert sum(increments) == 1_000_003

    def test_pure_function(self):
        schedule = make_schedule()
        assert schedule.vested_amount(START + 42) == schedule.vested_amount(START + 42)

    def test_unvested_and_fully_vested(self):
        schedule = make_schedule()
        assert schedule.unvested_amount(START + 25) == 750_000
        assert not schedule.is_fully_vested(START + 99)
        assert schedule.is_fully_vested(START + 100)

    def test_zero_duration_rejected(self):
        with pytest.raises(ValueError):
            make_schedule(duration=0)
