"""Linear-after-cliff vesting schedule."""
from dataclasses import dataclass


@dataclass(frozen=True)
class VestingSchedule:
    """
    Pure function of time to cumulative vested amount.

    Nothing vests before ``cliff_ts``. From the cliff on, the amount grows
    linearly from ``start_ts`` and is clamped at ``total_amount`` once
    ``start_ts + duration`` is reached. Integer floor division keeps the curve
    monotonic and never rounds above the deposit, so withdrawing in many small
    steps releases exactly what one lump-sum withdrawal would.
    """
    total_amount: int
    start_ts: int
    cliff_ts: int
    duration: int

    def __post_init__(self):
        if self.duration <= 0:
            raise ValueError("duration must be positive")
        if self.total_amount < 0:
            raise ValueError("total_amount cannot be negative")

    @classmethod
    def for_grant(cls, grant) -> "VestingSchedule":
        return cls(
            total_amount=grant.total_deposited_amount,
            start_ts=grant.start_ts,
            cliff_ts=grant.cliff_ts,
            duration=grant.duration,
        )

    @property
    def end_ts(self) -> int:
        return self.start_ts + self.duration

    def is_before_cliff(self, now: int) -> bool:
        return now < self.cliff_ts

    def vested_amount(self, now: int) -> int:
        """Cumulative amount vested as of ``now``, ignoring what was released."""
        if self.is_before_cliff(now):
            return 0
        if now >= self.end_ts:
            return self.total_amount
        # A cliff set before start behaves as no cliff; nothing vests until start
        elapsed = max(0, now - self.start_ts)
        return self.total_amount * elapsed // self.duration

    def unvested_amount(self, now: int) -> int:
        return self.total_amount - self.vested_amount(now)

    def is_fully_vested(self, now: int) -> bool:
        return self.vested_amount(now) >= self.total_amount
