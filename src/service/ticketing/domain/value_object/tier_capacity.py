from enum import StrEnum
from typing import Optional

import attrs


class CapacityMode(StrEnum):
    LIMITED = 'limited'
    UNLIMITED = 'unlimited'
    UNSET = 'unset'


@attrs.frozen
class TierCapacity:
    """
    How many tickets a tier may sell.

    `unlimited` is an explicit choice and never inferred from a zero quantity;
    `unset` is a tier whose capacity has not been configured yet and cannot
    be sold.
    """

    mode: CapacityMode
    total: Optional[int] = None

    def __attrs_post_init__(self) -> None:
        if self.mode == CapacityMode.LIMITED:
            if self.total is None or self.total < 1:
                raise ValueError('Limited capacity must be at least 1')
        elif self.total is not None:
            raise ValueError(f'{self.mode} capacity cannot carry a total')

    @classmethod
    def limited(cls, total: int) -> 'TierCapacity':
        return cls(mode=CapacityMode.LIMITED, total=total)

    @classmethod
    def unlimited(cls) -> 'TierCapacity':
        return cls(mode=CapacityMode.UNLIMITED)

    @classmethod
    def unset(cls) -> 'TierCapacity':
        return cls(mode=CapacityMode.UNSET)

    def remaining(self, sold: int) -> Optional[int]:
        """None means no upper bound"""
        if self.mode == CapacityMode.UNLIMITED:
            return None
        if self.mode == CapacityMode.UNSET:
            return 0
        return max(0, self.total - sold)  # type: ignore[operator]

    def allows(self, *, sold: int, requested: int) -> bool:
        if self.mode == CapacityMode.UNLIMITED:
            return True
        if self.mode == CapacityMode.UNSET:
            return False
        return sold + requested <= self.total  # type: ignore[operator]
