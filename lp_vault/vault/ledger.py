"""Time-locked LP positions.

Every deposit appends one :py:class:`Position` for the depositor.
Positions are never removed; claiming flips the ``claimed`` flag.
The order positions were added in is the order they are claimed in.
"""

from dataclasses import dataclass, replace

from eth_typing import HexAddress


@dataclass(slots=True)
class Position:
    """LP tokens locked for one deposit."""

    #: Depositor
    holder: HexAddress

    #: LP tokens the pool minted for the deposit
    amount: int

    #: Block timestamp when the position was created
    timestamp: int

    #: Set when the position is released, never unset
    claimed: bool = False

    def get_unlock_timestamp(self, stake_duration: int) -> int:
        """When the position matures under the given lock duration."""
        return self.timestamp + stake_duration

    def is_mature(self, now: int, stake_duration: int) -> bool:
        return now >= self.get_unlock_timestamp(stake_duration)


class PositionLedger:
    """Per holder append-only list of positions.

    Example:

    .. code-block:: python

        ledger = PositionLedger()
        ledger.append(Position(user_1, 100, block_timestamp))
        index, position = ledger.find_first_unclaimed(user_1)
        ledger.mark_claimed(user_1, index)
    """

    def __init__(self):
        self.positions: dict[HexAddress, list[Position]] = {}

    def __len__(self) -> int:
        return sum(len(p) for p in self.positions.values())

    def append(self, position: Position) -> int:
        """Add a new position.

        :return:
            Index of the position in the holder's list
        """
        assert position.amount >= 0, f"Negative position: {position}"
        assert not position.claimed, f"New positions must be unclaimed: {position}"
        positions = self.positions.setdefault(position.holder, [])
        positions.append(position)
        return len(positions) - 1

    def get_length(self, holder: HexAddress) -> int:
        return len(self.positions.get(holder, []))

    def get(self, holder: HexAddress, index: int) -> Position:
        """Copy of a position.

        :raise IndexError:
            No such position
        """
        positions = self.positions.get(holder, [])
        if not 0 <= index < len(positions):
            raise IndexError(f"Holder {holder} has {len(positions)} positions, asked for {index}")
        return replace(positions[index])

    def find_first_unclaimed(self, holder: HexAddress) -> tuple[int, Position] | None:
        """Oldest position not yet claimed.

        :return:
            Tuple (index, position) or ``None`` if everything is claimed
        """
        for index, p in enumerate(self.positions.get(holder, [])):
            if not p.claimed:
                return index, replace(p)
        return None

    def mark_claimed(self, holder: HexAddress, index: int):
        position = self.positions[holder][index]
        assert not position.claimed, f"Position already claimed: {position}"
        position.claimed = True

