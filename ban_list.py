from typing import Iterable, NamedTuple


class BannedPair(NamedTuple):
    receiver_name: str
    member_name: str

    def __str__(self):
        return f"{self.receiver_name}.{self.member_name}"


class BanList:
    """
    Ordered, append-only list of banned (receiver, member) pairs.

    One instance per analysed file. Duplicates are kept: each copy
    produces its own finding.
    """

    def __init__(self):
        self._pairs: list[BannedPair] = []

    @classmethod
    def from_pairs(cls, pairs: Iterable) -> "BanList":
        ban_list = cls()
        for pair in pairs:
            ban_list.add(pair)
        return ban_list

    def add(self, pair) -> None:
        receiver_name, member_name = pair
        for value in (receiver_name, member_name):
            if not isinstance(value, str) or not value:
                raise ValueError(f"Banned names must be non-empty strings, got {pair!r}")
        self._pairs.append(BannedPair(receiver_name, member_name))

    def entries(self) -> tuple[BannedPair, ...]:
        return tuple(self._pairs)

    def __iter__(self):
        return iter(self.entries())

    def __len__(self):
        return len(self._pairs)
