"""
Generic ordered pair.
"""

from typing import Generic, Optional, TypeVar

L = TypeVar("L")
R = TypeVar("R")


class Pair(Generic[L, R]):
    """Two independently typed slots, left and right"""

    __slots__ = ("left", "right")

    def __init__(self, left: Optional[L] = None, right: Optional[R] = None):
        self.left = left
        self.right = right

    def get_left(self) -> Optional[L]:
        return self.left

    def get_right(self) -> Optional[R]:
        return self.right

    def set(self, left: L, right: R):
        self.left = left
        self.right = right

    def set_left(self, left: L):
        self.left = left

    def set_right(self, right: R):
        self.right = right

    def __eq__(self, other):
        if not isinstance(other, Pair):
            return NotImplemented
        return self.left == other.left and self.right == other.right

    __hash__ = None

    def __repr__(self):
        return f"({self.left}, {self.right})"
