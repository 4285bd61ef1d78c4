from enum import Enum


class Direction(Enum):
    UP = "up"  # towards owners
    DOWN = "down"  # towards children
