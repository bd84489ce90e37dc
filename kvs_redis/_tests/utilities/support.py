"""
Helpers shared by the adapter tests
"""

import random

CHARS = "abcdefghiklmnopqrstuvwxyz"


def random_string(length: int = 8) -> str:
    return "".join(random.choice(CHARS) for _ in range(length))


def assert_between(actual, lower, upper):
    assert actual >= lower, f"Expected {actual} to be >= {lower}"
    assert actual <= upper, f"Expected {actual} to be <= {upper}"


def assert_within(actual, expected, delta):
    assert_between(actual, expected - delta, expected + delta)
