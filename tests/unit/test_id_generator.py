"""Tests for the prefixed snowflake ID generator."""

import pytest

from src.bk_common.id_generator import SnowflakeIdGenerator, generate_id


class TestSnowflake:
    def test_prefix(self) -> None:
        assert generate_id("WDR").startswith("WDR")

    def test_monotonic_and_unique(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=3)
        ids = [gen.next_int() for _ in range(5000)]
        assert ids == sorted(ids)
        assert len(set(ids)) == len(ids)

    def test_machine_id_range(self) -> None:
        with pytest.raises(ValueError):
            SnowflakeIdGenerator(machine_id=1024)
