"""Tests for the failure signals and the bounded retry loop."""

from __future__ import annotations

import logging

import pytest

from levelgen.environment.generators.base import (
    DisconnectedAfterSettlement,
    DisconnectedRoomGraph,
    GenerationError,
    GenerationFailed,
    NoValidSpawn,
    NoValidStairs,
    RiverNotStraightEnough,
    ShapeRejected,
    StageRejected,
    TownSiteUnavailable,
    retry_generation,
)


class Flaky:
    """Rejects a fixed number of times, then succeeds."""

    def __init__(self, failures: int, error: type[Exception] = ShapeRejected) -> None:
        self.failures = failures
        self.error = error
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error(f"attempt {self.calls}")
        return "done"


class TestRetryGeneration:
    def test_first_success_is_returned(self) -> None:
        attempt = Flaky(0)
        assert retry_generation("hull", attempt, 5) == "done"
        assert attempt.calls == 1

    def test_retries_until_success(self) -> None:
        attempt = Flaky(3)
        assert retry_generation("hull", attempt, 5) == "done"
        assert attempt.calls == 4

    def test_exhaustion_raises_generation_failed(self) -> None:
        attempt = Flaky(10)
        with pytest.raises(GenerationFailed) as excinfo:
            retry_generation("hull", attempt, 4)

        assert attempt.calls == 4
        assert excinfo.value.stage == "hull"
        assert excinfo.value.attempts == 4
        assert isinstance(excinfo.value.__cause__, ShapeRejected)
        assert "after 4 attempts" in str(excinfo.value)

    def test_other_errors_propagate_immediately(self) -> None:
        attempt = Flaky(1, error=KeyError)
        with pytest.raises(KeyError):
            retry_generation("hull", attempt, 5)
        assert attempt.calls == 1

    def test_retry_on_narrows_what_is_retried(self) -> None:
        attempt = Flaky(1, error=NoValidSpawn)
        with pytest.raises(NoValidSpawn):
            retry_generation("hull", attempt, 5, retry_on=(ShapeRejected,))

    def test_max_attempts_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            retry_generation("hull", Flaky(0), 0)

    def test_rejections_logged_at_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG):
            retry_generation("terrain", Flaky(2), 5)
        assert caplog.text.count("terrain: attempt") == 2


class TestErrorTaxonomy:
    @pytest.mark.parametrize(
        ("error", "stage"),
        [
            (ShapeRejected, "hull"),
            (DisconnectedRoomGraph, "station"),
            (NoValidStairs, "station"),
            (NoValidSpawn, "station"),
            (RiverNotStraightEnough, "terrain"),
            (TownSiteUnavailable, "terrain"),
            (DisconnectedAfterSettlement, "terrain"),
        ],
    )
    def test_rejections_name_their_stage(
        self, error: type[StageRejected], stage: str
    ) -> None:
        assert issubclass(error, StageRejected)
        assert error.stage == stage

    def test_everything_is_a_generation_error(self) -> None:
        assert issubclass(StageRejected, GenerationError)
        assert issubclass(GenerationFailed, GenerationError)
        assert not issubclass(GenerationFailed, StageRejected)
