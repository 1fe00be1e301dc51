"""
Tests for the resort loop.

End-to-end runs with real storage and ranker, scripted or simulated judges.
"""

import random
import tempfile
from collections.abc import Sequence
from pathlib import Path

import pytest

from resorter.exceptions import ConfigurationError, OracleAbortedError, StorageError, UpdateError
from resorter.group_selectors.uncertainty_selector import UncertaintySelector
from resorter.interfaces import Judge, Ranker
from resorter.judges.sim_judge import SimulatedJudge
from resorter.models import MatchResult, Outcome, RatedItem, ResortStatus, SkillEstimate
from resorter.orchestrator import Orchestrator, ResortConfig
from resorter.rankers.trueskill_ranker import TrueSkillRanker
from resorter.storage.csv_storage import CSVStorage


class ScriptedJudge(Judge):
    """Judge replaying fixed answers, then aborting."""

    def __init__(self, answers: Sequence[Outcome]):
        self.answers = list(answers)
        self.asked: list[tuple[str, str]] = []

    def compare(self, left: RatedItem, right: RatedItem) -> Outcome:
        if not self.answers:
            raise OracleAbortedError(f"No more answers for {left.name!r} vs {right.name!r}")
        self.asked.append((left.name, right.name))
        return self.answers.pop(0)


class RecordingStorage(CSVStorage):
    """CSV storage remembering how many items every save wrote."""

    def __init__(self, path: Path):
        super().__init__(path)
        self.saved_counts: list[int] = []

    def save_items(self, items: Sequence[RatedItem]) -> None:
        super().save_items(items)
        self.saved_counts.append(len(self.load_items()))


class FailingStorage(CSVStorage):
    """CSV storage whose saves always fail."""

    def save_items(self, items: Sequence[RatedItem]) -> None:
        raise StorageError(f"Disk full while writing {self.path}")


class ShrinkingRanker(Ranker):
    """Synthetic update: deviations shrink by a fixed factor, ratings follow the winner."""

    def __init__(self, factor: float = 0.9):
        self.factor = factor

    def rate(self, left: RatedItem, right: RatedItem, result: MatchResult) -> tuple[SkillEstimate, SkillEstimate]:
        shift = 10.0 if result is MatchResult.WIN else -10.0
        return (
            SkillEstimate(rating=left.rating + shift, deviation=left.deviation * self.factor),
            SkillEstimate(rating=right.rating - shift, deviation=right.deviation * self.factor),
        )

    def decay(self, item: RatedItem) -> SkillEstimate:
        return SkillEstimate(rating=item.rating, deviation=item.deviation)


def write_items(path: Path, items: Sequence[RatedItem]) -> CSVStorage:
    storage = CSVStorage(path)
    storage.save_items(items)
    return storage


def make_orchestrator(
    storage: CSVStorage,
    judge: Judge,
    config: ResortConfig | None = None,
    ranker: Ranker | None = None,
    seed: int = 0,
) -> Orchestrator:
    config = config or ResortConfig()
    rng = random.Random(seed)
    return Orchestrator(
        storage=storage,
        judge=judge,
        ranker=ranker or TrueSkillRanker(allow_draws=config.allow_draws),
        selector=UncertaintySelector(rng, random_pair_probability=config.random_pair_probability),
        config=config,
        rng=rng,
    )


class TestResortLoop:
    """Resort loop scenarios."""

    def test_consistent_winner_stabilizes(self) -> None:
        """A always beats B: ratings split, deviations settle, buckets follow ratings."""
        with tempfile.TemporaryDirectory() as temp_dir:
            # Arrange
            storage = write_items(Path(temp_dir) / "items.csv", [RatedItem(name="A"), RatedItem(name="B")])
            judge = SimulatedJudge({"A": 2.0, "B": 1.0})

            # Act
            result = make_orchestrator(storage, judge).run()

            # Assert
            assert result.status is ResortStatus.STABILIZED
            assert 0 < result.comparisons < 50
            saved = {item.name: item for item in storage.load_items()}
            assert saved["A"].rating > saved["B"].rating
            assert saved["A"].deviation <= 65.0
            assert saved["B"].deviation <= 65.0
            assert saved["A"].bucket > saved["B"].bucket

    def test_single_item_is_insufficient_data(self) -> None:
        """One item cannot be sorted; the file is left untouched even with decay."""
        with tempfile.TemporaryDirectory() as temp_dir:
            # Arrange
            path = Path(temp_dir) / "items.csv"
            storage = write_items(path, [RatedItem(name="lonely", deviation=40.0)])
            before = path.read_bytes()
            judge = ScriptedJudge([])

            # Act
            result = make_orchestrator(storage, judge, ResortConfig(decay=True)).run()

            # Assert
            assert result.status is ResortStatus.INSUFFICIENT_DATA
            assert result.comparisons == 0
            assert judge.asked == []
            assert path.read_bytes() == before

    def test_empty_store_is_insufficient_data(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "items.csv"
            path.write_text("", encoding="utf-8")

            result = make_orchestrator(CSVStorage(path), ScriptedJudge([])).run()

            assert result.status is ResortStatus.INSUFFICIENT_DATA

    def test_converged_set_needs_no_comparisons(self) -> None:
        """Everything at or below the threshold: stabilized at once, nothing written."""
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "items.csv"
            storage = write_items(path, [RatedItem(name="a", deviation=65.0), RatedItem(name="b", deviation=30.0)])
            before = path.read_bytes()
            judge = ScriptedJudge([])

            result = make_orchestrator(storage, judge).run()

            assert result.status is ResortStatus.STABILIZED
            assert result.comparisons == 0
            assert path.read_bytes() == before

    def test_decay_reopens_converged_set(self) -> None:
        """Decay pushes settled deviations back above the threshold."""
        with tempfile.TemporaryDirectory() as temp_dir:
            # Arrange
            storage = write_items(
                Path(temp_dir) / "items.csv",
                [RatedItem(name="a", rating=1600.0, deviation=60.0), RatedItem(name="b", rating=1400.0, deviation=62.0)],
            )
            judge = SimulatedJudge({"a": 2.0, "b": 1.0})

            # Act
            result = make_orchestrator(storage, judge, ResortConfig(decay=True)).run()

            # Assert
            assert result.comparisons > 0, "Decayed items should need new comparisons"
            assert all(item.deviation <= 65.0 for item in storage.load_items())

    def test_persists_after_every_comparison_without_losing_items(self) -> None:
        """Every comparison is saved, and every save keeps the full item count."""
        with tempfile.TemporaryDirectory() as temp_dir:
            # Arrange
            path = Path(temp_dir) / "items.csv"
            names = [f"album_{i}" for i in range(7)]
            write_items(path, [RatedItem(name=name) for name in names])
            storage = RecordingStorage(path)
            judge = SimulatedJudge({name: float(i) for i, name in enumerate(names)})

            # Act
            result = make_orchestrator(storage, judge, seed=3).run()

            # Assert
            assert len(storage.saved_counts) == result.comparisons == judge.comparisons
            assert set(storage.saved_counts) == {len(names)}

    def test_best_item_outranks_worst(self) -> None:
        """With a noiseless judge the best item ends above the worst one."""
        with tempfile.TemporaryDirectory() as temp_dir:
            names = ["worst", "poor", "fair", "good", "great", "best"]
            storage = write_items(Path(temp_dir) / "items.csv", [RatedItem(name=name) for name in names])
            judge = SimulatedJudge({name: float(i) for i, name in enumerate(names)})

            make_orchestrator(storage, judge, seed=5).run()

            saved = {item.name: item for item in storage.load_items()}
            assert saved["best"].rating > saved["worst"].rating
            assert saved["best"].bucket > saved["worst"].bucket
            for a in saved.values():
                for b in saved.values():
                    if a.rating < b.rating:
                        assert a.bucket <= b.bucket

    def test_shrinking_update_terminates(self) -> None:
        """Any update that never grows deviation must end the loop in bounded rounds."""
        with tempfile.TemporaryDirectory() as temp_dir:
            storage = write_items(Path(temp_dir) / "items.csv", [RatedItem(name=f"i{i}") for i in range(20)])
            judge = SimulatedJudge({f"i{i}": float(i) for i in range(20)})

            result = make_orchestrator(storage, judge, ranker=ShrinkingRanker(0.9), seed=9).run()

            assert result.status is ResortStatus.STABILIZED
            assert result.comparisons <= 500
            assert all(item.deviation <= 65.0 for item in storage.load_items())


class TestOutcomeMapping:
    """Translation of oracle answers."""

    def test_equal_counts_as_right_win(self) -> None:
        """By default EQUAL rates exactly like a right win."""
        with tempfile.TemporaryDirectory() as temp_dir:
            # Arrange
            storage = write_items(Path(temp_dir) / "items.csv", [RatedItem(name="x"), RatedItem(name="y")])
            judge = ScriptedJudge([Outcome.EQUAL])

            # Act
            with pytest.raises(OracleAbortedError):
                make_orchestrator(storage, judge).run()

            # Assert
            (left_name, right_name), = judge.asked
            saved = {item.name: item for item in storage.load_items()}
            assert saved[right_name].rating > saved[left_name].rating

    def test_equal_is_draw_when_enabled(self) -> None:
        """With draws enabled, EQUAL between equal items keeps them level."""
        with tempfile.TemporaryDirectory() as temp_dir:
            storage = write_items(Path(temp_dir) / "items.csv", [RatedItem(name="x"), RatedItem(name="y")])
            judge = ScriptedJudge([Outcome.EQUAL])

            with pytest.raises(OracleAbortedError):
                make_orchestrator(storage, judge, ResortConfig(allow_draws=True)).run()

            x, y = sorted(storage.load_items(), key=lambda item: item.name)
            assert x.rating == pytest.approx(y.rating)
            assert x.deviation < 100.0

    def test_outcome_translation(self) -> None:
        assert MatchResult.from_outcome(Outcome.LEFT) is MatchResult.WIN
        assert MatchResult.from_outcome(Outcome.RIGHT) is MatchResult.LOSS
        assert MatchResult.from_outcome(Outcome.EQUAL) is MatchResult.LOSS
        assert MatchResult.from_outcome(Outcome.EQUAL, allow_draws=True) is MatchResult.DRAW
        assert MatchResult.from_outcome(Outcome.RIGHT, allow_draws=True) is MatchResult.LOSS


class TestFailures:
    """Fatal errors abort the run and keep the last saved state."""

    def test_oracle_abort_keeps_completed_comparisons(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            # Arrange
            path = Path(temp_dir) / "items.csv"
            write_items(path, [RatedItem(name="A"), RatedItem(name="B")])
            storage = RecordingStorage(path)
            judge = ScriptedJudge([Outcome.LEFT, Outcome.LEFT])

            # Act
            with pytest.raises(OracleAbortedError):
                make_orchestrator(storage, judge).run()

            # Assert
            assert storage.saved_counts == [2, 2], "Only the two answered comparisons were saved"
            assert all(65.0 < item.deviation < 100.0 for item in storage.load_items())

    def test_update_error_leaves_file_untouched(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "items.csv"
            path.write_text("broken,nan,100.0,0\nfine,1500.0,100.0,0\n", encoding="utf-8")
            before = path.read_bytes()

            with pytest.raises(UpdateError, match="broken"):
                make_orchestrator(CSVStorage(path), ScriptedJudge([Outcome.LEFT])).run()

            assert path.read_bytes() == before

    def test_zero_deviation_record_fails_as_update_error(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "items.csv"
            path.write_text("pinned,1500.0,0.0,0\nnew,1500.0,100.0,0\n", encoding="utf-8")
            before = path.read_bytes()

            with pytest.raises(UpdateError, match="pinned"):
                make_orchestrator(CSVStorage(path), ScriptedJudge([Outcome.LEFT])).run()

            assert path.read_bytes() == before

    def test_storage_error_is_fatal(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "items.csv"
            write_items(path, [RatedItem(name="A"), RatedItem(name="B")])
            judge = ScriptedJudge([Outcome.LEFT, Outcome.LEFT])

            with pytest.raises(StorageError, match="Disk full"):
                make_orchestrator(FailingStorage(path), judge).run()

            assert len(judge.asked) == 1, "No further comparison after a failed save"

    def test_missing_store_is_fatal(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            storage = CSVStorage(Path(temp_dir) / "nope.csv")
            with pytest.raises(StorageError):
                make_orchestrator(storage, ScriptedJudge([])).run()


class TestResortConfig:
    """Configuration validation."""

    def test_defaults(self) -> None:
        config = ResortConfig()
        assert config.deviation_threshold == 65.0
        assert config.random_pair_probability == 0.25
        assert config.bucket_count == 10
        assert not config.allow_draws

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"deviation_threshold": 0.0},
            {"random_pair_probability": 1.1},
            {"bucket_count": 0},
            {"progress_every": 0},
        ],
    )
    def test_invalid_values_rejected(self, kwargs: dict[str, float]) -> None:
        with pytest.raises(ConfigurationError):
            ResortConfig(**kwargs)  # type: ignore[arg-type]
