"""Tests for destination planning: structure, duplicates and collisions."""
import os

import pytest

from medarch import PlanningError
from medarch.config import DuplicatePolicy, StructureMode
from medarch.discover import discover
from medarch.planner import Action, DestinationPlanner

from conftest import write_file


def plan_all(config):
    planner = DestinationPlanner(config)
    return [planner.plan(c) for c in discover(config)]


class TestStructure:
    """Tests for preserve vs. flatten target paths."""

    def test_preserve_mirrors_subdirectories(self, src, dest, make_config):
        write_file(src / "2023" / "trip" / "img.jpg")
        (planned,) = plan_all(make_config())
        assert planned.destination == os.path.join(os.path.realpath(str(dest)), "2023", "trip", "img.jpg")
        assert planned.action is Action.COPY
        assert (dest / "2023" / "trip").is_dir()

    def test_flatten_places_at_root(self, src, dest, make_config):
        write_file(src / "2023" / "trip" / "img.jpg")
        (planned,) = plan_all(make_config(structure=StructureMode.FLATTEN))
        assert planned.destination == os.path.join(os.path.realpath(str(dest)), "img.jpg")
        assert not (dest / "2023").exists()

    def test_dry_run_does_not_create_folders(self, src, dest, make_config):
        write_file(src / "2023" / "trip" / "img.jpg")
        (planned,) = plan_all(make_config(dry_run=True))
        assert planned.destination.endswith(os.path.join("2023", "trip", "img.jpg"))
        assert list(dest.iterdir()) == []

    def test_folder_creation_failure(self, src, dest, make_config):
        write_file(src / "2023" / "img.jpg")
        write_file(dest / "2023", size=1)
        config = make_config()
        (candidate,) = discover(config)
        with pytest.raises(PlanningError):
            DestinationPlanner(config).plan(candidate)

    def test_folder_creation_failure_in_dry_run(self, src, dest, make_config):
        write_file(src / "2023" / "trip" / "img.jpg")
        write_file(dest / "2023", size=1)
        config = make_config(dry_run=True)
        (candidate,) = discover(config)
        with pytest.raises(PlanningError):
            DestinationPlanner(config).plan(candidate)


class TestCollisions:
    """Tests for '(N)' collision resolution."""

    def test_existing_file_gets_counter(self, src, dest, make_config):
        write_file(src / "x.jpg", size=10)
        write_file(dest / "x.jpg", size=10)
        (planned,) = plan_all(make_config())
        assert os.path.basename(planned.destination) == "x(1).jpg"
        assert planned.renamed

    def test_counter_skips_taken_names(self, src, dest, make_config):
        write_file(src / "x.jpg")
        write_file(dest / "x.jpg")
        write_file(dest / "x(1).jpg")
        (planned,) = plan_all(make_config())
        assert os.path.basename(planned.destination) == "x(2).jpg"

    def test_nothing_reserved_in_real_run(self, src, dest, make_config):
        write_file(src / "a" / "x.jpg", size=10)
        write_file(src / "b" / "x.jpg", size=20)
        planner = DestinationPlanner(make_config(structure=StructureMode.FLATTEN))
        first, second = [planner.plan(c) for c in discover(planner.config)]
        # nothing copied in between, so both plans target the same free name
        assert first.destination == second.destination

    def test_dry_run_remembers_would_be_copies(self, src, make_config):
        write_file(src / "a" / "x.jpg", size=10)
        write_file(src / "b" / "x.jpg", size=20)
        planned = plan_all(make_config(structure=StructureMode.FLATTEN, dry_run=True))
        assert [os.path.basename(p.destination) for p in planned] == ["x.jpg", "x(1).jpg"]
        assert [p.renamed for p in planned] == [False, True]

    def test_existing_directory_counts_as_collision(self, src, dest, make_config):
        write_file(src / "x.jpg")
        (dest / "x.jpg").mkdir()
        (planned,) = plan_all(make_config(structure=StructureMode.FLATTEN))
        assert os.path.basename(planned.destination) == "x(1).jpg"


class TestDuplicates:
    """Tests for skip-if-same-name-and-size."""

    def skip_config(self, make_config, **kwargs):
        return make_config(duplicates=DuplicatePolicy.SKIP_SAME_NAME_AND_SIZE, **kwargs)

    def test_same_name_and_size_skipped(self, src, dest, make_config):
        write_file(src / "p.png", size=100)
        existing = write_file(dest / "p.png", size=100)
        (planned,) = plan_all(self.skip_config(make_config))
        assert planned.action is Action.SKIP_DUPLICATE
        assert os.path.samefile(planned.destination, existing)

    def test_different_size_is_collision(self, src, dest, make_config):
        write_file(src / "p.png", size=100)
        write_file(dest / "p.png", size=50)
        (planned,) = plan_all(self.skip_config(make_config))
        assert planned.action is Action.COPY
        assert os.path.basename(planned.destination) == "p(1).png"

    def test_zero_byte_files_never_duplicates(self, src, dest, make_config):
        write_file(src / "empty.jpg", size=0)
        write_file(dest / "empty.jpg", size=0)
        (planned,) = plan_all(self.skip_config(make_config))
        assert planned.action is Action.COPY
        assert os.path.basename(planned.destination) == "empty(1).jpg"

    def test_only_base_name_is_compared(self, src, dest, make_config):
        write_file(src / "p.png", size=100)
        write_file(dest / "p.png", size=50)
        write_file(dest / "p(1).png", size=100)
        (planned,) = plan_all(self.skip_config(make_config))
        assert planned.action is Action.COPY
        assert os.path.basename(planned.destination) == "p(2).png"

    def test_policy_off_always_copies(self, src, dest, make_config):
        write_file(src / "p.png", size=100)
        write_file(dest / "p.png", size=100)
        (planned,) = plan_all(make_config())
        assert planned.action is Action.COPY
        assert os.path.basename(planned.destination) == "p(1).png"

    def test_preserve_mode_compares_in_subfolder(self, src, dest, make_config):
        write_file(src / "2023" / "p.png", size=100)
        write_file(dest / "p.png", size=100)
        (planned,) = plan_all(self.skip_config(make_config))
        assert planned.action is Action.COPY
        assert planned.destination.endswith(os.path.join("2023", "p.png"))

    def test_dry_run_sees_earlier_would_be_copy(self, src, make_config):
        write_file(src / "a" / "p.png", size=100)
        write_file(src / "b" / "p.png", size=100)
        config = self.skip_config(make_config, structure=StructureMode.FLATTEN, dry_run=True)
        assert [p.action for p in plan_all(config)] == [Action.COPY, Action.SKIP_DUPLICATE]
