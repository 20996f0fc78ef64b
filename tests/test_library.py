"""Tests for library consolidation."""
import os
from pathlib import Path

from tome.core.library import consolidate, project_library, read_library
from tome.models.skill import DiscoveredSkill


def skill_at(path: Path, source_name: str = "local") -> DiscoveredSkill:
    return DiscoveredSkill(name=path.name, origin_path=path, source_name=source_name)


class TestConsolidate:
    """Test linking discovered skills into the library."""

    def test_creates_links(self, workspace, make_skill):
        """Test that each discovered skill gets a library link to its origin."""
        # Given: two skills
        skills = [
            skill_at(make_skill(workspace / "sources", "skill-a")),
            skill_at(make_skill(workspace / "sources", "skill-b")),
        ]
        library = workspace / "library"

        # When: we consolidate
        result = consolidate(skills, library)

        # Then: both links exist and point at the origins
        assert result.created == 2
        assert os.readlink(library / "skill-a") == str(workspace / "sources" / "skill-a")
        assert (library / "skill-b" / "SKILL.md").is_file()

    def test_second_run_is_unchanged(self, workspace, make_skill):
        """Test that consolidation is idempotent."""
        skills = [skill_at(make_skill(workspace / "sources", "skill-a"))]
        library = workspace / "library"
        consolidate(skills, library)

        result = consolidate(skills, library)

        assert result.created == 0
        assert result.unchanged == 1
        assert result.changed == 0

    def test_relative_link_to_origin_is_unchanged(self, workspace, make_skill):
        """Test that a relative link resolving to the origin is not rewritten."""
        origin = make_skill(workspace / "sources", "skill-a")
        library = workspace / "library"
        os.symlink("../sources/skill-a", library / "skill-a")

        result = consolidate([skill_at(origin)], library)

        assert result.unchanged == 1
        assert os.readlink(library / "skill-a") == "../sources/skill-a"

    def test_link_to_old_origin_is_updated(self, workspace, make_skill):
        """Test that a skill moving to a new origin repoints its link."""
        old = make_skill(workspace / "old", "skill-a")
        new = make_skill(workspace / "sources", "skill-a")
        library = workspace / "library"
        os.symlink(old, library / "skill-a")

        result = consolidate([skill_at(new)], library)

        assert result.updated == 1
        assert os.readlink(library / "skill-a") == str(new)

    def test_real_directory_is_skipped(self, workspace, make_skill):
        """Test that a user's real directory in the library is left alone."""
        # Given: a real directory occupying the skill's name
        library = workspace / "library"
        (library / "skill-a").mkdir()
        (library / "skill-a" / "notes.txt").write_text("mine")
        origin = make_skill(workspace / "sources", "skill-a")

        # When: we consolidate
        result = consolidate([skill_at(origin)], library)

        # Then: the directory is untouched and a warning is reported
        assert result.skipped == 1
        assert result.created == 0
        assert result.warnings
        assert not (library / "skill-a").is_symlink()
        assert (library / "skill-a" / "notes.txt").read_text() == "mine"

    def test_regular_file_is_skipped(self, workspace, make_skill):
        """Test that a regular file at the link path keeps its content and type."""
        # Given: a regular file occupying the skill's name
        library = workspace / "library"
        (library / "skill-a").write_text("user data")
        origin = make_skill(workspace / "sources", "skill-a")

        # When: we consolidate, for real and as a dry run
        planned = consolidate([skill_at(origin)], library, dry_run=True)
        result = consolidate([skill_at(origin)], library)

        # Then: both skip it and the file is unchanged
        assert planned.skipped == 1
        assert result.skipped == 1
        assert result.created == 0
        assert result.updated == 0
        assert any("is not a symlink" in w for w in result.warnings)
        assert not (library / "skill-a").is_symlink()
        assert (library / "skill-a").is_file()
        assert (library / "skill-a").read_text() == "user data"

    def test_dry_run_writes_nothing(self, tmp_path, make_skill):
        """Test that dry run counts links but creates neither links nor the library."""
        origin = make_skill(tmp_path / "sources", "skill-a")
        library = tmp_path / "library"

        result = consolidate([skill_at(origin)], library, dry_run=True)

        assert result.created == 1
        assert not library.exists()

    def test_creates_missing_library(self, tmp_path, make_skill):
        origin = make_skill(tmp_path / "sources", "skill-a")
        library = tmp_path / "deep" / "library"

        consolidate([skill_at(origin)], library)

        assert (library / "skill-a").is_symlink()

    def test_undiscovered_links_are_kept(self, workspace, make_skill):
        """Test that consolidation leaves links for other skills to cleanup."""
        library = workspace / "library"
        other = make_skill(workspace / "elsewhere", "skill-old")
        os.symlink(other, library / "skill-old")
        origin = make_skill(workspace / "sources", "skill-a")

        consolidate([skill_at(origin)], library)

        assert (library / "skill-old").is_symlink()


class TestReadLibrary:
    """Test reading library entries."""

    def test_missing_library_is_empty(self, tmp_path):
        assert read_library(tmp_path / "missing") == []

    def test_entries_describe_links(self, workspace, make_skill):
        library = workspace / "library"
        os.symlink(make_skill(workspace / "sources", "good"), library / "good")
        os.symlink(workspace / "gone", library / "broken")
        (library / "real").mkdir()
        (library / ".hidden").mkdir()

        entries = {entry.name: entry for entry in read_library(library)}

        assert sorted(entries) == ["broken", "good", "real"]
        assert entries["good"].usable is True
        assert entries["broken"].is_link is True
        assert entries["broken"].usable is False
        assert entries["real"].is_link is False


class TestProjectLibrary:
    """Test the projected library used by dry runs."""

    def test_projection_includes_pending_links(self, workspace, make_skill):
        """Test that skills not yet linked appear as usable entries."""
        library = workspace / "library"
        origin = make_skill(workspace / "sources", "skill-a")

        entries = project_library(library, [skill_at(origin)])

        assert [(e.name, e.usable) for e in entries] == [("skill-a", True)]

    def test_projection_repairs_broken_link_for_discovered_skill(self, workspace, make_skill):
        library = workspace / "library"
        os.symlink(workspace / "gone", library / "skill-a")
        origin = make_skill(workspace / "sources", "skill-a")

        entries = project_library(library, [skill_at(origin)])

        assert entries[0].usable is True

    def test_projection_keeps_foreign_entries(self, workspace, make_skill):
        """Test that a real directory stays a non-link in the projection."""
        library = workspace / "library"
        (library / "skill-a").mkdir()
        origin = make_skill(workspace / "sources", "skill-a")

        entries = project_library(library, [skill_at(origin)])

        assert entries[0].is_link is False
