"""End-to-end tests for the sync pipeline."""
import json
import os
import shutil

from tome.core.config import Config
from tome.core.pipeline import sync
from tome.models.skill import Source, SourceKind, Target, TargetMethod


class TestSync:
    """Test full sync runs against a scratch tree."""

    def test_first_sync_links_everything(self, sample_config, make_skill, workspace):
        """Test that a first sync creates library and target links."""
        # Given: two skills in the source
        make_skill(workspace / "sources", "skill-a")
        make_skill(workspace / "sources", "skill-b")

        # When: we sync
        report = sync(sample_config)

        # Then: both stages created two links
        assert [s.name for s in report.skills] == ["skill-a", "skill-b"]
        assert report.library.created == 2
        assert report.targets["claude"].created == 2
        assert os.readlink(workspace / "library" / "skill-a") == \
            str(workspace / "sources" / "skill-a")
        assert os.readlink(workspace / "target" / "skill-a") == \
            str(workspace / "library" / "skill-a")

    def test_second_sync_changes_nothing(self, sample_config, make_skill, workspace):
        make_skill(workspace / "sources", "skill-a")
        make_skill(workspace / "sources", "skill-b")
        sync(sample_config)

        report = sync(sample_config)

        assert report.library.created == 0
        assert report.library.unchanged == 2
        assert report.targets["claude"].unchanged == 2
        assert report.library_cleanup.removed == 0
        assert report.removed_from_targets == 0

    def test_deleted_skill_is_cleaned_everywhere(self, sample_config, make_skill, workspace):
        """Test that removing a skill's origin removes its library and target links."""
        # Given: two synced skills
        make_skill(workspace / "sources", "skill-a")
        make_skill(workspace / "sources", "skill-b")
        sync(sample_config)

        # When: skill-a is deleted and we sync again
        shutil.rmtree(workspace / "sources" / "skill-a")
        report = sync(sample_config)

        # Then: one link removed from the library and one from the target
        assert report.library_cleanup.removed == 1
        assert report.target_cleanups["claude"].removed == 1
        assert not (workspace / "library" / "skill-a").is_symlink()
        assert not (workspace / "target" / "skill-a").is_symlink()
        assert (workspace / "target" / "skill-b").is_symlink()

    def test_excluded_skill_is_not_linked(self, sample_config, make_skill, workspace):
        make_skill(workspace / "sources", "skill-a")
        make_skill(workspace / "sources", "private")
        sample_config.exclude = {"private"}

        report = sync(sample_config)

        assert report.library.created == 1
        assert not (workspace / "library" / "private").exists()
        assert not (workspace / "target" / "private").exists()

    def test_no_skills_stops_after_discovery(self, sample_config, workspace):
        report = sync(sample_config)

        assert report.skills == []
        assert report.library is None
        assert report.targets == {}
        assert list((workspace / "library").iterdir()) == []

    def test_mcp_and_disabled_targets(self, make_skill, workspace):
        """Test a mix of symlink, MCP and disabled targets."""
        make_skill(workspace / "sources", "skill-a")
        config = Config(
            library_dir=workspace / "library",
            sources=[Source(name="local", path=workspace / "sources", kind=SourceKind.DIRECTORY)],
            targets={
                "claude": Target(
                    name="claude", method=TargetMethod.SYMLINK, skills_dir=workspace / "target"
                ),
                "codex": Target(
                    name="codex", method=TargetMethod.MCP, mcp_config=workspace / ".mcp.json"
                ),
                "off": Target(
                    name="off",
                    method=TargetMethod.SYMLINK,
                    skills_dir=workspace / "off",
                    enabled=False,
                ),
            },
        )

        report = sync(config)

        assert report.targets["claude"].created == 1
        assert report.targets["codex"].created == 1
        assert report.targets["off"].disabled is True
        assert "off" not in report.target_cleanups
        assert not (workspace / "off").exists()
        servers = json.loads((workspace / ".mcp.json").read_text())["mcpServers"]
        assert servers["tome"]["command"] == "tome-mcp"

    def test_target_link_to_real_library_directory_survives(
        self, sample_config, make_skill, workspace
    ):
        """Test that sync keeps a target link whose library entry is a real directory."""
        # Given: a user directory in the library and a target link to it
        make_skill(workspace / "sources", "skill-a")
        make_skill(workspace / "library", "skill-a")
        link = workspace / "target" / "skill-a"
        os.symlink(workspace / "library" / "skill-a", link)

        # When: we sync
        report = sync(sample_config)

        # Then: the library directory is skipped and the target link kept
        assert report.library.skipped == 1
        assert report.target_cleanups["claude"].removed == 0
        assert link.is_symlink()

    def test_failed_target_is_reported(self, sample_config, make_skill, workspace):
        make_skill(workspace / "sources", "skill-a")
        (workspace / "bad.json").write_text("[1, 2]")
        sample_config.targets["bad"] = Target(
            name="bad", method=TargetMethod.MCP, mcp_config=workspace / "bad.json"
        )

        report = sync(sample_config)

        assert report.failed_targets == ["bad"]
        assert report.targets["claude"].created == 1


class TestDryRun:
    """Test that dry run mirrors a real run without writing."""

    def _messy_state(self, workspace, make_skill):
        """A tree with new, linked, moved and deleted skills."""
        library = workspace / "library"
        target = workspace / "target"

        # already synced
        make_skill(workspace / "sources", "skill-a")
        os.symlink(workspace / "sources" / "skill-a", library / "skill-a")
        os.symlink(library / "skill-a", target / "skill-a")
        # not synced yet
        make_skill(workspace / "sources", "skill-b")
        # linked to an old origin
        make_skill(workspace / "sources", "skill-c")
        os.symlink(workspace / "old" / "skill-c", library / "skill-c")
        # origin deleted
        os.symlink(workspace / "sources" / "skill-gone", library / "skill-gone")
        os.symlink(library / "skill-gone", target / "skill-gone")
        # user content that must survive
        (target / "user-skill").mkdir()
        os.symlink(workspace / "elsewhere", target / "user-link")

    def test_dry_run_writes_nothing(self, sample_config, make_skill, workspace, snapshot):
        """Test that every file, directory and link is unchanged by a dry run."""
        self._messy_state(workspace, make_skill)
        before = snapshot(workspace)

        sync(sample_config, dry_run=True)

        assert snapshot(workspace) == before

    def test_dry_run_counts_match_real_run(self, sample_config, make_skill, workspace):
        """Test that a dry run reports exactly what the real run then does."""
        # Given: a tree needing every kind of change
        self._messy_state(workspace, make_skill)

        # When: we dry run and then run for real
        planned = sync(sample_config, dry_run=True)
        actual = sync(sample_config)

        # Then: every stage reports the same counts
        assert planned.library.counts() == actual.library.counts()
        assert planned.targets["claude"].counts() == actual.targets["claude"].counts()
        assert planned.library_cleanup.removed == actual.library_cleanup.removed
        assert planned.removed_from_targets == actual.removed_from_targets

        assert actual.library.created == 1
        assert actual.library.updated == 1
        assert actual.library.unchanged == 1
        assert actual.library_cleanup.removed == 1
        assert actual.target_cleanups["claude"].removed == 1
        assert (workspace / "target" / "user-skill").is_dir()
        assert (workspace / "target" / "user-link").is_symlink()

    def test_dry_run_on_empty_tree(self, tmp_path, make_skill, snapshot):
        """Test that a dry run into a missing library and target creates nothing."""
        make_skill(tmp_path / "sources", "skill-a")
        config = Config(
            library_dir=tmp_path / "library",
            sources=[Source(name="local", path=tmp_path / "sources", kind=SourceKind.DIRECTORY)],
            targets={
                "claude": Target(
                    name="claude", method=TargetMethod.SYMLINK, skills_dir=tmp_path / "target"
                ),
            },
        )
        before = snapshot(tmp_path)

        report = sync(config, dry_run=True)

        assert snapshot(tmp_path) == before
        assert report.library.created == 1
        assert report.targets["claude"].created == 1
