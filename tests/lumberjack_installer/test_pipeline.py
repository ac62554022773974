"""End-to-end pipeline tests with git and composer faked at the runner seam."""

from __future__ import annotations

from pathlib import Path

from lumberjack_installer.cli.ui import StepTracker
from lumberjack_installer.core.config import BEDROCK_REPO, THEME_REPO, TRELLIS_REPO, InstallOptions
from lumberjack_installer.core.errors import (
    ConfigBlockNotFoundError,
    DependencyInstallError,
    MaterializeError,
    TargetExistsError,
)
from lumberjack_installer.core.git_refs import BranchRef, TagRef
from lumberjack_installer.core.paths import resolve_project_paths
from lumberjack_installer.pipeline import InstallPipeline, PipelineStage
from tests.lumberjack_installer.support import BEDROCK_FILES, THEME_FILES


def _pipeline(tmp_path: Path, runner, **overrides) -> InstallPipeline:
    options = InstallOptions(project_name="demo", **overrides)
    paths = resolve_project_paths(tmp_path, "demo", with_trellis=options.with_trellis)
    return InstallPipeline(options, paths, runner=runner)


def test_default_install_produces_plain_project_tree(tmp_path: Path, fake_runner) -> None:
    pipeline = _pipeline(tmp_path, fake_runner)

    result = pipeline.run()

    assert result.ok
    assert result.stage is PipelineStage.COMPLETE
    root = tmp_path / "demo"
    theme = root / "web" / "app" / "themes" / "lumberjack"
    assert not (root / ".git").exists()
    assert not (theme / ".git").exists()
    assert (theme / "config" / "app.php").is_file()
    assert not (root / ".github").exists()
    assert (root / ".env.example").read_text(encoding="utf-8") == (
        "DB_NAME=database_name\nDB_USER=database_user\n" "\n" "APP_KEY="
    )
    assert not (root / ".env").exists()
    assert result.refs == {"bedrock": TagRef("1.10.2"), "theme": TagRef("v4.1.0")}


def test_steps_run_in_fixed_order(tmp_path: Path, fake_runner) -> None:
    result = _pipeline(tmp_path, fake_runner).run()

    commands = [cmd[:2] + ([cmd[3]] if cmd[:2] == ["git", "ls-remote"] else []) for cmd, _ in fake_runner.calls]
    assert commands == [
        ["git", "ls-remote", BEDROCK_REPO],
        ["git", "clone"],
        ["composer", "require"],
        ["git", "ls-remote", THEME_REPO],
        ["git", "clone"],
    ]
    assert result.completed == [
        PipelineStage.PATHS_RESOLVED,
        PipelineStage.PRIMARY_MATERIALIZED,
        PipelineStage.DEPENDENCIES_INSTALLED,
        PipelineStage.THEME_MATERIALIZED,
        PipelineStage.ENV_AUGMENTED,
        PipelineStage.SCAFFOLD_CLEANUP,
    ]
    assert result.skipped == [PipelineStage.SECONDARY_MATERIALIZED, PipelineStage.PROVIDERS_INJECTED]
    composer_cwd = [cwd for cmd, cwd in fake_runner.calls if cmd[0] == "composer"]
    assert composer_cwd == [tmp_path / "demo"]


def test_dev_mode_uses_trunk_without_tag_queries(tmp_path: Path, fake_runner) -> None:
    result = _pipeline(tmp_path, fake_runner, dev=True).run()

    assert result.ok
    assert fake_runner.commands(("git", "ls-remote")) == []
    assert all(cmd[3:5] == ["--branch", "master"] for cmd in fake_runner.commands(("git", "clone")))
    assert fake_runner.commands(("composer",)) == [["composer", "require", "rareloop/lumberjack-core:dev-master"]]
    assert result.refs["theme"] == BranchRef("master")


def test_trellis_and_hatchet_extras(tmp_path: Path, fake_runner) -> None:
    result = _pipeline(tmp_path, fake_runner, with_trellis=True, with_hatchet=True).run()

    assert result.ok
    root = tmp_path / "demo"
    assert (root / "site" / ".env.example").is_file()
    assert (root / "site" / "web" / "app" / "themes" / "lumberjack" / "config" / "app.php").is_file()
    assert (root / "trellis" / "ansible.cfg").is_file()
    assert not (root / "trellis" / ".git").exists()
    assert not (root / "trellis" / ".github").exists()
    assert not (root / "site" / ".github").exists()
    assert fake_runner.commands(("composer",)) == [
        ["composer", "require", "rareloop/lumberjack-core", "rareloop/hatchet"]
    ]
    assert result.refs["trellis"] == TagRef("1.0.0")


def test_configured_providers_are_registered(tmp_path: Path, fake_runner) -> None:
    provider = r"App\Providers\AppServiceProvider::class"
    result = _pipeline(tmp_path, fake_runner, service_providers=(provider,)).run()

    assert PipelineStage.PROVIDERS_INJECTED in result.completed
    app_php = tmp_path / "demo" / "web" / "app" / "themes" / "lumberjack" / "config" / "app.php"
    assert f"WordPressControllersServiceProvider::class,\n        {provider}," in app_php.read_text(encoding="utf-8")


def test_create_env_file_and_cleanup_disabled(tmp_path: Path, fake_runner) -> None:
    result = _pipeline(tmp_path, fake_runner, create_env_file=True, cleanup_dirs=()).run()

    root = tmp_path / "demo"
    assert result.ok
    assert (root / ".env").read_text(encoding="utf-8").endswith("\nAPP_KEY=")
    assert (root / ".github").is_dir()
    assert PipelineStage.SCAFFOLD_CLEANUP in result.skipped


def test_failure_stops_pipeline_without_rollback(tmp_path: Path, make_runner) -> None:
    runner = make_runner(fail_on=lambda cmd: cmd[0] == "composer")

    result = _pipeline(tmp_path, runner).run()

    assert not result.ok
    assert result.stage is PipelineStage.FAILED
    assert result.failed_stage is PipelineStage.DEPENDENCIES_INSTALLED
    assert isinstance(result.error, DependencyInstallError)
    assert "composer require" in result.error.output
    assert (tmp_path / "demo" / "composer.json").is_file()
    assert not (tmp_path / "demo" / "web" / "app" / "themes" / "lumberjack").exists()
    assert len(runner.commands(("git", "clone"))) == 1


def test_theme_clone_failure_is_attributed_to_theme_stage(tmp_path: Path, make_runner) -> None:
    runner = make_runner(fail_on=lambda cmd: cmd[:2] == ["git", "clone"] and cmd[-2] == THEME_REPO)

    result = _pipeline(tmp_path, runner).run()

    assert result.failed_stage is PipelineStage.THEME_MATERIALIZED
    assert isinstance(result.error, MaterializeError)


def test_existing_target_fails_before_any_side_effect(tmp_path: Path, fake_runner) -> None:
    (tmp_path / "demo").mkdir()

    result = _pipeline(tmp_path, fake_runner).run()

    assert result.failed_stage is PipelineStage.PATHS_RESOLVED
    assert isinstance(result.error, TargetExistsError)
    assert fake_runner.calls == []
    assert list((tmp_path / "demo").iterdir()) == []


def test_tracker_reflects_stage_outcomes(tmp_path: Path, make_runner) -> None:
    runner = make_runner(fail_on=lambda cmd: cmd[0] == "composer")
    pipeline = _pipeline(tmp_path, runner)
    tracker = StepTracker("Install")
    pipeline.tracker = tracker
    pipeline.register_steps(tracker)

    pipeline.run()

    statuses = {step.key: step.status for step in tracker.steps}
    assert statuses["bedrock"] == "done"
    assert statuses["trellis"] == "skipped"
    assert statuses["composer"] == "error"
    assert statuses["theme"] == "pending"


def test_missing_env_template_fails_env_stage(tmp_path: Path, make_runner) -> None:
    bedrock = {rel: content for rel, content in BEDROCK_FILES.items() if rel != ".env.example"}
    runner = make_runner(templates={BEDROCK_REPO: bedrock, THEME_REPO: THEME_FILES, TRELLIS_REPO: {}})

    result = _pipeline(tmp_path, runner).run()

    assert result.failed_stage is PipelineStage.ENV_AUGMENTED
    assert result.error.classification == "ConfigBlockNotFoundError"


def test_undecodable_app_config_fails_provider_stage(tmp_path: Path, fake_runner) -> None:
    pipeline = _pipeline(tmp_path, fake_runner, service_providers=(r"App\Providers\AppServiceProvider::class",))
    app_php = tmp_path / "demo" / "web" / "app" / "themes" / "lumberjack" / "config" / "app.php"
    augment = pipeline._augment_env

    def corrupt_then_augment() -> str:
        app_php.write_bytes(b"<?php // \xe4\n")
        return augment()

    pipeline._augment_env = corrupt_then_augment

    result = pipeline.run()

    assert result.failed_stage is PipelineStage.PROVIDERS_INJECTED
    assert isinstance(result.error, ConfigBlockNotFoundError)
    assert PipelineStage.ENV_AUGMENTED in result.completed


def test_trellis_requested_without_resolved_directory_fails_cleanly(tmp_path: Path, fake_runner) -> None:
    options = InstallOptions(project_name="demo", with_trellis=True)
    paths = resolve_project_paths(tmp_path, "demo", with_trellis=False)

    result = InstallPipeline(options, paths, runner=fake_runner).run()

    assert result.failed_stage is PipelineStage.SECONDARY_MATERIALIZED
    assert "no Trellis directory" in result.error.message


class RecordingReporter:
    def __init__(self) -> None:
        self.events: list[tuple[str, str]] = []

    def add(self, key: str, label: str) -> None:
        self.events.append(("add", key))

    def start(self, key: str, detail: str = "") -> None:
        self.events.append(("start", key))

    def complete(self, key: str, detail: str = "") -> None:
        self.events.append(("complete", key))

    def error(self, key: str, detail: str = "") -> None:
        self.events.append(("error", key))

    def skip(self, key: str, detail: str = "") -> None:
        self.events.append(("skip", key))


def test_any_step_reporter_receives_stage_events(tmp_path: Path, fake_runner) -> None:
    reporter = RecordingReporter()
    options = InstallOptions(project_name="demo")
    paths = resolve_project_paths(tmp_path, "demo")
    pipeline = InstallPipeline(options, paths, tracker=reporter, runner=fake_runner)
    pipeline.register_steps(reporter)

    assert pipeline.run().ok
    assert ("skip", "trellis") in reporter.events
    assert reporter.events[-1] == ("complete", "cleanup")
    assert ("start", "composer") in reporter.events
