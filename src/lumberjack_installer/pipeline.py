"""Ordered install pipeline.

Stages run strictly in sequence and the first failure stops the run. Nothing
already written to disk is rolled back: a failed install leaves its partial
tree in place for the operator to inspect and remove.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Protocol

from lumberjack_installer.core.composer import composer_dependencies, install_dependencies
from lumberjack_installer.core.config import InstallOptions
from lumberjack_installer.core.errors import InstallerError, UpdateCheckWarning
from lumberjack_installer.core.git_refs import GitRef, resolve_git_ref
from lumberjack_installer.core.materialize import materialize_repository
from lumberjack_installer.core.paths import ProjectPaths, ensure_target_available
from lumberjack_installer.core.process import OutputCallback, Runner, run_process
from lumberjack_installer.template.cleanup import remove_scaffold_dirs
from lumberjack_installer.template.dotenv import augment_env
from lumberjack_installer.template.providers import inject_service_providers

__all__ = ["InstallPipeline", "PipelineResult", "PipelineStage", "StepReporter"]

logger = logging.getLogger(__name__)


class StepReporter(Protocol):
    """Progress sink for stage transitions, such as the CLI step tracker."""

    def add(self, key: str, label: str) -> None: ...

    def start(self, key: str, detail: str = "") -> None: ...

    def complete(self, key: str, detail: str = "") -> None: ...

    def error(self, key: str, detail: str = "") -> None: ...

    def skip(self, key: str, detail: str = "") -> None: ...


class PipelineStage(str, Enum):
    NOT_STARTED = "not-started"
    PATHS_RESOLVED = "paths-resolved"
    PRIMARY_MATERIALIZED = "bedrock"
    SECONDARY_MATERIALIZED = "trellis"
    DEPENDENCIES_INSTALLED = "composer"
    THEME_MATERIALIZED = "theme"
    ENV_AUGMENTED = "dotenv"
    PROVIDERS_INJECTED = "providers"
    SCAFFOLD_CLEANUP = "cleanup"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass
class PipelineResult:
    stage: PipelineStage = PipelineStage.NOT_STARTED
    completed: list[PipelineStage] = field(default_factory=list)
    skipped: list[PipelineStage] = field(default_factory=list)
    failed_stage: Optional[PipelineStage] = None
    error: Optional[InstallerError] = None
    warnings: list[UpdateCheckWarning] = field(default_factory=list)
    refs: dict[str, GitRef] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.stage is PipelineStage.COMPLETE and self.error is None


@dataclass
class _Step:
    stage: PipelineStage
    label: str
    enabled: bool
    action: Callable[[], str]
    skip_reason: str = ""


class InstallPipeline:
    """Materialize Bedrock, the Lumberjack theme and optional extras into *paths*."""

    def __init__(
        self,
        options: InstallOptions,
        paths: ProjectPaths,
        *,
        tracker: Optional[StepReporter] = None,
        on_output: Optional[OutputCallback] = None,
        runner: Runner = run_process,
    ):
        self.options = options
        self.paths = paths
        self.tracker = tracker
        self.on_output = on_output
        self.runner = runner
        self.result = PipelineResult()

    def steps(self) -> list[_Step]:
        options = self.options
        return [
            _Step(PipelineStage.PATHS_RESOLVED, "Check target directory", True, self._check_target),
            _Step(PipelineStage.PRIMARY_MATERIALIZED, "Checkout Bedrock", True, self._checkout_bedrock),
            _Step(
                PipelineStage.SECONDARY_MATERIALIZED,
                "Checkout Trellis",
                options.with_trellis,
                self._checkout_trellis,
                "--with-trellis not set",
            ),
            _Step(PipelineStage.DEPENDENCIES_INSTALLED, "Install Composer dependencies", True, self._install_composer),
            _Step(PipelineStage.THEME_MATERIALIZED, "Add Lumberjack theme", True, self._checkout_theme),
            _Step(PipelineStage.ENV_AUGMENTED, "Update .env.example", True, self._augment_env),
            _Step(
                PipelineStage.PROVIDERS_INJECTED,
                "Register service providers",
                bool(options.service_providers),
                self._register_providers,
                "no providers configured",
            ),
            _Step(
                PipelineStage.SCAFFOLD_CLEANUP,
                "Remove template metadata",
                bool(options.cleanup_dirs),
                self._cleanup,
                "cleanup disabled",
            ),
        ]

    def register_steps(self, tracker: StepReporter) -> None:
        for step in self.steps():
            tracker.add(step.stage.value, step.label)

    def run(self) -> PipelineResult:
        result = self.result
        for step in self.steps():
            key = step.stage.value
            if not step.enabled:
                logger.debug("Skipping %s: %s", key, step.skip_reason)
                result.skipped.append(step.stage)
                if self.tracker:
                    self.tracker.skip(key, step.skip_reason)
                continue

            if self.tracker:
                self.tracker.start(key)
            try:
                detail = step.action()
            except InstallerError as exc:
                return self._fail(step.stage, exc)
            except (OSError, UnicodeError) as exc:
                return self._fail(step.stage, InstallerError(f"{step.label} failed: {exc}"))

            result.completed.append(step.stage)
            result.stage = step.stage
            if self.tracker:
                self.tracker.complete(key, detail)

        result.stage = PipelineStage.COMPLETE
        return result

    def _fail(self, stage: PipelineStage, exc: InstallerError) -> PipelineResult:
        logger.debug("Stage %s failed: %s", stage.value, exc)
        if self.tracker:
            self.tracker.error(stage.value, exc.classification)
        self.result.failed_stage = stage
        self.result.error = exc
        self.result.stage = PipelineStage.FAILED
        return self.result

    def _clone(self, name: str, repo_url: str, target: Path) -> str:
        ref = resolve_git_ref(
            repo_url,
            use_trunk=self.options.dev,
            trunk=self.options.trunk,
            runner=self.runner,
        )
        self.result.refs[name] = ref
        materialize_repository(repo_url, ref, target, runner=self.runner, on_output=self.on_output)
        return str(ref)

    def _check_target(self) -> str:
        ensure_target_available(self.paths)
        return str(self.paths.root)

    def _checkout_bedrock(self) -> str:
        return self._clone("bedrock", self.options.bedrock_repo, self.paths.project)

    def _checkout_trellis(self) -> str:
        if self.paths.secondary_template is None:
            raise InstallerError("Trellis was requested but no Trellis directory was resolved")
        return self._clone("trellis", self.options.trellis_repo, self.paths.secondary_template)

    def _install_composer(self) -> str:
        dependencies = composer_dependencies(self.options)
        install_dependencies(self.paths.project, dependencies, runner=self.runner, on_output=self.on_output)
        return ", ".join(str(dep) for dep in dependencies)

    def _checkout_theme(self) -> str:
        return self._clone("theme", self.options.theme_repo, self.paths.theme)

    def _augment_env(self) -> str:
        written = augment_env(self.paths, self.options.dotenv_lines, create_env_file=self.options.create_env_file)
        return ", ".join(path.name for path in written)

    def _register_providers(self) -> str:
        inject_service_providers(self.paths.app_config, self.options.service_providers)
        return f"{len(self.options.service_providers)} added"

    def _cleanup(self) -> str:
        bases = [self.paths.project]
        if self.paths.secondary_template is not None:
            bases.append(self.paths.secondary_template)
        removed = remove_scaffold_dirs(bases, self.options.cleanup_dirs)
        return f"{len(removed)} removed"
