"""Scaffold orchestration: generate fragments and merge them into artifacts."""

from __future__ import annotations

import logging

from .exceptions import DuplicateEntityError
from .generator import FragmentGenerator
from .merge import MergeEngine
from .models import (
    ArtifactChange,
    ChangeAction,
    EntitySpec,
    Fragment,
    InsertionPolicy,
    ScaffoldConfig,
    ScaffoldResult,
)
from .registry import EntityRegistry
from .store import ArtifactStore

logger = logging.getLogger(__name__)


class Scaffolder:
    """Runs one scaffold request against a project's artifact set.

    Artifacts are merged one at a time with no rollback: if a later merge
    fails, earlier artifacts stay written and the error names the artifact
    that failed.
    """

    def __init__(
        self,
        store: ArtifactStore,
        config: ScaffoldConfig | None = None,
        generator: FragmentGenerator | None = None,
        engine: MergeEngine | None = None,
    ) -> None:
        """Initialize scaffolder.

        Args:
            store: Artifact store rooted at the Go project
            config: Project configuration, defaults when omitted
            generator: Fragment generator, built from config when omitted
            engine: Merge engine, defaults to a fresh engine
        """
        self.store = store
        self.config = config or ScaffoldConfig()
        self.generator = generator or FragmentGenerator(self.config)
        self.engine = engine or MergeEngine()
        self.registry = EntityRegistry(store, self.config.paths.registry)

    def scaffold(
        self,
        entity: EntitySpec,
        replace: bool = False,
        dry_run: bool = False,
    ) -> ScaffoldResult:
        """Generate and merge every artifact for an entity.

        Args:
            entity: Entity to scaffold
            replace: Regenerate an entity that is already registered
            dry_run: Compute the changes without writing anything

        Returns:
            What happened to each artifact

        Raises:
            DuplicateEntityError: If the entity is registered and replace is False
            MalformedArtifactError: If an existing artifact lost its anchor
            ArtifactIOError: If an artifact cannot be read or written
        """
        name = entity.identifier
        if not replace and self.registry.contains(name):
            msg = f"Entity {name} is already scaffolded (use replace to regenerate)"
            raise DuplicateEntityError(msg, details={"entity": name})

        fragments = self.generator.generate(entity)
        result = ScaffoldResult(entity=name, table_name=entity.table_name, dry_run=dry_run)

        for fragment in fragments.in_merge_order():
            change = self.apply(fragment, dry_run=dry_run)
            result.changes.append(change)
            logger.info("%s %s", change.action.value.upper(), change.path)

        return result

    def apply(self, fragment: Fragment, dry_run: bool = False) -> ArtifactChange:
        """Merge one fragment into its artifact and write the result."""
        existing = self.store.read_optional(fragment.target)
        merged = self.engine.merge(fragment, existing)

        if existing is None:
            action = ChangeAction.CREATED
        elif merged == existing:
            action = ChangeAction.UNCHANGED
        elif fragment.policy == InsertionPolicy.REPLACE:
            action = ChangeAction.REPLACED
        else:
            action = ChangeAction.UPDATED

        if not dry_run and action != ChangeAction.UNCHANGED:
            self.store.write(fragment.target, merged)

        return ArtifactChange(path=fragment.target, action=action)
