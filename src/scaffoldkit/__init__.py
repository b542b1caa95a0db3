"""ScaffoldKit: CRUD scaffolding and idempotent artifact merging for Go web apps."""

__version__ = "0.1.0"
__author__ = "ScaffoldKit Contributors"
__description__ = "CRUD scaffolding for Fiber + GORM projects"

from .generator import FragmentGenerator
from .merge import MergeEngine
from .models import EntitySpec, FieldSpec, Fragment, InsertionPolicy, TargetType
from .registry import EntityRegistry
from .scaffolder import Scaffolder
from .store import ArtifactStore
from .typemap import classify

__all__ = [
    "ArtifactStore",
    "EntityRegistry",
    "EntitySpec",
    "FieldSpec",
    "Fragment",
    "FragmentGenerator",
    "InsertionPolicy",
    "MergeEngine",
    "Scaffolder",
    "TargetType",
    "classify",
]
