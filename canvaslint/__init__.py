"""canvaslint - rule-based checks and repairs for OCIF canvas documents."""

from .config import LintConfig, RuleSetting, load_config, parse_rule_config, recommended_config
from .diagnostics import (
    DeleteChange,
    Diagnostic,
    DiagnosticTarget,
    Fix,
    Guideline,
    Highlight,
    InsertChange,
    Label,
    Marker,
    MoveChange,
    Rect,
    Related,
    ResizeChange,
    SetChange,
)
from .errors import CanvaslintError, ConfigError, DocumentError
from .fixer import MAX_FIX_ITERATIONS, FixResult, fix
from .index import GraphIndex
from .models import (
    Document,
    Extension,
    Node,
    Relation,
    Representation,
    Resource,
    SchemaDecl,
    detect_indent,
    dump_document,
    load_document,
)
from .overlay import create_overlay, node_bounds
from .registry import Registry, default_registry
from .runner import CheckResult, check

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "check",
    "fix",
    "create_overlay",
    "node_bounds",
    "CheckResult",
    "FixResult",
    "MAX_FIX_ITERATIONS",
    "Registry",
    "default_registry",
    "GraphIndex",
    "LintConfig",
    "RuleSetting",
    "load_config",
    "parse_rule_config",
    "recommended_config",
    "Document",
    "Node",
    "Relation",
    "Resource",
    "Representation",
    "SchemaDecl",
    "Extension",
    "load_document",
    "dump_document",
    "detect_indent",
    "Diagnostic",
    "DiagnosticTarget",
    "Fix",
    "SetChange",
    "DeleteChange",
    "InsertChange",
    "MoveChange",
    "ResizeChange",
    "Related",
    "Rect",
    "Highlight",
    "Guideline",
    "Label",
    "Marker",
    "CanvaslintError",
    "ConfigError",
    "DocumentError",
]
