"""
component_7_search_explanation.py

Search Trace for Paintshop

Records what a solve did as a hierarchical tree of steps, so a result can be
explained ("why is position 3 Matte?"):
- SearchStep: a single decision or deduction
- SearchTree: hierarchical container with O(1) lookup by step id
- Text formatting and JSON export/import
"""

import json
import os
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from component_8_logging_config import get_logger

logger = get_logger(__name__)

# Deepest subgoal nesting of a recorded or imported trace
MAX_TRACE_NESTING = 200


class StepType(Enum):
    """Types of search steps"""

    PREMISE = "premise"  # Problem statement (root)
    FORCED_FILL = "forced_fill"  # Positions fixed Glossy by default
    UNIT_PROPAGATION = "unit_propagation"  # Weight-1 clause forced
    ASSUMPTION = "assumption"  # Branch decision
    PRUNED = "pruned"  # Cannot beat the incumbent
    CONTRADICTION = "contradiction"  # Complete assignment leaves clauses open
    SOLUTION = "solution"  # All clauses satisfied at this node
    CONCLUSION = "conclusion"  # Final answer of the solve


@dataclass
class SearchStep:
    """
    One step of a search.

    Attributes:
        step_id: Unique identifier inside the tree
        step_type: Kind of step
        explanation_text: Human-readable description
        assignment: Assignment at this node, compact form ('GM_')
        depth: Recursion depth (0 = top call)
        bindings: Position/finish fixed by this step (1-based positions)
        metadata: Additional data (counts, weights)
        timestamp: Creation time
        subgoals: Child steps
    """

    step_id: str
    step_type: StepType
    explanation_text: str = ""
    assignment: str = ""
    depth: int = 0
    bindings: Dict[str, str] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)
    subgoals: List["SearchStep"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "step_id": self.step_id,
            "step_type": self.step_type.value,
            "explanation_text": self.explanation_text,
            "assignment": self.assignment,
            "depth": self.depth,
            "bindings": self.bindings,
            "metadata": self.metadata,
            "timestamp": self.timestamp.isoformat(),
            "subgoals": [sg.to_dict() for sg in self.subgoals],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], _depth: int = 0) -> "SearchStep":
        """
        Create SearchStep from dictionary with validation.

        Raises:
            ValueError: If data is invalid or malformed
        """
        if not isinstance(data, dict):
            raise ValueError(f"Expected dict, got {type(data).__name__}")
        for required in ("step_id", "step_type"):
            if required not in data:
                raise ValueError(f"Missing required field: {required}")

        if _depth > MAX_TRACE_NESTING:
            raise ValueError(
                f"Subgoal nesting too deep (max {MAX_TRACE_NESTING} levels)"
            )

        try:
            step_type = StepType(data["step_type"])
        except ValueError:
            raise ValueError(f"Invalid step_type: '{data['step_type']}'")

        timestamp = datetime.now()
        if data.get("timestamp"):
            try:
                timestamp = datetime.fromisoformat(data["timestamp"])
            except (ValueError, TypeError) as e:
                raise ValueError(f"Invalid timestamp format: '{data['timestamp']}'") from e

        subgoals_data = data.get("subgoals", [])
        if not isinstance(subgoals_data, list):
            raise ValueError("subgoals must be a list")

        return cls(
            step_id=data["step_id"],
            step_type=step_type,
            explanation_text=data.get("explanation_text", ""),
            assignment=data.get("assignment", ""),
            depth=int(data.get("depth", 0)),
            bindings=dict(data.get("bindings", {})),
            metadata=dict(data.get("metadata", {})),
            timestamp=timestamp,
            subgoals=[cls.from_dict(sg, _depth=_depth + 1) for sg in subgoals_data],
        )

    def add_subgoal(self, subgoal: "SearchStep") -> None:
        """Add a child step"""
        self.subgoals.append(subgoal)


@dataclass
class SearchTree:
    """
    Hierarchical record of one solve.

    Normally a single PREMISE root whose subgoals mirror the recursion.
    """

    query: str
    root_steps: List[SearchStep] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=datetime.now)
    _step_index: Dict[str, SearchStep] = field(
        default_factory=dict, init=False, repr=False
    )

    def __post_init__(self):
        for step in self.root_steps:
            self._index_step(step)

    def add_root_step(self, step: SearchStep) -> None:
        """Add a top-level step"""
        self.root_steps.append(step)
        self._index_step(step)

    def _index_step(self, step: SearchStep) -> None:
        """Recursively index step and subgoals"""
        self._step_index[step.step_id] = step
        for subgoal in step.subgoals:
            self._index_step(subgoal)

    def reindex(self) -> None:
        """Rebuild the index after subgoals were attached to indexed steps"""
        self._step_index.clear()
        for step in self.root_steps:
            self._index_step(step)

    def get_all_steps(self) -> List[SearchStep]:
        """All steps, depth-first"""
        all_steps: List[SearchStep] = []

        def collect(step: SearchStep) -> None:
            all_steps.append(step)
            for subgoal in step.subgoals:
                collect(subgoal)

        for root in self.root_steps:
            collect(root)
        return all_steps

    def get_step_by_id(self, step_id: str) -> Optional[SearchStep]:
        return self._step_index.get(step_id)

    def count_by_type(self) -> Dict[StepType, int]:
        counts: Dict[StepType, int] = {}
        for step in self.get_all_steps():
            counts[step.step_type] = counts.get(step.step_type, 0) + 1
        return counts

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "query": self.query,
            "root_steps": [step.to_dict() for step in self.root_steps],
            "metadata": self.metadata,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SearchTree":
        if not isinstance(data, dict) or "query" not in data:
            raise ValueError("Search tree data must be a dict with a 'query' field")
        created_at = datetime.now()
        if data.get("created_at"):
            created_at = datetime.fromisoformat(data["created_at"])
        return cls(
            query=data["query"],
            root_steps=[SearchStep.from_dict(s) for s in data.get("root_steps", [])],
            metadata=dict(data.get("metadata", {})),
            created_at=created_at,
        )


# ==================== Formatting ====================


def _get_step_icon(step_type: StepType) -> str:
    """Plain-ASCII marker per step type"""
    icons = {
        StepType.PREMISE: "[PREMISE]",
        StepType.FORCED_FILL: "[FILL]",
        StepType.UNIT_PROPAGATION: "[UNIT]",
        StepType.ASSUMPTION: "[BRANCH]",
        StepType.PRUNED: "[PRUNE]",
        StepType.CONTRADICTION: "[CONFLICT]",
        StepType.SOLUTION: "[SOLUTION]",
        StepType.CONCLUSION: "[RESULT]",
    }
    return icons.get(step_type, "[STEP]")


def format_search_step(step: SearchStep, indent: int = 0, show_details: bool = True) -> str:
    """
    Format a step and its subgoals as indented text.

    Args:
        step: Step to format
        indent: Indentation level
        show_details: Include assignment and bindings
    """
    prefix = "  " * indent
    lines = [f"{prefix}{_get_step_icon(step.step_type)} {step.explanation_text}".rstrip()]

    if show_details:
        if step.assignment:
            lines.append(f"{prefix}   assignment: {step.assignment}")
        if step.bindings:
            bindings_str = ", ".join(f"{k}={v}" for k, v in step.bindings.items())
            lines.append(f"{prefix}   bindings: {bindings_str}")

    for subgoal in step.subgoals:
        lines.append(format_search_step(subgoal, indent + 1, show_details))

    return "\n".join(lines)


def format_search_tree(tree: SearchTree, show_details: bool = True) -> str:
    """Format an entire search tree"""
    lines = ["=" * 60, f"Search trace for: {tree.query}", "=" * 60, ""]

    if not tree.root_steps:
        lines.append("No search steps recorded.")
        return "\n".join(lines)

    for step in tree.root_steps:
        lines.append(format_search_step(step, indent=0, show_details=show_details))
        lines.append("")

    lines.append(f"Total: {len(tree.get_all_steps())} steps")
    if tree.metadata.get("truncated"):
        lines.append("(trace truncated)")

    return "\n".join(lines)


# ==================== Persistence ====================


def export_search_tree_to_json(tree: SearchTree, filepath: str) -> None:
    """
    Export a search tree to a JSON file.

    Raises:
        ValueError: If filepath is empty
        IOError: If file cannot be written
    """
    if not filepath:
        raise ValueError("Filepath cannot be empty")

    filepath_obj = Path(filepath)
    try:
        filepath_obj.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise IOError(f"Cannot create directory for {filepath}: {e}") from e

    try:
        with open(filepath_obj, "w", encoding="utf-8") as f:
            json.dump(tree.to_dict(), f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise IOError(f"Failed to write to {filepath}: {e}") from e

    logger.debug("Search trace exported", extra={"file": str(filepath_obj)})


def import_search_tree_from_json(filepath: str) -> SearchTree:
    """
    Import a search tree from a JSON file.

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If JSON is malformed or invalid
    """
    filepath_obj = Path(filepath)
    if not filepath_obj.exists():
        raise FileNotFoundError(f"Search trace file not found: {filepath}")
    if not os.access(filepath_obj, os.R_OK):
        raise PermissionError(f"No read permission for {filepath}")

    try:
        with open(filepath_obj, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {filepath}: {e}") from e

    return SearchTree.from_dict(data)
