"""Nested pane layouts for taskdash.

A layout is a tree of single-key mappings. The key is a split spec and the
value lists one child per region, each either a command string or another
mapping of the same shape::

    {"v:10:~:20": ["*task next", {"h:~:30": ["task summary", "!htop"]}]}

``split_pane_tree`` walks the tree against an existing pivot pane, issuing the
splits in a fixed order and returning which command belongs to which pane.
"""

from dataclasses import dataclass, field
from typing import Union

from taskdash.errors import ConfigurationError, ExternalServiceError
from taskdash.split_spec import SplitSpec, parse_split_spec, plan_splits
from taskdash.tmux_manager import SurfaceService

# pane ID -> raw (marked) command
PaneCommandMap = dict[str, str]


@dataclass(frozen=True)
class LayoutNode:
    """One split in a layout tree."""

    split_spec: SplitSpec
    children: tuple[Union["LayoutNode", str], ...] = field(default_factory=tuple)

    @classmethod
    def from_config(cls, data: object, path: str = "layout") -> "LayoutNode":
        """Build and validate a layout tree from its configuration form.

        Args:
            data: A single-key mapping of split spec to children.
            path: Location in the config, used in error messages.

        Returns:
            The root LayoutNode.

        Raises:
            ConfigurationError: If any node is malformed.
        """
        if not isinstance(data, dict) or len(data) != 1:
            raise ConfigurationError(f"{path}: expected a mapping with exactly one split spec key")

        spec_text, raw_children = next(iter(data.items()))
        if not isinstance(spec_text, str):
            raise ConfigurationError(f"{path}: split spec must be a string, got {spec_text!r}")
        spec = parse_split_spec(spec_text)

        if not isinstance(raw_children, list):
            raise ConfigurationError(f"{path}[{spec_text!r}]: children must be a list")
        spec.check_arity(len(raw_children), f"{path}[{spec_text!r}]")

        children: list[LayoutNode | str] = []
        for idx, child in enumerate(raw_children):
            child_path = f"{path}[{spec_text!r}][{idx}]"
            if isinstance(child, str):
                children.append(child)
            elif isinstance(child, dict):
                children.append(cls.from_config(child, child_path))
            else:
                raise ConfigurationError(f"{child_path}: expected a command string or nested layout, got {child!r}")

        return cls(split_spec=spec, children=tuple(children))

    def leaf_count(self) -> int:
        """Number of command leaves in this subtree."""
        return sum(child.leaf_count() if isinstance(child, LayoutNode) else 1 for child in self.children)


@dataclass(frozen=True)
class SplitContext:
    """Everything the splitter needs besides the node and pivot."""

    session_name: str
    window_name: str
    surface: SurfaceService


def split_pane_tree(ctx: SplitContext, node: LayoutNode, pivot_pane_id: str) -> PaneCommandMap:
    """Split a pivot pane according to a layout node, recursively.

    Regions before the pivot are split off first (ascending, inserted before
    the pivot), then regions after it (descending, inserted after the pivot).
    The pivot region keeps ``pivot_pane_id``. Children are then visited in
    declared order.

    Args:
        ctx: Split context carrying the surface service.
        node: The layout node to realise.
        pivot_pane_id: Existing pane that becomes the pivot region.

    Returns:
        Mapping of pane ID to raw command for every leaf in the subtree.

    Raises:
        ExternalServiceError: If a split fails or reuses a pane ID.
    """
    spec = node.split_spec
    spec.check_arity(len(node.children))

    pane_ids: list[str] = [""] * spec.count
    pane_ids[spec.pivot_index] = pivot_pane_id
    for idx, before in plan_splits(spec):
        pane_ids[idx] = ctx.surface.split(pivot_pane_id, spec.axis, spec.sizes[idx], before)

    result: PaneCommandMap = {}
    for pane_id, child in zip(pane_ids, node.children, strict=True):
        if isinstance(child, LayoutNode):
            sub_map = split_pane_tree(ctx, child, pane_id)
        else:
            sub_map = {pane_id: child}
        for sub_id, command in sub_map.items():
            if sub_id in result:
                raise ExternalServiceError(f"Pane ID {sub_id} was assigned twice in session {ctx.session_name}")
            result[sub_id] = command
    return result
