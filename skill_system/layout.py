"""
Tree layout for the skill graph.

Categories are laid out as columns from left to right in order of first
appearance. Inside a column each non-empty level is one row, and every row is
centred on the column's title. Edges join the centres of a prerequisite's node
and its dependent's node.

The output depends only on the order of the input skills, so the same catalog
always renders to the same coordinates.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .models import CATEGORY_COLORS, Category, Skill

logger = logging.getLogger(__name__)

NODE_SIZE = 100
NODE_GAP = 40
CATEGORY_GAP = 150
VERTICAL_SPACING = 180
TOP_MARGIN = 150
CANVAS_MARGIN = 100
MIN_CANVAS_WIDTH = 1000
MIN_CANVAS_HEIGHT = 800

NODE_STEP = NODE_SIZE + NODE_GAP


@dataclass(frozen=True)
class NodePosition:
    x: float
    y: float

    @property
    def center(self):
        return self.x + NODE_SIZE / 2, self.y + NODE_SIZE / 2


@dataclass(frozen=True)
class Edge:
    from_id: str
    to_id: str
    from_x: float
    from_y: float
    to_x: float
    to_y: float

    def to_dict(self) -> dict:
        return {
            "from": self.from_id,
            "to": self.to_id,
            "fromX": self.from_x,
            "fromY": self.from_y,
            "toX": self.to_x,
            "toY": self.to_y,
        }


@dataclass
class LayoutResult:
    node_positions: Dict[str, NodePosition] = field(default_factory=dict)
    edges: List[Edge] = field(default_factory=list)
    canvas_width: float = MIN_CANVAS_WIDTH
    canvas_height: float = MIN_CANVAS_HEIGHT
    category_title_x: Dict[Category, float] = field(default_factory=dict)
    category_colors: Dict[Category, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "nodePositions": {
                skill_id: {"x": pos.x, "y": pos.y}
                for skill_id, pos in self.node_positions.items()
            },
            "edges": [edge.to_dict() for edge in self.edges],
            "canvasWidth": self.canvas_width,
            "canvasHeight": self.canvas_height,
            "categoryTitleX": {c.value: x for c, x in self.category_title_x.items()},
            "categoryColors": {c.value: color for c, color in self.category_colors.items()},
        }


def filter_skills_by_category(skills: Iterable[Skill], category: Optional[Category] = None) -> List[Skill]:
    """Keeps the skills of one category; `None` keeps everything."""
    if category is None:
        return list(skills)
    category = Category.parse(category)
    return [skill for skill in skills if skill.category is category]


def group_skills(skills: Iterable[Skill]) -> Dict[Category, Dict[int, List[Skill]]]:
    """
    Groups skills by category, then by level. Categories keep their order of first
    appearance, levels are sorted, and skills keep their input order.
    """
    grouped: Dict[Category, Dict[int, List[Skill]]] = {}
    for skill in skills:
        grouped.setdefault(skill.category, {}).setdefault(skill.level, []).append(skill)
    return {
        category: {level: levels[level] for level in sorted(levels)}
        for category, levels in grouped.items()
    }


def category_width(levels: Dict[int, List[Skill]]) -> float:
    max_skills_per_level = max((len(row) for row in levels.values()), default=0)
    return max(1, max_skills_per_level) * NODE_STEP


def compute_layout(skills: Iterable[Skill]) -> LayoutResult:
    skills = list(skills)
    grouped = group_skills(skills)
    result = LayoutResult()

    total_width = 0
    for category, levels in grouped.items():
        width = category_width(levels)
        start_x = total_width + CATEGORY_GAP
        result.category_title_x[category] = start_x + width / 2
        result.category_colors[category] = CATEGORY_COLORS[category]
        total_width += width + CATEGORY_GAP

        for level_index, row in enumerate(levels.values()):
            row_start_x = start_x + (width - len(row) * NODE_STEP) / 2
            y = level_index * VERTICAL_SPACING + TOP_MARGIN
            for slot, skill in enumerate(row):
                # Each node sits in the middle of its slot.
                x = row_start_x + slot * NODE_STEP + NODE_GAP / 2
                result.node_positions[skill.id] = NodePosition(x=x, y=y)

    if result.node_positions:
        max_x = max(pos.x for pos in result.node_positions.values())
        max_y = max(pos.y for pos in result.node_positions.values())
        result.canvas_width = max(max_x + NODE_SIZE + CANVAS_MARGIN, MIN_CANVAS_WIDTH)
        result.canvas_height = max(max_y + NODE_SIZE + CANVAS_MARGIN, MIN_CANVAS_HEIGHT)

    positions = result.node_positions
    for skill in skills:
        if skill.id not in positions:
            continue
        to_x, to_y = positions[skill.id].center
        for prereq in skill.prerequisites:
            if prereq not in positions:
                continue
            from_x, from_y = positions[prereq].center
            result.edges.append(
                Edge(from_id=prereq, to_id=skill.id, from_x=from_x, from_y=from_y, to_x=to_x, to_y=to_y)
            )

    logger.debug(
        "Laid out %d nodes and %d edges on a %sx%s canvas",
        len(positions), len(result.edges), result.canvas_width, result.canvas_height,
    )
    return result
