import logging
from typing import List, Optional

from edifact_models import EdifactSegment, SegmentGroup

logger = logging.getLogger(__name__)

# Tags that open a new segment group, mapped to the group type.
GROUP_STARTERS = {
    'LOC': 'location',
    'NAD': 'party',
    'LIN': 'line_item',
    'QTY': 'quantity',
    'SEQ': 'sequence',
    'IDE': 'identification',
    'CCI': 'characteristic',
    'RFF': 'reference',
}

MAX_LEVEL = 2


def determine_segment_level(segments: List[EdifactSegment], index: int) -> int:
    """
    Assigns a nesting level from the tag and the immediately preceding tag only.
    The first matching rule wins; anything unmatched is level 1.
    """
    tag = segments[index].tag
    previous_tag = segments[index - 1].tag if index > 0 else None

    if tag == 'NAD' and previous_tag == 'UNH':
        return 0
    if tag == 'LOC' and previous_tag == 'IDE':
        return 1
    if tag == 'CCI':
        return 2
    if tag == 'RFF' and previous_tag == 'BGM':
        return 0
    return 1


def build_segment_groups(segments: List[EdifactSegment]) -> List[SegmentGroup]:
    """
    Rebuilds the group forest from the flat segment list.

    At most one group is open per level. A starter replaces the open group at
    its level, closes deeper ones, and becomes a child of the deepest open
    shallower group (or a top-level group). Other segments join the deepest
    open group; segments before the first starter are not part of any group.
    """
    groups: List[SegmentGroup] = []
    open_groups: List[Optional[SegmentGroup]] = [None] * (MAX_LEVEL + 1)

    for idx, segment in enumerate(segments):
        group_type = GROUP_STARTERS.get(segment.tag)

        if group_type is None:
            owner = next((group for group in reversed(open_groups) if group is not None), None)
            if owner is not None:
                owner.segments.append(segment)
            else:
                logger.debug(f"Segment '{segment.tag}' at position {idx + 1} precedes any group; not grouped.")
            continue

        level = determine_segment_level(segments, idx)
        group = SegmentGroup(
            id=f"SG_{idx + 1}",
            type=group_type,
            level=level,
            starter_segment=segment.tag,
            segments=[segment],
        )

        parent = next((open_groups[lvl] for lvl in range(level - 1, -1, -1) if open_groups[lvl] is not None), None)
        if parent is not None:
            parent.add_child(group)
        else:
            groups.append(group)

        open_groups[level] = group
        for deeper in range(level + 1, MAX_LEVEL + 1):
            open_groups[deeper] = None

        logger.debug(f"Opened {group_type} group {group.id} at level {level} "
                     f"({'child of ' + parent.id if parent else 'top-level'}).")

    logger.info(f"Built {len(groups)} top-level segment groups.")
    return groups
