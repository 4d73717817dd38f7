from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

from .blocks import FenceTracker

# Task items: "- [ ] text", "* [x] text", "+ [X] text", "3. [ ] text"
TASK_PATTERN = re.compile(
    r"^(?P<prefix>\s*(?:[-*+]|\d+\.)\s+\[)(?P<state>[ xX])(?P<suffix>\]\s.*)$"
)


@dataclass
class Task:
    index: int
    line: int
    text: str
    done: bool


def _task_lines(text: str):
    """Yield ``(line_number, match)`` for task lines outside fenced code."""
    fence = FenceTracker()
    for line_no, line in enumerate(text.split("\n")):
        token = fence.feed(line)
        if token is not None or fence.is_open:
            continue
        match = TASK_PATTERN.match(line)
        if match:
            yield line_no, match


def extract_tasks(text: str) -> List[Task]:
    tasks: List[Task] = []
    for index, (line_no, match) in enumerate(_task_lines(text)):
        body = match.group("suffix")[1:].strip()
        tasks.append(
            Task(index=index, line=line_no, text=body, done=match.group("state").lower() == "x")
        )
    return tasks


def task_index_for_line(text: str, line: int) -> Optional[int]:
    """Visible index of the task on ``line``, or None when it is not a task."""
    for task in extract_tasks(text):
        if task.line == line:
            return task.index
    return None


def toggle_task_state_at_index(block: str, task_index: int) -> str:
    """Flip the checkbox of the ``task_index``-th visible task in ``block``."""
    if task_index < 0:
        return block
    lines = block.split("\n")
    for seen, (line_no, match) in enumerate(_task_lines(block)):
        if seen != task_index:
            continue
        mark = " " if match.group("state").lower() == "x" else "x"
        lines[line_no] = match.group("prefix") + mark + match.group("suffix")
        return "\n".join(lines)
    return block
