"""Turning operator answers into decisions.

Menus are rendered and read by the CLI; everything here is pure so the
commands behind the menus can be driven without a terminal.
"""

from enum import Enum
from typing import List, Optional, Sequence, Union

# Branch prefixes offered by the work type menu, numbered from 1
WORK_TYPES = ("feature", "bugfix", "hotfix", "chore")
WORK_TYPE_LABELS = ("Feature", "Bug/Bugfix", "Hotfix", "Chore")


class PromptKind(Enum):
    WORK_TYPE = "work-type"
    MULTI_SELECT = "multi-select"
    SINGLE_SELECT = "single-select"
    REMOVE_MODE = "remove-mode"
    CONFIRM = "confirm"
    CONFIRM_DEFAULT_YES = "confirm-default-yes"


class RemoveMode(Enum):
    """What happens to branches when a workspace is removed."""
    KEEP_BRANCHES = "1"
    DELETE_BRANCHES = "2"
    CANCEL = "0"

    @property
    def deletes_branches(self) -> bool:
        return self is RemoveMode.DELETE_BRANCHES


Choice = Union[str, List[str], Optional[str], RemoveMode, bool]


def _as_index(token: str, count: int) -> Optional[int]:
    """Zero-based index for a 1-based menu number, or None when out of range."""
    if not token.isdigit():
        return None
    number = int(token)
    if 1 <= number <= count:
        return number - 1
    return None


def _work_type(answer: str) -> str:
    index = _as_index(answer, len(WORK_TYPES))
    return WORK_TYPES[index] if index is not None else WORK_TYPES[0]


def _multi_select(candidates: Sequence[str], answer: str) -> List[str]:
    selected: List[str] = []
    for token in answer.split():
        index = _as_index(token, len(candidates))
        if index is not None and candidates[index] not in selected:
            selected.append(candidates[index])
    return selected


def _single_select(candidates: Sequence[str], answer: str) -> Optional[str]:
    if answer in ("", "0"):
        return None
    if answer in candidates:
        return answer
    index = _as_index(answer, len(candidates))
    if index is None:
        raise ValueError(f"Invalid choice: {answer}")
    return candidates[index]


def _remove_mode(answer: str) -> RemoveMode:
    if answer == "":
        return RemoveMode.DELETE_BRANCHES
    try:
        return RemoveMode(answer)
    except ValueError:
        raise ValueError(f"Invalid choice: {answer}") from None


def resolve_choice(
    prompt_kind: PromptKind,
    candidates: Sequence[str] = (),
    supplied_answer: Optional[str] = None,
) -> Choice:
    """Resolve an answer to a prompt.

    Args:
        prompt_kind: Which menu was answered
        candidates: Menu entries, numbered from 1 as shown to the operator
        supplied_answer: Raw answer; None is treated like an empty answer

    Returns:
        WORK_TYPE: branch prefix, `feature` for empty or unknown answers
        MULTI_SELECT: selected candidates in answer order, invalid numbers ignored
        SINGLE_SELECT: the selected candidate, None when cancelled with 0 or empty
        REMOVE_MODE: a RemoveMode, DELETE_BRANCHES when empty
        CONFIRM: True only for y/yes
        CONFIRM_DEFAULT_YES: False only for n/no

    Raises:
        ValueError: For an invalid SINGLE_SELECT or REMOVE_MODE answer
    """
    answer = (supplied_answer or "").strip()

    if prompt_kind is PromptKind.WORK_TYPE:
        return _work_type(answer)
    if prompt_kind is PromptKind.MULTI_SELECT:
        return _multi_select(list(candidates), answer)
    if prompt_kind is PromptKind.SINGLE_SELECT:
        return _single_select(list(candidates), answer)
    if prompt_kind is PromptKind.REMOVE_MODE:
        return _remove_mode(answer)
    if prompt_kind is PromptKind.CONFIRM:
        return answer.lower() in ("y", "yes")
    if prompt_kind is PromptKind.CONFIRM_DEFAULT_YES:
        return answer.lower() not in ("n", "no")

    raise ValueError(f"Unknown prompt kind: {prompt_kind}")
