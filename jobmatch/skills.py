"""Skill list normalization.

Skill fields arrive as free text ("Java, Spring Boot") or as a JSON-ish
array ('["Java", "Spring Boot"]'). Both become a SkillSet: an immutable,
ordered sequence of trimmed tokens that compares case-insensitively.
"""
from __future__ import annotations

from typing import Iterable, Iterator, Optional

_QUOTES = ("\"", "'")


class SkillSet:
    __slots__ = ("_skills", "_folded")

    def __init__(self, skills: Iterable[str] = ()):
        cleaned = tuple(s.strip() for s in skills if s and s.strip())
        self._skills = cleaned
        self._folded = tuple(s.casefold() for s in cleaned)

    def __iter__(self) -> Iterator[str]:
        return iter(self._skills)

    def __len__(self) -> int:
        return len(self._skills)

    def __bool__(self) -> bool:
        return bool(self._skills)

    def __getitem__(self, index: int) -> str:
        return self._skills[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SkillSet):
            return self._skills == other._skills
        if isinstance(other, (list, tuple)):
            return list(self._skills) == list(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._skills)

    def __repr__(self) -> str:
        return f"SkillSet({list(self._skills)!r})"

    def __contains__(self, skill: object) -> bool:
        return isinstance(skill, str) and skill.strip().casefold() in self._folded

    @property
    def folded(self) -> tuple[str, ...]:
        """Case-folded tokens, in the same order."""
        return self._folded

    def as_list(self) -> list[str]:
        return list(self._skills)

    def joined(self, sep: str = ", ") -> str:
        return sep.join(self._skills)


def _strip_quotes(item: str) -> str:
    item = item.strip()
    if len(item) >= 2 and item[0] == item[-1] and item[0] in _QUOTES:
        item = item[1:-1].strip()
    return item


def _split_commas(raw: str) -> list[str]:
    return [piece.strip() for piece in raw.split(",") if piece.strip()]


def _split_bracketed(trimmed: str) -> list[str]:
    inner = trimmed[1:-1]
    if "[" in inner or "]" in inner:
        raise ValueError("nested brackets")
    return [s for s in (_strip_quotes(item) for item in inner.split(",")) if s]


def parse_skills(raw: Optional[str]) -> SkillSet:
    """Normalize a raw skills field into a SkillSet. Never raises."""
    if not isinstance(raw, str):
        return SkillSet()
    trimmed = raw.strip()
    if not trimmed:
        return SkillSet()

    if trimmed.startswith("[") and trimmed.endswith("]"):
        try:
            return SkillSet(_split_bracketed(trimmed))
        except ValueError:
            pass  # fall back to plain comma splitting

    return SkillSet(_split_commas(raw))
