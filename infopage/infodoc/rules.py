"""Ordered pattern rules that strip navigation and boilerplate from info text."""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class RuleAction(Enum):
    """What a rule does to a fragment it matches."""
    SUBSTITUTE = "substitute"
    DELETE_FRAGMENT = "delete_fragment"


@dataclass(frozen=True)
class PatternRule:
    """A matcher paired with the action taken on a match."""
    name: str
    pattern: re.Pattern
    action: RuleAction
    replacement: str = ""

    def matches(self, fragment: str) -> bool:
        return self.pattern.search(fragment) is not None

    def apply(self, fragment: str) -> str:
        if self.action is RuleAction.SUBSTITUTE:
            return self.pattern.sub(self.replacement, fragment)
        if self.matches(fragment):
            return ""
        return fragment


@dataclass(frozen=True)
class RuleSet:
    """Substitutions applied in order, then whole-fragment deletions."""
    substitutions: Tuple[PatternRule, ...]
    deletions: Tuple[PatternRule, ...]


def substitute(name: str, pattern: str, replacement: str = "") -> PatternRule:
    return PatternRule(name, re.compile(pattern), RuleAction.SUBSTITUTE, replacement)


def delete_fragment(name: str, pattern: str) -> PatternRule:
    return PatternRule(name, re.compile(pattern), RuleAction.DELETE_FRAGMENT)


# Order matters: the blank-line rule cleans up after the first two.
SUBSTITUTIONS = (
    substitute("navigation", r'(^|\n)File: [\w\-]+.info,  Node: .+($|\n)'),
    substitute("menu", r'\n\* Menu:\n\n(\* .+?::( .+?)?\n)+'),
    substitute("blank_lines", r'\n{3,}', "\n\n"),
)

DELETIONS = (
    # Often longer than the manual itself
    delete_fragment("copying", r'^\s*\d+ Copying\n\*{9,}\n\n'),
    delete_fragment("fdl_section", r'^\s*[\d.]+ GNU Free Documentation License\n={32,}\n\n'),
    delete_fragment("free_documentation_appendix",
                    r'Appendix \w Free Software Needs Free Documentation\n\*{49,}\n\n'),
    delete_fragment("fdl_appendix", r'Appendix \w GNU Free Documentation License\n\*{41,}\n\n'),
    delete_fragment("gpl", r'GNU General Public License\n\*{26}'),

    # Repeated at the top of nearly every manual
    delete_fragment("permission_notice", r'Permission is granted to copy, distribute and/or modify this'),

    delete_fragment("index_marker", r'\x00\x08\[index\x00\x08\]\n'),
    delete_fragment("tag_table", r'^\s*Tag Table:\n'),
    delete_fragment("end_tag_table", r'^\s*End Tag Table\n'),
    delete_fragment("local_variables", r'^\s*Local Variables:\n'),

    delete_fragment("indirect_table", r'\nIndirect:\n(.+?: \d+\n)+?'),
)

DEFAULT_RULES = RuleSet(substitutions=SUBSTITUTIONS, deletions=DELETIONS)

# \x1f
# Indirect:
# tar.info-1: 1139
# tar.info-2: 303202
# \x1f
INDIRECT_BLOCK_RE = re.compile(rb'\x1f\nIndirect:\n(.+?: \d+\n)+?\x1f')

FRAGMENT_SEPARATOR = "\x1f"
