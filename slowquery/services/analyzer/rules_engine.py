"""Rule catalog and matcher for detecting slow SQL query patterns.

Every rule is a plain (pattern, message) record. Matching is lexical: the
patterns run over raw text, so they also fire inside string literals and
comments, and they miss constructs they do not describe. Patterns with
unbounded ``.*`` gaps (SQ003, SQ007, SQ009, SQ010, SQ014) can backtrack
heavily on large adversarial input; callers bound the input size instead of
the patterns being changed.
"""

import re
from dataclasses import dataclass

from slowquery.core.models import Finding

# Case-insensitive everywhere; "any characters" gaps also span line breaks.
# \w and \b only cover ASCII identifiers.
_FLAGS = re.IGNORECASE | re.DOTALL | re.ASCII

SUMMARY_HEADER = "Detected potential issues:"
NO_ISSUES_MESSAGE = "No slow query patterns detected."


@dataclass(frozen=True)
class Rule:
    code: str
    name: str
    pattern: re.Pattern
    message: str


def _rule(code: str, name: str, pattern: str, message: str) -> Rule:
    return Rule(code=code, name=name, pattern=re.compile(pattern, _FLAGS), message=message)


RULES: tuple[Rule, ...] = (
    _rule(
        "SQ001",
        "SELECT_STAR",
        r"\bSELECT\s+\*",
        "Avoid using 'SELECT *'. Specify the columns you need to reduce I/O and network traffic.",
    ),
    _rule(
        "SQ002",
        "LIKE_LEADING_WILDCARD",
        r"\bWHERE\s+\w+\s+(?:NOT\s+)?LIKE\s+'%",
        "Avoid leading wildcards in LIKE clauses (e.g., '%value'). "
        "They prevent index usage and force full table scans.",
    ),
    _rule(
        "SQ003",
        "JOIN_IS_NULL",
        r"\bJOIN\b.*\bON\b.*\bIS\s+NULL",
        "Ensure indexes exist for JOIN conditions, especially when using IS NULL.",
    ),
    _rule(
        "SQ004",
        "OUTER_JOIN",
        r"\bLEFT\s+JOIN\b|\bRIGHT\s+JOIN\b",
        "Outer joins can be slower than inner joins. Ensure they're necessary and properly indexed.",
    ),
    _rule(
        "SQ005",
        "EQUALS_NULL",
        r"\bWHERE\s+\w+\s*=\s*NULL",
        "Use 'IS NULL' instead of '= NULL'. Comparing with NULL using = will always return false.",
    ),
    _rule(
        "SQ006",
        "NOT_EQUALS_NULL",
        r"\bWHERE\s+\w+\s*<>\s*NULL",
        "Use 'IS NOT NULL' instead of '<> NULL' or '!= NULL'. "
        "Comparing with NULL using <> will always return false.",
    ),
    _rule(
        "SQ007",
        "ORDER_BY_LIMIT",
        r"\bORDER\s+BY\b.*\bLIMIT\b",
        "Ordering large datasets with LIMIT may cause performance issues. "
        "Consider using indexed columns for ORDER BY.",
    ),
    _rule(
        "SQ008",
        "ORDER_BY_RAND",
        r"\bORDER\s+BY\s+RAND\(\)",
        "ORDER BY RAND() is extremely inefficient for large datasets. "
        "Consider alternative randomization methods.",
    ),
    _rule(
        "SQ009",
        "GROUP_BY_HAVING",
        r"\bGROUP\s+BY\b.*\bHAVING\b",
        "HAVING clauses can be slow. Consider using WHERE before GROUP BY when possible.",
    ),
    _rule(
        "SQ010",
        "IN_SUBQUERY",
        r"\bWHERE\s+.*\bIN\s*\(\s*SELECT",
        "IN + subquery can be slow. Consider using EXISTS or JOIN instead for better performance.",
    ),
    _rule(
        "SQ011",
        "DERIVED_TABLE",
        r"\bFROM\s*\(\s*SELECT",
        "Derived tables (subqueries in FROM) might impact performance. "
        "Consider using CTEs or temporary tables.",
    ),
    _rule(
        "SQ012",
        "FUNCTION_IN_WHERE",
        r"\bWHERE\s+\w+\s*=\s*\w+\([^)]*\)",
        "Using functions in WHERE clauses prevents index usage. Consider restructuring the query.",
    ),
    _rule(
        "SQ013",
        "DISTINCT",
        r"\bDISTINCT\b",
        "DISTINCT can be expensive. Consider if it's really needed or if the query can be rewritten.",
    ),
    _rule(
        "SQ014",
        "OR_CONDITION",
        r"\bWHERE\b.*\bOR\b",
        "OR conditions might prevent optimal index usage. "
        "Consider UNION ALL or restructuring the query.",
    ),
    _rule(
        "SQ015",
        "TEMP_TABLE",
        r"\bINTO\s+#",
        "Consider indexing temporary tables if they're used in subsequent joins or where clauses.",
    ),
)


def get_rules() -> tuple[Rule, ...]:
    """Return the rule catalog in evaluation order."""
    return RULES


def find_matches(rule: Rule, text: str) -> list[Finding]:
    """All non-overlapping matches of one rule, left to right."""
    return [
        Finding(
            code=rule.code,
            rule=rule.name,
            message=rule.message,
            start_offset=match.start(),
            length=match.end() - match.start(),
        )
        for match in rule.pattern.finditer(text)
    ]


def analyze(text: str) -> list[Finding]:
    """Detailed mode: every match of every rule, grouped by rule in catalog order."""
    findings: list[Finding] = []
    if not text:
        return findings

    for rule in RULES:
        findings.extend(find_matches(rule, text))

    return findings


def summarize(text: str) -> list[str]:
    """Summary mode: the message of each rule that matches at least once."""
    if not text:
        return []
    return [rule.message for rule in RULES if rule.pattern.search(text)]


def format_summary(messages: list[str]) -> str:
    """Render summary messages as a single pop-up notification text."""
    if not messages:
        return NO_ISSUES_MESSAGE
    return f"{SUMMARY_HEADER}\n- " + "\n- ".join(messages)
