"""
Keyword-based automatic categorization.

Imported rows often arrive without a category. A small keyword table
covers the common cases; rules learned from the user's own manual
categorizations extend it. Persisting learned rules is the store's job.
"""

from collections.abc import Iterable, Sequence
from typing import Optional

import structlog

from household_ledger.models.ledger import CategoryRule, LedgerEntry

logger = structlog.get_logger(__name__)

DEFAULT_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        keywords=("식당", "맛집", "카페", "커피", "음식", "점심", "저녁", "아침"),
        category="식비",
        sub_category="외식",
    ),
    CategoryRule(
        keywords=("마트", "편의점", "이마트", "롯데마트", "홈플러스", "쿠팡", "마켓컬리"),
        category="식비",
        sub_category="식료품",
    ),
    CategoryRule(keywords=("택시", "버스", "지하철", "교통", "주유", "주차"), category="교통비"),
    CategoryRule(
        keywords=("관리비", "전기", "가스", "수도", "인터넷", "통신", "핸드폰"),
        category="주거비",
        sub_category="공과금",
    ),
    CategoryRule(keywords=("병원", "약국", "의료", "치과", "검진"), category="의료비"),
    CategoryRule(keywords=("영화", "넷플릭스", "게임", "취미", "도서"), category="문화생활"),
    CategoryRule(keywords=("옷", "의류", "신발", "쇼핑"), category="쇼핑"),
    CategoryRule(keywords=("급여", "월급"), category="수입", sub_category="급여"),
    CategoryRule(keywords=("배당", "이자"), category="수입", sub_category="배당/이자"),
)


def auto_categorize(
    description: str,
    extra_rules: Sequence[CategoryRule] = (),
) -> Optional[CategoryRule]:
    """
    First rule whose keyword appears in the description.

    Default rules are consulted before ``extra_rules``.
    """
    if not isinstance(description, str) or not description:
        return None
    for rule in (*DEFAULT_RULES, *extra_rules):
        if rule.matches(description):
            return rule
    return None


def learn_rule(entry: LedgerEntry) -> Optional[CategoryRule]:
    """
    Derive a rule from a manually categorized entry.

    Every word longer than one character becomes a keyword.
    """
    if not entry.description or not entry.category:
        return None
    keywords = tuple(word for word in entry.description.split() if len(word) > 1)
    if not keywords:
        return None
    return CategoryRule(
        keywords=keywords,
        category=entry.category,
        sub_category=entry.sub_category,
    )


def apply_auto_categorization(
    entries: Iterable[LedgerEntry],
    extra_rules: Sequence[CategoryRule] = (),
) -> list[LedgerEntry]:
    """
    Fill in missing categories from the rules.

    Entries that already have a category, or have no description, are
    passed through untouched.
    """
    result = []
    for entry in entries:
        if entry.category or not entry.description:
            result.append(entry)
            continue
        rule = auto_categorize(entry.description, extra_rules)
        if rule is None:
            result.append(entry)
            continue
        logger.debug("auto_categorized", entry_id=entry.id, category=rule.category)
        result.append(
            entry.model_copy(
                update={"category": rule.category, "sub_category": rule.sub_category}
            )
        )
    return result
