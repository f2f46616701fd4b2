"""
Tests for category name normalization and ledger repair.
"""

import pytest

from household_ledger.normalization import (
    CATEGORY_NORMALIZER,
    SUB_CATEGORY_NORMALIZER,
    NameNormalizer,
    clean_name,
    normalize_category,
    normalize_sub_category,
    repair_entry,
    repair_ledger,
)
from household_ledger.normalization.names import (
    CATEGORY_MAP,
    CATEGORY_RULES,
    SUB_CATEGORY_MAP,
    SUB_CATEGORY_RULES,
    pattern,
)

# Corrupted, canonical and unrelated names, with and without broken characters
SAMPLE_NAMES = [
    "",
    "유류통",
    "유류교통비",
    "유류�통",
    "데이비",
    "데이트비",
    "데이트 코스",
    "이비",
    "비이",
    "식",
    "식�",
    "식비",
    "식이건",
    "입",
    "수입",
    "장/마트",
    "시장/미트",
    "시장/마트",
    "장보기마트",
    "저축성지출출",
    "저축성지출",
    "경조사회비",
    "경조사비",
    "건",
    "물건",
    "유트브",
    "유튜브",
    "주거비",
    "월세",
    "Groceries",
    "coffee & tea",
    "???",
    "123",
    "/",
    "  ",
]


class TestCleanName:
    """Tests for broken-character stripping."""

    def test_keeps_hangul_ascii_and_slash(self):
        assert clean_name("시장/마트") == "시장/마트"
        assert clean_name("abc_123") == "abc_123"

    def test_strips_replacement_and_punctuation(self):
        assert clean_name("유류�통") == "유류통"
        assert clean_name("식 비!") == "식비"

    def test_strips_non_ascii_letters(self):
        """Only Hangul syllables survive among non-ASCII letters."""
        assert clean_name("café식") == "caf식"


class TestNormalizeCategory:
    """Tests for primary category normalization."""

    def test_fuel_transport(self):
        assert normalize_category("유류통") == "유류교통비"

    def test_dating_expense(self):
        assert normalize_category("데이비") == "데이트비"
        assert normalize_category("이비") == "데이트비"

    def test_broken_character_inside_name(self):
        assert normalize_category("유류�통") == "유류교통비"

    def test_lone_glyphs(self):
        assert normalize_category("식") == "식비"
        assert normalize_category("식�") == "식비"
        assert normalize_category("입") == "수입"

    def test_two_glyph_dating_corruption(self):
        assert normalize_category("비이") == "데이트비"

    def test_pattern_prefixes(self):
        assert normalize_category("저축성지출출") == "저축성지출"
        assert normalize_category("경조사회비") == "경조사비"
        assert normalize_category("데이트 코스") == "데이트비"

    def test_fuel_rule_checked_first(self):
        """A fuel name ending in 비 must not fall through to a later rule."""
        assert normalize_category("유류통비") == "유류교통비"

    def test_unknown_name_unchanged(self):
        assert normalize_category("주거비") == "주거비"
        assert normalize_category("Groceries") == "Groceries"

    def test_empty_string(self):
        assert normalize_category("") == ""


class TestNormalizeSubCategory:
    """Tests for sub-category normalization."""

    def test_dating_expense(self):
        assert normalize_sub_category("이비") == "데이트비"
        assert normalize_sub_category("데이비") == "데이트비"

    def test_goods(self):
        assert normalize_sub_category("건") == "물건"

    def test_youtube(self):
        assert normalize_sub_category("유트브") == "유튜브"

    def test_market(self):
        assert normalize_sub_category("장/마트") == "시장/마트"
        assert normalize_sub_category("장보기마트") == "시장/마트"

    def test_sub_category_map_differs_from_category_map(self):
        """'입' is only an income corruption for primary categories."""
        assert normalize_sub_category("입") == "입"
        assert normalize_category("건") == "건"

    def test_unknown_name_unchanged(self):
        assert normalize_sub_category("월세") == "월세"


class TestNormalizationProperties:
    """Idempotence and totality over a spread of inputs."""

    @pytest.mark.parametrize("name", SAMPLE_NAMES)
    def test_category_idempotent(self, name):
        once = normalize_category(name)
        assert normalize_category(once) == once

    @pytest.mark.parametrize("name", SAMPLE_NAMES)
    def test_sub_category_idempotent(self, name):
        once = normalize_sub_category(name)
        assert normalize_sub_category(once) == once

    @pytest.mark.parametrize(
        "canonical",
        sorted(set(CATEGORY_MAP.values()) | {replacement for _, replacement in CATEGORY_RULES}),
    )
    def test_category_canonical_values_are_fixed_points(self, canonical):
        assert normalize_category(canonical) == canonical

    @pytest.mark.parametrize(
        "canonical",
        sorted(
            set(SUB_CATEGORY_MAP.values()) | {replacement for _, replacement in SUB_CATEGORY_RULES}
        ),
    )
    def test_sub_category_canonical_values_are_fixed_points(self, canonical):
        assert normalize_sub_category(canonical) == canonical

    @pytest.mark.parametrize("value", [None, 3, 1.5, ["식"], b"\xec\x8b\x9d"])
    def test_non_string_returned_unchanged(self, value):
        assert normalize_category(value) is value
        assert normalize_sub_category(value) is value

    @pytest.mark.parametrize("name", ["no hangul at all", "��", "\x00", "a" * 500])
    def test_never_raises(self, name):
        assert isinstance(normalize_category(name), str)
        assert isinstance(normalize_sub_category(name), str)


class TestNameNormalizerStages:
    """Each stage of the pipeline can be exercised on its own."""

    def test_lookup_raw_then_cleaned(self):
        assert CATEGORY_NORMALIZER.lookup("유류통", "유류통") == "유류교통비"
        assert CATEGORY_NORMALIZER.lookup("유류?통", "유류통") == "유류교통비"
        assert CATEGORY_NORMALIZER.lookup("주거비", "주거비") is None

    def test_first_matching_rule_wins(self):
        normalizer = NameNormalizer(
            exact_map={},
            rules=[(pattern(r"^a"), "first"), (pattern(r"^ab"), "second")],
        )
        assert normalizer.normalize("abc") == "first"

    def test_rules_see_cleaned_form(self):
        normalizer = NameNormalizer(exact_map={}, rules=[(pattern(r"^ab$"), "AB")])
        assert normalizer.match_rules("a-b", "ab") == "AB"

    def test_heuristics_run_after_rules(self):
        assert SUB_CATEGORY_NORMALIZER.apply_heuristics("건", "건") == "물건"
        assert SUB_CATEGORY_NORMALIZER.apply_heuristics("월세", "월세") is None

    def test_identity_when_no_stage_matches(self):
        normalizer = NameNormalizer(exact_map={}, rules=[])
        assert normalizer("anything") == "anything"


class TestRepair:
    """Tests for whole-entry repair."""

    def test_repair_entry_returns_copy(self, make_entry):
        entry = make_entry(category="유류통", sub_category="건")
        fixed = repair_entry(entry)
        assert fixed is not entry
        assert fixed.category == "유류교통비"
        assert fixed.sub_category == "물건"
        assert entry.category == "유류통"

    def test_repair_entry_untouched_is_same_object(self, make_entry):
        entry = make_entry(category="주거비", sub_category="월세")
        assert repair_entry(entry) is entry

    def test_repair_entry_keeps_missing_sub_category(self, make_entry):
        entry = make_entry(category="식", sub_category=None)
        fixed = repair_entry(entry)
        assert fixed.category == "식비"
        assert fixed.sub_category is None

    def test_repair_ledger_reports_changed_ids(self, make_entry):
        entries = [
            make_entry(id="ok", category="주거비"),
            make_entry(id="broken", category="데이비"),
        ]
        report = repair_ledger(entries)
        assert report.repaired_ids == ["broken"]
        assert report.repaired_count == 1
        assert report.changed is True
        assert [entry.id for entry in report.entries] == ["ok", "broken"]
        assert report.entries[0] is entries[0]

    def test_repair_ledger_accepts_custom_normalizers(self, make_entry):
        report = repair_ledger([make_entry(category="x")], str.upper, str.upper)
        assert report.entries[0].category == "X"
