"""
Tests for the Section Registry

Tests cover:
- The thirteen sections and their order
- Exact, case-sensitive name lookup
- Meaningful-data rules (booleans, zeros, blanks, nesting)
- Populated rules for object and sequence sections
- Inclusion-flag schema selection for the co-applicant
"""

import pytest

from core.intake.registry import (
    SectionKind,
    SectionRegistration,
    all_names,
    all_sections,
    describe,
    has_meaningful_value,
    lookup,
    register_section,
    round_half_up,
    total_sections,
)
from core.intake.schema import (
    ApplicantSection,
    CoApplicantSection,
    IncludedCoApplicantSection,
    SectionName,
)


class TestRegistryContents:

    def test_thirteen_sections(self):
        assert total_sections() == 13

    def test_reporting_order(self):
        assert all_names() == [
            "applicant",
            "coApplicant",
            "liabilities",
            "mortgages",
            "underwriting",
            "loanStatus",
            "drivers",
            "vehicleCoverage",
            "homeowners",
            "renters",
            "incomeProtection",
            "retirement",
            "lineage",
        ]

    def test_sequence_sections(self):
        sequences = {r.name.value for r in all_sections() if r.is_sequence}
        assert sequences == {"liabilities", "mortgages", "drivers"}

    def test_describe_returns_registration(self):
        registration = describe(SectionName.APPLICANT)
        assert registration.kind == SectionKind.OBJECT
        assert registration.model is ApplicantSection

    def test_duplicate_registration_rejected(self):
        with pytest.raises(ValueError):
            register_section(
                SectionRegistration(
                    name=SectionName.LINEAGE,
                    kind=SectionKind.OBJECT,
                    model=ApplicantSection,
                    order=99,
                )
            )

    def test_inclusion_flags_require_included_model(self):
        with pytest.raises(ValueError):
            SectionRegistration(
                name=SectionName.CO_APPLICANT,
                kind=SectionKind.OBJECT,
                model=CoApplicantSection,
                order=1,
                inclusion_flags=("includeCoApplicant",),
            )


class TestLookup:

    def test_known_name(self):
        assert lookup("underwriting").name == SectionName.UNDERWRITING

    def test_unknown_name(self):
        assert lookup("notASection") is None

    def test_lookup_is_case_sensitive(self):
        assert lookup("Applicant") is None
        assert lookup("loanstatus") is None

    def test_non_string_lookup(self):
        assert lookup(None) is None
        assert lookup(3) is None


class TestMeaningfulValue:

    @pytest.mark.parametrize("value", [None, False, 0, 0.0, "", "   ", [], {}, {"a": None}, [None, ""]])
    def test_not_meaningful(self, value):
        assert has_meaningful_value(value) is False

    @pytest.mark.parametrize("value", [True, 1, 0.5, "x", ["a"], {"a": {"b": "x"}}, [{"c": 3}]])
    def test_meaningful(self, value):
        assert has_meaningful_value(value) is True


class TestIsPopulated:

    def test_absent_section_not_populated(self):
        assert describe(SectionName.RENTERS).is_populated(None) is False

    def test_false_flag_alone_not_populated(self):
        assert describe(SectionName.RENTERS).is_populated({"hasRentersInsurance": False}) is False

    def test_true_flag_populated(self):
        assert describe(SectionName.RENTERS).is_populated({"hasRentersInsurance": True}) is True

    def test_blank_string_not_populated(self):
        assert describe(SectionName.HOMEOWNERS).is_populated({"provider": "  "}) is False

    def test_zero_amount_not_populated(self):
        assert describe(SectionName.UNDERWRITING).is_populated({"annualIncome": 0}) is False

    def test_undeclared_key_ignored(self):
        assert describe(SectionName.LINEAGE).is_populated({"favouriteColour": "blue"}) is False

    def test_nested_value_counts(self):
        data = {"currentAddress": {"city": "Austin"}}
        assert describe(SectionName.APPLICANT).is_populated(data) is True

    def test_empty_sequence_not_populated(self):
        assert describe(SectionName.DRIVERS).is_populated([]) is False

    def test_sequence_with_one_item_populated(self):
        assert describe(SectionName.MORTGAGES).is_populated([{"lender": "Bank"}]) is True

    def test_sequence_wrong_shape_not_populated(self):
        assert describe(SectionName.DRIVERS).is_populated({"fullName": "Jane"}) is False


class TestFillPercentage:

    def test_half_filled_object(self):
        registration = describe(SectionName.HOMEOWNERS)
        assert registration.fill_percentage({"provider": "State Farm", "deductible": 0}) == 50

    def test_empty_object(self):
        assert describe(SectionName.HOMEOWNERS).fill_percentage({}) == 0

    def test_sequence(self):
        registration = describe(SectionName.DRIVERS)
        assert registration.fill_percentage([{"fullName": "Jane"}]) == 100
        assert registration.fill_percentage([]) == 0


class TestInclusionFlags:

    def test_lax_schema_by_default(self):
        registration = describe(SectionName.CO_APPLICANT)
        assert registration.schema_for({}) is CoApplicantSection
        assert registration.schema_for({"includeCoApplicant": False}) is CoApplicantSection

    @pytest.mark.parametrize("flag", ["includeCoApplicant", "hasCoApplicant"])
    def test_either_flag_selects_strict_schema(self, flag):
        registration = describe(SectionName.CO_APPLICANT)
        assert registration.schema_for({flag: True}) is IncludedCoApplicantSection

    def test_only_boolean_true_switches(self):
        registration = describe(SectionName.CO_APPLICANT)
        assert registration.schema_for({"includeCoApplicant": "yes"}) is CoApplicantSection

    def test_flags_declared_as_keys(self):
        keys = describe(SectionName.CO_APPLICANT).declared_keys
        assert {"includeCoApplicant", "hasCoApplicant", "firstName"} <= keys


class TestRounding:

    @pytest.mark.parametrize(
        "numerator,denominator,expected",
        [(100, 13, 8), (200, 13, 15), (400, 13, 31), (1, 2, 1), (5, 10, 1), (4, 10, 0)],
    )
    def test_round_half_up(self, numerator, denominator, expected):
        assert round_half_up(numerator, denominator) == expected
