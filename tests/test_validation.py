"""
Tests for Intake Validation

Tests cover:
- Per-section schema rules and field paths
- Collect-all violation reporting
- Closed vocabularies and numeric bounds
- Two-phase co-applicant validation
- Multi-section creation payloads
- Required-contact rule
"""

import pytest

from core.intake.errors import InvalidSection
from core.intake.schema import SectionName
from core.intake.validation import (
    parse_create,
    parse_section,
    validate_create,
    validate_required_contact,
    validate_section,
)


def fields_of(result):
    return [v.field for v in result.violations]


# =============================================================================
# Section Validation
# =============================================================================


class TestApplicantSection:

    def test_minimal_applicant_valid(self):
        result = validate_section("applicant", {"firstName": "Jane", "lastName": "Smith"})
        assert result.valid
        assert result.violations == ()

    def test_missing_last_name(self):
        result = validate_section("applicant", {"firstName": "Jane"})
        assert not result.valid
        assert fields_of(result) == ["applicant.lastName"]

    def test_blank_first_name_rejected(self):
        result = validate_section("applicant", {"firstName": "   ", "lastName": "Smith"})
        assert "applicant.firstName" in fields_of(result)

    def test_name_too_long(self):
        result = validate_section("applicant", {"firstName": "J" * 51, "lastName": "Smith"})
        assert fields_of(result) == ["applicant.firstName"]

    def test_invalid_email(self):
        result = validate_section(
            "applicant", {"firstName": "Jane", "lastName": "Smith", "email": "not-an-email"}
        )
        assert fields_of(result) == ["applicant.email"]

    def test_nested_zip_code_path(self):
        result = validate_section(
            "applicant",
            {"firstName": "Jane", "lastName": "Smith", "currentAddress": {"zipCode": "1234"}},
        )
        assert fields_of(result) == ["applicant.currentAddress.zipCode"]

    def test_zip_plus_four_accepted(self):
        result = validate_section(
            "applicant",
            {"firstName": "Jane", "lastName": "Smith", "currentAddress": {"zipCode": "78701-1234"}},
        )
        assert result.valid

    def test_state_must_be_two_letters(self):
        result = validate_section(
            "applicant",
            {"firstName": "Jane", "lastName": "Smith", "currentAddress": {"state": "Texas"}},
        )
        assert fields_of(result) == ["applicant.currentAddress.state"]

    def test_object_section_rejects_list(self):
        result = validate_section("applicant", [{"firstName": "Jane"}])
        assert fields_of(result) == ["applicant"]


class TestNormalisation:

    def test_normalised_data_keeps_only_supplied_keys(self):
        payload, result = parse_section("underwriting", {"creditScore": 720})
        assert result.valid
        assert payload.name == SectionName.UNDERWRITING
        assert payload.data == {"creditScore": 720}

    def test_unknown_keys_stripped(self):
        payload, _ = parse_section("lineage", {"referralSource": "Website", "shoeSize": 9})
        assert payload.data == {"referralSource": "Website"}

    def test_whitespace_stripped(self):
        payload, _ = parse_section("applicant", {"firstName": "  Jane ", "lastName": "Smith"})
        assert payload.data["firstName"] == "Jane"

    def test_dates_stored_as_iso_strings(self):
        payload, _ = parse_section("loanStatus", {"applicationDate": "2024-03-01"})
        assert payload.data == {"applicationDate": "2024-03-01"}

    def test_failed_parse_returns_no_payload(self):
        payload, result = parse_section("underwriting", {"creditScore": 10})
        assert payload is None
        assert not result.valid


class TestNumericBounds:

    @pytest.mark.parametrize("score", [299, 851])
    def test_credit_score_out_of_range(self, score):
        result = validate_section("underwriting", {"creditScore": score})
        assert fields_of(result) == ["underwriting.creditScore"]

    @pytest.mark.parametrize("score", [300, 850])
    def test_credit_score_bounds_inclusive(self, score):
        assert validate_section("underwriting", {"creditScore": score}).valid

    def test_percentage_above_hundred(self):
        result = validate_section("underwriting", {"loanToValueRatio": 101})
        assert fields_of(result) == ["underwriting.loanToValueRatio"]

    def test_negative_money(self):
        result = validate_section("renters", {"deductible": -1})
        assert fields_of(result) == ["renters.deductible"]

    def test_all_violations_collected(self):
        result = validate_section(
            "underwriting",
            {"creditScore": 900, "debtToIncomeRatio": 150, "annualIncome": -5},
        )
        assert set(fields_of(result)) == {
            "underwriting.creditScore",
            "underwriting.debtToIncomeRatio",
            "underwriting.annualIncome",
        }

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_numbers_rejected(self, value):
        result = validate_section("underwriting", {"netWorth": value})
        assert fields_of(result) == ["underwriting.netWorth"]

    def test_infinite_money_rejected(self):
        result = validate_section("underwriting", {"annualIncome": float("inf")})
        assert fields_of(result) == ["underwriting.annualIncome"]


class TestVocabularies:

    def test_known_loan_status(self):
        assert validate_section("loanStatus", {"status": "Under Review"}).valid

    def test_unknown_loan_status_rejected(self):
        result = validate_section("loanStatus", {"status": "Approvedish"})
        assert fields_of(result) == ["loanStatus.status"]

    def test_vocabulary_is_not_coerced(self):
        result = validate_section("lineage", {"referralSource": "website"})
        assert fields_of(result) == ["lineage.referralSource"]

    def test_driver_marital_status_vocabulary(self):
        result = validate_section("drivers", [{"maritalStatus": "Engaged"}])
        assert fields_of(result) == ["drivers.0.maritalStatus"]


class TestSequenceSections:

    def test_empty_list_valid(self):
        assert validate_section("drivers", []).valid

    def test_not_an_array(self):
        result = validate_section("drivers", "not-an-array")
        assert fields_of(result) == ["drivers"]

    def test_item_path_includes_index(self):
        result = validate_section("mortgages", [{"lender": "Bank"}, {"interestRate": 120}])
        assert fields_of(result) == ["mortgages.1.interestRate"]

    def test_nested_sequence_in_object_section(self):
        result = validate_section("vehicleCoverage", {"vehicles": [{"year": 1850}]})
        assert fields_of(result) == ["vehicleCoverage.vehicles.0.year"]


class TestCoApplicant:

    def test_names_optional_when_not_included(self):
        assert validate_section("coApplicant", {"includeCoApplicant": False}).valid

    def test_names_optional_when_flag_absent(self):
        assert validate_section("coApplicant", {"email": "john@example.com"}).valid

    def test_names_required_when_included(self):
        result = validate_section("coApplicant", {"includeCoApplicant": True})
        assert set(fields_of(result)) == {"coApplicant.firstName", "coApplicant.lastName"}

    def test_has_co_applicant_flag_also_switches(self):
        result = validate_section("coApplicant", {"hasCoApplicant": True, "firstName": "John"})
        assert fields_of(result) == ["coApplicant.lastName"]

    def test_included_with_names_valid(self):
        result = validate_section(
            "coApplicant",
            {"includeCoApplicant": True, "firstName": "John", "lastName": "Smith"},
        )
        assert result.valid

    @pytest.mark.parametrize("flag", ["includeCoApplicant", "hasCoApplicant"])
    @pytest.mark.parametrize("value", ["true", 1, "yes", "on"])
    def test_flag_must_be_json_boolean(self, flag, value):
        result = validate_section("coApplicant", {flag: value, "firstName": "John"})
        assert not result.valid
        assert fields_of(result) == [f"coApplicant.{flag}"]

    def test_false_flag_valid(self):
        assert validate_section("coApplicant", {"hasCoApplicant": False}).valid


class TestUnknownSection:

    def test_unknown_section_raises(self):
        with pytest.raises(InvalidSection) as exc_info:
            validate_section("notASection", {"firstName": "Jane"})
        assert "notASection" in exc_info.value.error

    def test_error_lists_valid_sections(self):
        with pytest.raises(InvalidSection) as exc_info:
            parse_section("Applicant", {})
        assert "applicant" in exc_info.value.error
        assert "lineage" in exc_info.value.error


# =============================================================================
# Creation Payloads
# =============================================================================


class TestCreatePayload:

    def test_partial_payload_valid(self, jane_payload):
        sections, result = parse_create(jane_payload)
        assert result.valid
        assert [s.name for s in sections] == [SectionName.APPLICANT]

    def test_empty_payload_valid(self):
        sections, result = parse_create({})
        assert result.valid
        assert sections == []

    def test_full_payload_valid(self, full_payload):
        sections, result = parse_create(full_payload)
        assert result.valid
        assert len(sections) == 13

    def test_sections_returned_in_registry_order(self):
        sections, _ = parse_create(
            {"lineage": {"notes": "x"}, "applicant": {"firstName": "A", "lastName": "B"}}
        )
        assert [s.name.value for s in sections] == ["applicant", "lineage"]

    def test_unknown_top_level_keys_ignored(self, jane_payload):
        jane_payload["favouriteColour"] = "blue"
        assert validate_create(jane_payload).valid

    def test_null_section_treated_as_absent(self, jane_payload):
        jane_payload["coApplicant"] = None
        sections, result = parse_create(jane_payload)
        assert result.valid
        assert len(sections) == 1

    def test_violations_from_every_section(self):
        result = validate_create(
            {
                "applicant": {"firstName": "Jane"},
                "underwriting": {"creditScore": 10},
                "drivers": "not-an-array",
            }
        )
        assert fields_of(result) == [
            "applicant.lastName",
            "underwriting.creditScore",
            "drivers",
        ]

    def test_non_object_payload(self):
        sections, result = parse_create(["applicant"])
        assert sections is None
        assert fields_of(result) == ["body"]

    def test_require_contact_applies_to_applicant(self):
        result = validate_create(
            {"applicant": {"firstName": "Jane", "lastName": "Smith"}},
            require_contact=True,
        )
        assert set(fields_of(result)) == {"applicant.phone", "applicant.email"}

    def test_require_contact_skips_excluded_co_applicant(self):
        result = validate_create(
            {
                "applicant": {
                    "firstName": "Jane",
                    "lastName": "Smith",
                    "mobilePhone": "512-555-0147",
                    "email": "jane@example.com",
                },
                "coApplicant": {"includeCoApplicant": False},
            },
            require_contact=True,
        )
        assert result.valid

    def test_require_contact_applies_to_included_co_applicant(self):
        result = validate_create(
            {
                "applicant": {
                    "firstName": "Jane",
                    "lastName": "Smith",
                    "mobilePhone": "512-555-0147",
                    "email": "jane@example.com",
                },
                "coApplicant": {
                    "includeCoApplicant": True,
                    "firstName": "John",
                    "lastName": "Smith",
                },
            },
            require_contact=True,
        )
        assert set(fields_of(result)) == {"coApplicant.phone", "coApplicant.email"}

    def test_malformed_email_reported_once(self):
        result = validate_create(
            {
                "applicant": {
                    "firstName": "Jane",
                    "lastName": "Smith",
                    "homePhone": "512-555-0147",
                    "email": "bad",
                }
            },
            require_contact=True,
        )
        assert fields_of(result) == ["applicant.email"]


# =============================================================================
# Required Contact
# =============================================================================


class TestRequiredContact:

    def test_phone_and_email_valid(self):
        result = validate_required_contact(
            {"mobilePhone": "512-555-0147", "email": "jane@example.com"}
        )
        assert result.valid

    @pytest.mark.parametrize("phone_field", ["homePhone", "mobilePhone", "otherPhone"])
    def test_any_one_phone_suffices(self, phone_field):
        result = validate_required_contact({phone_field: "+1 (512) 555-0147", "email": "a@example.com"})
        assert result.valid

    def test_work_phone_does_not_count(self):
        result = validate_required_contact({"workPhone": "512-555-0147", "email": "a@example.com"})
        assert fields_of(result) == ["phone"]

    def test_nothing_supplied(self):
        result = validate_required_contact({})
        assert fields_of(result) == ["phone", "email"]

    def test_blank_email_required(self):
        result = validate_required_contact({"homePhone": "512-555-0147", "email": "  "})
        assert fields_of(result) == ["email"]

    def test_malformed_email(self):
        result = validate_required_contact({"homePhone": "512-555-0147", "email": "jane@"})
        assert fields_of(result) == ["email"]
        assert result.violations[0].message == "Please enter a valid email address"

    @pytest.mark.parametrize("phone", ["123", "0123456789", "phone-number"])
    def test_malformed_phone(self, phone):
        result = validate_required_contact({"homePhone": phone, "email": "a@example.com"})
        assert fields_of(result) == ["homePhone"]

    def test_prefix_applied(self):
        result = validate_required_contact({}, prefix="applicant")
        assert fields_of(result) == ["applicant.phone", "applicant.email"]

    def test_non_object_block(self):
        result = validate_required_contact("jane@example.com", prefix="applicant")
        assert fields_of(result) == ["applicant"]

    def test_result_to_dict(self):
        result = validate_required_contact({"homePhone": "512-555-0147"})
        assert result.to_dict() == {
            "valid": False,
            "errors": [{"field": "email", "message": "Email is required"}],
        }
