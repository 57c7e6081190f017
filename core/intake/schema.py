"""
Client Intake Schema - Sections, Vocabularies and the Client Aggregate

Defines the thirteen intake sections as pydantic models, the closed
vocabularies their enumerated fields draw from, and the ClientRecord
aggregate that owns one slot per section.

Wire format is camelCase; Python attributes are snake_case.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Annotated, Any, Final, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StrictBool, StringConstraints
from pydantic.alias_generators import to_camel


# =============================================================================
# Enums
# =============================================================================


class SectionName(str, Enum):
    """The thirteen intake sections, in reporting order."""

    APPLICANT = "applicant"
    CO_APPLICANT = "coApplicant"
    LIABILITIES = "liabilities"
    MORTGAGES = "mortgages"
    UNDERWRITING = "underwriting"
    LOAN_STATUS = "loanStatus"
    DRIVERS = "drivers"
    VEHICLE_COVERAGE = "vehicleCoverage"
    HOMEOWNERS = "homeowners"
    RENTERS = "renters"
    INCOME_PROTECTION = "incomeProtection"
    RETIREMENT = "retirement"
    LINEAGE = "lineage"

    @classmethod
    def from_string(cls, value: Any) -> Optional["SectionName"]:
        """Exact, case-sensitive lookup. None for anything else."""
        if not isinstance(value, str):
            return None
        for name in cls:
            if name.value == value:
                return name
        return None


class ClientStatus(Enum):
    """
    Coarse workflow status of a client.

    PROSPECT: nothing captured yet (0%)
    PENDING: intake in progress (1-99%)
    ACTIVE: every section captured (100%)
    INACTIVE: set outside this module, never derived
    """

    PROSPECT = "prospect"
    ACTIVE = "active"
    PENDING = "pending"
    INACTIVE = "inactive"


# =============================================================================
# Closed Vocabularies
# =============================================================================

Title = Literal["Mr.", "Mrs.", "Ms.", "Dr.", "Prof."]
Suffix = Literal["Jr.", "Sr.", "II", "III", "IV", "V", "MD", "PhD"]
EmploymentStatus = Literal[
    "Employed",
    "Full-time",
    "Self-Employed",
    "Unemployed",
    "Retired",
    "Student",
    "Part-Time",
    "Contract",
]
Race = Literal[
    "American Indian or Alaska Native",
    "Asian",
    "Black or African American",
    "Hispanic or Latino",
    "Native Hawaiian or Other Pacific Islander",
    "White",
    "Two or More Races",
    "Other",
    "Decline to Answer",
]
MaritalStatus = Literal["Single", "Married", "Divorced", "Widowed", "Separated"]
Sex = Literal["Male", "Female", "Other"]
HouseholdRelationship = Literal[
    "Applicant",
    "Co-Applicant",
    "Spouse",
    "Partner",
    "Son",
    "Daughter",
    "Parent",
    "Sibling",
    "Other",
]
DebtorType = Literal["Applicant", "Co-Applicant", "Joint"]
LoanProgress = Literal[
    "Pre-Approval",
    "Application Submitted",
    "Under Review",
    "Approved",
    "Denied",
    "Funded",
]
LoanType = Literal["Conventional", "FHA", "VA", "USDA", "Jumbo"]
DrivingStatus = Literal["Licensed", "Permit", "No License", "Suspended"]
VehicleUsage = Literal["Personal", "Business", "Farm"]
PremiumFrequency = Literal["Monthly", "Quarterly", "Semi-Annual", "Annual"]
RetirementAccountType = Literal["401k", "403b", "IRA", "Roth IRA", "Pension", "Other"]
ReferralSource = Literal["Website", "Referral", "Advertisement", "Social Media", "Other"]


# =============================================================================
# Field Constraints
# =============================================================================

ZIP_CODE_PATTERN: Final = r"^\d{5}(-\d{4})?$"

Money = Annotated[float, Field(ge=0)]
Percentage = Annotated[float, Field(ge=0, le=100)]
CreditScore = Annotated[int, Field(ge=300, le=850)]
Count = Annotated[int, Field(ge=0)]
ZipCode = Annotated[str, StringConstraints(pattern=ZIP_CODE_PATTERN)]
StateCode = Annotated[str, StringConstraints(min_length=2, max_length=2)]
ShortText = Annotated[str, StringConstraints(max_length=100)]
Name = Annotated[str, StringConstraints(max_length=50)]
RequiredName = Annotated[str, StringConstraints(min_length=1, max_length=50)]


class IntakeModel(BaseModel):
    """Common configuration for every section and nested block."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
        allow_inf_nan=False,
    )


# =============================================================================
# Nested Blocks
# =============================================================================


class Address(IntakeModel):
    street: Optional[Annotated[str, StringConstraints(max_length=200)]] = None
    city: Optional[ShortText] = None
    state: Optional[StateCode] = None
    zip_code: Optional[ZipCode] = None
    county: Optional[ShortText] = None
    how_long_years: Optional[Count] = None
    how_long_months: Optional[Annotated[int, Field(ge=0, le=11)]] = None


class Employment(IntakeModel):
    employment_status: Optional[EmploymentStatus] = None
    is_business_owner: Optional[bool] = None
    occupation: Optional[ShortText] = None
    employer_name: Optional[Annotated[str, StringConstraints(max_length=200)]] = None
    employer_address: Optional[str] = None
    employer_city: Optional[ShortText] = None
    employer_state: Optional[StateCode] = None
    employer_zip_code: Optional[ZipCode] = None
    monthly_gross_salary: Optional[Money] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    supervisor: Optional[str] = None
    supervisor_phone: Optional[str] = None
    additional_income: Optional[Money] = None
    source: Optional[str] = None


class PreviousEmployment(IntakeModel):
    employer_name: Optional[str] = None
    employer_address: Optional[str] = None
    city: Optional[ShortText] = None
    state: Optional[StateCode] = None
    zip_code: Optional[ZipCode] = None
    occupation: Optional[ShortText] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None


class Demographics(IntakeModel):
    birth_place: Optional[str] = None
    date_of_birth: Optional[date] = None
    ssn: Optional[str] = None
    race: Optional[Race] = None
    marital_status: Optional[MaritalStatus] = None
    anniversary: Optional[date] = None
    spouse_name: Optional[str] = None
    spouse_occupation: Optional[str] = None
    number_of_dependents: Optional[Count] = None


class HouseholdMember(IntakeModel):
    first_name: Optional[Name] = None
    middle_initial: Optional[Annotated[str, StringConstraints(max_length=1)]] = None
    last_name: Optional[Name] = None
    relationship: Optional[HouseholdRelationship] = None
    date_of_birth: Optional[date] = None
    age: Optional[Annotated[int, Field(ge=0, le=150)]] = None
    sex: Optional[Sex] = None
    marital_status: Optional[MaritalStatus] = None
    ssn: Optional[str] = None


class PersonDetails(IntakeModel):
    """Fields shared by applicant and co-applicant."""

    title: Optional[Title] = None
    first_name: Optional[Name] = None
    mi: Optional[Annotated[str, StringConstraints(max_length=1)]] = None
    last_name: Optional[Name] = None
    suffix: Optional[Suffix] = None
    maiden_name: Optional[Name] = None
    is_consultant: Optional[bool] = None
    home_phone: Optional[str] = None
    work_phone: Optional[str] = None
    cell_phone: Optional[str] = None
    mobile_phone: Optional[str] = None
    other_phone: Optional[str] = None
    fax: Optional[str] = None
    email: Optional[EmailStr] = None
    current_address: Optional[Address] = None
    previous_address: Optional[Address] = None
    employment: Optional[Employment] = None
    previous_employment: Optional[PreviousEmployment] = None
    demographics: Optional[Demographics] = None
    household_members: Optional[list[HouseholdMember]] = None


# =============================================================================
# Sections
# =============================================================================


class ApplicantSection(PersonDetails):
    """Primary applicant. First and last name make the minimal record."""

    first_name: RequiredName
    last_name: RequiredName


class CoApplicantSection(PersonDetails):
    """Co-applicant as captured while the inclusion flag is off or unset."""

    # JSON booleans only; schema selection reads these before parsing
    include_co_applicant: Optional[StrictBool] = None
    has_co_applicant: Optional[StrictBool] = None


class IncludedCoApplicantSection(CoApplicantSection):
    """Co-applicant once the inclusion flag is on: names become required."""

    first_name: RequiredName
    last_name: RequiredName


class Liability(IntakeModel):
    debtor_type: Optional[DebtorType] = None
    liability_type: Optional[str] = None
    creditor_name: Optional[str] = None
    current_balance: Optional[Money] = None
    monthly_payment: Optional[Money] = None
    pay_off: Optional[bool] = None
    property_address: Optional[str] = None
    property_value: Optional[Money] = None
    gross_rent: Optional[Money] = None
    escrow: Optional[str] = None
    taxes: Optional[Money] = None
    hoi: Optional[Money] = None
    total_escrow: Optional[Money] = None
    net_rent: Optional[float] = None


class Mortgage(IntakeModel):
    property_address: Optional[str] = None
    lender: Optional[str] = None
    original_amount: Optional[Money] = None
    current_balance: Optional[Money] = None
    monthly_payment: Optional[Money] = None
    interest_rate: Optional[Percentage] = None
    loan_type: Optional[str] = None
    property_value: Optional[Money] = None
    rental_income: Optional[Money] = None


class UnderwritingSection(IntakeModel):
    address: Optional[str] = None
    city: Optional[ShortText] = None
    client_id: Optional[str] = None
    credit_score: Optional[CreditScore] = None
    annual_income: Optional[Money] = None
    monthly_income: Optional[Money] = None
    debt_to_income_ratio: Optional[Percentage] = None
    assets: Optional[Money] = None
    liabilities: Optional[Money] = None
    net_worth: Optional[float] = None
    loan_amount: Optional[Money] = None
    loan_to_value_ratio: Optional[Percentage] = None
    property_value: Optional[Money] = None
    down_payment: Optional[Money] = None
    cash_reserves: Optional[Money] = None
    employment_history: Optional[str] = None
    notes: Optional[str] = None


class LoanStatusSection(IntakeModel):
    application_date: Optional[date] = None
    status: Optional[LoanProgress] = None
    loan_type: Optional[LoanType] = None
    loan_amount: Optional[Money] = None
    interest_rate: Optional[Percentage] = None
    term: Optional[Annotated[int, Field(ge=1, le=50)]] = None
    closing_date: Optional[date] = None
    lender: Optional[str] = None
    loan_officer: Optional[str] = None
    notes: Optional[str] = None


class Driver(IntakeModel):
    full_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    age: Optional[Annotated[int, Field(ge=0, le=150)]] = None
    relationship: Optional[str] = None
    ssn: Optional[str] = None
    sex: Optional[Sex] = None
    marital_status: Optional[MaritalStatus] = None
    driving_status: Optional[DrivingStatus] = None
    license_number: Optional[str] = None
    license_state: Optional[StateCode] = None
    accidents_violations: Optional[bool] = None
    explanation: Optional[str] = None


class CoverageLimits(IntakeModel):
    liability: Optional[str] = None
    collision: Optional[str] = None
    comprehensive: Optional[str] = None
    uninsured_motorist: Optional[str] = None


class VehicleCoverageFlags(IntakeModel):
    liability: Optional[bool] = None
    collision: Optional[bool] = None
    comprehensive: Optional[bool] = None


class Vehicle(IntakeModel):
    year: Optional[Annotated[int, Field(ge=1900)]] = None
    make: Optional[str] = None
    model: Optional[str] = None
    vin: Optional[str] = None
    usage: Optional[VehicleUsage] = None
    annual_mileage: Optional[Count] = None
    coverage: Optional[VehicleCoverageFlags] = None


class VehicleCoverageSection(IntakeModel):
    has_vehicles: Optional[bool] = None
    current_provider: Optional[str] = None
    policy_number: Optional[str] = None
    coverage_limits: Optional[CoverageLimits] = None
    vehicles: Optional[list[Vehicle]] = None


class AdditionalCoverage(IntakeModel):
    type: Optional[str] = None
    amount: Optional[Money] = None


class HomeownersSection(IntakeModel):
    has_home_insurance: Optional[bool] = None
    provider: Optional[str] = None
    policy_number: Optional[str] = None
    coverage_amount: Optional[Money] = None
    deductible: Optional[Money] = None
    annual_premium: Optional[Money] = None
    property_value: Optional[Money] = None
    mortgage_company: Optional[str] = None
    additional_coverage: Optional[list[AdditionalCoverage]] = None


class RentersSection(IntakeModel):
    has_renters_insurance: Optional[bool] = None
    provider: Optional[str] = None
    policy_number: Optional[str] = None
    coverage_amount: Optional[Money] = None
    deductible: Optional[Money] = None
    annual_premium: Optional[Money] = None
    personal_property: Optional[Money] = None
    liability: Optional[Money] = None
    additional_living: Optional[Money] = None


class DisabilityPolicy(IntakeModel):
    provider: Optional[str] = None
    policy_number: Optional[str] = None
    monthly_benefit: Optional[Money] = None
    elimination_period: Optional[Count] = None  # days
    benefit_period: Optional[str] = None  # e.g. "6 months", "Age 65"


class Beneficiary(IntakeModel):
    name: Optional[str] = None
    relationship: Optional[str] = None
    percentage: Optional[Percentage] = None


class LifeInsurancePolicy(IntakeModel):
    provider: Optional[str] = None
    policy_number: Optional[str] = None
    face_amount: Optional[Money] = None
    premium_amount: Optional[Money] = None
    premium_frequency: Optional[PremiumFrequency] = None
    beneficiaries: Optional[list[Beneficiary]] = None


class IncomeProtectionSection(IntakeModel):
    has_income_protection: Optional[bool] = None
    short_term_disability: Optional[DisabilityPolicy] = None
    long_term_disability: Optional[DisabilityPolicy] = None
    life_insurance: Optional[list[LifeInsurancePolicy]] = None


class RetirementAccount(IntakeModel):
    account_type: Optional[RetirementAccountType] = None
    provider: Optional[str] = None
    current_balance: Optional[Money] = None
    monthly_contribution: Optional[Money] = None
    employer_match: Optional[Percentage] = None
    vesting_schedule: Optional[str] = None


class RetirementGoals(IntakeModel):
    monthly_income_needed: Optional[Money] = None
    inflation_rate: Optional[Percentage] = None
    rate_of_return: Optional[Percentage] = None
    retirement_duration: Optional[Count] = None  # years


class RetirementSection(IntakeModel):
    has_retirement_accounts: Optional[bool] = None
    current_age: Optional[Annotated[int, Field(ge=0, le=150)]] = None
    desired_retirement_age: Optional[Annotated[int, Field(ge=0, le=150)]] = None
    estimated_retirement_income: Optional[Money] = None
    current_retirement_savings: Optional[Money] = None
    monthly_contribution: Optional[Money] = None
    employer_match: Optional[Percentage] = None
    retirement_accounts: Optional[list[RetirementAccount]] = None
    retirement_goals: Optional[RetirementGoals] = None


class LineageSection(IntakeModel):
    referral_source: Optional[ReferralSource] = None
    referred_by: Optional[str] = None
    referrer_contact: Optional[str] = None
    original_contact_date: Optional[date] = None
    lead_source: Optional[str] = None
    marketing_campaign: Optional[str] = None
    notes: Optional[str] = None
    consultant_assigned: Optional[str] = None
    consultant_notes: Optional[str] = None


# =============================================================================
# Client Aggregate
# =============================================================================


@dataclass
class ClientRecord:
    """
    The unit of persistence: one prospective client's intake.

    Section slots are keyed by wire name and hold the stored (validated,
    normalised) JSON data. Absent keys are never-populated sections.
    Timestamps and version are owned by the persistence gateway.
    """

    id: str
    client_id: str
    status: ClientStatus = ClientStatus.PROSPECT
    completion_percentage: int = 0
    sections: dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    version: int = 0

    def get_section(self, name: SectionName) -> Any:
        """Stored data for a section, or None if never written."""
        return self.sections.get(name.value)

    def set_section(self, name: SectionName, data: Any) -> None:
        """Replace a section slot wholesale."""
        self.sections[name.value] = copy.deepcopy(data)

    @property
    def applicant_name(self) -> Optional[str]:
        """Display name from the applicant section, if captured."""
        applicant = self.sections.get(SectionName.APPLICANT.value) or {}
        parts = [applicant.get("firstName"), applicant.get("lastName")]
        name = " ".join(p for p in parts if p)
        return name or None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialisation."""
        data = {
            "id": self.id,
            "clientId": self.client_id,
            "status": self.status.value,
            "completionPercentage": self.completion_percentage,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
            "version": self.version,
        }
        for name in SectionName:
            if name.value in self.sections:
                data[name.value] = copy.deepcopy(self.sections[name.value])
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ClientRecord":
        """Create ClientRecord from dictionary."""
        created_at = data.get("createdAt")
        updated_at = data.get("updatedAt")
        return cls(
            id=data["id"],
            client_id=data["clientId"],
            status=ClientStatus(data.get("status", ClientStatus.PROSPECT.value)),
            completion_percentage=int(data.get("completionPercentage", 0)),
            sections={
                name.value: copy.deepcopy(data[name.value])
                for name in SectionName
                if name.value in data
            },
            created_at=datetime.fromisoformat(created_at) if created_at else None,
            updated_at=datetime.fromisoformat(updated_at) if updated_at else None,
            version=int(data.get("version", 0)),
        )
