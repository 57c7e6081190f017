"""
Shared fixtures for the client intake tests.
"""

from __future__ import annotations

import copy
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest


class FakeClock:
    """Deterministic clock that advances one second per reading."""

    def __init__(self, start: datetime = datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + timedelta(seconds=1)
        return value


MINIMAL_SECTIONS = {
    "applicant": {"firstName": "Jane", "lastName": "Smith", "email": "jane.smith@example.com"},
    "coApplicant": {"includeCoApplicant": True, "firstName": "John", "lastName": "Smith"},
    "liabilities": [{"creditorName": "Visa", "currentBalance": 1200}],
    "mortgages": [{"lender": "Bank"}],
    "underwriting": {"creditScore": 720, "annualIncome": 95000},
    "loanStatus": {"status": "Pre-Approval"},
    "drivers": [{"fullName": "Jane Smith"}],
    "vehicleCoverage": {"hasVehicles": True},
    "homeowners": {"provider": "State Farm"},
    "renters": {"hasRentersInsurance": True},
    "incomeProtection": {"hasIncomeProtection": True},
    "retirement": {"currentAge": 40},
    "lineage": {"referralSource": "Website"},
}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def full_payload():
    """Minimally valid data for all thirteen sections."""
    return copy.deepcopy(MINIMAL_SECTIONS)


@pytest.fixture
def jane_payload():
    return {
        "applicant": {
            "firstName": "Jane",
            "lastName": "Smith",
            "email": "jane.smith@example.com",
        }
    }


@pytest.fixture
def temp_dir():
    """Temporary directory for store and audit files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
