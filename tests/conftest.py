"""Shared test fixtures for the OCR normalization test suite."""

from pathlib import Path

import pytest

ENTERTAINMENT_PARTNERS_STUB = (
    "Entertainment Partners\n"
    "TIME REPORT SUMMARY\n"
    "SHOW: NORTHERN LIGHTS UNION: IATSE 891\n"
    "PERIOD ENDING 03/15/2024\n"
    "GROSS PAY 1,000.00\n"
    "G/HST (P) 50.00\n"
    "TOTAL DEDUCTIONS 120.00\n"
    "NET PAY 830.00\n"
    "DESC.\tCURRENT\tYEAR TO DATE\n"
    "Dues\t93.07\t137.50\n"
    "Insure\t12.34\t40.00\n"
    "Pension\t20.00\t60.00\n"
    "Retire\t15.00\t45.00\n"
)

CAST_AND_CREW_STUB = (
    "CAST AND CREW\n"
    "PAYROLL STATEMENT\n"
    "CONTROLLING EMPLOYER: Maple Pictures Inc. Resident of British Columbia\n"
    "PAY PERIOD: 03/01/2024 - 03/15/2024\n"
    "GROSS PAY: 1,000.00\n"
    "REIMBURSEMENTS: 75.00\n"
    "GST/HST: 50.00\n"
    "DEDUCTIONS: 200.00\n"
    "INS. DED 10.00\n"
    "MEMBER FEE 25.00\n"
    "RETIR. EMP 30.00\n"
    "RETIRE DEDUCT 40.00\n"
    "NET PAY: 875.00\n"
)

UNLABELLED_STUB = (
    "Weekly Statement\n"
    "PAY PERIOD 04/05/2024\n"
    "GROSS PAY 800.00\n"
    "NET PAY 700.00\n"
)

COFFEE_RECEIPT = (
    "Tim Hortons #1234\n"
    "123 Main St\n"
    "03/15/2024 08:12\n"
    "Coffee $2.50\n"
    "SUBTOTAL $2.50\n"
    "GST $0.13\n"
    "TOTAL $2.63\n"
)


@pytest.fixture
def ep_stub() -> str:
    """Transcript of an Entertainment Partners paystub."""
    return ENTERTAINMENT_PARTNERS_STUB


@pytest.fixture
def cc_stub() -> str:
    """Transcript of a Cast and Crew paystub."""
    return CAST_AND_CREW_STUB


@pytest.fixture
def unlabelled_stub() -> str:
    """Transcript of a paystub from an unrecognized payroll service."""
    return UNLABELLED_STUB


@pytest.fixture
def coffee_receipt() -> str:
    """Transcript of a small coffee-shop receipt."""
    return COFFEE_RECEIPT


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"
