"""Platform fee / companion earning split."""

from decimal import Decimal

import pytest

from apps.finances.services import calculate_split_amounts
from shared.domain.exceptions import ValidationError


@pytest.mark.parametrize(
    "total, percentage, fee, earning",
    [
        ("10000", "20", "2000", "8000"),
        ("9999", "33", "3300", "6699"),
        ("0", "20", "0", "0"),
        ("5000", "0", "0", "5000"),
        ("5000", "100", "5000", "0"),
        ("2.50", "20", "1", "1.50"),
        ("7", "50", "4", "3"),
    ],
)
def test_split_examples(total, percentage, fee, earning):
    split = calculate_split_amounts(Decimal(total), Decimal(percentage))

    assert split.platform_fee == Decimal(fee)
    assert split.companion_earning == Decimal(earning)


@pytest.mark.parametrize("total", ["0.01", "1", "99.99", "12345.67", "1000000"])
@pytest.mark.parametrize("percentage", ["0", "12.5", "20", "33", "99.9", "100"])
def test_split_always_adds_up(total, percentage):
    split = calculate_split_amounts(total, percentage)

    assert split.platform_fee + split.companion_earning == split.total_amount == Decimal(total)
    assert split.companion_earning >= 0


def test_default_percentage_is_twenty():
    assert calculate_split_amounts(Decimal("10000")).platform_fee == Decimal("2000")


@pytest.mark.parametrize(
    "total, percentage",
    [("-1", "20"), ("NaN", "20"), ("Infinity", "20"), ("abc", "20"), ("100", "-0.5"), ("100", "100.01")],
)
def test_invalid_inputs(total, percentage):
    with pytest.raises(ValidationError):
        calculate_split_amounts(total, percentage)
