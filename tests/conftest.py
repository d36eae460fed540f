"""Shared fixtures for ledger tests."""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID

import pytest

from equipment_ledger.models.operation import OperationComptable, OperationType


def make_operation(
    op_id: str,
    when: datetime,
    operation_type: OperationType,
    amount: str,
    **kwargs,
) -> OperationComptable:
    """Build an operation with a readable, deterministic id."""
    return OperationComptable(
        id=UUID(int=int.from_bytes(op_id.encode(), "big")),
        date=when,
        operation_type=operation_type,
        amount=Decimal(amount),
        **kwargs,
    )


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def op_a() -> OperationComptable:
    return make_operation(
        "a", utc(2024, 1, 15, 10, 0), OperationType.LOCATION_REVENU, "100.00",
        materiel_nom="Bétonnière",
        personne_nom="Jean Dupont",
    )


@pytest.fixture
def op_b() -> OperationComptable:
    return make_operation(
        "b", utc(2024, 1, 20, 9, 30), OperationType.REPARATION_DEPENSE, "30.00",
        materiel_nom="Bétonnière",
    )


@pytest.fixture
def op_c() -> OperationComptable:
    return make_operation(
        "c", utc(2024, 2, 29, 18, 0), OperationType.LOCATION_CAUTION, "50.00",
    )


@pytest.fixture
def mixed_operations(op_a, op_b, op_c) -> list[OperationComptable]:
    return [
        op_a,
        op_b,
        op_c,
        make_operation("d", utc(2023, 12, 31, 23, 0), OperationType.MA_LOCATION_DEPENSE, "45.50"),
        make_operation("e", utc(2024, 3, 1, 0, 0), OperationType.MA_LOCATION_CAUTION_PERDUE, "20.00"),
    ]
