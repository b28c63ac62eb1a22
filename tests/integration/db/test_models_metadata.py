from __future__ import annotations

import marketplace.models  # noqa: F401
from marketplace.models import Base


def test_model_metadata_contains_target_tables():
    expected = {"users", "contracts", "negotiations", "negotiation_events"}
    assert expected.issubset(set(Base.metadata.tables.keys()))


def test_active_negotiation_index_is_partial_and_unique():
    table = Base.metadata.tables["negotiations"]
    index = next(ix for ix in table.indexes if ix.name == "uq_negotiations_active_contract")
    assert index.unique
    assert "pending" in str(index.dialect_options["sqlite"]["where"])
