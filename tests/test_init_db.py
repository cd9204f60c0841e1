from __future__ import annotations

from db.init_db import DEMO_EMAIL, DEMO_PASSWORD, SAMPLE_INVESTMENTS, create_sample_data
from services.auth_service import authenticate
from services.investment_service import list_investments
from services.transaction_service import list_transactions


def test_sample_data_is_idempotent(db):
    create_sample_data()
    create_sample_data()

    result = authenticate(DEMO_EMAIL, DEMO_PASSWORD)
    assert result.success
    investments = list_investments(result.user.id)
    assert len(investments) == len(SAMPLE_INVESTMENTS)

    listed = [inv for inv in investments if inv.symbol]
    transactions = list_transactions(result.user.id)
    assert len(transactions) == len(listed)
    assert all(tx.investment_id is not None for tx in transactions)
