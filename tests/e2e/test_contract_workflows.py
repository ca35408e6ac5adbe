"""
E2E tests walking the contract editor through complete billing workflows.

Each scenario drives the API the way the editor does: generate a schedule,
mutate it, check the balance, then persist and reload the plan.

Scenarios:
- quarterly_campaign: interval policy with a fixed first payment
- discounted_contract: total changes after the schedule was generated
- hand_entered_split: manual entries, a removal, then save
- reloaded_contract: stored manual plan survives the first total update
"""

import pytest
from decimal import Decimal
from fastapi.testclient import TestClient


def _amounts(payload):
    return [Decimal(str(i["amount"])) for i in payload["installments"]]


@pytest.mark.integration
def test_quarterly_campaign(client: TestClient):
    """
    quarterly_campaign: 9000 billboard rental, 1500 deposit, quarterly until year end
    Expected: deposit at signing, remaining 7500 split across quarters, plan saved
    """
    policy = {
        "mode": "interval",
        "interval_months": 3,
        "last_payment_date": "2025-12-31",
        "first_payment": {"value": 1500, "kind": "amount"},
    }
    response = client.post(
        "/v1/installments/interval",
        json={"total": 9000, "start_date": "2025-01-31", "policy": policy},
    )

    assert response.status_code == 200
    data = response.json()
    assert [i["due_date"] for i in data["installments"]] == [
        "2025-01-31",
        "2025-04-30",
        "2025-07-31",
        "2025-10-31",
    ]
    assert _amounts(data) == [Decimal("1500"), Decimal("2500"), Decimal("2500"), Decimal("2500")]
    assert data["installments"][1]["payment_type"] == "every 3 months"

    response = client.put(
        "/v1/contracts/campaign-q/plan",
        json={"total": 9000, "policy": policy, "installments": data["installments"]},
    )
    assert response.status_code == 200
    assert response.json()["policy"]["interval_months"] == 3


@pytest.mark.integration
def test_discounted_contract(client: TestClient):
    """
    discounted_contract: 6000 over 6 months, then a 10% discount brings it to 5400
    Expected: the same policy is re-run and the schedule stays balanced
    """
    policy = {"mode": "interval", "count": 6}
    generated = client.post(
        "/v1/installments/interval",
        json={"total": 6000, "start_date": "2025-03-01", "policy": policy},
    ).json()
    assert _amounts(generated) == [Decimal("1000")] * 6

    response = client.post(
        "/v1/installments/redistribute/total",
        json={
            "installments": generated["installments"],
            "previous_total": 6000,
            "current_total": 5400,
            "start_date": "2025-03-01",
            "policy": policy,
        },
    )

    data = response.json()
    assert data["redistributed"] is True
    assert _amounts(data) == [Decimal("900")] * 6
    assert data["balance"]["is_balanced"] is True

    saved = client.put(
        "/v1/contracts/discounted/plan",
        json={"total": 5400, "policy": policy, "installments": data["installments"]},
    )
    assert saved.status_code == 200


@pytest.mark.integration
def test_hand_entered_split(client: TestClient):
    """
    hand_entered_split: client pays 1000 in three unequal parts, then drops one
    Expected: unbalanced entry is flagged, removal restores balance, plan saved
    """
    entries = [
        {"amount": 200, "description": "Deposit"},
        {"amount": 300, "description": "Mid campaign"},
        {"amount": 400, "description": "Closing"},
    ]
    check = client.post("/v1/installments/manual", json={"total": 1000, "entries": entries}).json()
    assert check["validation"]["balanced"] is False
    assert Decimal(str(check["validation"]["difference"])) == Decimal("100")

    dated = client.post(
        "/v1/installments/manual/dates",
        json={"entries": entries, "start_date": "2025-05-15", "interval_months": 2},
    ).json()
    assert [i["due_date"] for i in dated["installments"]] == ["2025-05-15", "2025-07-15", "2025-09-15"]

    rejected = client.put(
        "/v1/contracts/hand-split/plan",
        json={"total": 1000, "policy": {"mode": "manual"}, "installments": dated["installments"]},
    )
    assert rejected.status_code == 409

    trimmed = client.post(
        "/v1/installments/redistribute/removal",
        json={"installments": dated["installments"], "removed_index": 1, "total": 1000},
    ).json()
    assert _amounts(trimmed) == [Decimal("400"), Decimal("600")]
    assert [i["description"] for i in trimmed["installments"]] == ["Deposit", "Closing"]

    saved = client.put(
        "/v1/contracts/hand-split/plan",
        json={"total": 1000, "policy": {"mode": "manual"}, "installments": trimmed["installments"]},
    )
    assert saved.status_code == 200


@pytest.mark.integration
def test_reloaded_contract(client: TestClient):
    """
    reloaded_contract: stored manual split is opened again in the editor
    Expected: the first total observed after loading does not overwrite the split,
    a later real change rescales it
    """
    installments = [
        {"amount": 700, "due_date": "2025-01-01", "description": "Deposit"},
        {"amount": 300, "due_date": "2025-06-01", "description": "Balance"},
    ]
    client.put(
        "/v1/contracts/reloaded/plan",
        json={"total": 1000, "policy": {"mode": "manual"}, "installments": installments},
    )
    plan = client.get("/v1/contracts/reloaded/plan").json()

    loaded = client.post(
        "/v1/installments/redistribute/total",
        json={
            "installments": plan["installments"],
            "previous_total": 0,
            "current_total": plan["total"],
            "start_date": "2025-01-01",
            "policy": plan["policy"],
            "suppressed": True,
        },
    ).json()
    assert loaded["redistributed"] is False
    assert _amounts(loaded) == [Decimal("700"), Decimal("300")]

    changed = client.post(
        "/v1/installments/redistribute/total",
        json={
            "installments": loaded["installments"],
            "previous_total": plan["total"],
            "current_total": 2000,
            "start_date": "2025-01-01",
            "policy": plan["policy"],
        },
    ).json()
    assert changed["redistributed"] is True
    assert _amounts(changed) == [Decimal("1400"), Decimal("600")]
    assert [i["due_date"] for i in changed["installments"]] == ["2025-01-01", "2025-06-01"]
