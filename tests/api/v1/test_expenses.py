from decimal import Decimal
from fastapi import status


def post_expense(client, **body):
    return client.post("/api/v1/expenses/", json=body)


def test_root(test_client):
    response = test_client.get("/")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"message": "Welcome to Rx Ledger API"}


def test_create_split_expense(test_client):
    response = post_expense(
        test_client,
        date="2024-01-05",
        narration="groceries",
        amount="100",
        contributions=[{"user": "a", "amount": "100"}]
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert Decimal(data["amount"]) == Decimal("100")
    assert {k: Decimal(v) for k, v in data["debt"]["A"].items()} == {"B": Decimal("30"), "C": Decimal("20")}


def test_create_transfer(test_client):
    response = post_expense(
        test_client,
        date="2024-01-06",
        narration="intra",
        amount="40",
        payer="a",
        payee="b"
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert Decimal(data["amount"]) == 0
    assert Decimal(data["breakdown"]["A"]) == Decimal("-40")
    assert Decimal(data["breakdown"]["B"]) == Decimal("40")


def test_amount_mismatch_is_rejected(test_client):
    response = post_expense(
        test_client,
        date="2024-01-05",
        narration="groceries",
        amount="100",
        contributions=[{"user": "a", "amount": "50"}, {"user": "b", "amount": "49.99"}]
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"]["error"] == "AmountMismatch"
    assert test_client.get("/api/v1/expenses/").json() == []


def test_unknown_user_is_rejected(test_client):
    response = post_expense(
        test_client,
        date="2024-01-05",
        narration="groceries",
        amount="10",
        contributions=[{"user": "zed"}]
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == {"error": "UnknownUser", "message": "ZED: user not found."}


def test_last_and_undo(test_client):
    assert test_client.get("/api/v1/expenses/last").json() is None

    post_expense(test_client, date="d1", narration="rent", amount="10", contributions=[{"user": "b"}])
    post_expense(test_client, date="d2", narration="rent", amount="20", contributions=[{"user": "c"}])

    assert test_client.get("/api/v1/expenses/last").json()["date"] == "d2"

    response = test_client.post("/api/v1/expenses/undo")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["undone"]["date"] == "d2"

    history = test_client.get("/api/v1/expenses/").json()
    assert [e["date"] for e in history] == ["d1"]


def test_undo_empty_history(test_client):
    response = test_client.post("/api/v1/expenses/undo")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"undone": None}


def test_export_download(test_client):
    post_expense(test_client, date="d1", narration="rent", amount="10", contributions=[{"user": "b"}])

    compact = test_client.get("/api/v1/expenses/export")
    pretty = test_client.get("/api/v1/expenses/export", params={"pretty": True})

    assert compact.status_code == status.HTTP_200_OK
    assert 'filename="rx.json"' in compact.headers["content-disposition"]
    assert compact.json() == pretty.json()
    assert "\n\t" in pretty.text
    assert compact.json()[0]["narration"] == "rent"


def test_read_totals_and_ratios(test_client):
    post_expense(test_client, date="d1", narration="rent", amount="10", contributions=[{"user": "b"}])

    totals = test_client.get("/api/v1/ledger/totals").json()["totals"]
    ratios = test_client.get("/api/v1/ledger/ratios").json()["ratios"]

    assert [(row["user"], row["display"]) for row in totals] == [("A", "0.00"), ("B", "10.00"), ("C", "0.00")]
    assert {user: Decimal(value) for user, value in ratios.items()} == {
        "A": Decimal("0.5"), "B": Decimal("0.3"), "C": Decimal("0.2")
    }
