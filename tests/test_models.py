from homefin.models import (
    AutoPayment,
    Budget,
    CashFlowItem,
    Expenditure,
    Receipt,
    Transfer,
    UserProfile,
    Wallet,
    WalletBalance,
)


def test_receipt_from_api_converts_amount_and_comment() -> None:
    receipt = Receipt.from_api(
        {
            "id": 5,
            "date": "2024-02-01T00:00:00Z",
            "amount": "99.90",
            "comment": "Bonus",
            "wallet": "w1",
            "cash_flow_item": "c1",
        }
    )

    assert receipt.id == "5"
    assert receipt.amount == 99.9
    assert receipt.description == "Bonus"
    assert receipt.wallet == "w1"


def test_expenditure_to_api_formats_amount_and_date() -> None:
    expenditure = Expenditure(
        date="2024-02-01",
        amount=12.5,
        wallet="w1",
        cash_flow_item="c1",
        include_in_budget=True,
    )

    assert expenditure.to_api() == {
        "date": "2024-02-01T00:00:00Z",
        "amount": "12.50",
        "wallet": "w1",
        "cash_flow_item": "c1",
        "include_in_budget": True,
    }


def test_transfer_uses_wire_wallet_names() -> None:
    transfer = Transfer.from_api(
        {"id": "t1", "amount": "10", "wallet_out": "a", "wallet_in": "b"}
    )
    legacy = Transfer.from_api(
        {"id": "t2", "amount": "10", "wallet_from": "a", "wallet_to": "b"}
    )

    assert (transfer.wallet_from, transfer.wallet_to) == ("a", "b")
    assert (legacy.wallet_from, legacy.wallet_to) == ("a", "b")
    payload = transfer.to_api()
    assert payload["wallet_out"] == "a"
    assert payload["wallet_in"] == "b"
    assert "wallet_from" not in payload


def test_budget_type_defaults_to_expense() -> None:
    assert Budget.from_api({"type": "INCOME"}).type == "income"
    assert Budget.from_api({"type": "something"}).type == "expense"
    assert Budget.from_api({}).type == "expense"


def test_auto_payment_sends_only_type_specific_field() -> None:
    transfer = AutoPayment(
        amount=10.0,
        is_transfer=True,
        wallet_from="a",
        wallet_to="b",
        cash_flow_item="c",
        period_days=30,
        next_date="2024-05-01",
    )
    expense = AutoPayment(
        amount=10.0,
        is_transfer=False,
        wallet_from="a",
        wallet_to="b",
        cash_flow_item="c",
        period_days=7,
        next_date="2024-05-01",
    )

    assert "cash_flow_item" not in transfer.to_api()
    assert transfer.to_api()["wallet_to"] == "b"
    assert "wallet_to" not in expense.to_api()
    assert expense.to_api()["next_date"] == "2024-05-01T00:00:00Z"


def test_wallet_payload_is_limited() -> None:
    wallet = Wallet(id="w1", name="Cash", code="C", hidden=True, created_at="x")

    assert wallet.to_api() == {"code": "C", "name": "Cash", "hidden": True}


def test_wallet_balance_accepts_strings_and_numbers() -> None:
    assert WalletBalance.from_api("w", {"balance": "15.25"}).balance == 15.25
    assert WalletBalance.from_api("w", {"balance": -3}).balance == -3.0
    assert WalletBalance.from_api("w", {"balance": None}).balance == 0.0
    assert WalletBalance.from_api("w", []).balance == 0.0


def test_cash_flow_item_defaults() -> None:
    item = CashFlowItem.from_api({"id": "c1"})

    assert item.name is None
    assert item.include_in_budget is None
    assert item.to_api() == {}


def test_profile_display_name() -> None:
    assert UserProfile(id="1", username="jdoe").display_name == "jdoe"
    named = UserProfile(id="1", username="jdoe", first_name="Jane", last_name="Doe")
    assert named.display_name == "Jane Doe"
