import pytest

from homefin.errors import ApiError, CategoryInUseError, ValidationError
from homefin.models import Receipt, Transfer, Wallet


async def test_list_decodes_records(backend, services) -> None:
    backend.add(
        "GET",
        "/receipts/",
        json_body=[
            {"id": "r1", "date": "2024-01-02", "amount": "10.00", "wallet": "w1"},
            {"id": "r2", "date": "2024-01-03", "amount": "5.5", "wallet": "w1"},
        ],
    )

    receipts = await services.receipts.list()

    assert [r.id for r in receipts] == ["r1", "r2"]
    assert receipts[1].amount == 5.5


async def test_list_accepts_paginated_results(backend, services) -> None:
    backend.add(
        "GET",
        "/projects/",
        json_body={"count": 1, "results": [{"id": "p1", "name": "Home"}]},
    )

    projects = await services.projects.list()

    assert [p.name for p in projects] == ["Home"]


async def test_query_filters_skip_unset_values(backend, services) -> None:
    backend.add("GET", "/expenditures/", json_body=[])
    backend.add("GET", "/budgets/", json_body=[])
    backend.add("GET", "/auto-payments/", json_body=[])

    await services.expenditures.list()
    await services.expenditures.list(include_in_budget=True)
    await services.budgets.list(type="income")
    await services.auto_payments.list(is_transfer=False)

    first, second = backend.calls("GET", "/expenditures/")
    assert dict(first.url.params) == {}
    assert dict(second.url.params) == {"include_in_budget": "true"}
    (budgets,) = backend.calls("GET", "/budgets/")
    (auto_payments,) = backend.calls("GET", "/auto-payments/")
    assert dict(budgets.url.params) == {"type": "income"}
    assert dict(auto_payments.url.params) == {"is_transfer": "false"}


async def test_wallet_create_sends_limited_payload_and_refetches(
    backend, services
) -> None:
    backend.add("POST", "/wallets/", status=201, json_body={"id": "w9", "name": "Cash"})
    backend.add(
        "GET",
        "/wallets/w9/",
        json_body={
            "id": "w9",
            "name": "Cash",
            "code": "CSH",
            "created_at": "2024-01-01",
        },
    )

    wallet = await services.wallets.create(Wallet(id="", name="Cash", code="CSH"))

    assert wallet.created_at == "2024-01-01"
    sent = backend.body(backend.calls("POST", "/wallets/")[0])
    assert sent == {"code": "CSH", "name": "Cash", "hidden": False}


async def test_wallet_update_refetches(backend, services) -> None:
    backend.add("PUT", "/wallets/w1/", json_body={"name": "Bank"})
    backend.add(
        "GET", "/wallets/w1/", json_body={"id": "w1", "name": "Bank", "hidden": True}
    )

    wallet = await services.wallets.update(
        "w1", Wallet(id="w1", name="Bank", hidden=True)
    )

    assert wallet.id == "w1"
    assert wallet.hidden is True


async def test_wallet_balance(backend, services) -> None:
    backend.add("GET", "/wallets/w1/balance/", json_body={"balance": "120.40"})

    balance = await services.wallets.get_balance("w1")

    assert balance.wallet == "w1"
    assert balance.balance == pytest.approx(120.4)


async def test_invalid_receipt_is_not_sent(backend, services) -> None:
    with pytest.raises(ValidationError) as excinfo:
        await services.receipts.create(Receipt(date="2024-01-01", amount=10.0))

    assert excinfo.value.fields == ["wallet", "cash_flow_item"]
    assert backend.requests == []


async def test_transfer_exceeding_balance_is_rejected(backend, services) -> None:
    transfer = Transfer(date="2024-01-01", amount=500.0, wallet_from="a", wallet_to="b")

    with pytest.raises(ValidationError):
        await services.transfers.create(transfer, source_balance=100.0)

    assert backend.requests == []


async def test_transfer_create_uses_wire_names(backend, services) -> None:
    backend.add(
        "POST",
        "/transfers/",
        status=201,
        json_body={"id": "t1", "amount": "50.00", "wallet_out": "a", "wallet_in": "b"},
    )

    created = await services.transfers.create(
        Transfer(date="2024-01-01", amount=50.0, wallet_from="a", wallet_to="b")
    )

    assert created.id == "t1"
    sent = backend.body(backend.calls("POST", "/transfers/")[0])
    assert sent["wallet_out"] == "a"
    assert sent["wallet_in"] == "b"
    assert sent["amount"] == "50.00"


async def test_category_hierarchy(backend, services) -> None:
    backend.add(
        "GET",
        "/cash-flow-items/hierarchy/",
        json_body={
            "items": [
                {"id": "1", "name": "Food"},
                {"id": "2", "name": "Bread", "parent": "1"},
            ]
        },
    )

    forest = await services.cash_flow_items.get_hierarchy()

    assert [root.id for root in forest] == ["1"]
    assert [child.id for child in forest[0].children] == ["2"]


async def test_category_delete_refused_raises_category_in_use(
    backend, services
) -> None:
    backend.add(
        "DELETE",
        "/cash-flow-items/c1/",
        status=400,
        json_body={"detail": "ProtectedError"},
    )

    with pytest.raises(CategoryInUseError) as excinfo:
        await services.cash_flow_items.delete("c1")

    assert excinfo.value.item_id == "c1"
    assert "used by existing operations" in str(excinfo.value)


async def test_category_delete_not_found_is_plain_api_error(backend, services) -> None:
    with pytest.raises(ApiError) as excinfo:
        await services.cash_flow_items.delete("missing")

    assert not isinstance(excinfo.value, CategoryInUseError)
    assert excinfo.value.status_code == 404
