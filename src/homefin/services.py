# HomeFin - Personal & Family Finance Dashboard client
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
High-level services for the HomeFin backend resources.

This module sits between:
- the low-level HTTP client in ``api.py``, and
- user-facing layers such as the CLI and the report loaders.

Each backend resource gets one service exposing typed CRUD operations:

- ``list(**filters)``     GET    /{resource}/
- ``get(id)``             GET    /{resource}/{id}/
- ``create(obj)``         POST   /{resource}/
- ``update(id, obj)``     PUT    /{resource}/{id}/
- ``delete(id)``          DELETE /{resource}/{id}/

Records are decoded into the dataclasses of ``models.py`` and encoded with
their ``to_api()`` method. Records are validated client-side (see
``validation.py``) before being sent.

Resource-specific behaviour
---------------------------
- Wallets and projects: the backend's create/update responses are partial,
  so the full object is fetched again after each write. Wallets also expose
  their server-computed balance.
- Cash-flow items: the hierarchy endpoint is turned into a forest by
  ``hierarchy.build_hierarchy``. Deleting an item still referenced by
  operations is refused by the backend; the refusal is reported as
  ``CategoryInUseError``.
- Expenditures, budgets and auto-payments accept a query filter on
  ``include_in_budget``, ``type`` and ``is_transfer`` respectively.

Query parameters set to None are not sent.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from .api import ApiClient
from .errors import ApiError, AuthenticationError, CategoryInUseError
from .hierarchy import DEFAULT_UNTITLED_LABEL, CashFlowItemNode, build_hierarchy
from .models import (
    AutoPayment,
    Budget,
    BudgetType,
    CashFlowItem,
    Expenditure,
    Project,
    Receipt,
    Transfer,
    Wallet,
    WalletBalance,
)
from .validation import (
    validate_auto_payment,
    validate_budget,
    validate_cash_flow_item,
    validate_expenditure,
    validate_project,
    validate_receipt,
    validate_transfer,
    validate_wallet,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _query(params: Mapping[str, Any]) -> Optional[dict[str, Any]]:
    """Drop unset query parameters; booleans are sent as true/false."""
    query = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        query[key] = value
    return query or None


def _records(payload: Any) -> list[Mapping[str, Any]]:
    """Return the records of a listing (plain list or paginated ``results``)."""
    if isinstance(payload, Mapping):
        payload = payload.get("results")
    if not isinstance(payload, list):
        return []
    return [record for record in payload if isinstance(record, Mapping)]


class ResourceService(Generic[T]):
    """
    CRUD operations on one REST resource.

    Subclasses set ``path`` (e.g. ``"/wallets/"``), ``model`` (a dataclass
    with ``from_api``/``to_api``) and optionally ``validator``.
    """

    path: str = ""
    model: Any = None
    validator: Optional[Callable[[Any], None]] = None

    def __init__(self, client: ApiClient):
        self.client = client

    def _item_path(self, item_id: str) -> str:
        return f"{self.path}{item_id}/"

    def _validate(self, obj: T) -> None:
        if self.validator is not None:
            self.validator(obj)

    async def list(self, **filters: Any) -> list[T]:
        payload = await self.client.get(self.path, params=_query(filters))
        return [self.model.from_api(record) for record in _records(payload)]

    async def get(self, item_id: str) -> T:
        data = await self.client.get(self._item_path(item_id))
        return self.model.from_api(data or {})

    async def create(self, obj: T) -> T:
        self._validate(obj)
        data = await self.client.post(self.path, json_body=obj.to_api())
        return self.model.from_api(data or {})

    async def update(self, item_id: str, obj: T) -> T:
        self._validate(obj)
        data = await self.client.put(self._item_path(item_id), json_body=obj.to_api())
        return self.model.from_api(data or {})

    async def delete(self, item_id: str) -> None:
        await self.client.delete(self._item_path(item_id))


class _RefetchingService(ResourceService[T]):
    """Service whose write responses are incomplete: re-read after writing."""

    async def create(self, obj: T) -> T:
        self._validate(obj)
        data = await self.client.post(self.path, json_body=obj.to_api())
        created_id = data.get("id") if isinstance(data, Mapping) else None
        if not created_id:
            return self.model.from_api(data or {})
        return await self.get(str(created_id))

    async def update(self, item_id: str, obj: T) -> T:
        self._validate(obj)
        await self.client.put(self._item_path(item_id), json_body=obj.to_api())
        return await self.get(item_id)


class WalletService(_RefetchingService[Wallet]):
    path = "/wallets/"
    model = Wallet
    validator = staticmethod(validate_wallet)

    async def get_balance(self, wallet_id: str) -> WalletBalance:
        """Fetch the server-computed balance of one wallet."""
        data = await self.client.get(f"{self.path}{wallet_id}/balance/")
        return WalletBalance.from_api(wallet_id, data)


class ProjectService(_RefetchingService[Project]):
    path = "/projects/"
    model = Project
    validator = staticmethod(validate_project)


class CashFlowItemService(ResourceService[CashFlowItem]):
    path = "/cash-flow-items/"
    model = CashFlowItem
    validator = staticmethod(validate_cash_flow_item)

    async def get_hierarchy(
        self, untitled_label: str = DEFAULT_UNTITLED_LABEL
    ) -> list[CashFlowItemNode]:
        """Fetch the category hierarchy and return it as a forest."""
        payload = await self.client.get(f"{self.path}hierarchy/")
        return build_hierarchy(payload, untitled_label=untitled_label)

    async def delete(self, item_id: str) -> None:
        """
        Delete a cash-flow item.

        Raises
        ------
        CategoryInUseError
            If the backend refuses the deletion (typically because receipts
            or expenditures still reference the item).
        """
        try:
            await self.client.delete(self._item_path(item_id))
        except AuthenticationError:
            raise
        except ApiError as exc:
            if exc.status_code in (0, 404):
                raise
            logger.info("Deletion of cash-flow item %s refused: %s", item_id, exc)
            raise CategoryInUseError(exc.status_code, item_id) from exc


class ReceiptService(ResourceService[Receipt]):
    path = "/receipts/"
    model = Receipt
    validator = staticmethod(validate_receipt)


class ExpenditureService(ResourceService[Expenditure]):
    path = "/expenditures/"
    model = Expenditure
    validator = staticmethod(validate_expenditure)

    async def list(self, include_in_budget: Optional[bool] = None) -> list[Expenditure]:
        return await super().list(include_in_budget=include_in_budget)


class TransferService(ResourceService[Transfer]):
    path = "/transfers/"
    model = Transfer
    validator = staticmethod(validate_transfer)

    async def create(
        self, obj: Transfer, source_balance: Optional[float] = None
    ) -> Transfer:
        """
        Create a transfer.

        When ``source_balance`` is given, a transfer exceeding it is
        rejected before anything is sent.
        """
        validate_transfer(obj, source_balance=source_balance)
        data = await self.client.post(self.path, json_body=obj.to_api())
        return self.model.from_api(data or {})


class BudgetService(ResourceService[Budget]):
    path = "/budgets/"
    model = Budget
    validator = staticmethod(validate_budget)

    async def list(self, type: Optional[BudgetType] = None) -> list[Budget]:
        return await super().list(type=type)


class AutoPaymentService(ResourceService[AutoPayment]):
    path = "/auto-payments/"
    model = AutoPayment
    validator = staticmethod(validate_auto_payment)

    async def list(self, is_transfer: Optional[bool] = None) -> list[AutoPayment]:
        return await super().list(is_transfer=is_transfer)


@dataclass(frozen=True)
class Services:
    """All resource services bound to one ApiClient."""

    wallets: WalletService
    projects: ProjectService
    cash_flow_items: CashFlowItemService
    receipts: ReceiptService
    expenditures: ExpenditureService
    transfers: TransferService
    budgets: BudgetService
    auto_payments: AutoPaymentService

    @classmethod
    def for_client(cls, client: ApiClient) -> "Services":
        return cls(
            wallets=WalletService(client),
            projects=ProjectService(client),
            cash_flow_items=CashFlowItemService(client),
            receipts=ReceiptService(client),
            expenditures=ExpenditureService(client),
            transfers=TransferService(client),
            budgets=BudgetService(client),
            auto_payments=AutoPaymentService(client),
        )
