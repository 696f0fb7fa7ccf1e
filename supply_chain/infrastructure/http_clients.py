import math
import httpx
import logging
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from supply_chain.domain.models import PickupItem, PickupResult
from supply_chain.domain.exceptions import (
    BankServiceError, InsufficientFundsError, LogisticsServiceError
)
from supply_chain.application.interfaces import BankService, LogisticsService

logger = logging.getLogger(__name__)

TREASURY_ACCOUNT = "TREASURY_ACCOUNT"
TREASURY_BANK_NAME = "thoh"


class HTTPBankClient(BankService):
    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        safety_balance: int = 2000,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._safety_balance = safety_balance
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self._timeout)

    async def make_payment(self, to_account: str, to_bank_name: str, amount: int, description: str) -> bool:
        if amount <= 0:
            amount = 1
        if to_account == TREASURY_ACCOUNT:
            to_bank_name = TREASURY_BANK_NAME
            to_account = ""

        try:
            async with self._client() as client:
                response = await client.post(
                    f"{self._base_url}/transaction",
                    json={
                        "to_account_number": to_account,
                        "to_bank_name": to_bank_name,
                        "amount": amount,
                        "description": description
                    }
                )
        except httpx.TimeoutException as e:
            logger.error(f"Bank service timeout during payment to {to_account}: {e}")
            raise BankServiceError(f"Bank service timeout during payment to {to_account}") from e
        except httpx.RequestError as e:
            logger.error(f"Bank service connection error: {e}")
            raise BankServiceError(f"Bank service unavailable for payment to {to_account}") from e

        if response.status_code == 400 and "insufficient" in response.text.lower():
            raise InsufficientFundsError(amount)
        if not response.is_success:
            raise BankServiceError(f"Payment failed: {response.status_code} - {response.text}")

        try:
            body = response.json()
        except ValueError:
            logger.warning(f"Bank returned a non-JSON payment response: {response.text}")
            return False
        return isinstance(body, dict) and body.get("success") is True

    async def get_balance(self) -> int:
        try:
            async with self._client() as client:
                response = await client.get(f"{self._base_url}/account/me/balance")
        except httpx.RequestError as e:
            raise BankServiceError(f"Bank service unavailable for balance check: {e}") from e

        if not response.is_success:
            raise BankServiceError(f"Balance retrieval failed: {response.status_code} - {response.text}")
        return int(response.json().get("balance") or 0)

    async def has_sufficient_balance(self, amount: int) -> bool:
        balance = await self.get_balance()
        return balance - self._safety_balance >= amount


class HTTPLogisticsClient(LogisticsService):
    def __init__(self, base_url: str, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def request_pickup(
        self,
        origin_company: str,
        destination_company: str,
        external_order_id: str,
        items: List[PickupItem]
    ) -> PickupResult:
        payload = {
            "originCompany": origin_company,
            "destinationCompany": destination_company,
            "originalExternalOrderId": external_order_id,
            "items": [
                {"name": item.name, "quantity": item.quantity, "measurementType": item.measurement_type}
                for item in items
            ]
        }
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                response = await client.post(f"{self._base_url}/pickup-request", json=payload)
        except httpx.TimeoutException as e:
            raise LogisticsServiceError("Bulk logistics service timeout") from e
        except httpx.RequestError as e:
            logger.error(f"Bulk logistics connection error: {e}")
            raise LogisticsServiceError("Bulk logistics service unavailable") from e

        if not response.is_success:
            raise LogisticsServiceError(f"Pickup request failed: {response.status_code} - {response.text}")

        try:
            data = response.json()
        except ValueError as e:
            raise LogisticsServiceError("Invalid response format from bulk logistics service") from e
        if not isinstance(data, dict):
            raise LogisticsServiceError("Invalid response format from bulk logistics service")

        # Field names are matched case-insensitively
        data = {str(key).lower(): value for key, value in data.items()}
        pickup_request_id = data.get("pickuprequestid")
        if pickup_request_id is None:
            raise LogisticsServiceError("Invalid response from bulk logistics service - missing pickup request ID")

        try:
            cost = math.ceil(Decimal(str(data.get("cost", "0"))))
        except (InvalidOperation, ValueError, OverflowError) as e:
            raise LogisticsServiceError(f"Invalid shipping cost: {data.get('cost')}") from e

        return PickupResult(
            shipment_id=str(pickup_request_id),
            bank_account=data.get("accountnumber") or "",
            cost=cost
        )
