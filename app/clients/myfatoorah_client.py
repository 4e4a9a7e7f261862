"""
MyFatoorah API Client

Async client for the hosted payment gateway using Bearer Token auth.

Connection Details:
    - Base URL: https://api.myfatoorah.com (sandbox: https://apitest.myfatoorah.com)
    - Auth: Bearer Token (API key)

Endpoints:
    - POST /v2/InitiatePayment - Payment methods available for an amount
    - POST /v2/ExecutePayment - Create invoice and hosted payment URL
    - POST /v2/GetPaymentStatus - Authoritative invoice status

Every response is wrapped as {"IsSuccess", "Message", "ValidationErrors", "Data"}.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

import httpx

from app.config.settings import get_settings
from app.core.domain import GatewayException
from app.domains.ecommerce.application.dto import (
    GatewayInvoice,
    GatewayPaymentMethod,
    GatewayPaymentStatus,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "myfatoorah"


class PaymentGatewayError(GatewayException):
    """Base exception for gateway errors."""

    def __init__(self, message: str, code: str = "GATEWAY_ERROR", original_error: Exception | None = None):
        super().__init__(message, code=code, service=SERVICE_NAME, original_error=original_error)


class PaymentGatewayAuthError(PaymentGatewayError):
    """Authentication error (invalid API key)."""

    def __init__(self, message: str = "Invalid payment gateway API key"):
        super().__init__(message, code="GATEWAY_AUTH_ERROR")


class PaymentGatewayConnectionError(PaymentGatewayError):
    """Network connectivity issues or timeout."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message, code="GATEWAY_CONNECTION_ERROR", original_error=original_error)


class PaymentGatewayValidationError(PaymentGatewayError):
    """Request rejected by the gateway."""

    def __init__(self, message: str):
        super().__init__(message, code="GATEWAY_VALIDATION_ERROR")


class MyFatoorahClient:
    """
    Async HTTP client for the MyFatoorah API.

    One instance is shared by the application; the underlying
    httpx.AsyncClient is created lazily and closed on shutdown.

    Example:
        client = MyFatoorahClient()
        methods = await client.list_payment_methods(Decimal("10.000"), "KWD")
        invoice = await client.execute_payment(
            method_id=methods[0].method_id,
            amount=Decimal("10.000"),
            currency="KWD",
            customer_name="Sara",
            customer_email=None,
            customer_mobile="96550000000",
            customer_reference="ORD-20250101-A1B2C3",
        )
        # invoice.payment_url is the hosted payment page
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize client with settings, overridable per argument."""
        settings = get_settings()

        self._base_url = (base_url or settings.PAYMENT_GATEWAY_BASE_URL).rstrip("/")
        self._api_key = api_key if api_key is not None else settings.PAYMENT_GATEWAY_API_KEY
        self._timeout = timeout if timeout is not None else settings.PAYMENT_GATEWAY_TIMEOUT
        self._callback_url = settings.PAYMENT_CALLBACK_URL
        self._error_url = settings.PAYMENT_ERROR_URL
        self._language = settings.PAYMENT_LANGUAGE
        self._client = http_client

        if not self._api_key:
            logger.error("PAYMENT_GATEWAY_API_KEY not configured")

    async def __aenter__(self) -> MyFatoorahClient:
        self._get_client()
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "Content-Type": "application/json",
                },
                timeout=self._timeout,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        """
        POST to the gateway and unwrap Data.

        Raises:
            PaymentGatewayAuthError: 401
            PaymentGatewayValidationError: 400 or IsSuccess=false
            PaymentGatewayConnectionError: Connect error, dropped connection or timeout
            PaymentGatewayError: Any other HTTP error or an unreadable body
        """
        try:
            response = await self._get_client().post(path, json=payload)
        except httpx.ConnectError as e:
            logger.error(f"[PAYMENT] Gateway connection error on {path}: {e}")
            raise PaymentGatewayConnectionError(f"Could not connect to payment gateway: {e}", e) from e
        except httpx.TimeoutException as e:
            logger.error(f"[PAYMENT] Gateway timeout on {path}: {e}")
            raise PaymentGatewayConnectionError(f"Payment gateway request timed out: {e}", e) from e
        except httpx.TransportError as e:
            logger.error(f"[PAYMENT] Gateway transport error on {path}: {e}")
            raise PaymentGatewayConnectionError(f"Payment gateway connection failed: {e}", e) from e

        if response.status_code == 401:
            raise PaymentGatewayAuthError("Invalid or expired payment gateway API key")

        if response.status_code == 400:
            raise PaymentGatewayValidationError(self._error_message(response))

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"[PAYMENT] Gateway HTTP {response.status_code} on {path}")
            raise PaymentGatewayError(f"Payment gateway returned HTTP {response.status_code}", original_error=e) from e

        try:
            body = response.json()
        except ValueError as e:
            logger.error(f"[PAYMENT] Gateway returned a non-JSON body on {path}")
            raise PaymentGatewayError("Payment gateway returned an unreadable response", original_error=e) from e
        if not isinstance(body, dict):
            raise PaymentGatewayError("Payment gateway returned an unexpected response")

        if not body.get("IsSuccess", False):
            raise PaymentGatewayValidationError(self._error_message(response))

        return body.get("Data") or {}

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or "Payment gateway rejected the request"
        if not isinstance(body, dict):
            return "Payment gateway rejected the request"

        errors = body.get("ValidationErrors") or []
        if errors:
            return "; ".join(f"{error.get('Name')}: {error.get('Error')}" for error in errors)
        return body.get("Message") or "Payment gateway rejected the request"

    async def list_payment_methods(self, amount: Decimal, currency: str) -> list[GatewayPaymentMethod]:
        """
        Payment methods available for an amount (InitiatePayment).

        Args:
            amount: Invoice amount
            currency: ISO currency code

        Returns:
            List of available methods with service charges
        """
        logger.info(f"[PAYMENT] Listing gateway methods for {amount} {currency}")

        data = await self._post("/v2/InitiatePayment", {"InvoiceAmount": float(amount), "CurrencyIso": currency})

        methods = []
        for item in data.get("PaymentMethods") or []:
            methods.append(
                GatewayPaymentMethod(
                    method_id=item.get("PaymentMethodId"),
                    code=str(item.get("PaymentMethodCode") or "").lower(),
                    name=item.get("PaymentMethodEn") or "",
                    is_direct_payment=bool(item.get("IsDirectPayment", False)),
                    service_charge=Decimal(str(item.get("ServiceCharge") or 0)),
                    total_amount=Decimal(str(item["TotalAmount"])) if item.get("TotalAmount") is not None else None,
                    currency=item.get("CurrencyIso"),
                    image_url=item.get("ImageUrl"),
                )
            )
        return methods

    async def execute_payment(
        self,
        *,
        method_id: int,
        amount: Decimal,
        currency: str,
        customer_name: str,
        customer_email: str | None,
        customer_mobile: str | None,
        customer_reference: str,
        user_defined_field: str | None = None,
    ) -> GatewayInvoice:
        """
        Create an invoice and get the hosted payment URL (ExecutePayment).

        Returns:
            GatewayInvoice with invoice_id and payment_url

        Raises:
            PaymentGatewayValidationError: Invalid request parameters
        """
        if amount <= 0:
            raise PaymentGatewayValidationError("Amount must be greater than zero")

        payload: dict[str, Any] = {
            "PaymentMethodId": method_id,
            "InvoiceValue": float(amount),
            "CustomerName": customer_name,
            "DisplayCurrencyIso": currency,
            "CallBackUrl": self._callback_url,
            "ErrorUrl": self._error_url,
            "Language": self._language,
            "CustomerReference": customer_reference,
        }
        if customer_email:
            payload["CustomerEmail"] = customer_email
        if customer_mobile:
            payload["CustomerMobile"] = customer_mobile
        if user_defined_field:
            payload["UserDefinedField"] = user_defined_field

        logger.info(f"[PAYMENT] Executing payment: amount={amount} {currency}, ref={customer_reference}")

        data = await self._post("/v2/ExecutePayment", payload)

        invoice_id = data.get("InvoiceId")
        if invoice_id is None:
            raise PaymentGatewayError("Payment gateway did not return an invoice id")

        logger.info(f"[PAYMENT] Invoice created: {invoice_id}")
        return GatewayInvoice(invoice_id=str(invoice_id), payment_url=data.get("PaymentURL"))

    async def get_payment_status(self, key: str, key_type: str = "InvoiceId") -> GatewayPaymentStatus:
        """
        Authoritative status of an invoice (GetPaymentStatus).

        Args:
            key: Invoice id or gateway payment id
            key_type: "InvoiceId" or "PaymentId"

        Returns:
            GatewayPaymentStatus with InvoiceStatus, value and currency
        """
        logger.info(f"[PAYMENT] Fetching gateway status for {key_type}={key}")

        data = await self._post("/v2/GetPaymentStatus", {"Key": key, "KeyType": key_type})

        transactions = data.get("InvoiceTransactions") or []
        last_transaction = transactions[-1] if transactions else {}
        currency = data.get("CurrencyIso") or last_transaction.get("PaidCurrency") or ""

        status = GatewayPaymentStatus(
            invoice_id=str(data.get("InvoiceId", key)),
            status=str(data.get("InvoiceStatus") or "Pending"),
            amount=Decimal(str(data.get("InvoiceValue") or 0)),
            currency=str(currency).upper(),
            gateway_payment_id=last_transaction.get("PaymentId"),
            customer_reference=data.get("CustomerReference"),
            raw=data,
        )
        logger.info(f"[PAYMENT] Invoice {status.invoice_id} status: {status.status}")
        return status


__all__ = [
    "MyFatoorahClient",
    "PaymentGatewayError",
    "PaymentGatewayAuthError",
    "PaymentGatewayConnectionError",
    "PaymentGatewayValidationError",
]
