"""
Unit Tests for MyFatoorahClient

Requests are served by httpx.MockTransport, so no network is involved.
"""

import json
from decimal import Decimal

import httpx
import pytest

from app.clients.myfatoorah_client import (
    MyFatoorahClient,
    PaymentGatewayAuthError,
    PaymentGatewayConnectionError,
    PaymentGatewayError,
    PaymentGatewayValidationError,
)
from app.core.domain import GatewayException

BASE_URL = "https://apitest.myfatoorah.com"


def ok(data: dict) -> httpx.Response:
    return httpx.Response(200, json={"IsSuccess": True, "Message": "", "ValidationErrors": None, "Data": data})


def make_client(handler) -> tuple[MyFatoorahClient, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def recorder(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(recorder), base_url=BASE_URL)
    return MyFatoorahClient(base_url=BASE_URL, api_key="key", timeout=5, http_client=http_client), seen


class TestListPaymentMethods:
    async def test_parses_methods(self):
        client, seen = make_client(
            lambda request: ok(
                {
                    "PaymentMethods": [
                        {
                            "PaymentMethodId": 1,
                            "PaymentMethodCode": "KN",
                            "PaymentMethodEn": "KNET",
                            "IsDirectPayment": False,
                            "ServiceCharge": 0.1,
                            "TotalAmount": 10.1,
                            "CurrencyIso": "KWD",
                            "ImageUrl": "https://img/kn.png",
                        }
                    ]
                }
            )
        )

        methods = await client.list_payment_methods(Decimal("10.000"), "KWD")

        assert seen[0].url.path == "/v2/InitiatePayment"
        assert json.loads(seen[0].content) == {"InvoiceAmount": 10.0, "CurrencyIso": "KWD"}
        assert methods[0].method_id == 1
        assert methods[0].code == "kn"
        assert methods[0].service_charge == Decimal("0.1")
        assert methods[0].total_amount == Decimal("10.1")


class TestExecutePayment:
    async def test_returns_invoice(self):
        client, seen = make_client(lambda request: ok({"InvoiceId": 5001, "PaymentURL": "https://pay/5001"}))

        invoice = await client.execute_payment(
            method_id=1,
            amount=Decimal("20.000"),
            currency="KWD",
            customer_name="Sara",
            customer_email=None,
            customer_mobile="96550001234",
            customer_reference="ORD-20260315-ABC123",
            user_defined_field="7",
        )

        payload = json.loads(seen[0].content)
        assert invoice.invoice_id == "5001"
        assert invoice.payment_url == "https://pay/5001"
        assert payload["CustomerReference"] == "ORD-20260315-ABC123"
        assert payload["UserDefinedField"] == "7"
        assert "CustomerEmail" not in payload

    async def test_zero_amount_is_rejected_locally(self):
        client, seen = make_client(lambda request: ok({}))

        with pytest.raises(PaymentGatewayValidationError):
            await client.execute_payment(
                method_id=1,
                amount=Decimal("0"),
                currency="KWD",
                customer_name="Sara",
                customer_email=None,
                customer_mobile=None,
                customer_reference="ORD-1",
            )

        assert seen == []


class TestGetPaymentStatus:
    async def test_reads_last_transaction(self):
        client, seen = make_client(
            lambda request: ok(
                {
                    "InvoiceId": 5001,
                    "InvoiceStatus": "Paid",
                    "InvoiceValue": 20.0,
                    "CustomerReference": "ORD-20260315-ABC123",
                    "InvoiceTransactions": [
                        {"PaymentId": "P-1", "PaidCurrency": "KWD"},
                        {"PaymentId": "P-2", "PaidCurrency": "kwd"},
                    ],
                }
            )
        )

        status = await client.get_payment_status("5001")

        assert json.loads(seen[0].content) == {"Key": "5001", "KeyType": "InvoiceId"}
        assert status.is_paid
        assert status.amount == Decimal("20.0")
        assert status.currency == "KWD"
        assert status.gateway_payment_id == "P-2"


class TestErrorMapping:
    @pytest.mark.parametrize(
        "response,error",
        [
            (httpx.Response(401), PaymentGatewayAuthError),
            (
                httpx.Response(400, json={"ValidationErrors": [{"Name": "InvoiceValue", "Error": "Invalid"}]}),
                PaymentGatewayValidationError,
            ),
            (httpx.Response(200, json={"IsSuccess": False, "Message": "Bad key"}), PaymentGatewayValidationError),
            (httpx.Response(503), PaymentGatewayError),
            (httpx.Response(400, json=["bad"]), PaymentGatewayValidationError),
        ],
    )
    async def test_http_errors(self, response, error):
        client, _ = make_client(lambda request: response)

        with pytest.raises(error):
            await client.get_payment_status("5001")

    async def test_validation_message_lists_fields(self):
        client, _ = make_client(
            lambda request: httpx.Response(400, json={"ValidationErrors": [{"Name": "Key", "Error": "Required"}]})
        )

        with pytest.raises(PaymentGatewayValidationError) as exc_info:
            await client.get_payment_status("")

        assert exc_info.value.message == "Key: Required"

    async def test_connection_error(self):
        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        client, _ = make_client(refuse)

        with pytest.raises(PaymentGatewayConnectionError):
            await client.get_payment_status("5001")

    async def test_timeout(self):
        def slow(request):
            raise httpx.ReadTimeout("slow", request=request)

        client, _ = make_client(slow)

        with pytest.raises(PaymentGatewayConnectionError):
            await client.get_payment_status("5001")

    @pytest.mark.parametrize(
        "error",
        [httpx.ReadError, httpx.RemoteProtocolError, httpx.WriteError],
    )
    async def test_dropped_connection(self, error):
        def drop(request):
            raise error("connection dropped", request=request)

        client, _ = make_client(drop)

        with pytest.raises(PaymentGatewayConnectionError):
            await client.get_payment_status("5001")

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, text="<html>maintenance</html>"),
            httpx.Response(200, json=["not", "an", "object"]),
        ],
    )
    async def test_unreadable_body(self, response):
        client, _ = make_client(lambda request: response)

        with pytest.raises(PaymentGatewayError) as exc_info:
            await client.get_payment_status("5001")

        assert isinstance(exc_info.value, GatewayException)
        assert exc_info.value.code == "GATEWAY_ERROR"
