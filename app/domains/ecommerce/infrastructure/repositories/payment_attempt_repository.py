"""
Payment Attempt Repository Implementation

SQLAlchemy implementation of IPaymentAttemptRepository.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain import ConcurrencyException
from app.domains.ecommerce.application.ports import IPaymentAttemptRepository
from app.domains.ecommerce.domain.entities.payment_attempt import PaymentAttempt
from app.domains.ecommerce.domain.value_objects.order_status import PaymentAttemptStatus
from app.models.db.payments import PaymentAttempt as PaymentAttemptModel

logger = logging.getLogger(__name__)


class SQLAlchemyPaymentAttemptRepository(IPaymentAttemptRepository):
    """
    SQLAlchemy implementation of payment attempt repository.

    The unique indexes on invoice_reference and on the transition-causing
    attempt per order surface as ConcurrencyException.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, attempt: PaymentAttempt) -> PaymentAttempt:
        try:
            model = PaymentAttemptModel(
                payment_id=attempt.payment_id,
                invoice_reference=attempt.invoice_reference,
                gateway_payment_id=attempt.gateway_payment_id,
                order_id=attempt.order_id,
                payment_method_code=attempt.payment_method_code,
                amount=attempt.amount,
                currency=attempt.currency,
                gateway_status=attempt.gateway_status.value,
                redirect_url=attempt.redirect_url,
                customer_ip=attempt.customer_ip,
                user_agent=attempt.user_agent,
                verified_at=attempt.verified_at,
                caused_transition=attempt.caused_transition,
                created_at=attempt.created_at,
                updated_at=attempt.updated_at,
            )
            self.session.add(model)
            await self.session.flush()
            attempt.id = model.id
            return attempt
        except IntegrityError as e:
            logger.warning(f"[PAYMENT] Duplicate invoice reference {attempt.invoice_reference}: {e}")
            raise ConcurrencyException("PaymentAttempt") from e
        except Exception as e:
            logger.error(f"Error adding payment attempt {attempt.payment_id}: {e}")
            raise

    async def get_by_invoice_reference(self, invoice_reference: str, for_update: bool = False) -> PaymentAttempt | None:
        try:
            query = select(PaymentAttemptModel).where(PaymentAttemptModel.invoice_reference == invoice_reference)
            if for_update:
                query = query.with_for_update().execution_options(populate_existing=True)
            result = await self.session.execute(query)
            model = result.scalar_one_or_none()
            return self._to_entity(model) if model else None
        except Exception as e:
            logger.error(f"Error getting payment attempt for invoice {invoice_reference}: {e}")
            raise

    async def get_cash_on_delivery_attempt(self, order_id: int) -> PaymentAttempt | None:
        try:
            result = await self.session.execute(
                select(PaymentAttemptModel)
                .where(
                    PaymentAttemptModel.order_id == order_id,
                    PaymentAttemptModel.gateway_status == PaymentAttemptStatus.CASH_ON_DELIVERY.value,
                )
                .order_by(PaymentAttemptModel.id)
                .limit(1)
            )
            model = result.scalar_one_or_none()
            return self._to_entity(model) if model else None
        except Exception as e:
            logger.error(f"Error getting cash-on-delivery attempt for order {order_id}: {e}")
            raise

    async def list_by_order(self, order_id: int) -> list[PaymentAttempt]:
        try:
            result = await self.session.execute(
                select(PaymentAttemptModel)
                .where(PaymentAttemptModel.order_id == order_id)
                .order_by(PaymentAttemptModel.id)
            )
            return [self._to_entity(model) for model in result.scalars().all()]
        except Exception as e:
            logger.error(f"Error listing payment attempts for order {order_id}: {e}")
            raise

    async def save(self, attempt: PaymentAttempt) -> PaymentAttempt:
        try:
            model = await self.session.get(PaymentAttemptModel, attempt.id)
            if model is None:
                raise ValueError(f"Payment attempt {attempt.id} does not exist")

            model.gateway_status = attempt.gateway_status.value
            model.gateway_payment_id = attempt.gateway_payment_id
            model.verified_at = attempt.verified_at
            model.caused_transition = attempt.caused_transition
            await self.session.flush()
            return attempt
        except IntegrityError as e:
            logger.warning(f"[PAYMENT] Order {attempt.order_id} already paid by another attempt: {e}")
            raise ConcurrencyException("PaymentAttempt") from e
        except Exception as e:
            logger.error(f"Error saving payment attempt {attempt.payment_id}: {e}")
            raise

    @staticmethod
    def _to_entity(model: PaymentAttemptModel) -> PaymentAttempt:
        return PaymentAttempt(
            id=model.id,
            payment_id=model.payment_id,
            invoice_reference=model.invoice_reference,
            order_id=model.order_id,
            payment_method_code=model.payment_method_code,
            amount=model.amount,
            currency=model.currency,
            gateway_status=PaymentAttemptStatus(model.gateway_status),
            redirect_url=model.redirect_url,
            customer_ip=model.customer_ip,
            user_agent=model.user_agent,
            gateway_payment_id=model.gateway_payment_id,
            verified_at=model.verified_at,
            caused_transition=bool(model.caused_transition),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
