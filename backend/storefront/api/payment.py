"""
Payment API Endpoints
Razorpay checkout, verification, refunds and webhooks

Author: Taksha Engineering
Date: 2025-10-17
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from storefront.core.auth import TokenUser, get_current_user
from storefront.core.exceptions import StoreError, to_http_exception
from storefront.domain.payment import CreatePaymentOrder, PaymentFailure, RefundCreate, VerifyPayment
from storefront.services.payment_service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/create-order")
async def create_payment_order(
    data: CreatePaymentOrder,
    current_user: TokenUser = Depends(get_current_user)
):
    """
    Create a pending order and its Razorpay order

    Stock is reserved until the payment is verified or fails.
    """
    try:
        checkout = PaymentService().create_order(current_user.id, data)
        return {
            "status": "success",
            "message": "Order created successfully",
            "data": checkout
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Create order error for user {current_user.id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error creating order: {str(e)}")


@router.post("/verify-payment")
async def verify_payment(data: VerifyPayment, current_user: TokenUser = Depends(get_current_user)):
    try:
        order = PaymentService().verify_payment(current_user, data)
        return {
            "status": "success",
            "message": "Payment verified successfully",
            "data": order
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error verifying payment: {str(e)}")


@router.post("/payment-failed")
async def payment_failed(data: PaymentFailure, current_user: TokenUser = Depends(get_current_user)):
    try:
        order = PaymentService().record_failure(current_user, data)
        return {
            "status": "success",
            "message": "Payment failure recorded",
            "data": order
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error recording payment failure: {str(e)}")


@router.get("/payment/{payment_id}")
async def get_payment(payment_id: str, current_user: TokenUser = Depends(get_current_user)):
    try:
        return {
            "status": "success",
            "data": PaymentService().get_payment(current_user, payment_id)
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching payment: {str(e)}")


@router.post("/refund")
async def create_refund(data: RefundCreate, current_user: TokenUser = Depends(get_current_user)):
    try:
        result = PaymentService().refund(current_user, data)
        return {
            "status": "success",
            "message": "Refund initiated successfully",
            "data": result
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error processing refund: {str(e)}")


@router.get("/refund/{refund_id}")
async def get_refund(refund_id: str, current_user: TokenUser = Depends(get_current_user)):
    try:
        return {
            "status": "success",
            "data": PaymentService().get_refund(current_user, refund_id)
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching refund: {str(e)}")


@router.post("/webhook")
async def razorpay_webhook(
    request: Request,
    x_razorpay_signature: Optional[str] = Header(None)
):
    """
    Razorpay webhook receiver

    The signature covers the raw body, so it is read before any parsing.
    """
    try:
        body = await request.body()
        result = PaymentService().handle_webhook(body, x_razorpay_signature)
        return {"status": "success", "data": result}

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Webhook processing error: {e}")
        raise HTTPException(status_code=500, detail=f"Error processing webhook: {str(e)}")
