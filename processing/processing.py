import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse

from exceptions.gateway import GatewayUnavailableException
from exceptions.order import OrderNotFoundException, InvalidOrderStateException
from exceptions.payment import (
    PaymentNotCompletedException,
    InsufficientPaymentException,
    AddressMismatchException
)
from exceptions.validation import MalformedCallbackException
from models.payment import PaymentCallback
from services.order import OrderService
from web.dependencies import client_ip, generate_correlation_id, get_order_service

logger = logging.getLogger(__name__)

processing_router = APIRouter(tags=["payment-callback"])


@processing_router.get("/payment-callback/{order_id}")
async def payment_callback(
    order_id: str,
    request: Request,
    value_coin: str | None = None,
    coin: str | None = None,
    txid_in: str | None = None,
    txid_out: str | None = None,
    address_in: str | None = None,
    order_service: OrderService = Depends(get_order_service)
):
    """
    Payment callback called by the gateway once a deposit is detected.

    The query parameters are only hints: the order is finalized on the
    gateway's own status record (see CallbackVerifier).

    Returns:
        303: Redirect to the storefront success page (or 200 JSON when none is configured);
             a replayed callback for a verified order gets the identical answer
        400: Missing payment verification parameters
        402: Payment not completed or amount insufficient
        403: Deposit address does not match the registered one
        404: Order not found, expired, or payment never initiated
        500: Payment verification failed (gateway unreachable, safe to retry)
    """
    correlation_id = generate_correlation_id()
    source_ip = client_ip(request)
    logger.info(f"[{correlation_id}] 🔔 Payment callback for order {order_id} from {source_ip}")

    callback = PaymentCallback(
        value_coin=value_coin,
        coin=coin,
        txid_in=txid_in,
        txid_out=txid_out,
        address_in=address_in
    )

    try:
        result = await order_service.handle_callback(order_id, callback, client_ip=source_ip)
    except OrderNotFoundException:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    except InvalidOrderStateException as e:
        logger.warning(f"[{correlation_id}] Callback rejected, order {order_id} in state {e.current_state}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not properly initialized")
    except MalformedCallbackException:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                            detail="Missing payment verification parameters")
    except PaymentNotCompletedException:
        raise HTTPException(status_code=status.HTTP_402_PAYMENT_REQUIRED, detail="Payment not completed")
    except InsufficientPaymentException:
        raise HTTPException(status_code=status.HTTP_402_PAYMENT_REQUIRED, detail="Payment amount insufficient")
    except AddressMismatchException:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid payment address")
    except GatewayUnavailableException as e:
        logger.error(f"[{correlation_id}] ❌ Payment verification failed for order {order_id}: {e.reason}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail="Payment verification failed")

    logger.info(f"[{correlation_id}] ✅ Order {order_id} verified (repeat: {result.already_verified})")

    success_url = request.app.state.storefront_success_url
    if success_url:
        separator = "&" if "?" in success_url else "?"
        return RedirectResponse(
            f"{success_url}{separator}{urlencode({'orderId': order_id})}",
            status_code=status.HTTP_303_SEE_OTHER
        )
    return {
        "status": "verified",
        "orderId": result.order_id,
        "transactionId": result.transaction_id
    }
