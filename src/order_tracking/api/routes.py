"""
Order Tracking API Routes

A single lookup route: the customer types an email, CPF, order number or
tracking code and gets back a summary of the matching order.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status

from ..exceptions import InvalidQueryError, RateLimitedError, ResolutionTimeoutError
from ..resolver import TieredResolver
from .models import OrderSummary

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tracking"])


def get_resolver(request: Request) -> TieredResolver:
    """Resolver built at startup and stored on the application state."""
    return request.app.state.resolver


@router.get("/rastreio", response_model=OrderSummary)
async def track_order(
    query: Optional[str] = None,
    resolver: TieredResolver = Depends(get_resolver),
):
    """
    Look up an order by email, CPF, order number or tracking code.

    Store errors are never echoed back; only coarse status codes are exposed.
    """
    if not query or not query.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Faltou o parâmetro de busca.",
        )

    try:
        result = await resolver.resolve_text(query)
    except InvalidQueryError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Faltou o parâmetro de busca.",
        )
    except RateLimitedError as e:
        logger.warning(f"Lookup rejected, store rate limited: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Loja ocupada. Tente novamente em instantes.",
        )
    except ResolutionTimeoutError:
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail="A busca demorou demais. Tente novamente.",
        )
    except Exception:
        logger.exception("❌ Unexpected error while resolving order lookup")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Erro interno ao processar pedido.",
        )

    if not result.found:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Pedido não encontrado.",
        )

    logger.info(f"Lookup resolved to {result.order.name} via {result.tier.value}")
    return OrderSummary.from_order(result.order, query.strip(), result.tier)
