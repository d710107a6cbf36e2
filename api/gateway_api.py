#!/usr/bin/env python3
"""
Read-only HTTP API over a vault gateway
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from common.metrics import GatewayMetrics
from gateway.events import GatewayEvent
from gateway.router import VaultGateway
from utils.errors import ValidationError, VaultNotAllowed
from utils.settings import get_settings

logger = logging.getLogger(__name__)

QUOTE_KINDS = ("convert_to_shares", "convert_to_assets", "preview_deposit", "preview_redeem")


class HealthResponse(BaseModel):
    ok: bool
    gateway: str
    owner: str
    pending_owner: Optional[str] = None
    vault_count: int


class VaultResponse(BaseModel):
    vault: str
    allowed: bool
    asset: Optional[str] = None


class QuoteResponse(BaseModel):
    vault: str
    kind: str
    amount: int
    result: int


class AllowanceResponse(BaseModel):
    vault: str
    owner: str
    share_allowance: int
    asset_allowance: int


class EventResponse(BaseModel):
    index: int
    event: str
    data: Dict[str, Any]


def create_app(gateway: VaultGateway, metrics: Optional[GatewayMetrics] = None) -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Vault Gateway API", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list(),
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.get("/healthz", response_model=HealthResponse)
    def healthz():
        return HealthResponse(
            ok=True,
            gateway=gateway.address,
            owner=gateway.owner(),
            pending_owner=gateway.pending_owner(),
            vault_count=gateway.vault_count(),
        )

    @app.get("/vaults", response_model=List[VaultResponse])
    def vaults():
        return [
            VaultResponse(vault=v, allowed=True, asset=gateway.vault_asset(v))
            for v in gateway.get_vaults()
        ]

    @app.get("/vaults/{vault}", response_model=VaultResponse)
    def vault_detail(vault: str):
        try:
            allowed = gateway.is_vault_allowed(vault)
            return VaultResponse(vault=vault, allowed=allowed, asset=gateway.vault_asset(vault))
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))

    @app.get("/vaults/{vault}/quote", response_model=QuoteResponse)
    def quote(vault: str, kind: str = Query(...), amount: int = Query(..., ge=0)):
        if kind not in QUOTE_KINDS:
            raise HTTPException(status_code=400, detail=f"kind must be one of {', '.join(QUOTE_KINDS)}")
        try:
            result = getattr(gateway, kind)(vault, amount)
        except VaultNotAllowed as e:
            raise HTTPException(status_code=404, detail=str(e))
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return QuoteResponse(vault=vault, kind=kind, amount=amount, result=result)

    @app.get("/vaults/{vault}/allowances/{owner}", response_model=AllowanceResponse)
    def allowances(vault: str, owner: str):
        try:
            if not gateway.is_vault_allowed(vault):
                raise HTTPException(status_code=404, detail=f"vault {vault} is not allow-listed")
            return AllowanceResponse(
                vault=vault,
                owner=owner,
                share_allowance=gateway.share_allowance(vault, owner),
                asset_allowance=gateway.asset_allowance(vault, owner),
            )
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))

    @app.get("/events", response_model=List[EventResponse])
    def events(limit: int = Query(settings.event_limit, ge=1)):
        entries = [
            e for e in gateway.chain.logs
            if e.address == gateway.address and isinstance(e.event, GatewayEvent)
        ]
        return [
            EventResponse(index=e.index, event=e.name, data=e.event.to_dict())
            for e in entries[-limit:]
        ]

    @app.get("/metrics")
    def metrics_summary():
        if metrics is None:
            raise HTTPException(status_code=404, detail="metrics not configured")
        return metrics.collector.get_summary()

    logger.info(f"API created for gateway {gateway.address}")
    return app
