from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, HTTPException, Request, Response

from cashback.core.config import ConfigurationError
from cashback.domain.models import InvalidCardError
from cashback.schemas import CardHistoryOut, CardIn, CardOut, StorageSelection
from cashback.services.card_service import CardService

router = APIRouter(tags=["cards"])


def _get_card_service(request: Request) -> CardService:
    svc = getattr(getattr(request.app, "state", None), "card_service", None)
    if not svc:
        raise RuntimeError("CardService not configured")
    return svc


@router.get("/cards", response_model=list[CardOut])
def list_cards(
    request: Request,
    bank: Optional[str] = None,
    category: Optional[str] = None,
    status: Optional[str] = None,
):
    svc = _get_card_service(request)
    try:
        cards = svc.filter_cards(bank_name=bank, category=category, status=status)
    except ValueError:
        raise HTTPException(400, f"Invalid status: {status}")
    return [CardOut.from_card(card) for card in cards]


@router.post("/cards", response_model=CardOut, status_code=201)
def create_card(payload: CardIn, request: Request):
    svc = _get_card_service(request)
    try:
        card = svc.add_card(payload.to_card())
    except InvalidCardError as exc:
        raise HTTPException(400, str(exc))
    return CardOut.from_card(card)


@router.get("/cards/best", response_model=CardOut)
def best_card(category: str, request: Request):
    card = _get_card_service(request).find_best_card_for_category(category)
    if not card:
        raise HTTPException(404, "No active card for this category")
    return CardOut.from_card(card)


@router.get("/cards/expiring", response_model=list[CardOut])
def expiring_cards(request: Request, on: Optional[date] = None):
    cards = _get_card_service(request).get_expiring_cards(on or date.today())
    return [CardOut.from_card(card) for card in cards]


@router.post("/cards/expire", response_model=list[CardOut])
def expire_cards(request: Request, on: Optional[date] = None):
    cards = _get_card_service(request).expire_cards(on)
    return [CardOut.from_card(card) for card in cards]


@router.get("/cards/{card_id}", response_model=CardOut)
def get_card(card_id: int, request: Request):
    card = _get_card_service(request).get_card(card_id)
    if not card:
        raise HTTPException(404, "Card not found")
    return CardOut.from_card(card)


@router.put("/cards/{card_id}", response_model=CardOut)
def update_card(card_id: int, payload: CardIn, request: Request):
    svc = _get_card_service(request)
    try:
        card = svc.update_card(payload.to_card(card_id))
    except InvalidCardError as exc:
        raise HTTPException(400, str(exc))
    return CardOut.from_card(card)


@router.delete("/cards/{card_id}", status_code=204)
def delete_card(card_id: int, request: Request):
    _get_card_service(request).delete_card(card_id)
    return Response(status_code=204)


@router.get("/cards/{card_id}/history", response_model=list[CardHistoryOut])
def card_history(card_id: int, request: Request):
    records = _get_card_service(request).get_card_history(card_id)
    return [CardHistoryOut.from_record(record) for record in records]


@router.get("/storage")
def current_storage(request: Request):
    kind = _get_card_service(request).storage_kind
    return {"kind": kind.value if kind else None}


@router.put("/storage")
def switch_storage(payload: StorageSelection, request: Request):
    svc = _get_card_service(request)
    try:
        kind = svc.switch_storage(payload.kind)
    except ConfigurationError as exc:
        raise HTTPException(400, str(exc))
    return {"kind": kind.value}
