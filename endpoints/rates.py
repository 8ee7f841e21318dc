from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, Path, status

from schemas.rates import RateCardEntry, RoomRateCreate, RoomRateRead, RoomRateUpdate
from services.rate_store import RateStore
from utils.dependencies import get_rate_store
from utils.errors import StoreError


router = APIRouter(prefix="/rates", tags=["Tarifas"])


def _buscar_room(store: RateStore, room_no: str):
    room_rate = store.get(room_no)
    if not room_rate:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Room {room_no} not found")
    return room_rate


@router.get("", response_model=List[RoomRateRead])
def listar_tarifas(store: RateStore = Depends(get_rate_store)):
    return store.list()


@router.get("/card", response_model=Dict[str, RateCardEntry])
def tarifario(store: RateStore = Depends(get_rate_store)):
    """Mapa room_no -> {type, rate} para autocompletar el formulario"""
    return {
        room_no: RateCardEntry(type=rate.room_type, rate=rate.rate)
        for room_no, rate in store.rate_card().items()
    }


@router.post("", response_model=RoomRateRead, status_code=status.HTTP_201_CREATED)
def crear_tarifa(data: RoomRateCreate, store: RateStore = Depends(get_rate_store)):
    if store.get(data.room_no):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Room {data.room_no} already exists")
    try:
        return store.insert(data.room_no, data.room_type, data.rate)
    except StoreError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)


@router.put("/{room_no}", response_model=RoomRateRead)
def actualizar_tarifa(
    data: RoomRateUpdate,
    room_no: str = Path(..., min_length=1, max_length=20),
    store: RateStore = Depends(get_rate_store),
):
    _buscar_room(store, room_no)
    try:
        return store.update(room_no, room_type=data.room_type, rate=data.rate)
    except StoreError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)


@router.delete("/{room_no}", status_code=status.HTTP_204_NO_CONTENT)
def eliminar_tarifa(
    room_no: str = Path(..., min_length=1, max_length=20),
    store: RateStore = Depends(get_rate_store),
):
    _buscar_room(store, room_no)
    try:
        store.delete(room_no)
    except StoreError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)
