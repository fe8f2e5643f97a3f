# app/api/telephone_numbers.py

import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status

from app.api.deps import get_telephone_number_service
from app.errors import NotFoundError
from app.models.telephone_numbers import (
    TelephoneNumberCreate,
    TelephoneNumberOut,
    TelephoneNumberUpdate,
)
from app.services.telephone_numbers import TelephoneNumberService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/telephone-numbers", tags=["telephone-numbers"])


@router.get("/", response_model=List[TelephoneNumberOut])
def list_telephone_numbers(
    service: TelephoneNumberService = Depends(get_telephone_number_service),
) -> List[TelephoneNumberOut]:
    logger.info("Getting all telephone numbers")
    return [TelephoneNumberOut.model_validate(p) for p in service.list_telephone_numbers()]


@router.get("/customer/{customer_id}", response_model=List[TelephoneNumberOut])
def list_telephone_numbers_for_customer(
    customer_id: int,
    service: TelephoneNumberService = Depends(get_telephone_number_service),
) -> List[TelephoneNumberOut]:
    logger.info("Getting telephone numbers for customer %s", customer_id)
    return [TelephoneNumberOut.model_validate(p) for p in service.list_for_customer(customer_id)]


@router.get("/{phone_id}", response_model=TelephoneNumberOut)
def get_telephone_number(
    phone_id: int,
    service: TelephoneNumberService = Depends(get_telephone_number_service),
) -> TelephoneNumberOut:
    return TelephoneNumberOut.model_validate(service.get_telephone_number(phone_id))


@router.post("/", response_model=TelephoneNumberOut, status_code=status.HTTP_201_CREATED)
def create_telephone_number(
    payload: TelephoneNumberCreate,
    response: Response,
    service: TelephoneNumberService = Depends(get_telephone_number_service),
) -> TelephoneNumberOut:
    created = service.create_telephone_number(payload.customer_id, payload.type, payload.number)
    response.headers["Location"] = f"/telephone-numbers/{created.id}"
    return TelephoneNumberOut.model_validate(created)


@router.put("/{phone_id}", response_model=TelephoneNumberOut)
def update_telephone_number(
    phone_id: int,
    payload: TelephoneNumberUpdate,
    service: TelephoneNumberService = Depends(get_telephone_number_service),
) -> TelephoneNumberOut:
    updated = service.update_telephone_number(phone_id, payload.type, payload.number)
    return TelephoneNumberOut.model_validate(updated)


@router.delete("/{phone_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_telephone_number(
    phone_id: int,
    service: TelephoneNumberService = Depends(get_telephone_number_service),
) -> Response:
    if not service.delete_telephone_number(phone_id):
        raise NotFoundError("Telephone number", phone_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
