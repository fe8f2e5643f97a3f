# app/models/telephone_numbers.py

from pydantic import BaseModel, Field

from app.db.records import PhoneType


class TelephoneNumberOut(BaseModel):
    id: int
    customer_id: int
    type: PhoneType
    number: str

    class Config:
        from_attributes = True


class TelephoneNumberCreate(BaseModel):
    customer_id: int
    type: PhoneType
    number: str = Field(..., min_length=1, max_length=50)


class TelephoneNumberUpdate(BaseModel):
    type: PhoneType
    number: str = Field(..., min_length=1, max_length=50)
