from datetime import datetime

from pydantic import BaseModel


class User(BaseModel):
    id: int
    name: str
    email: str


class UserDetails(BaseModel):
    id: int
    address: str
    phone: str


class Event(BaseModel):
    title: str
    starts_at: datetime


JOHN_DOE_JSON = {"id": 1, "name": "John Doe", "email": "john.doe@example.com"}
JANE_DOE_JSON = {"id": 2, "name": "Jane Doe", "email": "jane.doe@example.com"}
