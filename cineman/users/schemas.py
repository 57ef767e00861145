from typing import Optional
from datetime import date

from cineman.responses import CamelModel

class Address(CamelModel):
    street: str = ""
    city: str = ""
    state: str = ""
    country: str = ""
    zip_code: str = ""

class UserProfile(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: str
    date_of_birth: Optional[date] = None
    address: Optional[Address] = None

class UpdateProfileRequest(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    address: Optional[Address] = None
