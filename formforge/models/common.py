from enum import Enum

from pydantic import BaseModel


class Locale(str, Enum):
    EN = "en"
    VI = "vi"


class StatusResponse(BaseModel):
    integration: str
    authenticated: bool
    message: str
