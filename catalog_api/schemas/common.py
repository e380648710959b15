from pydantic import BaseModel


class ErrorResponse(BaseModel):
    detail: str


class HealthStatus(BaseModel):
    status: str
    database: str
