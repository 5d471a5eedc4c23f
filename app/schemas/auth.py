from pydantic import BaseModel, Field


class CurrentUser(BaseModel):
    """Acting user resolved from the bearer token"""

    id: str = Field(..., description="Opaque user identifier from the auth service")
