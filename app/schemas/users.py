from pydantic import BaseModel, Field


class NewUserRequest(BaseModel):
    name: str = Field(min_length=2, max_length=250)
    email: str = Field(min_length=6, max_length=254, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class UserOut(BaseModel):
    id: int
    name: str
    email: str

    class Config:
        from_attributes = True


class UserShortOut(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True
