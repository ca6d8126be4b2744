from typing import Any, Dict, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator
from bson import ObjectId


class Person(BaseModel):
    """A person record as stored in the collection"""
    id: Optional[str] = Field(None, alias="_id", description="Document identifier")
    name: str = Field(..., description="Family name")
    age: int = Field(..., description="Age in years", ge=0)
    date_of_birth: datetime = Field(..., alias="dateOfBirth", description="Point in time of birth")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_object_id(cls, value: Any) -> Any:
        if isinstance(value, ObjectId):
            return str(value)
        return value

    def to_document(self) -> Dict[str, Any]:
        """Document to insert; the server assigns _id"""
        return self.model_dump(by_alias=True, exclude={"id"})

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Person":
        return cls.model_validate(document)

    def __str__(self) -> str:
        return (
            f"Person(id={self.id}, name={self.name}, age={self.age}, "
            f"dateOfBirth={self.date_of_birth.isoformat()})"
        )
