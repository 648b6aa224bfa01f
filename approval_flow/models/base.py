from typing import Annotated, Any, Dict, Optional, Type, TypeVar
from pydantic import BaseModel, BeforeValidator, Field, ConfigDict

# Mongo ObjectIds are carried around as plain strings
PyObjectId = Annotated[str, BeforeValidator(str)]

T = TypeVar("T", bound="MongoModel")

class MongoModel(BaseModel):
    """
    Base model for documents stored in MongoDB.
    Handles the `_id` alias and round-tripping to plain dicts.
    """
    id: Optional[PyObjectId] = Field(default=None, alias="_id")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_mongo(cls: Type[T], data: Optional[Dict[str, Any]]) -> Optional[T]:
        """Build a model from a raw MongoDB document."""
        if not data:
            return None
        data = dict(data)
        doc_id = data.pop("_id", None)
        return cls(id=doc_id, **data)

    def to_mongo(self, exclude_none: bool = False) -> Dict[str, Any]:
        """Dump to a MongoDB-ready dict, dropping an unset _id."""
        data = self.model_dump(by_alias=True, exclude_none=exclude_none)
        if data.get("_id") is None:
            data.pop("_id", None)
        return data
