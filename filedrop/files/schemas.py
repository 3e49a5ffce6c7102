from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List

class FileOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    id: str
    filename: str
    index: int
    upload_date: datetime = Field(alias="uploadDate")
    url: str

class UploadOut(BaseModel):
    message: str
    files: List[str]

class MessageOut(BaseModel):
    message: str
