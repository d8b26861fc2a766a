"""
Admin schemas
"""

from typing import List

from pydantic import BaseModel, Field


class ImportRequest(BaseModel):
    file_content: str = Field(..., min_length=1, description="JSON oder CSV Inhalt")
    filename: str = Field(..., min_length=1, description="Dateiname mit Endung .json oder .csv")
    make_public: bool = True


class ImportResult(BaseModel):
    imported: int
    failed: int
    errors: List[str] = []
