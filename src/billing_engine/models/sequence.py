"""Document sequence models"""

from enum import Enum

from pydantic import BaseModel, Field


class DocumentType(str, Enum):
    """Numbered document types"""
    INVOICE = "invoice"
    QUOTE = "quote"


class DocumentSequence(BaseModel):
    """Counter state for one document type"""
    
    doc_type: DocumentType = Field(..., description="Document type")
    prefix: str = Field("", description="Display prefix, e.g. 'I' or 'E'")
    next_value: int = Field(1, description="Value the next generated number will carry", ge=1)
    padding: int = Field(0, description="Zero-pad width for the numeric part", ge=0)
