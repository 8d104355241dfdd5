from pydantic import BaseModel
from typing import Dict, List, Optional


class GenerateRequest(BaseModel):
    query: Optional[str] = None
    componentLibrary: Optional[str] = None
    projectName: Optional[str] = None
    cms: Optional[str] = None


class GenerateResponse(BaseModel):
    success: bool
    files: Dict[str, str]
    message: str
    zipFileName: str
    downloadUrl: str
    actualProjectName: str


class ErrorResponse(BaseModel):
    error: str


class DecodeErrorResponse(ErrorResponse):
    reason: str
    raw: str


class ValidationErrorResponse(ErrorResponse):
    issues: List[str]
    hint: str
    suggestedDependencies: Dict[str, str] = {}


class IOErrorResponse(ErrorResponse):
    path: Optional[str] = None
