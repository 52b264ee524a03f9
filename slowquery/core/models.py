"""Pydantic models for findings, diagnostics and API requests/responses."""

from typing import Literal

from pydantic import BaseModel, Field


class Finding(BaseModel):
    """One match of a catalog rule against a piece of SQL text."""

    code: str = Field(..., description="Rule code (e.g., SQ001)")
    rule: str = Field(..., description="Rule name that produced this finding")
    message: str = Field(..., description="Human-readable explanation")
    start_offset: int = Field(..., alias="startOffset", ge=0, description="Character offset of the match")
    length: int = Field(..., ge=0, description="Length of the match in characters")
    severity: Literal["warning"] = Field(default="warning", description="Finding severity")

    class Config:
        populate_by_name = True
        frozen = True

    @property
    def end_offset(self) -> int:
        return self.start_offset + self.length


class Position(BaseModel):
    """Zero-based line/character position in a document."""

    line: int = Field(..., ge=0)
    character: int = Field(..., ge=0)


class Range(BaseModel):
    start: Position
    end: Position


class Diagnostic(Finding):
    """A finding anchored to a document range."""

    range: Range


class RuleInfo(BaseModel):
    """Public description of a catalog rule."""

    code: str
    name: str
    pattern: str
    message: str


class AnalyzeRequest(BaseModel):
    """Request model for the stateless analysis endpoints."""

    text: str = Field(..., description="Full SQL text to scan (may be empty)")


class AnalyzeResponse(BaseModel):
    """Detailed-mode response."""

    findings: list[Finding] = Field(default_factory=list)
    total: int = Field(default=0, description="Number of findings")


class Notification(BaseModel):
    """Single aggregate message for an on-demand check."""

    level: Literal["warning", "info"] = Field(..., description="warning when issues were found")
    message: str = Field(..., description="Text shown to the user")
    issues: list[str] = Field(default_factory=list, description="One message per triggered rule")


class DocumentOpenRequest(BaseModel):
    uri: str = Field(..., min_length=1, description="Document identity")
    language_id: str = Field(..., alias="languageId", description="Declared content type (e.g., sql)")
    text: str = Field(default="", description="Full document content")
    activate: bool = Field(default=True, description="Make this the active document")

    class Config:
        populate_by_name = True


class DocumentChangeRequest(BaseModel):
    uri: str = Field(..., min_length=1)
    text: str = Field(..., description="Full current document content")


class DocumentRef(BaseModel):
    uri: str = Field(..., min_length=1)


class DiagnosticsResponse(BaseModel):
    """Current diagnostics for one document."""

    uri: str
    language_id: str = Field(..., alias="languageId")
    version: int
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class DocumentClosedResponse(BaseModel):
    uri: str
    closed: bool = True
