"""Pydantic models for uploaded and stored questionnaire questions.

A MyPreOp CSV carries one row per option, so several rows share an ``Id``.
`MyPreOpCsvRow` mirrors a single row using the CSV headers as aliases;
`ParsedQuestion` is the grouped result and `StoredQuestion` the persisted,
pipe-joined form that masters and instances serve back.
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


MYPREOP_REQUIRED_COLUMNS: tuple[str, ...] = (
    "Id",
    "Section",
    "Page",
    "ItemType",
    "Question",
    "Option",
    "Characteristic",
    "Required",
    "EnableWhen",
    "HasHelper",
    "HelperType",
    "HelperName",
    "HelperValue",
)

Logic = Literal["AND", "OR"]


class MyPreOpCsvRow(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default="", alias="Id")
    section: str = Field(default="", alias="Section")
    page: str = Field(default="", alias="Page")
    item_type: str = Field(default="", alias="ItemType")
    question: str = Field(default="", alias="Question")
    option: str = Field(default="", alias="Option")
    characteristic: str = Field(default="", alias="Characteristic")
    required: str = Field(default="", alias="Required")
    enable_when: str = Field(default="", alias="EnableWhen")
    has_helper: str = Field(default="", alias="HasHelper")
    helper_type: str = Field(default="", alias="HelperType")
    helper_name: str = Field(default="", alias="HelperName")
    helper_value: str = Field(default="", alias="HelperValue")
    # 1-based line in the source file (header is line 1); None when built in code
    line: Optional[int] = None


class QuestionOption(BaseModel):
    value: str
    characteristic: Optional[str] = None


class EnableWhenCondition(BaseModel):
    characteristic: str
    operator: str
    value: Optional[str] = None


class EnableWhen(BaseModel):
    conditions: List[EnableWhenCondition] = Field(min_length=1)
    logic: Logic = "AND"


class ParsedQuestion(BaseModel):
    id: str
    section: str = ""
    page: str = ""
    item_type: str = ""
    question_text: str = ""
    options: List[QuestionOption] = Field(default_factory=list)
    required: bool = False
    enable_when: Optional[EnableWhen] = None
    has_helper: bool = False
    helper_type: Optional[str] = None
    helper_name: Optional[str] = None
    helper_value: Optional[str] = None
    # Question-level token, only for questions without options
    characteristic: Optional[str] = None


class StoredQuestion(BaseModel):
    question_id: str
    section: str = ""
    page: str = ""
    item_type: str
    question_text: str
    answer_options: Optional[str] = None
    characteristic: Optional[str] = None
    required: bool = False
    enable_when: Optional[EnableWhen] = None
    has_helper: bool = False
    helper_type: Optional[str] = None
    helper_name: Optional[str] = None
    helper_value: Optional[str] = None


__all__ = [
    "MYPREOP_REQUIRED_COLUMNS",
    "Logic",
    "MyPreOpCsvRow",
    "QuestionOption",
    "EnableWhenCondition",
    "EnableWhen",
    "ParsedQuestion",
    "StoredQuestion",
]
