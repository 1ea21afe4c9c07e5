"""Core type definitions for the Thrift IDL parser."""

from enum import Enum
from pathlib import Path
from pydantic import BaseModel, ConfigDict


class IncludePolicy(str, Enum):
    SKIP = "skip"
    FAIL = "fail"


class Requiredness(str, Enum):
    REQUIRED = "required"
    OPTIONAL = "optional"


class BaseTypeName(str, Enum):
    BOOL = "bool"
    BYTE = "byte"
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    DOUBLE = "double"
    STRING = "string"
    BINARY = "binary"
    SLIST = "slist"


class ParserOptions(BaseModel):
    """Options controlling how documents are built and assembled."""
    model_config = ConfigDict(frozen=True)

    include_root: Path | None = None
    include_policy: IncludePolicy = IncludePolicy.SKIP
    follow_includes: bool = True
    retain_requiredness: bool = False
    auto_number_enums: bool = False
    encoding: str = "utf-8"


class SkippedInclude(BaseModel):
    """An include that could not be merged under the SKIP policy."""
    path: str
    included_from: str
    reason: str
