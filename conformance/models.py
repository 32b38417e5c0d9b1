# conformance/models.py
from __future__ import annotations

from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# Demuxer output carries more fields than the harness looks at; keep them all.
class BaseCfg(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class Stream(BaseCfg):
    id: Union[int, str]
    rotation: Optional[int] = None
    flip: Optional[Union[bool, int, str]] = None
    # typed view, plain array, numeric-key object or absent
    extradata: Optional[Any] = None


class MediaInfo(BaseCfg):
    filename: Optional[str] = None
    url: Optional[str] = None
    streams: List[Stream] = Field(default_factory=list)


class Packet(BaseCfg):
    data: Optional[List[int]] = None
    size: Optional[int] = None
    timestamp: Optional[float] = None
    duration: Optional[float] = None
    # byteLength of data.buffer, recorded in-page before the payload is copied out
    buffer_byte_length: Optional[int] = Field(default=None, alias="bufferByteLength")
