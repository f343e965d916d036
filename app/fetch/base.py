from dataclasses import dataclass
from typing import Union

@dataclass(frozen=True)
class FetchSuccess:
    original: int
    processed: int

@dataclass(frozen=True)
class FetchFailure:
    reason: str

FetchResult = Union[FetchSuccess, FetchFailure]

class UpstreamError(Exception):
    """Transport or protocol failure talking to an upstream service."""
