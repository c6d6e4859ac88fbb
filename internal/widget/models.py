"""
Widget state models

UIState is the whole mutable state of WeatherWidget, LookupOutcome is the typed
result of a single lookup.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import List, Optional

from lib.openweathermap import Suggestion, WeatherResult


class LookupStatus(StrEnum):
    """Status of the most recent settled lookup"""

    NOT_YET_SEARCHED = "not-yet-searched"
    ERROR = "error"
    SUCCESS = "success"


@dataclass(frozen=True)
class LookupOutcome:
    """
    Result of one lookup: either weather data or failure reason.

    Attributes:
        status: SUCCESS or ERROR
        data: Parsed weather for SUCCESS
        reason: Failure description for ERROR
        superseded: True if a newer lookup started before this one settled,
            such outcome was not applied to widget state
    """

    status: LookupStatus
    data: Optional[WeatherResult] = None
    reason: Optional[str] = None
    superseded: bool = False

    @classmethod
    def success(cls, data: WeatherResult) -> "LookupOutcome":
        return cls(status=LookupStatus.SUCCESS, data=data)

    @classmethod
    def failure(cls, reason: str) -> "LookupOutcome":
        return cls(status=LookupStatus.ERROR, reason=reason)

    @property
    def ok(self) -> bool:
        return self.status == LookupStatus.SUCCESS


@dataclass
class UIState:
    """
    Widget state, created empty at mount and discarded at unmount.

    Invariants:
        - isLoading is True only while a lookup request is in flight
        - suggestions is cleared whenever a lookup is submitted or a suggestion is chosen
        - lastResult is replaced on successful lookup and kept (stale) on failure
    """

    queryText: str = ""
    selectedCityName: str = ""
    lastResult: Optional[WeatherResult] = None
    isLoading: bool = False
    suggestions: List[Suggestion] = field(default_factory=list)
    lookupStatus: LookupStatus = LookupStatus.NOT_YET_SEARCHED
    errorReason: Optional[str] = None

    def copy(self) -> "UIState":
        """Shallow snapshot safe to hand out to listeners"""
        return UIState(
            queryText=self.queryText,
            selectedCityName=self.selectedCityName,
            lastResult=self.lastResult,
            isLoading=self.isLoading,
            suggestions=list(self.suggestions),
            lookupStatus=self.lookupStatus,
            errorReason=self.errorReason,
        )
