"""Event model consumed by the layout."""

from serialog.events.context import ContextStack
from serialog.events.models import LocationInfo, LoggingEvent, NDC_PROPERTY, START_TIME

__all__ = ["ContextStack", "LocationInfo", "LoggingEvent", "NDC_PROPERTY", "START_TIME"]
