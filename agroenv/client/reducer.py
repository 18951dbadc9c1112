"""
Incremental merge of stream events into a search's client state.

``reduce`` is a pure function: it never mutates the state it is given and
returns a new state for every event, so merge behaviour can be tested
without any network stack.
"""
import logging
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, ValidationError

from agroenv.domain.models import EnvironmentalRecord, SoilType
from agroenv.streaming.events import (
    CoordinatesPayload,
    ErrorPayload,
    EventType,
    MetricPayload,
    SOIL_METRICS_BY_TAG,
    StatusPayload,
    StreamEvent,
    WEATHER_METRICS_BY_TAG,
)

logger = logging.getLogger(__name__)


class Notification(BaseModel):
    """Transient user-facing message."""
    title: str
    description: str = ""
    variant: Literal["default", "destructive"] = "default"


class ClientState(BaseModel):
    """State of one search as seen by the consumer."""
    request_id: str
    record: EnvironmentalRecord
    loading: bool = True
    complete: bool = False
    error: Optional[ErrorPayload] = None
    notifications: List[Notification] = Field(default_factory=list)


def start_search(location: str, request_id: str) -> ClientState:
    """Initial state for a new search: placeholder record, loading."""
    return ClientState(
        request_id=request_id,
        record=EnvironmentalRecord.placeholder(location),
    )


def is_placeholder(value) -> bool:
    """True for the zero values a fresh record starts with."""
    return value is None or value == 0 or value == ""


def _merge_value(current, incoming):
    # A placeholder never replaces data that has already arrived
    if is_placeholder(incoming) and not is_placeholder(current):
        return current
    return incoming


def _notify(state: ClientState, notification: Notification, **updates) -> ClientState:
    return state.model_copy(
        update={"notifications": [*state.notifications, notification], **updates}
    )


def fail(state: ClientState, message: str, kind: Optional[str] = None) -> ClientState:
    """Stop loading and surface an error, keeping whatever data has arrived."""
    return _notify(
        state,
        Notification(title="Error", description=message, variant="destructive"),
        loading=False,
        error=ErrorPayload(error=message, kind=kind),
    )


def _apply_coordinates(state: ClientState, data: dict) -> ClientState:
    payload = CoordinatesPayload.model_validate(data)
    record = state.record
    geo = payload.to_geo_result()
    coordinates = record.coordinates.model_copy(update={
        "latitude": _merge_value(record.coordinates.latitude, geo.latitude),
        "longitude": _merge_value(record.coordinates.longitude, geo.longitude),
        "display_name": _merge_value(record.coordinates.display_name, geo.display_name),
        "bounding_box": geo.bounding_box or record.coordinates.bounding_box,
        "polygon": geo.polygon or record.coordinates.polygon,
    })
    location = _merge_value(record.location, payload.display_name or payload.location)
    return state.model_copy(update={
        "record": record.model_copy(update={"coordinates": coordinates, "location": location}),
    })


def _apply_metric(state: ClientState, event_type: str, data: dict) -> ClientState:
    payload = MetricPayload.model_validate(data)
    if event_type == EventType.WEATHER:
        section, definitions = "weather", WEATHER_METRICS_BY_TAG
    else:
        section, definitions = "soil", SOIL_METRICS_BY_TAG

    definition = definitions.get(payload.metric)
    if definition is None:
        logger.debug(f"Ignoring unknown {event_type} metric '{payload.metric}'")
        return state

    value = payload.value
    if definition.field == "soil_type":
        try:
            value = SoilType(value) if value else None
        except ValueError:
            logger.debug(f"Ignoring unknown soil type '{value}'")
            return state
    elif isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            logger.debug(f"Ignoring non-numeric value for {payload.metric}: '{value}'")
            return state

    current_section = getattr(state.record, section)
    merged = _merge_value(getattr(current_section, definition.field), value)
    updated_section = current_section.model_copy(update={definition.field: merged})
    unit = f" {payload.unit}" if payload.unit else ""
    return _notify(
        state,
        Notification(title=f"{payload.label or definition.label} received", description=f"{payload.value}{unit}"),
        record=state.record.model_copy(update={section: updated_section}),
    )


def reduce(state: ClientState, event: StreamEvent) -> ClientState:
    """
    Merge one event into the state.

    status adds a notification only; coordinates fills the location;
    weather and soil fill the single field named by their metric tag;
    complete stops loading; error stops loading and records the failure
    while keeping partial data. Unknown events leave the state unchanged.

    Args:
        state: Current state (not modified)
        event: Decoded stream event

    Returns:
        New state
    """
    try:
        if event.event == EventType.STATUS:
            payload = StatusPayload.model_validate(event.data)
            return _notify(
                state,
                Notification(title=payload.message, description=f"Processing {payload.stage}..."),
            )

        if event.event == EventType.COORDINATES:
            return _apply_coordinates(state, event.data)

        if event.event in (EventType.WEATHER, EventType.SOIL):
            return _apply_metric(state, event.event, event.data)

        if event.event == EventType.COMPLETE:
            return _notify(
                state,
                Notification(
                    title="Analysis complete",
                    description=f"All environmental data retrieved for {state.record.location}",
                ),
                loading=False,
                complete=True,
            )

        if event.event == EventType.ERROR:
            payload = ErrorPayload.model_validate(event.data)
            return fail(state, payload.error, payload.kind)

    except ValidationError as e:
        logger.warning(f"Ignoring malformed '{event.event}' event: {e}")
        return state

    logger.debug(f"Ignoring unknown event type '{event.event}'")
    return state
