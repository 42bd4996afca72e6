"""
View-State Store.

Holds the user-facing state of a graph view: filter criteria, view
preferences, selection, zoom and request status. The store is an explicit
object handed to whoever needs it; tests and "reset" actions restore the
defaults through ``reset``.

Every write swaps in a new immutable ``GraphViewState`` and replaces whole
fields, so readers always see a consistent snapshot and concurrent writers
resolve last-writer-wins. Subscribers are called after each write with the
new and the previous snapshot.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, List, Mapping, Optional, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from ..core.types import GraphLink, LinkType, NodeType, RelationshipType
from ..graph.filters import GraphFilters

logger = logging.getLogger(__name__)

LIGHT_FONT_COLOR = "rgba(0, 0, 0, 0.8)"
LIGHT_LABEL_BACKGROUND = "rgba(255, 255, 255, 0.7)"
DARK_FONT_COLOR = "rgba(255, 255, 255, 0.8)"
DARK_LABEL_BACKGROUND = "rgba(0, 0, 0, 0.7)"


class PhysicsSettings(BaseModel):
    """Force-simulation tunables passed through to the renderer."""
    gravity: float = 0
    link_strength: float = 50
    friction: float = 0.9
    charge_strength: float = -80
    enabled: bool = True


class LabelSettings(BaseModel):
    show_node_labels: bool = True
    show_link_labels: bool = False
    font_size: int = 12
    font_color: str = LIGHT_FONT_COLOR
    background_color: str = LIGHT_LABEL_BACKGROUND
    padding: int = 4
    max_length: int = 20


class ViewPreferences(BaseModel):
    auto_zoom: bool = True
    dark_mode: bool = False
    node_size: float = 15
    link_width: float = 2
    highlighted_node: Optional[str] = None
    highlighted_path: Optional[List[GraphLink]] = None
    physics: PhysicsSettings = Field(default_factory=PhysicsSettings)
    labels: LabelSettings = Field(default_factory=LabelSettings)
    node_color_scheme: str = "default"
    link_color_scheme: str = "default"
    grouping_enabled: bool = False


class GraphViewState(BaseModel):
    """Immutable snapshot of the whole store."""
    filters: GraphFilters = Field(default_factory=GraphFilters)
    view_preferences: ViewPreferences = Field(default_factory=ViewPreferences)
    selected_node: Optional[str] = None
    zoom_level: float = 1.0
    is_loading: bool = False
    error: Optional[str] = None
    last_updated: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class FilteredGraphState(BaseModel):
    """The subset of state that graph consumers typically bind to."""
    filters: GraphFilters
    view_preferences: ViewPreferences
    selected_node: Optional[str] = None
    is_loading: bool = False
    error: Optional[str] = None


Listener = Callable[[GraphViewState, GraphViewState], None]
M = TypeVar("M", bound=BaseModel)


def merge_model(model: M, updates: Mapping[str, Any]) -> M:
    """Partial update of a pydantic model, validated, as a new instance."""
    fields = type(model).model_fields
    unknown = sorted(set(updates) - set(fields))
    if unknown:
        raise ValueError(f"Unknown {type(model).__name__} field(s): {', '.join(unknown)}")
    return type(model).model_validate({**model.model_dump(), **updates})


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class GraphViewStore:
    """
    Reactive state container for one graph view.

    Example:
        ```python
        store = GraphViewStore()
        unsubscribe = store.subscribe(lambda new, old: print(new.filters))
        store.set_node_types([NodeType.ROOT, NodeType.DERIVATIVE])
        store.reset_filters()
        unsubscribe()
        ```
    """

    def __init__(self, initial: Optional[GraphViewState] = None):
        self._state = initial or GraphViewState()
        self._listeners: List[Listener] = []

    # =========================================================================
    # Reading
    # =========================================================================

    @property
    def state(self) -> GraphViewState:
        return self._state

    @property
    def filters(self) -> GraphFilters:
        return self._state.filters

    @property
    def view_preferences(self) -> ViewPreferences:
        return self._state.view_preferences

    @property
    def selected_node(self) -> Optional[str]:
        return self._state.selected_node

    @property
    def zoom_level(self) -> float:
        return self._state.zoom_level

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def error(self) -> Optional[str]:
        return self._state.error

    @property
    def last_updated(self) -> Optional[str]:
        return self._state.last_updated

    def filtered_state(self) -> FilteredGraphState:
        state = self._state
        return FilteredGraphState(
            filters=state.filters,
            view_preferences=state.view_preferences,
            selected_node=state.selected_node,
            is_loading=state.is_loading,
            error=state.error,
        )

    # =========================================================================
    # Subscription
    # =========================================================================

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener(new_state, old_state)``; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, **fields: Any) -> None:
        old = self._state
        self._state = old.model_copy(update=fields)
        for listener in list(self._listeners):
            listener(self._state, old)

    def set_state(self, **fields: Any) -> None:
        """Validated whole-field replacement of any top-level field (test harness hook)."""
        new = merge_model(self._state, fields)
        self._set(**{name: getattr(new, name) for name in fields})

    def reset(self) -> None:
        """Restore every field to its default."""
        defaults = GraphViewState()
        self._set(**{name: getattr(defaults, name) for name in GraphViewState.model_fields})

    # =========================================================================
    # Filters
    # =========================================================================

    def set_filters(self, **partial: Any) -> None:
        self._set(filters=merge_model(self._state.filters, partial))

    def reset_filters(self) -> None:
        self._set(filters=GraphFilters())

    def set_node_types(self, node_types: Sequence[NodeType]) -> None:
        self.set_filters(node_types=list(node_types))

    def set_link_types(self, link_types: Sequence[LinkType]) -> None:
        self.set_filters(link_types=list(link_types))

    def set_relationship_types(self, relationship_types: Optional[Sequence[RelationshipType]]) -> None:
        self.set_filters(relationship_types=None if relationship_types is None else list(relationship_types))

    def set_remix_types(self, remix_types: Optional[Sequence[str]]) -> None:
        self.set_filters(remix_types=None if remix_types is None else list(remix_types))

    def set_approval_statuses(self, statuses: Optional[Sequence[str]]) -> None:
        self.set_filters(approval_statuses=None if statuses is None else list(statuses))

    def set_verification_statuses(self, statuses: Optional[Sequence[str]]) -> None:
        self.set_filters(verification_statuses=None if statuses is None else list(statuses))

    def set_search_query(self, query: str) -> None:
        self.set_filters(search_query=query)

    def set_max_distance(self, distance: Optional[int]) -> None:
        self.set_filters(max_distance=distance)

    def set_show_labels(self, show: bool) -> None:
        self.set_filters(show_labels=show)

    def set_date_range(self, min_date: Optional[str] = None, max_date: Optional[str] = None) -> None:
        self.set_filters(min_creation_date=min_date, max_creation_date=max_date)

    def set_tags(self, tags: Optional[Sequence[str]]) -> None:
        self.set_filters(tags=None if tags is None else list(tags))

    def set_creators(self, creators: Optional[Sequence[str]]) -> None:
        self.set_filters(creators=None if creators is None else list(creators))

    # =========================================================================
    # View preferences
    # =========================================================================

    def set_view_preferences(self, **partial: Any) -> None:
        self._set(view_preferences=merge_model(self._state.view_preferences, partial))

    def reset_view_preferences(self) -> None:
        self._set(view_preferences=ViewPreferences())

    def set_auto_zoom(self, enabled: bool) -> None:
        self.set_view_preferences(auto_zoom=enabled)

    def set_dark_mode(self, enabled: bool) -> None:
        """Toggle dark mode and switch label colors to match."""
        labels = self._state.view_preferences.labels.model_copy(update={
            "font_color": DARK_FONT_COLOR if enabled else LIGHT_FONT_COLOR,
            "background_color": DARK_LABEL_BACKGROUND if enabled else LIGHT_LABEL_BACKGROUND,
        })
        self.set_view_preferences(dark_mode=enabled, labels=labels)

    def set_node_size(self, size: float) -> None:
        self.set_view_preferences(node_size=size)

    def set_link_width(self, width: float) -> None:
        self.set_view_preferences(link_width=width)

    def set_physics_settings(self, **settings: Any) -> None:
        physics = merge_model(self._state.view_preferences.physics, settings)
        self.set_view_preferences(physics=physics)

    def set_label_settings(self, **settings: Any) -> None:
        labels = merge_model(self._state.view_preferences.labels, settings)
        self.set_view_preferences(labels=labels)

    def set_color_scheme(self, node_scheme: str, link_scheme: Optional[str] = None) -> None:
        self.set_view_preferences(
            node_color_scheme=node_scheme,
            link_color_scheme=link_scheme or node_scheme,
        )

    def set_grouping_enabled(self, enabled: bool) -> None:
        self.set_view_preferences(grouping_enabled=enabled)

    def highlight_node(self, node_id: Optional[str]) -> None:
        self.set_view_preferences(highlighted_node=node_id)

    def highlight_path(self, links: Optional[Sequence[GraphLink]]) -> None:
        self.set_view_preferences(highlighted_path=None if links is None else list(links))

    # =========================================================================
    # Selection, zoom, status
    # =========================================================================

    def set_selected_node(self, node_id: Optional[str]) -> None:
        self._set(selected_node=node_id)

    def set_zoom_level(self, level: float) -> None:
        self._set(zoom_level=level)

    def center_graph(self) -> None:
        view = self._state.view_preferences.model_copy(update={"auto_zoom": True})
        self._set(zoom_level=1.0, view_preferences=view)

    def set_loading(self, loading: bool) -> None:
        self._set(is_loading=loading)

    def set_error(self, error: Optional[str]) -> None:
        if error:
            logger.debug(f"Graph view error: {error}")
        self._set(error=error)

    def set_last_updated(self, timestamp: Optional[str] = None) -> None:
        self._set(last_updated=timestamp or utc_timestamp())
