"""
Page Builder Kernel -- Render Coordinator

Sits between the pure functions (reducer, renderer) and the outside world
(the host document, the file chooser, the print and export adapters).
Owns the editor state for the lifetime of one loaded document.

Operations: load, dispatch, upload, resize, before_print, export, unload

Everything runs on one event loop. The only suspension points are the file
read inside an upload and the settle delay inside before_print.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from pagebuilder.config import Settings, settings
from pagebuilder.kernel.bindings import DEFAULT_BINDINGS, BindingTable, validate_bindings
from pagebuilder.kernel.document import Document, apply_patches
from pagebuilder.kernel.events import make_event
from pagebuilder.kernel.fields import DEFAULT_REGISTRY, FieldRegistry
from pagebuilder.kernel.files import read_data_uri
from pagebuilder.kernel.layout import build_document
from pagebuilder.kernel.reducer import empty_state, recompute_arc, reduce, sync_patches
from pagebuilder.kernel.renderer import render
from pagebuilder.kernel.types import Event, NodePatch, ReduceResult, RenderOptions

logger = logging.getLogger(__name__)

Listener = Callable[[Event, ReduceResult], None]


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class BindingError(Exception):
    """The binding table references fields the registry does not declare."""
    pass


class NotLoaded(Exception):
    """No document is loaded (before load() or after unload())."""
    pass


# ---------------------------------------------------------------------------
# Coordinator
# ---------------------------------------------------------------------------


class RenderCoordinator:
    """
    Receives change events, runs them through the reducer, and applies the
    resulting patches to the host document. Only nodes bound to the changed
    field are touched.
    """

    def __init__(
        self,
        registry: FieldRegistry = DEFAULT_REGISTRY,
        bindings: BindingTable = DEFAULT_BINDINGS,
        *,
        document_factory: Callable[[FieldRegistry], Document] = build_document,
        config: Settings = settings,
    ):
        self._registry = registry
        self._bindings = bindings
        self._document_factory = document_factory
        self._config = config
        self._document: Document | None = None
        self._state: dict[str, Any] | None = None
        self._sequence = 0
        self._in_flight: set[str] = set()
        self._generations: dict[str, int] = {}
        self._listeners: list[Listener] = []
        self._history: list[Event] = []

    # -- lifecycle --

    def load(self, container_width: int | float | None = None) -> Document:
        """
        Build the host document, validate the binding table against it, and
        render the initial state into it.
        """
        document = self._document_factory(self._registry)

        errors = validate_bindings(self._bindings, self._registry)
        if errors:
            raise BindingError("; ".join(errors))

        # Nodes missing from this page variant are tolerated, just noted
        for problem in validate_bindings(self._bindings, self._registry, document.ids()):
            logger.info("binding target missing from document: %s", problem)

        self._document = document
        self._state = empty_state(
            self._registry,
            self._bindings,
            page_width=self._config.PAGE_WIDTH,
            margin=self._config.PAGE_MARGIN,
        )
        self._sequence = 0
        self._generations.clear()
        self._history = []
        apply_patches(document, sync_patches(self._state, self._registry, self._bindings))

        if container_width is not None:
            self.resize(container_width)

        logger.debug("document loaded with %d fields, %d bindings", len(self._registry), len(self._bindings))
        return document

    def unload(self) -> None:
        """Tear the state down. Nothing is persisted."""
        self._document = None
        self._state = None
        self._in_flight.clear()
        self._generations.clear()
        self._history = []

    @property
    def loaded(self) -> bool:
        return self._document is not None

    @property
    def document(self) -> Document:
        if self._document is None:
            raise NotLoaded("no document loaded")
        return self._document

    @property
    def state(self) -> dict[str, Any]:
        if self._state is None:
            raise NotLoaded("no document loaded")
        return self._state

    def subscribe(self, listener: Listener) -> None:
        """Call `listener(event, result)` after every dispatched event."""
        self._listeners.append(listener)

    def history(self) -> list[dict[str, Any]]:
        """Applied events since load, in order. replay() over these rebuilds the state."""
        return [e.to_dict() for e in self._history]

    # -- dispatch --

    def dispatch(self, type: str, payload: dict[str, Any], *, source: str = "web") -> ReduceResult:
        self._sequence += 1
        return self.dispatch_event(make_event(self._sequence, type, payload, source=source))

    def dispatch_event(self, event: Event) -> ReduceResult:
        """
        Reduce one event and apply its patches in the same call, so no
        intermediate state is ever observable in the document.
        """
        document = self.document
        key = _dispatch_key(event)
        if key in self._in_flight:
            logger.warning("dropping re-entrant %s for %s", event.type, key)
            return ReduceResult(state=self.state, applied=False, error=f"REENTRANT_DISPATCH: {key}")

        self._in_flight.add(key)
        try:
            result = reduce(self.state, event, self._registry, self._bindings)
            if result.applied:
                self._state = result.state
                self._history.append(event)
                apply_patches(document, result.patches)
            else:
                logger.debug("event %s rejected: %s", event.type, result.error)
            for w in result.warnings:
                logger.info("event %s: [%s] %s", event.type, w.code, w.message)
            for listener in list(self._listeners):
                listener(event, result)
        finally:
            self._in_flight.discard(key)
        return result

    # -- text / image mirror --

    def set_text(self, field_id: str, value: str) -> ReduceResult:
        return self.dispatch("field.input", {"field": field_id, "value": value})

    def set_image_link(self, field_id: str, url: str) -> ReduceResult:
        return self.dispatch("image.link", {"field": field_id, "url": url})

    async def upload_image(
        self, field_id: str, source: Path | str | bytes, mime: str | None = None
    ) -> ReduceResult | None:
        """
        Read the chosen file and mirror it to the thumbnail and the page.
        Raises FileReadError when the file cannot be read; state and document
        stay as they were. Returns None when the read finished after the
        document went away, or was overtaken by a newer upload while
        DISCARD_STALE_READS is on.
        """
        data_uri = await self._read_latest(field_id, source, mime)
        if data_uri is None:
            return None
        return self.dispatch("image.upload", {"field": field_id, "data_uri": data_uri})

    # -- style resolver --

    def apply_style(
        self,
        field_id: str,
        *,
        color: str | None = None,
        font: str | None = None,
        size: int | float | None = None,
    ) -> ReduceResult:
        payload: dict[str, Any] = {"field": field_id}
        if color is not None:
            payload["color"] = color
        if font is not None:
            payload["font"] = font
        if size is not None:
            payload["size"] = size
        return self.dispatch("style.set", payload)

    def set_position(self, field_id: str, offset: int | float) -> ReduceResult:
        return self.dispatch("position.set", {"field": field_id, "offset": offset})

    # -- visibility controller --

    def toggle(self, toggle_id: str) -> ReduceResult:
        return self.dispatch("visibility.toggle", {"toggle": toggle_id})

    def set_visible(self, toggle_id: str, visible: bool) -> ReduceResult:
        return self.dispatch("visibility.set", {"toggle": toggle_id, "visible": visible})

    # -- arc geometry --

    def set_arc(self, *, depth: int | float | None = None, font_size: int | float | None = None) -> ReduceResult:
        payload: dict[str, Any] = {}
        if depth is not None:
            payload["depth"] = depth
        if font_size is not None:
            payload["font_size"] = font_size
        return self.dispatch("arc.set", payload)

    def recompute_arc(self) -> list[NodePatch]:
        """Re-apply the arc from the current state. Safe to call any number of times."""
        patches = recompute_arc(self.state, self._bindings)
        apply_patches(self.document, patches)
        return patches

    # -- background compositor --

    def apply_background(self, *, color: str | None = None, opacity: int | float | None = None) -> ReduceResult:
        payload: dict[str, Any] = {}
        if color is not None:
            payload["color"] = color
        if opacity is not None:
            payload["opacity"] = opacity
        return self.dispatch("background.set", payload)

    async def apply_background_image(self, source: Path | str | bytes, mime: str | None = None) -> ReduceResult | None:
        """Layer a picked image over the page color. Raises FileReadError like upload_image."""
        data_uri = await self._read_latest("bg_image", source, mime)
        if data_uri is None:
            return None
        return self.dispatch("background.image_set", {"data_uri": data_uri})

    def clear_background_image(self) -> ReduceResult:
        return self.dispatch("background.image_clear", {})

    # -- border --

    def set_border_style(self, style: str) -> ReduceResult:
        return self.dispatch("border.style", {"style": style})

    def set_border_color(self, color: str) -> ReduceResult:
        return self.dispatch("border.color", {"color": color})

    # -- viewport / print / export --

    def resize(self, container_width: int | float) -> ReduceResult:
        return self.dispatch("viewport.resize", {"width": container_width})

    async def before_print(self) -> None:
        """
        Pre-print hook: final arc sync, then a fixed settle delay so layout
        is stable before the print adapter captures the page.
        """
        self.recompute_arc()
        await asyncio.sleep(self._config.PRINT_SETTLE_SECONDS)

    def export_html(self, options: RenderOptions | None = None) -> str:
        return render(self.document, options)

    # -- internal --

    async def _read_latest(self, field_id: str, source: Path | str | bytes, mime: str | None) -> str | None:
        document = self.document
        generation = self._generations.get(field_id, 0) + 1
        self._generations[field_id] = generation

        data_uri = await read_data_uri(source, mime)

        if self._document is not document:
            logger.info("upload for %s finished after its document was unloaded, dropped", field_id)
            return None
        if self._config.DISCARD_STALE_READS and self._generations.get(field_id) != generation:
            logger.info("stale upload for %s (generation %d) discarded", field_id, generation)
            return None
        return data_uri


def _dispatch_key(event: Event) -> str:
    """The unit re-entrancy is tracked by: a field, a toggle, or the event type."""
    p = event.payload if isinstance(event.payload, dict) else {}
    if "field" in p:
        return f"field:{p['field']}"
    if "toggle" in p:
        return f"toggle:{p['toggle']}"
    return f"type:{event.type}"
