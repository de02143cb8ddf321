"""Scene registry - the explicit, passed-in owner of every scene.

There is no module-level registry: construct one per process (or per
request when isolation matters) and hand it to the command catalog.

Concurrency model:
    - Each scene has its own re-entrant lock; hold it (``with
      registry.lock(scene_id):``) for the whole of any read or mutation so
      parent/child edits are observed all-or-nothing
    - The scene mapping and the active-scene pointer are guarded by a
      separate registry lock
    - Different scenes never contend with each other
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator

from scene_graph.errors import AlreadyExists, scene_not_found
from scene_graph.primitives import Color, check_id, coerce_color
from scene_graph.scene import AmbientLight, Scene

log = logging.getLogger(__name__)


class SceneRegistry:
    """Mapping of scene id -> Scene plus the process-wide active scene."""

    def __init__(self):
        self._scenes: dict[str, Scene] = {}
        self._locks: dict[str, threading.RLock] = {}
        self._active: str | None = None
        self._guard = threading.RLock()

    def __contains__(self, scene_id: str) -> bool:
        return scene_id in self._scenes

    def __len__(self) -> int:
        return len(self._scenes)

    @property
    def active_scene(self) -> str | None:
        return self._active

    def create_scene(
        self,
        scene_id: str,
        background_color: Color | None = None,
        ambient_light: AmbientLight | None = None,
    ) -> Scene:
        """Insert an empty scene. The first scene ever created becomes active."""
        check_id(scene_id, "sceneId")
        with self._guard:
            if scene_id in self._scenes:
                raise AlreadyExists(f"Scene with ID {scene_id} already exists")
            if background_color is not None:
                background_color = coerce_color(background_color, "backgroundColor")
            scene = Scene(
                id=scene_id,
                background_color=background_color,
                ambient_light=ambient_light,
            )
            self._scenes[scene_id] = scene
            self._locks[scene_id] = threading.RLock()
            if self._active is None:
                self._active = scene_id
            log.info("Created scene %r (active=%r)", scene_id, self._active)
            return scene

    def get_scene(self, scene_id: str) -> Scene:
        with self._guard:
            try:
                return self._scenes[scene_id]
            except KeyError:
                raise scene_not_found(scene_id) from None

    def set_active_scene(self, scene_id: str) -> Scene:
        with self._guard:
            scene = self.get_scene(scene_id)
            self._active = scene_id
            log.info("Active scene is now %r", scene_id)
            return scene

    def list_scenes(self) -> list[str]:
        with self._guard:
            return list(self._scenes)

    @contextmanager
    def lock(self, scene_id: str) -> Iterator[Scene]:
        """Hold a scene's lock and yield the scene. NotFound if absent."""
        with self._guard:
            if scene_id not in self._scenes:
                raise scene_not_found(scene_id)
            scene = self._scenes[scene_id]
            scene_lock = self._locks[scene_id]
        with scene_lock:
            yield scene

    def reset(self):
        """Drop every scene and the active pointer."""
        with self._guard:
            n = len(self._scenes)
            self._scenes.clear()
            self._locks.clear()
            self._active = None
        log.debug("Registry reset (%d scenes dropped)", n)
