"""In-memory transform tree implementation"""
import logging
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, List, Optional, Set

from .core.interfaces import TransformProvider
from .core.data_types import RigidTransform, TransformLookupError

logger = logging.getLogger(__name__)


@dataclass
class _Edge:
    """Parent link of one frame with its stamped history"""
    parent: str
    static: bool
    history: Deque[RigidTransform] = field(default_factory=deque)


class TransformBuffer(TransformProvider):
    """
    Frame tree fed by external publishers

    Every frame has at most one parent. Dynamic edges keep a bounded history
    so lookups can be made at a past stamp; static edges are valid at any time.
    Lookups between any two connected frames are chained through their
    closest common ancestor.
    """

    def __init__(self, cache_time: float = 10.0, clock: Callable[[], float] = time.time):
        """
        Initialize transform buffer

        Args:
            cache_time: Seconds of dynamic history kept per edge
            clock: Time source used to stamp transforms published without a stamp
        """
        self.cache_time = cache_time
        self._clock = clock
        self._edges: Dict[str, _Edge] = {}
        self._condition = threading.Condition()

    def set_transform(self, transform: RigidTransform, static: bool = False):
        """
        Publish a parent -> child relationship

        Args:
            transform: Pose of child_frame expressed in parent_frame
            static: True if the relationship never changes
        """
        if transform.parent_frame == transform.child_frame:
            raise ValueError(f"Frame '{transform.child_frame}' cannot be its own parent")

        if not static and transform.stamp is None:
            transform = RigidTransform(
                transform.parent_frame, transform.child_frame,
                transform.translation, transform.rotation, self._clock()
            )

        with self._condition:
            edge = self._edges.get(transform.child_frame)
            if edge is None or edge.parent != transform.parent_frame or edge.static != static:
                if edge is not None:
                    logger.warning(f"Re-parenting frame '{transform.child_frame}': "
                                   f"'{edge.parent}' -> '{transform.parent_frame}'")
                edge = _Edge(parent=transform.parent_frame, static=static)
                self._edges[transform.child_frame] = edge

            if static:
                edge.history.clear()
                edge.history.append(transform)
            else:
                self._insert_sample(edge, transform)

            self._condition.notify_all()

        logger.debug(f"Transform set: {transform.parent_frame} -> {transform.child_frame} "
                     f"({'static' if static else transform.stamp})")

    def set_static_transform(self, transform: RigidTransform):
        self.set_transform(transform, static=True)

    def _insert_sample(self, edge: _Edge, transform: RigidTransform):
        history = edge.history
        if history and transform.stamp < history[-1].stamp:
            samples = sorted(list(history) + [transform], key=lambda t: t.stamp)
            history.clear()
            history.extend(samples)
        else:
            history.append(transform)

        newest = history[-1].stamp
        while len(history) > 1 and history[0].stamp < newest - self.cache_time:
            history.popleft()

    def frames(self) -> Set[str]:
        """All frame ids the buffer knows about"""
        with self._condition:
            return self._known_frames()

    def _known_frames(self) -> Set[str]:
        known = set(self._edges)
        known.update(edge.parent for edge in self._edges.values())
        return known

    def _path_to_root(self, frame: str) -> List[str]:
        path = [frame]
        while path[-1] in self._edges:
            parent = self._edges[path[-1]].parent
            if parent in path:
                raise TransformLookupError(f"Loop detected in frame tree at '{parent}'")
            path.append(parent)
        return path

    def _sample(self, child: str, at_time: Optional[float]) -> RigidTransform:
        edge = self._edges[child]
        if edge.static or at_time is None:
            return edge.history[-1]

        newest = edge.history[-1]
        if at_time > newest.stamp:
            raise TransformLookupError(
                f"Lookup would require extrapolation into the future for "
                f"'{edge.parent}' -> '{child}' (requested {at_time:.3f}, latest {newest.stamp:.3f})"
            )
        for sample in reversed(edge.history):
            if sample.stamp <= at_time:
                return sample
        raise TransformLookupError(
            f"Lookup would require extrapolation into the past for "
            f"'{edge.parent}' -> '{child}' (requested {at_time:.3f}, "
            f"oldest {edge.history[0].stamp:.3f})"
        )

    def _accumulate(self, path: List[str], at_time: Optional[float]) -> RigidTransform:
        """Transform mapping path[0] into path[-1] by walking up the tree"""
        transform = RigidTransform.identity(path[0], path[0])
        for child in path[:-1]:
            transform = self._sample(child, at_time).compose(transform)
        return transform

    def _resolve(self, target_frame: str, source_frame: str,
                 at_time: Optional[float]) -> RigidTransform:
        known = self._known_frames()
        for frame in (target_frame, source_frame):
            if frame not in known:
                raise TransformLookupError(f"Frame '{frame}' does not exist")

        if target_frame == source_frame:
            return RigidTransform.identity(target_frame, source_frame, at_time)

        source_path = self._path_to_root(source_frame)
        target_path = self._path_to_root(target_frame)
        common = next((frame for frame in source_path if frame in target_path), None)
        if common is None:
            raise TransformLookupError(
                f"Frames '{source_frame}' and '{target_frame}' are not connected"
            )

        source_to_common = self._accumulate(source_path[:source_path.index(common) + 1], at_time)
        target_to_common = self._accumulate(target_path[:target_path.index(common) + 1], at_time)
        return target_to_common.inverse().compose(source_to_common)

    def can_transform(self, target_frame: str, source_frame: str,
                      at_time: Optional[float] = None) -> bool:
        with self._condition:
            return self._can_resolve(target_frame, source_frame, at_time)

    def _can_resolve(self, target_frame: str, source_frame: str,
                     at_time: Optional[float]) -> bool:
        try:
            self._resolve(target_frame, source_frame, at_time)
        except TransformLookupError:
            return False
        return True

    def lookup_transform(self, target_frame: str, source_frame: str,
                         at_time: Optional[float] = None) -> RigidTransform:
        with self._condition:
            return self._resolve(target_frame, source_frame, at_time)

    def wait_for_transform(self, target_frame: str, source_frame: str,
                           at_time: Optional[float] = None,
                           timeout: float = 0.0) -> bool:
        with self._condition:
            return self._condition.wait_for(
                lambda: self._can_resolve(target_frame, source_frame, at_time),
                timeout=timeout
            )
