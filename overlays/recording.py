"""In-memory overlay backend.

Keeps drawn overlays in a plain list so a headless host (tests, the CLI's
JSON export, a server-side map) can inspect exactly what would be on screen.
"""

from typing import List, Tuple, Dict, Any

from overlays.overlay import BaseOverlay, OverlaySpec


class RecordingSurface:
    """Container that records attach/detach activity.

    Attributes:
        attached: Overlays currently on the surface, in attach order.
        events: ("attach" | "detach", overlay) history.
    """

    def __init__(self):
        self.attached: List["RecordingOverlay"] = []
        self.events: List[Tuple[str, "RecordingOverlay"]] = []

    def by_kind(self, kind: str) -> List["RecordingOverlay"]:
        return [o for o in self.attached if o.spec.kind == kind]

    def snapshot(self) -> List[Dict[str, Any]]:
        """Attached overlays as dicts, bottom of the stack first."""
        ordered = sorted(enumerate(self.attached), key=lambda item: (item[1].spec.z_index, item[0]))
        out = []
        for _, o in ordered:
            left, top, w, h = o.box if o.box is not None else (None, None, None, None)
            out.append({
                "kind": o.spec.kind,
                "cluster": o.spec.target.cluster.key,
                "count": o.spec.target.count,
                "text": o.spec.text,
                "left": left,
                "top": top,
                "width": w,
                "height": h,
                "z_index": o.spec.z_index,
            })
        return out


class RecordingOverlay(BaseOverlay):
    def __init__(self, spec: OverlaySpec):
        super().__init__(spec)
        self.moves = 0

    def _on_attach(self, container: RecordingSurface) -> None:
        container.attached.append(self)
        container.events.append(("attach", self))

    def _on_move(self, box) -> None:
        self.moves += 1

    def _on_detach(self) -> None:
        self.container.attached.remove(self)
        self.container.events.append(("detach", self))
