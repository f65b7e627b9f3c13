from __future__ import annotations

DEFAULT_SPLIT = 50.0


class ComparisonController:
    """前后对比滑块

    split 是"重新生成前"图片覆盖层的宽度百分比。拖动期间指针离开对比区域
    仍然有效，松开时无论指针在哪里都结束拖动。
    """

    def __init__(self, split: float = DEFAULT_SPLIT) -> None:
        self.split = max(0.0, min(float(split), 100.0))
        self.dragging = False

    def pointer_down(self) -> None:
        self.dragging = True

    def pointer_move(self, x: float, surface_left: float, surface_width: float) -> float:
        if not self.dragging or surface_width <= 0:
            return self.split
        offset = max(0.0, min(x - surface_left, surface_width))
        self.split = offset / surface_width * 100.0
        return self.split

    def pointer_up(self) -> None:
        self.dragging = False

    def crop_fractions(self) -> tuple[float, float]:
        return self.split, 100.0 - self.split

    def reset(self) -> None:
        self.split = DEFAULT_SPLIT
        self.dragging = False
