"""ToyCV-style Tk sliders for head and controller orientation."""

from __future__ import annotations

import logging
import tkinter as tk

import numpy as np

from ..control.pose import Pose6D
from ..control.pose_provider import PoseProvider
from ..math3d.quaternion import euler_yaw_pitch_roll_to_q

logger = logging.getLogger(__name__)

TICK_MS = 16


class ToyCvTkPoseProvider(PoseProvider):
    """Debug provider: controller and head pitch/yaw from sliders."""

    def __init__(self, title: str, head_height: float = 1.6):
        try:
            self.root = tk.Tk()
        except tk.TclError as exc:
            raise RuntimeError(f"pose-provider=toycv needs a display: {exc}") from exc
        self.root.title(title)

        self._var_controller_pitch = tk.DoubleVar(value=0.0)
        self._var_controller_yaw = tk.DoubleVar(value=0.0)
        self._var_head_pitch = tk.DoubleVar(value=0.0)
        self._var_head_yaw = tk.DoubleVar(value=0.0)
        self._var_head_height = tk.DoubleVar(value=float(head_height))

        self._build_ui()

        self._on_tick = None
        self._closed = False
        self.root.protocol("WM_DELETE_WINDOW", self._handle_close)
        logger.info("[POSE] provider=toycv (head_height=%.2fm)", head_height)

    def _build_ui(self) -> None:
        def add_slider(
            label: str, var: tk.DoubleVar, lo: float, hi: float, resolution: float = 1
        ) -> None:
            tk.Label(self.root, text=label).pack(anchor="w", padx=10, pady=2)
            tk.Scale(
                self.root,
                from_=lo,
                to=hi,
                orient="horizontal",
                resolution=resolution,
                length=520,
                variable=var,
            ).pack(padx=10, pady=2)

        add_slider("Controller pitch (deg) [-90..90]", self._var_controller_pitch, -90, 90)
        add_slider("Controller yaw (deg)   [-180..180]", self._var_controller_yaw, -180, 180)
        add_slider("Head pitch (deg)       [-90..90]", self._var_head_pitch, -90, 90)
        add_slider("Head yaw (deg)         [-180..180]", self._var_head_yaw, -180, 180)
        add_slider("Head height (m)        [0.5..2.2]", self._var_head_height, 0.5, 2.2, 0.01)

        self._stats = tk.Label(self.root, text="", justify="left", font=("Consolas", 10))
        self._stats.pack(padx=10, pady=8)

    def _handle_close(self) -> None:
        self._closed = True
        self.root.destroy()

    def get_controller_quaternion(self) -> np.ndarray:
        return euler_yaw_pitch_roll_to_q(
            float(self._var_controller_yaw.get()),
            float(self._var_controller_pitch.get()),
            0.0,
        )

    def get_head_pose(self) -> Pose6D:
        return Pose6D(
            position=np.array(
                [0.0, float(self._var_head_height.get()), 0.0], dtype=np.float64
            ),
            quaternion=euler_yaw_pitch_roll_to_q(
                float(self._var_head_yaw.get()),
                float(self._var_head_pitch.get()),
                0.0,
            ),
        )

    def set_status(self, text: str) -> None:
        if not self._closed:
            self._stats.config(text=text)

    def run(self, on_tick):
        self._on_tick = on_tick
        self.root.after(TICK_MS, self._tick)
        self.root.mainloop()

    def _tick(self) -> None:
        if self._closed:
            return
        if self._on_tick is not None:
            self._on_tick()
        self.root.after(TICK_MS, self._tick)

    def close(self) -> None:
        if not self._closed:
            self._handle_close()
