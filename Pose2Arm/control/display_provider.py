"""Display providers for rendering arm model state."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass

import numpy as np

from ..math3d.coords import vec_to_az_el_deg
from ..math3d.quaternion import FORWARD, q_rotate_vec
from .arm_model import ArmModelDiagnostics
from .pose import Pose6D
from .pose_provider import PoseProvider

logger = logging.getLogger(__name__)

FIGURE_HEIGHT = 1.6
POINTER_LENGTH = 0.1


@dataclass(slots=True)
class ArmDisplayFrame:
    """Runtime frame data shared by all display providers."""

    frame_index: int
    arm_pose: Pose6D
    head_pose: Pose6D
    root_q: np.ndarray
    elbow_world: np.ndarray
    wrist_world: np.ndarray
    forearm_length: float
    diagnostics: ArmModelDiagnostics


class DisplayProvider:
    """Base display provider interface."""

    def update(self, frame: ArmDisplayFrame) -> None:
        raise NotImplementedError

    def close(self) -> None:
        pass


def controller_pointer(frame: ArmDisplayFrame) -> tuple[np.ndarray, np.ndarray]:
    """Segment from the wrist along the controller's forward direction."""
    direction = q_rotate_vec(frame.arm_pose.quaternion, FORWARD)
    start = np.asarray(frame.wrist_world, dtype=np.float64).reshape(3)
    return start, start + direction * POINTER_LENGTH


def _status_lines(frame: ArmDisplayFrame) -> list[str]:
    p = frame.arm_pose.position
    q = frame.arm_pose.quaternion
    e = frame.elbow_world
    w = frame.wrist_world
    d = frame.diagnostics
    az, el = vec_to_az_el_deg(q_rotate_vec(q, FORWARD))
    return [
        f"controller xyz (m) = [{p[0]: .3f}, {p[1]: .3f}, {p[2]: .3f}]",
        f"pointing az/el     = ({az:7.2f} deg, {el:7.2f} deg)",
        f"elbow xyz (m)      = [{e[0]: .3f}, {e[1]: .3f}, {e[2]: .3f}]",
        f"wrist xyz (m)      = [{w[0]: .3f}, {w[1]: .3f}, {w[2]: .3f}]",
        (
            f"extension          = {d.extension_ratio:.2f}  "
            f"lerp={d.lerp_value:.3f} (suppression {d.lerp_suppression:.3f})"
        ),
        (
            f"angular speed      = {d.angular_speed:.2f} rad/s  "
            f"root={'snap' if d.root_snapped else 'attenuated'}"
        ),
        (
            f"q=[w,x,y,z]        = [{q[0]: .4f}, {q[1]: .4f}, "
            f"{q[2]: .4f}, {q[3]: .4f}]"
        ),
    ]


class _CliStatsSink:
    def __init__(self, mode: str):
        self.mode = "live" if mode == "live" else "scroll"
        self._is_tty = bool(getattr(sys.stderr, "isatty", lambda: False)())
        self._live_enabled = self.mode == "live" and self._is_tty
        self._line_count = 0

    def emit(self, lines: list[str], scroll_line: str) -> None:
        if not self._live_enabled:
            logger.info(scroll_line)
            return

        out = sys.stderr
        if self._line_count > 0:
            out.write(f"\x1b[{self._line_count}F")

        max_lines = max(self._line_count, len(lines))
        for i in range(max_lines):
            line = lines[i] if i < len(lines) else ""
            out.write("\x1b[2K")
            out.write(line)
            out.write("\n")
        out.flush()
        self._line_count = len(lines)


class TuiDisplayProvider(DisplayProvider):
    """Terminal + pose UI text display provider."""

    def __init__(self, pose_provider: PoseProvider, cli_output: str = "live"):
        self.pose_provider = pose_provider
        self.cli_sink = _CliStatsSink(cli_output)

    def update(self, frame: ArmDisplayFrame) -> None:
        lines = _status_lines(frame)
        self.pose_provider.set_status("\n".join(lines))

        p = frame.arm_pose.position
        d = frame.diagnostics
        self.cli_sink.emit(
            lines=["Pose2Arm Live Arm Model", f"frame              = {frame.frame_index}"]
            + lines,
            scroll_line=(
                "[ARM] frame=%d controller_xyz=(%.3f, %.3f, %.3f) ext=%.2f lerp=%.3f "
                "speed=%.2f root=%s"
                % (
                    frame.frame_index,
                    p[0],
                    p[1],
                    p[2],
                    d.extension_ratio,
                    d.lerp_value,
                    d.angular_speed,
                    "snap" if d.root_snapped else "attenuated",
                )
            ),
        )


class Matplotlib3DAnimationDisplayProvider(DisplayProvider):
    """Third-person stick figure with the articulated forearm, in matplotlib."""

    def __init__(self, title: str = "Pose2Arm 3D Scene"):
        try:
            import matplotlib.pyplot as plt
        except ImportError as exc:
            raise RuntimeError(
                "display-provider=3d requires matplotlib. Install with: pip install matplotlib"
            ) from exc

        self.plt = plt
        self.plt.ion()
        self.fig = self.plt.figure(title)
        self.ax = self.fig.add_subplot(111, projection="3d")
        # World y is up; matplotlib's third axis is drawn vertical.
        self.ax.set_xlabel("x (right)")
        self.ax.set_ylabel("-z (forward)")
        self.ax.set_zlabel("y (up)")

        (self.body_line,) = self.ax.plot(
            [0.0, 0.0], [0.0, 0.0], [0.0, FIGURE_HEIGHT], c="0.6", lw=6.0, label="body"
        )
        (self.facing_line,) = self.ax.plot(
            [0.0, 0.0], [0.0, 0.2], [FIGURE_HEIGHT, FIGURE_HEIGHT], c="tab:green", lw=2.0,
            label="root facing",
        )
        (self.forearm_line,) = self.ax.plot(
            [0.0, 0.0], [0.0, 0.0], [0.0, 0.0], c="tab:red", lw=3.0, label="forearm"
        )
        (self.pointer_line,) = self.ax.plot(
            [0.0, 0.0], [0.0, 0.0], [0.0, 0.0], c="tab:purple", lw=2.0, label="controller"
        )
        self.ax.legend(loc="upper left")
        self.ax.set_xlim(-1.0, 1.0)
        self.ax.set_ylim(-1.0, 1.0)
        self.ax.set_zlim(0.0, 2.0)
        self._enabled = True

    @staticmethod
    def _to_plot(v: np.ndarray) -> tuple[float, float, float]:
        return float(v[0]), float(-v[2]), float(v[1])

    def _set_line(self, line_artist, p0: np.ndarray, p1: np.ndarray) -> None:
        a = self._to_plot(p0)
        b = self._to_plot(p1)
        line_artist.set_data_3d([a[0], b[0]], [a[1], b[1]], [a[2], b[2]])

    def update(self, frame: ArmDisplayFrame) -> None:
        if not self._enabled:
            return
        if not self.plt.fignum_exists(self.fig.number):
            self._enabled = False
            return

        facing = q_rotate_vec(frame.root_q, FORWARD) * 0.2
        top = np.array([0.0, FIGURE_HEIGHT, 0.0], dtype=np.float64)
        self._set_line(self.facing_line, top, top + facing)

        elbow = np.asarray(frame.elbow_world, dtype=np.float64).reshape(3)
        wrist = np.asarray(frame.wrist_world, dtype=np.float64).reshape(3)
        direction = wrist - elbow
        n = float(np.linalg.norm(direction))
        if n > 1e-12:
            direction = direction / n
        self._set_line(self.forearm_line, elbow, elbow + direction * frame.forearm_length)

        p0, p1 = controller_pointer(frame)
        self._set_line(self.pointer_line, p0, p1)

        d = frame.diagnostics
        self.ax.set_title(
            f"ext={d.extension_ratio:.2f}  lerp={d.lerp_value:.2f}  "
            f"root={'snap' if d.root_snapped else 'attenuated'}"
        )
        self.fig.canvas.draw_idle()
        self.plt.pause(0.001)

    def close(self) -> None:
        if not getattr(self, "_enabled", False):
            return
        self._enabled = False
        self.plt.close(self.fig)
