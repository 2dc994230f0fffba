from __future__ import annotations

from typing import List, Optional, Tuple
import math

import pygame

from .grid import OccupancyGrid
from .loop import TickReport
from .pose import Point, Pose
from .sensors import ScanReading


Color = Tuple[int, int, int]

THEME = {
    "bg": (18, 22, 32),
    "grid": (28, 34, 48),
    "cell_fill": (45, 52, 70),
    "cell_edge": (65, 75, 98),
    "goal_inner": (0, 230, 180),
    "goal_outer": (0, 180, 140),
    "goal_glow": (0, 140, 110),
    "robot_fill": (100, 220, 255),
    "robot_outline": (40, 140, 200),
    "robot_arrow": (140, 240, 255),
    "trail_start": (60, 160, 200),
    "trail_end": (100, 220, 255),
    "hud_bg": (28, 34, 48),
    "hud_border": (55, 65, 88),
    "hud_text": (200, 220, 255),
    "lidar_close": (255, 90, 90),
    "lidar_mid": (255, 180, 100),
    "lidar_far": (100, 200, 255),
}


def _lerp_color(a: Color, b: Color, t: float) -> Color:
    return (
        int(a[0] + t * (b[0] - a[0])),
        int(a[1] + t * (b[1] - a[1])),
        int(a[2] + t * (b[2] - a[2])),
    )


class PygameRenderer:
    """Top-down view of the grid, goal, trajectory, LiDAR and robot marker.

    Coordinates:
    - World origin (0,0) is mapped to the bottom-left of the screen.
    - Y axis is flipped so that world +y is up while screen y increases downward.

    Pass ``on_tick`` to the SimulationLoop as an observer.
    """

    def __init__(
        self,
        grid: OccupancyGrid,
        goal: Point,
        goal_radius: float,
        window_width: int,
        window_height: int,
        fps: int = 60,
        show_lidar: bool = True,
        show_trail: bool = True,
        trail_max_length: int = 5000,
    ) -> None:
        pygame.init()
        pygame.display.set_caption("Potential Field Navigation")
        self.screen = pygame.display.set_mode((window_width, window_height))
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("monospace", 13)

        self.grid = grid
        self.goal = goal
        self.goal_radius = goal_radius
        self.window_width = window_width
        self.window_height = window_height
        self.fps = fps
        self.show_lidar = show_lidar
        self.show_trail = show_trail
        self.trail_max_length = trail_max_length
        self.trail: List[Point] = []
        self.closed = False

        self.scale_x = window_width / grid.width
        self.scale_y = window_height / grid.height

        # Obstacles never change during a run; draw them once
        self._background = pygame.Surface((window_width, window_height))
        self._draw_background(self._background)

    # ------------------------------------------------------------------
    # Coordinate transforms
    # ------------------------------------------------------------------
    def _world_to_screen(self, x: float, y: float) -> Tuple[int, int]:
        sx = int(x * self.scale_x)
        sy = int(self.window_height - y * self.scale_y)
        return sx, sy

    def _length_to_pixels(self, r: float) -> int:
        return int(r * 0.5 * (self.scale_x + self.scale_y))

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def _draw_background(self, surface: pygame.Surface) -> None:
        surface.fill(THEME["bg"])
        step = 10.0
        x = 0.0
        while x <= self.grid.width:
            pygame.draw.line(surface, THEME["grid"], self._world_to_screen(x, 0.0), self._world_to_screen(x, self.grid.height), 1)
            x += step
        y = 0.0
        while y <= self.grid.height:
            pygame.draw.line(surface, THEME["grid"], self._world_to_screen(0.0, y), self._world_to_screen(self.grid.width, y), 1)
            y += step

        s = self.grid.cell_size
        cw = max(1, int(math.ceil(s * self.scale_x)))
        ch = max(1, int(math.ceil(s * self.scale_y)))
        for ix, iy in self.grid.occupied_cells():
            sx, sy = self._world_to_screen(ix * s, (iy + 1) * s)
            rect = pygame.Rect(sx, sy, cw, ch)
            pygame.draw.rect(surface, THEME["cell_fill"], rect)
            pygame.draw.rect(surface, THEME["cell_edge"], rect, 1)

        goal_pos = self._world_to_screen(*self.goal)
        pygame.draw.circle(surface, THEME["goal_glow"], goal_pos, self._length_to_pixels(self.goal_radius), 1)
        pygame.draw.circle(surface, THEME["goal_outer"], goal_pos, self._length_to_pixels(1.5), 2)
        pygame.draw.circle(surface, THEME["goal_inner"], goal_pos, self._length_to_pixels(1.0))

    def on_tick(self, report: TickReport) -> None:
        """Observer hook: draw the frame for a tick and pace to the target FPS."""
        if self.closed:
            return
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.close()
                return
        self.draw(report.pose, report.scan, report)
        self.clock.tick(self.fps)

    def draw(self, pose: Pose, scan: Optional[ScanReading] = None, report: Optional[TickReport] = None) -> None:
        """Render one frame."""
        self.screen.blit(self._background, (0, 0))

        if self.show_trail:
            self.trail.append(pose.position)
            if len(self.trail) > self.trail_max_length:
                self.trail = self.trail[-self.trail_max_length :]
            if len(self.trail) >= 2:
                pts = [self._world_to_screen(p[0], p[1]) for p in self.trail]
                n = len(pts) - 1
                for i in range(n):
                    t = (i + 1) / max(n, 1)
                    color = _lerp_color(THEME["trail_start"], THEME["trail_end"], t)
                    pygame.draw.line(self.screen, color, pts[i], pts[i + 1], 2 if i == n - 1 else 1)

        if self.show_lidar and scan is not None and len(scan) > 0:
            self._draw_lidar(pose, scan)

        self._draw_robot(pose)
        if report is not None:
            self._draw_hud(report)
        pygame.display.flip()

    def _draw_robot(self, pose: Pose) -> None:
        center = self._world_to_screen(pose.x, pose.y)
        radius_px = max(3, self._length_to_pixels(1.0))
        pygame.draw.circle(self.screen, THEME["robot_fill"], center, radius_px, 0)
        pygame.draw.circle(self.screen, THEME["robot_outline"], center, radius_px, 2)

        arrow_len = 3.0
        hx = pose.x + math.cos(pose.theta) * arrow_len
        hy = pose.y + math.sin(pose.theta) * arrow_len
        head = self._world_to_screen(hx, hy)
        pygame.draw.line(self.screen, THEME["robot_arrow"], center, head, 3)
        wing = 0.8
        tri = [head]
        for side in (1.0, -1.0):
            back = pose.theta + side * math.pi * 0.85
            tri.append(self._world_to_screen(hx + math.cos(back) * wing, hy + math.sin(back) * wing))
        pygame.draw.polygon(self.screen, THEME["robot_arrow"], tri)

    def _draw_lidar(self, pose: Pose, scan: ScanReading) -> None:
        max_range = max(scan.ranges)
        if max_range < 1e-6:
            max_range = 1.0
        sx, sy = self._world_to_screen(pose.x, pose.y)
        close, mid, far = THEME["lidar_close"], THEME["lidar_mid"], THEME["lidar_far"]
        for r, angle in scan:
            t = min(1.0, r / max_range)  # 0 = close, 1 = far
            if t < 0.5:
                color = _lerp_color(close, mid, t * 2.0)
            else:
                color = _lerp_color(mid, far, (t - 0.5) * 2.0)
            ex = pose.x + r * math.cos(angle)
            ey = pose.y + r * math.sin(angle)
            pygame.draw.line(self.screen, color, (sx, sy), self._world_to_screen(ex, ey), 1)

    def _draw_hud(self, report: TickReport) -> None:
        pad = 10
        text = f"  tick={report.tick}   dist={report.distance_to_goal:.2f}   {report.status.value}  "
        surf = self.font.render(text, True, THEME["hud_text"])
        panel = surf.get_rect(topleft=(pad, pad)).inflate(pad, pad)
        pygame.draw.rect(self.screen, THEME["hud_bg"], panel)
        pygame.draw.rect(self.screen, THEME["hud_border"], panel, 1)
        self.screen.blit(surf, (panel.x + 4, panel.y + 4))

    def wait_for_close(self) -> None:
        """Keep the last frame on screen until the window is closed."""
        while not self.closed:
            for event in pygame.event.get():
                if event.type == pygame.QUIT or (event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE):
                    self.close()
                    return
            self.clock.tick(30)

    def close(self) -> None:
        if not self.closed:
            pygame.quit()
            self.closed = True
