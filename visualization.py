# visualization.py
"""
Previews the primitive buffer using Pygame.

The Visualizer plays the part of the external render host: it declares the
capacity it can display, receives every rebuilt buffer through
`set_primitives`, and turns key presses into pipeline entry points.
"""
import logging
from typing import Any, Dict, Optional, Tuple

import numpy as np
import pygame

from constants import (
    BACKGROUND_COLOR, DEFAULT_CAPACITY, DEFAULT_ROTATION_SPEED, DEFAULT_WINDOW_HEIGHT,
    DEFAULT_WINDOW_WIDTH, FPS, SIZE_STEP, VIEW_FILL_RATIO
)
from primitives import PrimitiveBuffer

# Type hints only; the pipeline drives this module, not the other way round
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from pipeline import CycleReport, ParticleDatasetPipeline


# --- Data Contracts ---
#
# project_to_screen(positions, angle, scale, center) -> Tuple[np.ndarray, np.ndarray]:
#   - Inputs:
#     - positions: float array (N, 3) of centroid-relative positions.
#     - angle: rotation about the Y axis in radians.
#     - scale: pixels per world unit.
#     - center: screen pixel the centroid is drawn at.
#   - Outputs: int32 array (N, 2) of screen coordinates and float array (N,)
#     of depths (larger is closer to the viewer).
#
# class Visualizer:
#   - __init__(self, params: Optional[Dict[str, Any]] = None):
#     - Inputs: the "visualization" config section ("max_particles",
#       "window_width", "window_height", "rotation_speed").
#     - Side Effects: Initializes Pygame and creates a display surface.
#
#   - set_primitives(self, buffer: PrimitiveBuffer, count: int) -> None:
#     - Side Effects: replaces the displayed buffer and refits the view scale.
#
#   - draw(self, pipeline: ParticleDatasetPipeline) -> bool:
#     - Outputs: False if the user has quit, True otherwise.
#     - Side Effects: Renders the buffer, handles events, and may change the
#       pipeline's size or color mode (followed by remap) or reload it.

def project_to_screen(
    positions: np.ndarray, angle: float, scale: float, center: Tuple[int, int]
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Orthographic projection after rotating the points about the Y axis.
    """
    cos_a, sin_a = np.cos(angle), np.sin(angle)
    x = positions[:, 0] * cos_a + positions[:, 2] * sin_a
    y = positions[:, 1]
    depth = -positions[:, 0] * sin_a + positions[:, 2] * cos_a

    screen = np.empty((positions.shape[0], 2), dtype=np.int32)
    screen[:, 0] = np.rint(center[0] + x * scale)
    # Screen Y grows downwards.
    screen[:, 1] = np.rint(center[1] - y * scale)
    return screen, depth


class Visualizer:
    """
    Renders the primitive buffer and forwards user edits to the pipeline.
    """
    def __init__(self, params: Optional[Dict[str, Any]] = None):
        params = params if params is not None else {}
        pygame.init()
        pygame.font.init()

        self.width = params.get('window_width', DEFAULT_WINDOW_WIDTH)
        self.height = params.get('window_height', DEFAULT_WINDOW_HEIGHT)
        self.screen = pygame.display.set_mode((self.width, self.height))
        pygame.display.set_caption("Particle Dataset Renderer")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont(None, 20)

        # Maximum number of primitives this host displays; the pipeline never exceeds it.
        self.max_particles = params.get('max_particles', DEFAULT_CAPACITY)
        self.rotation_speed = params.get('rotation_speed', DEFAULT_ROTATION_SPEED)
        self.angle = 0.0

        self.buffer = PrimitiveBuffer.empty()
        self.count = 0
        self.scale = 1.0
        self.text_color = (220, 220, 220)

        logging.info(
            f"Visualizer initialized with Pygame display ({self.width}x{self.height}), "
            f"max {self.max_particles} particles."
        )

    def set_primitives(self, buffer: PrimitiveBuffer, count: int) -> None:
        """Receives a freshly built buffer from the pipeline."""
        self.buffer = buffer
        self.count = count
        extent = float(np.max(np.linalg.norm(buffer.positions, axis=1))) if count else 0.0
        self.scale = VIEW_FILL_RATIO * min(self.width, self.height) / extent if extent > 0 else 1.0
        logging.debug(f"Visualizer received {count} primitives. View scale {self.scale:.3f} px/unit.")

    def _log_report(self, report: "CycleReport") -> None:
        if not report.ok:
            logging.warning(f"{report.stage} finished with error: {report.error}")
        else:
            logging.info(f"{report.stage} produced {report.primitive_count} particles.")

    def _handle_key(self, key: int, pipeline: "ParticleDatasetPipeline") -> bool:
        if key == pygame.K_ESCAPE:
            logging.info("ESC key pressed. Shutting down visualizer.")
            return False

        if key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
            pipeline.set_particle_size(pipeline.particle_size * SIZE_STEP)
            logging.info(f"Particle size increased to {pipeline.particle_size:.4f} by user.")
            self._log_report(pipeline.remap())
        elif key in (pygame.K_MINUS, pygame.K_KP_MINUS):
            pipeline.set_particle_size(pipeline.particle_size / SIZE_STEP)
            logging.info(f"Particle size decreased to {pipeline.particle_size:.4f} by user.")
            self._log_report(pipeline.remap())
        elif key == pygame.K_c:
            new_mode = "speed" if pipeline.color_mode.value == "distance" else "distance"
            pipeline.set_color_mode(new_mode)
            logging.info(f"Color mode switched to '{new_mode}' by user.")
            self._log_report(pipeline.remap())
        elif key == pygame.K_r:
            logging.info("Reload requested by user.")
            self._log_report(pipeline.reload())
        return True

    def _draw_hud(self, pipeline: "ParticleDatasetPipeline") -> None:
        lines = [
            f"Particles: {self.count}/{self.max_particles}",
            f"Size: {pipeline.particle_size:.3f}  Color: {pipeline.color_mode.value}",
            "+/- size   C color mode   R resample   ESC quit",
        ]
        y = 10
        for line in lines:
            surf = self.font.render(line, True, self.text_color)
            self.screen.blit(surf, (10, y))
            y += self.font.get_linesize()

    def draw(self, pipeline: "ParticleDatasetPipeline") -> bool:
        """
        Draws all primitives and the HUD, and handles events.

        Returns:
            bool: False if the renderer should exit, True otherwise.
        """
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                logging.info("Quit event received. Shutting down visualizer.")
                return False
            if event.type == pygame.KEYDOWN:
                if not self._handle_key(event.key, pipeline):
                    return False

        self.screen.fill(BACKGROUND_COLOR)

        if self.count:
            particle_surface = pygame.Surface((self.width, self.height), pygame.SRCALPHA)
            center = (self.width // 2, self.height // 2)
            screen_pos, depth = project_to_screen(self.buffer.positions, self.angle, self.scale, center)
            colors = np.clip(self.buffer.colors * 255.0, 0, 255).astype(np.uint8)
            radii = np.maximum(1, (self.buffer.sizes * self.scale).astype(np.int32))

            # Back to front. Only the drawing order changes, never the buffer.
            for i in np.argsort(depth, kind='stable'):
                pygame.draw.circle(
                    particle_surface,
                    tuple(int(c) for c in colors[i]),
                    (int(screen_pos[i, 0]), int(screen_pos[i, 1])),
                    int(radii[i])
                )
            self.screen.blit(particle_surface, (0, 0))

        self._draw_hud(pipeline)
        pygame.display.flip()
        self.clock.tick(FPS)
        self.angle = (self.angle + self.rotation_speed) % (2 * np.pi)
        return True

    def close(self):
        """Shuts down Pygame."""
        pygame.font.quit()
        pygame.quit()
