"""
Pygame render sink.
Draws the server pane and one pane per client. In client panes each entity
is drawn twice: a hollow ring at the raw received position and a filled
circle at the interpolated position.
"""

import pygame

from common.config import DEFAULT_FPS


# Entity colors, bound by entity index
COLORS = [
    (255, 80, 80),    # Red
    (80, 255, 80),    # Green
    (80, 80, 255),    # Blue
    (255, 160, 80),   # Orange
]

PANE_SIZE = 320
PANE_MARGIN = 10
ENTITY_RADIUS = 10


class GameRenderer:
    """Pygame-based render sink for the netcode demo."""

    def __init__(self, num_clients: int, fps: int = DEFAULT_FPS):
        pygame.init()
        self.num_panes = num_clients + 1
        self.columns = 2 if self.num_panes > 1 else 1
        rows = (self.num_panes + self.columns - 1) // self.columns
        self.width = self.columns * (PANE_SIZE + PANE_MARGIN) + PANE_MARGIN
        self.height = rows * (PANE_SIZE + PANE_MARGIN) + PANE_MARGIN
        self.fps = fps

        self.screen = pygame.display.set_mode((self.width, self.height))
        pygame.display.set_caption("Snapshot Interpolation Demo")
        self.font = pygame.font.SysFont('monospace', 14)
        self.clock = pygame.time.Clock()

    def _pane_rect(self, pane: int) -> pygame.Rect:
        col = pane % self.columns
        row = pane // self.columns
        return pygame.Rect(PANE_MARGIN + col * (PANE_SIZE + PANE_MARGIN),
                           PANE_MARGIN + row * (PANE_SIZE + PANE_MARGIN),
                           PANE_SIZE, PANE_SIZE)

    @staticmethod
    def _to_screen(rect: pygame.Rect, pos: tuple) -> tuple:
        span = PANE_SIZE - 2 * ENTITY_RADIUS
        return (int(rect.x + ENTITY_RADIUS + pos[0] * span),
                int(rect.y + ENTITY_RADIUS + pos[1] * span))

    def render(self, frame_view: dict):
        """Draw one frame."""
        self.screen.fill((30, 30, 30))

        rect = self._pane_rect(0)
        self._draw_pane(rect, "Server")
        for idx, pos in frame_view['server']:
            color = COLORS[idx % len(COLORS)]
            pygame.draw.circle(self.screen, color,
                               self._to_screen(rect, pos), ENTITY_RADIUS)
        self._draw_label(rect, [f"tick {frame_view['server_tick']}"])

        for view in frame_view['clients']:
            rect = self._pane_rect(view['client'] + 1)
            self._draw_pane(rect, f"Client {view['client']}")
            for idx, pos in view['raw']:
                color = COLORS[idx % len(COLORS)]
                pygame.draw.circle(self.screen, color,
                                   self._to_screen(rect, pos), ENTITY_RADIUS, 2)
            for idx, pos in view['interpolated']:
                color = COLORS[idx % len(COLORS)]
                pygame.draw.circle(self.screen, color,
                                   self._to_screen(rect, pos), ENTITY_RADIUS)
            status = "PAUSED" if view['paused'] else "running"
            self._draw_label(rect, [f"tick {view['tick']}", status])

        pygame.display.flip()
        self.clock.tick(self.fps)

    def _draw_pane(self, rect: pygame.Rect, title: str):
        pygame.draw.rect(self.screen, (45, 45, 45), rect)
        pygame.draw.rect(self.screen, (80, 80, 80), rect, 2)
        label = self.font.render(title, True, (150, 255, 150))
        self.screen.blit(label, (rect.x + 6, rect.bottom - 20))

    def _draw_label(self, rect: pygame.Rect, lines: list):
        y = rect.y + 6
        for line in lines:
            text = self.font.render(line, True, (200, 200, 200))
            self.screen.blit(text, (rect.x + 6, y))
            y += 16

    def check_quit(self) -> bool:
        """Check if user wants to quit."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return True
            if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                return True
        return False

    def close(self):
        pygame.quit()
