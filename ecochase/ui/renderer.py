# ecochase/ui/renderer.py
from __future__ import annotations
import pygame

# ---------- Colors / Theme ----------
BG_COLOR      = (14,16,20)
GRID_COLOR    = (35,40,48)
CELL_COLOR    = (22,25,31)
OBSTACLE_COLOR= (88,92,104)
PATH_COLOR    = (235,200,70)
PREY_COLOR    = (60,200,120)
TARGET_RING   = (240,240,240)
PREDATOR_COLOR= (220,60,60)
PANEL_BG      = (10,12,16)

# Top bar colors
TOPBAR_BG     = (24,26,32)
TOPBAR_LINE   = (54,58,66)

PHASE_COLORS = {
    "idle":     (160,165,175),
    "running":  (90,220,120),
    "paused":   (240,160,60),
    "finished": (70,140,240),
}

# ---------- Layout knobs (tweak here) ----------
DRAW_TOPBAR      = True
TOPBAR_HEIGHT    = 100
HUD_PAD_X        = 12
HUD_PAD_Y        = 10
PANEL_PADDING    = 12
TITLE_GAP        = 6
SECTION_GAP      = 10
LOG_LINES        = 18


def _wrap(text: str, font, width: int):
    words, lines, cur = text.split(), [], ""
    for w in words:
        trial = f"{cur} {w}".strip()
        if font.size(trial)[0] <= width or not cur:
            cur = trial
        else:
            lines.append(cur)
            cur = w
    if cur:
        lines.append(cur)
    return lines


class Renderer:
    def __init__(self, screen, world_rect: pygame.Rect, panel_rect: pygame.Rect, font_name="Menlo"):
        self.screen = screen
        self.topbar_height = TOPBAR_HEIGHT
        self.resize(world_rect, panel_rect)

        self.font = pygame.font.SysFont(font_name, 14)
        self.bigfont = pygame.font.SysFont(font_name, 18, bold=True)

        self.show_path = True       # toggled by 'P'

    # Public API: call when window resizes
    def resize(self, world_rect: pygame.Rect, panel_rect: pygame.Rect):
        """Update layout rects after a window resize."""
        self.panel_rect_outer = panel_rect
        self.panel_content = self.panel_rect_outer.inflate(-2*PANEL_PADDING, -2*PANEL_PADDING)
        self.world_rect = pygame.Rect(
            world_rect.x,
            world_rect.y + self.topbar_height,
            world_rect.w,
            max(0, world_rect.h - self.topbar_height)
        )

    # ---------- coordinate helpers ----------
    def _cell_px(self, n: int) -> int:
        return max(2, min(self.world_rect.w, self.world_rect.h) // max(1, n))

    def cell_rect(self, x: int, y: int, n: int) -> pygame.Rect:
        c = self._cell_px(n)
        return pygame.Rect(self.world_rect.x + x * c, self.world_rect.y + y * c, c, c)

    # ---------- top bar ----------
    def _draw_topbar(self):
        if not DRAW_TOPBAR:
            return
        scr = self.screen.get_rect()
        bar = pygame.Rect(0, 0, scr.w, self.topbar_height)
        pygame.draw.rect(self.screen, TOPBAR_BG, bar)
        pygame.draw.line(self.screen, TOPBAR_LINE, (0, self.topbar_height), (scr.w, self.topbar_height), 1)

    # ---------- world ----------
    def draw_world(self, state):
        self._draw_topbar()
        n = state.grid_size
        c = self._cell_px(n)
        board = pygame.Rect(self.world_rect.x, self.world_rect.y, c * n, c * n)
        pygame.draw.rect(self.screen, CELL_COLOR, board)
        if c >= 6:
            for k in range(n + 1):
                pygame.draw.line(self.screen, GRID_COLOR, (board.x + k*c, board.y), (board.x + k*c, board.bottom), 1)
                pygame.draw.line(self.screen, GRID_COLOR, (board.x, board.y + k*c), (board.right, board.y + k*c), 1)

        for o in state.obstacles:
            pygame.draw.rect(self.screen, OBSTACLE_COLOR, self.cell_rect(o.x, o.y, n).inflate(-1, -1))

        if self.show_path:
            for p in state.last_path:
                r = self.cell_rect(p.x, p.y, n)
                pygame.draw.circle(self.screen, PATH_COLOR, r.center, max(1, c // 6))

        for p in state.prey:
            r = self.cell_rect(p.position.x, p.position.y, n)
            pygame.draw.circle(self.screen, PREY_COLOR, r.center, max(2, c // 3))
            if p.id == state.target_id:
                pygame.draw.circle(self.screen, TARGET_RING, r.center, max(3, c // 2 - 1), 1)

        r = self.cell_rect(state.predator.x, state.predator.y, n)
        pygame.draw.rect(self.screen, PREDATOR_COLOR, r.inflate(-max(2, c // 5), -max(2, c // 5)), border_radius=3)
        pygame.draw.rect(self.screen, (70,75,85), board, 2)

    # ---------- right panel: log + explanation ----------
    def draw_panel(self, live):
        pr = self.panel_rect_outer
        pc = self.panel_content
        pygame.draw.rect(self.screen, PANEL_BG, pr)
        pygame.draw.rect(self.screen, (70,75,85), pr, 2)

        title = self.bigfont.render("Game Console", True, (220,220,230))
        self.screen.blit(title, (pc.x, pc.y))
        y = pc.y + title.get_height() + TITLE_GAP

        for entry in live.state.log[-LOG_LINES:]:
            for line in _wrap(f"[{entry.tick}] {entry.message}", self.font, pc.w):
                self.screen.blit(self.font.render(line, True, (190,195,205)), (pc.x, y))
                y += 16
        y += SECTION_GAP

        if live.explanation:
            self.screen.blit(self.bigfont.render("Path explanation", True, (220,220,230)), (pc.x, y))
            y += 24
            for line in _wrap(live.explanation, self.font, pc.w):
                if y > pc.bottom - 40:
                    break
                self.screen.blit(self.font.render(line, True, (170,175,185)), (pc.x, y))
                y += 16

        if live.warnings:
            msg = live.warnings[-1]
            self.screen.blit(self.font.render(f"! {msg}"[:90], True, (240,160,60)), (pc.x, pc.bottom - 18))

    def draw_hud(self, live, rec_enabled, prompt_text=None):
        s = live.state
        cfg = live.config
        lines = [
            (f"Tick: {s.tick}   Reward: {s.reward}   Prey left: {len(s.prey)}   Captured: {len(s.captured)}", None),
            (f"Phase: {s.phase.upper()}   Algo: {s.algorithm}   Grid: {cfg.grid_size}   Prey: {cfg.num_prey}   "
             f"Density: {cfg.obstacle_density:.2f}   Seed: {cfg.seed}   {'REC ON' if rec_enabled else 'REC OFF'}"
             f"{'   [collaborator busy]' if live.busy else ''}", PHASE_COLORS.get(s.phase)),
            ("Controls:", None),
            (" Space Start/Pause   R Reset (new seed)   N Reset (same seed)   A toggle BFS/A*   "
             "+/- prey   [ ] grid   O/I density   P path", None),
            (" G generate from prompt   E explain path   V record   C clear rec   S save NPZ   Esc quit", None),
        ]
        if prompt_text is not None:
            lines.append((f"Prompt> {prompt_text}_   (Enter submit, Esc cancel)", (240,240,100)))
        x, y = HUD_PAD_X, HUD_PAD_Y
        for i, (text, col) in enumerate(lines):
            col = col or ((225,225,235) if i < 2 else (170,175,185))
            self.screen.blit(self.font.render(text, True, col), (x, y))
            y += 16
