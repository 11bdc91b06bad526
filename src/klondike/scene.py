# scene.py - Klondike table: renders engine snapshots, turns clicks/drags into commands, drives the clock
import logging
import random

import pygame

from klondike import common as C
from klondike.engine.cards import SUITS
from klondike.engine.game import GameEngine, GamePhase, MoveRequest

logger = logging.getLogger(__name__)

TICK_MS = 1000


class KlondikeGameScene(C.Scene):
    def __init__(self, app, engine=None, settings=None):
        super().__init__(app)
        settings = settings if settings is not None else C.get_current_settings()
        self.busy_window_ms = int(settings.get("draw_busy_ms", 350))
        if engine is None:
            seed = settings.get("seed")
            engine = GameEngine(rng=random.Random(seed) if seed is not None else None)
        self.engine = engine
        self.view = None
        self.drag = None          # (source, depth, cards, grab offset)
        self.message = ""
        self._tick_acc = 0
        self._busy_left = 0

        # Auto-finish UI/logic
        self.auto_play_active = False
        self._auto_acc = 0
        self.auto_interval_ms = 180  # move a card roughly every 0.18s

        self.compute_layout()
        self.engine.subscribe(self._on_change)
        self.new_game()

    # ---------- Layout ----------
    def compute_layout(self):
        top = C.TOP_BAR_H + 50
        self.stock_pile = C.Pile(40, top, "stock")
        self.waste_pile = C.Pile(40 + C.CARD_W + C.CARD_GAP_X, top, "waste", fan_x=C.CARD_W // 4)
        fx = 40 + 3 * (C.CARD_W + C.CARD_GAP_X)
        self.foundations = {
            suit: C.Pile(fx + i * (C.CARD_W + C.CARD_GAP_X), top, f"foundation:{suit}")
            for i, suit in enumerate(SUITS)
        }
        ty = top + C.CARD_H + 30
        self.tableau = [
            C.Pile(40 + i * (C.CARD_W + C.CARD_GAP_X), ty, f"tableau:{i}", fan_y=C.FAN_Y_UP)
            for i in range(7)
        ]
        bx = C.SCREEN_W - 4 * 130 - 20
        self.b_new = C.Button("New", bx, C.TOP_BAR_H + 8, w=120, h=32)
        self.b_restart = C.Button("Restart", bx + 130, C.TOP_BAR_H + 8, w=120, h=32)
        self.b_undo = C.Button("Undo", bx + 260, C.TOP_BAR_H + 8, w=120, h=32)
        self.b_autofinish = C.Button("Auto Finish", bx + 390, C.TOP_BAR_H + 8, w=120, h=32)
        if self.view is not None:
            self._sync_piles()

    def _sync_piles(self):
        v = self.view
        self.stock_pile.cards = ()
        self.waste_pile.cards = v.waste
        for suit, pile in self.foundations.items():
            top = v.foundations[suit]
            pile.cards = (top,) if top is not None else ()
        for pile, cards in zip(self.tableau, v.tableau):
            pile.cards = cards

    def _on_change(self, snapshot):
        self.view = snapshot
        self._sync_piles()
        if snapshot.phase == GamePhase.WON.value:
            self.auto_play_active = False
            self.message = "Congratulations! You won! Press N for a new game."

    # ---------- Commands ----------
    def new_game(self):
        self.drag = None
        self.message = ""
        self.auto_play_active = False
        self._tick_acc = 0
        self._busy_left = 0
        self.engine.init()

    def restart(self):
        self.drag = None
        self.auto_play_active = False
        self._tick_acc = 0
        if self.engine.restart():
            self.message = ""

    def undo(self):
        self.auto_play_active = False
        if not self.engine.undo():
            self.message = "Nothing to undo."
        else:
            self.message = ""

    def draw_from_stock(self):
        if self.engine.draw():
            self._busy_left = self.busy_window_ms
            if self.busy_window_ms <= 0:
                self.engine.release_busy()

    def start_auto_finish(self):
        if not self.engine.can_auto_finish():
            return
        self.auto_play_active = True
        self._auto_acc = 0

    # ---------- Clock ----------
    def update(self, dt_ms):
        if self.engine.is_busy():
            self._busy_left -= dt_ms
            if self._busy_left <= 0:
                self.engine.release_busy()
        if self.engine.phase is GamePhase.PLAYING:
            self._tick_acc += dt_ms
            while self._tick_acc >= TICK_MS and self.engine.phase is GamePhase.PLAYING:
                self._tick_acc -= TICK_MS
                self.engine.tick()
        if self.auto_play_active:
            self._auto_acc += dt_ms
            if self._auto_acc >= self.auto_interval_ms:
                self._auto_acc = 0
                if not self.engine.auto_finish_step():
                    self.auto_play_active = False

    # ---------- Event handling ----------
    def handle_event(self, e):
        if e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
            self._on_press(e.pos)
        elif e.type == pygame.MOUSEBUTTONUP and e.button == 1:
            self._on_release(e.pos)
        elif e.type == pygame.KEYDOWN:
            if e.key == pygame.K_r:
                self.restart()
            elif e.key == pygame.K_n:
                self.new_game()
            elif e.key == pygame.K_u:
                self.undo()
            elif e.key == pygame.K_a:
                self.start_auto_finish()
            elif e.key == pygame.K_ESCAPE:
                pygame.event.post(pygame.event.Event(pygame.QUIT))

    def _on_press(self, pos):
        if self.b_new.hovered(pos):
            self.new_game(); return
        if self.b_restart.hovered(pos):
            self.restart(); return
        if self.b_undo.hovered(pos):
            self.undo(); return
        if self.b_autofinish.hovered(pos):
            self.start_auto_finish(); return
        if self.auto_play_active:
            return

        if pygame.Rect(self.stock_pile.x, self.stock_pile.y, C.CARD_W, C.CARD_H).collidepoint(pos):
            self.draw_from_stock(); return

        # Waste (only top card draggable)
        wi = self.waste_pile.hit(pos)
        if wi is not None and wi >= 0 and wi == len(self.waste_pile.cards) - 1:
            self._start_drag(self.waste_pile, wi, None, pos); return

        for t in self.tableau:
            hi = t.hit(pos)
            if hi is None or hi == -1:
                continue
            # Face-down cards are never picked up
            if t.cards[hi].face_up:
                self._start_drag(t, hi, hi, pos)
            return

    def _start_drag(self, pile, index, depth, pos):
        r = pile.rect_for_index(index)
        offset = (pos[0] - r.x, pos[1] - r.y)
        self.drag = (pile, depth, pile.cards[index:], offset)

    def _on_release(self, pos):
        if not self.drag:
            return
        pile, depth, cards, _ = self.drag
        self.drag = None
        target = self._drop_target(pos)
        if target is None or target == pile.location:
            return
        if not self.engine.move(MoveRequest(pile.location, target, depth)):
            logger.debug("drop of %s on %s rejected", cards[0].id, target)

    def _drop_target(self, pos):
        for pile in self.foundations.values():
            if pile.drop_rect().collidepoint(pos):
                return pile.location
        for pile in self.tableau:
            if pile.drop_rect().collidepoint(pos):
                return pile.location
        return None

    # ---------- Drawing ----------
    def draw(self, screen):
        screen.fill(C.TABLE_BG)
        v = self.view
        self.draw_top_bar(screen, "Klondike", f"Score: {v.score}   Time: {v.time}")

        mp = pygame.mouse.get_pos()
        self.b_new.draw(screen, hover=self.b_new.hovered(mp))
        self.b_restart.draw(screen, hover=self.b_restart.hovered(mp))
        self.b_undo.draw(screen, hover=self.b_undo.hovered(mp), enabled=v.can_undo)
        can_auto = self.engine.can_auto_finish()
        self.b_autofinish.draw(screen, hover=self.b_autofinish.hovered(mp), enabled=can_auto)

        # Stock: the snapshot only carries its size
        sr = pygame.Rect(self.stock_pile.x, self.stock_pile.y, C.CARD_W, C.CARD_H)
        if v.stock_size:
            screen.blit(C.get_back_surface(), sr.topleft)
            n = C.FONT_SMALL.render(str(v.stock_size), True, C.WHITE)
            screen.blit(n, (sr.centerx - n.get_width() // 2, sr.bottom + 4))
        else:
            pygame.draw.rect(screen, C.WHITE, sr, width=2, border_radius=C.CARD_RADIUS)

        drag_pile = self.drag[0] if self.drag else None
        drag_from = None
        if self.drag:
            drag_from = len(drag_pile.cards) - len(self.drag[2])
        self.waste_pile.draw(screen, skip_from=drag_from if drag_pile is self.waste_pile else None)
        for suit, f in self.foundations.items():
            f.draw(screen)
            if not f.cards:
                glyph = C.FONT_CORNER_SUIT.render(C.SUIT_SYMBOLS[suit], True, C.LIGHT)
                screen.blit(glyph, (f.x + (C.CARD_W - glyph.get_width()) // 2,
                                    f.y + (C.CARD_H - glyph.get_height()) // 2))
        for t in self.tableau:
            t.draw(screen, skip_from=drag_from if drag_pile is t else None)

        # Drag visuals
        if self.drag:
            _, _, cards, (ox, oy) = self.drag
            mx, my = mp
            for i, c in enumerate(cards):
                screen.blit(C.get_card_surface(c), (mx - ox, my - oy + i * C.FAN_Y_UP))

        if self.message:
            msg = C.FONT_UI.render(self.message, True, (255, 255, 180))
            screen.blit(msg, (C.SCREEN_W // 2 - msg.get_width() // 2, C.SCREEN_H - 40))
