# main.py - entry point
import logging
import os
import pygame
from klondike import common as C
from klondike.scene import KlondikeGameScene

logger = logging.getLogger("klondike")

def _configure_logging():
    level_name = os.environ.get("SOLI_LOG_LEVEL", "WARNING").strip().upper()
    level = getattr(logging, level_name, logging.WARNING)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

def _initial_window_size():
    info = pygame.display.Info()
    # Keep a safety margin so the window never hides under taskbar
    margin_w, margin_h = 120, 140
    w = min(C.SCREEN_W, max(640, info.current_w - margin_w))
    h = min(C.SCREEN_H, max(480, info.current_h - margin_h))
    return w, h

def _confirm_modal_rects():
    mw, mh = 460, 180
    modal = pygame.Rect(0, 0, mw, mh)
    modal.center = (C.SCREEN_W // 2, C.SCREEN_H // 2)
    # Buttons
    bw, bh = 120, 44
    gap = 30
    yes = pygame.Rect(0, 0, bw, bh)
    no  = pygame.Rect(0, 0, bw, bh)
    yes.centerx = modal.centerx - (bw // 2 + gap)
    no.centerx  = modal.centerx + (bw // 2 + gap)
    yes.bottom = modal.bottom - 20
    no.bottom  = modal.bottom - 20
    return modal, yes, no

def _draw_confirm(screen):
    # Dim background
    overlay = pygame.Surface((C.SCREEN_W, C.SCREEN_H), pygame.SRCALPHA)
    overlay.fill((0, 0, 0, 160))
    screen.blit(overlay, (0, 0))
    modal, yes_r, no_r = _confirm_modal_rects()
    pygame.draw.rect(screen, (240, 240, 240), modal, border_radius=16)
    pygame.draw.rect(screen, (80, 80, 80), modal, width=2, border_radius=16)
    title = C.FONT_TITLE.render("Quit Game?", True, (20, 20, 20))
    screen.blit(title, (modal.centerx - title.get_width() // 2, modal.y + 20))
    msg = C.FONT_UI.render("The current game will be lost.", True, (30, 30, 30))
    screen.blit(msg, (modal.centerx - msg.get_width() // 2, modal.y + 20 + title.get_height() + 8))
    for rect, label in ((yes_r, "Yes"), (no_r, "No")):
        pygame.draw.rect(screen, (230, 230, 235), rect, border_radius=10)
        pygame.draw.rect(screen, (100, 100, 110), rect, 1, border_radius=10)
        t = C.FONT_UI.render(label, True, (20, 20, 25))
        screen.blit(t, (rect.centerx - t.get_width() // 2, rect.centery - t.get_height() // 2))

def main():
    _configure_logging()
    # Center window and init
    os.environ.setdefault("SDL_VIDEO_CENTERED", "1")
    pygame.init()

    settings = C.load_settings()
    C.apply_card_settings(size_name=settings["card_size"], back_color=settings["back_color"])

    # Pick a safe default size for this desktop
    w, h = _initial_window_size()
    C.SCREEN_W, C.SCREEN_H = w, h
    screen = pygame.display.set_mode((w, h), pygame.RESIZABLE)
    pygame.display.set_caption("Klondike")
    C.setup_fonts()
    clock = pygame.time.Clock()

    scene = KlondikeGameScene(app=None, settings=settings)
    logger.info("table ready (%dx%d, seed=%s)", w, h, settings.get("seed"))

    running = True
    confirm_quit = False
    while running:
        dt_ms = clock.tick(60)
        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                confirm_quit = True
                continue
            elif e.type == pygame.VIDEORESIZE:
                # Apply new size and relayout
                C.SCREEN_W, C.SCREEN_H = e.size
                screen = pygame.display.set_mode((C.SCREEN_W, C.SCREEN_H), pygame.RESIZABLE)
                scene.compute_layout()
                continue
            if confirm_quit:
                # Handle confirm dialog input only
                if e.type == pygame.KEYDOWN:
                    if e.key in (pygame.K_ESCAPE, pygame.K_n):
                        confirm_quit = False
                    elif e.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_y):
                        running = False
                elif e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
                    _, yes_r, no_r = _confirm_modal_rects()
                    if yes_r.collidepoint(e.pos):
                        running = False
                    elif no_r.collidepoint(e.pos):
                        confirm_quit = False
                continue
            scene.handle_event(e)
        if not running:
            break
        # The clock stands still while the quit dialog is open
        if not confirm_quit:
            scene.update(dt_ms)
        scene.draw(screen)
        if confirm_quit:
            _draw_confirm(screen)
        pygame.display.flip()
    pygame.quit()

if __name__ == "__main__":
    main()
