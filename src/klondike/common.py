
# common.py - shared settings, drawing helpers and scene base for the Klondike table
import os
import json
import logging
import pygame
from typing import Optional

logger = logging.getLogger(__name__)

# Defaults (may be overridden by persisted settings)
_DEFAULT_SETTINGS = {
    "card_size": "Medium",   # Small | Medium | Large
    "back_color": "Blue",    # Blue | Grey | Red
    "draw_busy_ms": 350,     # draws are ignored for this long after a draw
    "seed": None,            # int for a reproducible deal sequence
}

_CURRENT_SETTINGS = dict(_DEFAULT_SETTINGS)

def _settings_dir() -> str:
    # Prefer %APPDATA% on Windows, else ~/.klondike_solitaire
    base = os.environ.get("APPDATA")
    if base:
        return os.path.join(base, "KlondikeSolitaire")
    return os.path.join(os.path.expanduser("~"), ".klondike_solitaire")

def _settings_path() -> str:
    return os.path.join(_settings_dir(), "settings.json")

def _coerce_seed(value) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)

def get_current_settings():
    return dict(_CURRENT_SETTINGS)

def load_settings():
    global _CURRENT_SETTINGS
    try:
        with open(_settings_path(), "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        data = None
    except (OSError, ValueError) as exc:
        logger.warning("Failed to load settings: %s", exc)
        data = None
    if isinstance(data, dict):
        try:
            _CURRENT_SETTINGS.update({
                "card_size": data.get("card_size", _CURRENT_SETTINGS["card_size"]),
                "back_color": data.get("back_color", _CURRENT_SETTINGS["back_color"]),
                "draw_busy_ms": max(0, int(data.get("draw_busy_ms", _CURRENT_SETTINGS["draw_busy_ms"]))),
                "seed": _coerce_seed(data.get("seed", _CURRENT_SETTINGS["seed"])),
            })
        except (TypeError, ValueError) as exc:
            logger.warning("Ignoring malformed settings: %s", exc)
    # Developer overrides
    env_size = os.environ.get("SOLI_CARD_SIZE", "").strip().capitalize()
    if env_size in ("Small", "Medium", "Large"):
        _CURRENT_SETTINGS["card_size"] = env_size
    env_seed = os.environ.get("SOLI_SEED", "").strip()
    if env_seed:
        try:
            _CURRENT_SETTINGS["seed"] = int(env_seed)
        except ValueError:
            logger.warning("SOLI_SEED is not an integer: %r", env_seed)
    return get_current_settings()

def save_settings(new_values: dict):
    # Merge and write to disk
    global _CURRENT_SETTINGS
    _CURRENT_SETTINGS.update({
        k: new_values[k] for k in _DEFAULT_SETTINGS if k in new_values
    })
    try:
        os.makedirs(_settings_dir(), exist_ok=True)
        with open(_settings_path(), "w", encoding="utf-8") as f:
            json.dump(_CURRENT_SETTINGS, f, indent=2)
    except OSError as exc:
        logger.warning("Failed to save settings: %s", exc)

def reset_settings():
    global _CURRENT_SETTINGS
    _CURRENT_SETTINGS = dict(_DEFAULT_SETTINGS)

def _size_to_dims(size_name: str):
    size_name = (size_name or "Medium").capitalize()
    if size_name == "Small":
        return 75, 105
    if size_name == "Large":
        return 150, 210
    return 100, 140

def apply_card_settings(size_name: str = None, back_color: str = None):
    # Update globals for gameplay rendering
    global BACK_COLOR, CARD_W, CARD_H
    if size_name is not None:
        CARD_W, CARD_H = _size_to_dims(size_name)
    if back_color is not None:
        BACK_COLOR = back_color
    invalidate_card_caches()


# ---------- Configuration ----------
SCREEN_W, SCREEN_H = 1280, 800
TABLE_BG = (2, 100, 40)

CARD_W, CARD_H = _size_to_dims(_DEFAULT_SETTINGS["card_size"])
BACK_COLOR = _DEFAULT_SETTINGS["back_color"]
CARD_RADIUS = 10
CARD_GAP_X = 18
FAN_Y_DOWN = 12
FAN_Y_UP = 28
TOP_BAR_H = 60

# Fonts are initialized via setup_fonts() AFTER pygame.init()
FONT_NAME = None
FONT_SMALL = None
FONT_UI = None
FONT_TITLE = None
FONT_CORNER_RANK = None
FONT_CORNER_SUIT = None

def setup_fonts():
    global FONT_NAME, FONT_SMALL, FONT_UI, FONT_TITLE, FONT_CORNER_RANK, FONT_CORNER_SUIT
    FONT_NAME = pygame.font.get_default_font()
    FONT_SMALL = pygame.font.SysFont(FONT_NAME, 20, bold=True)
    FONT_UI = pygame.font.SysFont(FONT_NAME, 26, bold=True)
    FONT_TITLE = pygame.font.SysFont(FONT_NAME, 44, bold=True)
    FONT_CORNER_RANK = pygame.font.SysFont(FONT_NAME, 28, bold=True)
    # Suit glyphs need a Unicode-capable font
    try:
        FONT_CORNER_SUIT = pygame.font.SysFont("Segoe UI Symbol", 26, bold=True)
    except (OSError, RuntimeError):
        FONT_CORNER_SUIT = pygame.font.SysFont(FONT_NAME, 26, bold=True)

# Colors
BLACK = (20, 20, 20)
WHITE = (245, 245, 245)
RED = (200, 20, 20)
GOLD = (230, 190, 80)
LIGHT = (220, 220, 220)
HIGHLIGHT = (255, 240, 120)

BACK_COLORS = {"Blue": (34, 96, 200), "Grey": (110, 110, 120), "Red": (170, 30, 40)}
SUIT_SYMBOLS = {"spades": "♠", "hearts": "♥", "diamonds": "♦", "clubs": "♣"}


# ---------- Card surfaces ----------
_card_face_cache = {}
_card_back_cache = None

def invalidate_card_caches():
    global _card_face_cache, _card_back_cache
    _card_face_cache = {}
    _card_back_cache = None

def draw_suit_shape(surface, center, suit, color, size=42):
    x, y = center
    if suit == "diamonds":
        half = size//2
        points = [(x, y - half), (x + half, y), (x, y + half), (x - half, y)]
        pygame.draw.polygon(surface, color, points)
    elif suit == "hearts":
        r = size//3
        pygame.draw.circle(surface, color, (x - r, y - r), r)
        pygame.draw.circle(surface, color, (x + r, y - r), r)
        tri = [(x - 2*r, y - r), (x + 2*r, y - r), (x, y + 2*r)]
        pygame.draw.polygon(surface, color, tri)
    elif suit == "spades":
        r = size//3
        pygame.draw.circle(surface, color, (x - r, y), r)
        pygame.draw.circle(surface, color, (x + r, y), r)
        tri = [(x - 2*r, y), (x + 2*r, y), (x, y - 2*r)]
        pygame.draw.polygon(surface, color, tri)
        stem_w = max(6, size//6)
        pygame.draw.rect(surface, color, (x - stem_w//2, y + r, stem_w, size//2))
    else:  # clubs
        r = size//3
        pygame.draw.circle(surface, color, (x, y - r), r)
        pygame.draw.circle(surface, color, (x - r, y + r//3), r)
        pygame.draw.circle(surface, color, (x + r, y + r//3), r)
        stem_w = max(6, size//6)
        pygame.draw.rect(surface, color, (x - stem_w//2, y + r, stem_w, size//2))

def get_card_surface(card):
    """Surface for a ``CardView``; face-down cards share the back surface."""
    if not card.face_up:
        return get_back_surface()
    key = card.id
    if key in _card_face_cache:
        return _card_face_cache[key]
    surf = pygame.Surface((CARD_W, CARD_H), pygame.SRCALPHA)
    pygame.draw.rect(surf, WHITE, (0,0,CARD_W,CARD_H), border_radius=CARD_RADIUS)
    pygame.draw.rect(surf, BLACK, (0,0,CARD_W,CARD_H), width=3, border_radius=CARD_RADIUS)
    color = RED if card.color == "red" else BLACK
    margin = 10
    rtxt = FONT_CORNER_RANK.render(card.rank, True, color)
    stxt = FONT_CORNER_SUIT.render(SUIT_SYMBOLS[card.suit], True, color)
    surf.blit(rtxt, (margin, margin))
    surf.blit(stxt, (margin, margin + rtxt.get_height() - 2))
    draw_suit_shape(surf, (CARD_W//2, CARD_H//2), card.suit, color, size=min(56, CARD_W//2))
    _card_face_cache[key] = surf
    return surf

def get_back_surface():
    global _card_back_cache
    if _card_back_cache is not None:
        return _card_back_cache
    surf = pygame.Surface((CARD_W, CARD_H), pygame.SRCALPHA)
    pygame.draw.rect(surf, WHITE, (0,0,CARD_W,CARD_H), border_radius=CARD_RADIUS)
    pygame.draw.rect(surf, BLACK, (0,0,CARD_W,CARD_H), width=3, border_radius=CARD_RADIUS)
    inset = 8
    inner_rect = pygame.Rect(inset, inset, CARD_W-2*inset, CARD_H-2*inset)
    pygame.draw.rect(surf, BACK_COLORS.get(BACK_COLOR, BACK_COLORS["Blue"]), inner_rect, border_radius=8)
    for i in range(-CARD_H, CARD_W, 12):
        pygame.draw.line(surf, LIGHT, (i, 8), (i+CARD_H, CARD_H-8), 1)
    _card_back_cache = surf
    return surf


# ---------- Piles ----------
class Pile:
    """Screen placement of one pile. ``cards`` holds the ``CardView``s to show."""
    def __init__(self, x, y, location, fan_y=0, fan_x=0):
        self.x, self.y = x, y
        self.location = location
        self.cards = ()
        self.fan_y = fan_y
        self.fan_x = fan_x
    def rect_for_index(self, idx):
        rx = self.x + idx * self.fan_x
        ry = self.y
        if self.fan_y:
            # face-down cards sit tighter than face-up ones
            for c in self.cards[:idx]:
                ry += self.fan_y if c.face_up else FAN_Y_DOWN
        return pygame.Rect(rx, ry, CARD_W, CARD_H)
    def top_rect(self):
        if not self.cards:
            return pygame.Rect(self.x, self.y, CARD_W, CARD_H)
        return self.rect_for_index(len(self.cards)-1)
    def drop_rect(self):
        return self.top_rect().union(pygame.Rect(self.x, self.y, CARD_W, CARD_H))
    def draw(self, screen, skip_from=None):
        if not self.cards:
            pygame.draw.rect(screen, (255, 255, 255), (self.x, self.y, CARD_W, CARD_H),
                             border_radius=CARD_RADIUS, width=2)
        for i, c in enumerate(self.cards):
            if skip_from is not None and i >= skip_from:
                break
            r = self.rect_for_index(i)
            screen.blit(get_card_surface(c), r.topleft)
            if c.just_revealed:
                pygame.draw.rect(screen, HIGHLIGHT, r, width=3, border_radius=CARD_RADIUS)
    def hit(self, pos):
        if not self.cards:
            r = pygame.Rect(self.x, self.y, CARD_W, CARD_H)
            if r.collidepoint(pos):
                return -1
            return None
        for i in reversed(range(len(self.cards))):
            r = self.rect_for_index(i)
            if r.collidepoint(pos):
                return i
        return None

# ---------- UI ----------
class Button:
    def __init__(self, text, x, y, w=280, h=48, center=False):
        self.text = text
        self.rect = pygame.Rect(0, 0, w, h)
        if center:
            self.rect.center = (x, y)
        else:
            self.rect.topleft = (x, y)

    def draw(self, screen, hover=False, enabled=True):
        col = GOLD if hover and enabled else ((200, 200, 200) if enabled else (150, 150, 150))
        pygame.draw.rect(screen, col, self.rect, border_radius=12)
        pygame.draw.rect(screen, BLACK, self.rect, 2, border_radius=12)
        t = FONT_SMALL.render(self.text, True, BLACK)
        screen.blit(t, (self.rect.centerx - t.get_width() // 2,
                        self.rect.centery - t.get_height() // 2))

    def hovered(self, mouse_pos):
        return self.rect.collidepoint(mouse_pos)

# ---------- Base Scene ----------
class Scene:
    def __init__(self, app):
        self.app = app
    def handle_event(self, e): pass
    def update(self, dt_ms): pass
    def draw(self, screen): pass
    def draw_top_bar(self, screen, title, extra=""):
        pygame.draw.rect(screen, (0, 60, 20), (0, 0, SCREEN_W, TOP_BAR_H))
        t = FONT_TITLE.render(title, True, WHITE)
        screen.blit(t, (20, 10))
        if extra:
            s = FONT_UI.render(extra, True, WHITE)
            screen.blit(s, (SCREEN_W - s.get_width() - 20, TOP_BAR_H - s.get_height() - 12))
