from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

import pygame

from blackjack_trainer import Card, TrainerError, TrainerSession
from blackjack_trainer.game import NATURAL_DEALER, NATURAL_NONE, NATURAL_PLAYER, NATURAL_PUSH
from blackjack_trainer.strategy import ACTION_LABELS, DOUBLE_DOWN, HIT, SPLIT, STAND, SURRENDER

CARD_ASSETS = Path("images/playing-cards")

CARD_ASPECT_RATIO = 0.71  # width / height approximation
BUTTON_HEIGHT = 48
BUTTON_WIDTH = 160
BUTTON_SPACING = 12
PANEL_PADDING = 20

COLOR_WHITE = (240, 240, 240)
COLOR_BLACK = (10, 10, 10)
COLOR_RED = (190, 30, 45)
COLOR_PRIMARY = (38, 115, 198)
COLOR_PRIMARY_DISABLED = (90, 110, 130)
COLOR_BACKGROUND = (21, 82, 56)
COLOR_PANEL = (0, 0, 0, 140)

SUIT_SYMBOLS = {"diamond": "D", "clover": "C", "heart": "H", "spade": "S"}

NATURAL_HEADINGS = {
    NATURAL_PLAYER: ("BLACKJACK!", "Deal again for a new hand."),
    NATURAL_DEALER: ("Dealer blackjack.", "Nothing to decide this round."),
    NATURAL_PUSH: ("Push.", "Both hands are blackjack."),
}

logger = logging.getLogger(__name__)


class Button:
    def __init__(self, label: str, rect: pygame.Rect, callback) -> None:
        self.label = label
        self.rect = rect
        self.callback = callback
        self.enabled = True

    def draw(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        color = COLOR_PRIMARY if self.enabled else COLOR_PRIMARY_DISABLED
        pygame.draw.rect(surface, color, self.rect, border_radius=8)
        text = font.render(self.label, True, COLOR_WHITE)
        text_rect = text.get_rect(center=self.rect.center)
        surface.blit(text, text_rect)

    def handle(self, event: pygame.event.Event) -> None:
        if not self.enabled:
            return
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.rect.collidepoint(event.pos):
                self.callback()


def load_card_images(card_dir: Path, size: Tuple[int, int]) -> Dict[str, pygame.Surface]:
    assets: Dict[str, pygame.Surface] = {}
    if not card_dir.exists():
        return assets
    for pattern in ("*-*.png", "*-*.svg"):
        for path in card_dir.glob(pattern):
            if path.stem in assets:
                continue
            surface = pygame.image.load(str(path)).convert_alpha()
            assets[path.stem] = pygame.transform.smoothscale(surface, size)
    return assets


def create_card_face(card: Card, size: Tuple[int, int], font: pygame.font.Font) -> pygame.Surface:
    face = pygame.Surface(size, pygame.SRCALPHA)
    face.fill(COLOR_WHITE)
    pygame.draw.rect(face, COLOR_BLACK, face.get_rect(), width=2, border_radius=12)
    color = COLOR_RED if card.suit in ("diamond", "heart") else COLOR_BLACK
    label = font.render(f"{card.rank.upper()}{SUIT_SYMBOLS[card.suit]}", True, color)
    face.blit(label, label.get_rect(center=face.get_rect().center))
    return face


def create_card_back(size: Tuple[int, int]) -> pygame.Surface:
    card = pygame.Surface(size, pygame.SRCALPHA)
    card.fill((170, 30, 55))
    pygame.draw.rect(card, (230, 230, 230), card.get_rect(), width=4, border_radius=12)
    pygame.draw.rect(card, (255, 255, 255, 70), card.get_rect().inflate(-16, -16), width=2, border_radius=8)
    return card


class TrainerApp:
    def __init__(self, args: argparse.Namespace) -> None:
        pygame.init()
        pygame.display.set_caption("Blackjack Strategy Trainer")
        self.screen = pygame.display.set_mode((args.width, args.height))
        self.clock = pygame.time.Clock()
        self.fps = args.fps
        self.font_large = pygame.font.Font(None, 44)
        self.font_medium = pygame.font.Font(None, 32)
        self.font_small = pygame.font.Font(None, 26)

        card_height = int(args.height * 0.28)
        self.card_size = (int(card_height * CARD_ASPECT_RATIO), card_height)
        self.card_spacing = int(self.card_size[0] * 1.1)
        self.card_images = load_card_images(CARD_ASSETS, self.card_size)
        self.card_back = create_card_back(self.card_size)

        self.session = TrainerSession(args.decks, seed=args.seed)
        self.dealt = False
        self.heading = ""
        self.detail = ""
        self.running = True

        btn_y = args.height - BUTTON_HEIGHT - PANEL_PADDING
        self.buttons: Dict[str, Button] = {}
        self.buttons["deal"] = Button("Deal", self._button_rect(0, btn_y), self.deal)
        for index, action in enumerate((HIT, STAND, DOUBLE_DOWN, SPLIT, SURRENDER), start=1):
            self.buttons[action] = Button(
                ACTION_LABELS[action],
                self._button_rect(index, btn_y),
                lambda action=action: self.submit(action),
            )

    @staticmethod
    def _button_rect(index: int, y: int) -> pygame.Rect:
        return pygame.Rect(PANEL_PADDING + (BUTTON_WIDTH + BUTTON_SPACING) * index, y, BUTTON_WIDTH, BUTTON_HEIGHT)

    def deal(self) -> None:
        view = self.session.new_round()
        self.dealt = True
        self.heading, self.detail = NATURAL_HEADINGS.get(view.natural_outcome, ("", ""))

    def submit(self, action: str) -> None:
        if action not in self.session.available_actions():
            return
        try:
            result = self.session.submit_action(action)
        except TrainerError as exc:
            logger.exception("Could not evaluate action %s", action)
            self.heading, self.detail = "Error.", str(exc)
            return
        self.heading, self.detail = result.feedback()

    def draw(self) -> None:
        self.screen.fill(COLOR_BACKGROUND)
        self._draw_panel()
        if self.dealt:
            self._draw_dealer_area()
            self._draw_player_area()
        self._draw_buttons()
        pygame.display.flip()

    def _draw_panel(self) -> None:
        width, _ = self.screen.get_size()
        panel_rect = pygame.Rect(PANEL_PADDING, PANEL_PADDING, width - PANEL_PADDING * 2, 110)
        overlay = pygame.Surface(panel_rect.size, pygame.SRCALPHA)
        overlay.fill(COLOR_PANEL)
        self.screen.blit(overlay, panel_rect.topleft)

        score = self.session.current_score()
        self.screen.blit(
            self.font_medium.render(f"Score: {score.correct}/{score.total}", True, COLOR_WHITE),
            (panel_rect.x + 16, panel_rect.y + 16),
        )
        self.screen.blit(
            self.font_medium.render(f"{score.percentage}%", True, COLOR_WHITE),
            (panel_rect.x + 16, panel_rect.y + 56),
        )
        if self.session.shoe is not None:
            shoe_left = f"Shoe: {self.session.shoe.remaining_fraction() * 100:.0f}%"
            self.screen.blit(self.font_small.render(shoe_left, True, COLOR_WHITE), (panel_rect.x + 160, panel_rect.y + 62))
        self.screen.blit(self.font_large.render(self.heading, True, COLOR_WHITE), (panel_rect.x + 320, panel_rect.y + 16))
        self.screen.blit(self.font_small.render(self.detail, True, COLOR_WHITE), (panel_rect.x + 320, panel_rect.y + 64))

    def _card_surface(self, card: Card) -> pygame.Surface:
        surface = self.card_images.get(card.asset_name)
        if surface is None:
            surface = create_card_face(card, self.card_size, self.font_large)
            self.card_images[card.asset_name] = surface
        return surface

    def _draw_dealer_area(self) -> None:
        width, _ = self.screen.get_size()
        base_x = width // 2 - self.card_spacing // 2
        y = PANEL_PADDING + 130

        up_card = self.session.dealer_visible_hand.cards[0]
        self.screen.blit(self._card_surface(up_card), (base_x, y))
        hole_pos = (base_x + self.card_spacing, y)
        if self.session.natural_outcome == NATURAL_NONE:
            self.screen.blit(self.card_back, hole_pos)
        else:
            self.screen.blit(self._card_surface(self.session.dealer_hidden_hand.cards[0]), hole_pos)

        info = f"Dealer Hand: {self.session.dealer_visible_hand.value()}"
        self.screen.blit(self.font_medium.render(info, True, COLOR_WHITE), (PANEL_PADDING, y + self.card_size[1] // 2))

    def _draw_player_area(self) -> None:
        width, height = self.screen.get_size()
        cards = self.session.player_hand.cards
        base_x = width // 2 - (len(cards) - 1) * self.card_spacing // 2
        y = height // 2 + 20

        for idx, card in enumerate(cards):
            self.screen.blit(self._card_surface(card), (base_x + idx * self.card_spacing, y))

        info = f"Player Hand: {self.session.player_hand.value()}"
        self.screen.blit(self.font_medium.render(info, True, COLOR_WHITE), (PANEL_PADDING, y + self.card_size[1] // 2))

    def _draw_buttons(self) -> None:
        self._update_button_states()
        for button in self.buttons.values():
            button.draw(self.screen, self.font_small)

    def _update_button_states(self) -> None:
        available = self.session.available_actions()
        self.buttons["deal"].enabled = not available
        for action in (HIT, STAND, DOUBLE_DOWN, SPLIT, SURRENDER):
            self.buttons[action].enabled = action in available

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.running = False
            return
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                self.running = False
                return
            if event.key in (pygame.K_SPACE, pygame.K_RETURN):
                if not self.session.available_actions():
                    self.deal()
            elif event.key == pygame.K_h:
                self.submit(HIT)
            elif event.key == pygame.K_s:
                self.submit(STAND)
            elif event.key == pygame.K_d:
                self.submit(DOUBLE_DOWN)
            elif event.key == pygame.K_p:
                self.submit(SPLIT)
            elif event.key == pygame.K_r:
                self.submit(SURRENDER)
            return
        for button in self.buttons.values():
            button.handle(event)

    def run(self) -> None:
        while self.running:
            for event in pygame.event.get():
                self.handle_event(event)
            self.draw()
            self.clock.tick(self.fps)
        pygame.quit()


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Practise blackjack basic strategy one hand at a time.")
    parser.add_argument("--width", type=int, default=1280, help="Window width")
    parser.add_argument("--height", type=int, default=720, help="Window height")
    parser.add_argument("--fps", type=int, default=30, help="Target frame rate")
    parser.add_argument("--decks", type=int, default=4, help="Decks per shoe")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible deals")
    parser.add_argument(
        "--log-level",
        default=os.getenv("BLACKJACK_TRAINER_LOG_LEVEL", "WARNING"),
        help="Logging level (DEBUG shows every lookup)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Iterable[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=str(args.log_level).upper())
    app = TrainerApp(args)
    app.run()


if __name__ == "__main__":
    main()
