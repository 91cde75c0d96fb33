"""
Rabbit Care host loop: a small pygame window that drives the engine's timers
and maps keys to care actions.
"""

import logging
import os
import sys

import pygame

from rabbitcare.api import RemoteStore
from rabbitcare.config import load_config
from rabbitcare.constants import SCREEN_WIDTH, SCREEN_HEIGHT, FPS, COLOR_TEXT, COLOR_WARNING
from rabbitcare.database import LocalStore, get_player_id
from rabbitcare.engine import GameEngine
from rabbitcare.log import configure_logging
from rabbitcare.models import Mood
from rabbitcare.sync import SyncCoordinator

logger = logging.getLogger(__name__)

MOOD_FACES = {Mood.SAD: ":(", Mood.NORMAL: ":|", Mood.HAPPY: ":)"}


class RabbitCareApp:
    """Wires store, engine and sync together and runs them inside a pygame loop."""

    def __init__(self, config=None, remote=None, executor=None):
        self.config = config or load_config()
        pygame.init()
        self.screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
        pygame.display.set_caption("Rabbit Care")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.Font(None, 24)

        self.store = LocalStore(self.config.db_path)
        self.player_id = get_player_id(self.store, self.config.player_id_key)
        self.engine = GameEngine(self.store, self.config)
        self.sync = None
        if self.config.sync_enabled:
            remote = remote or RemoteStore(self.config.api_base, timeout=self.config.request_timeout)
            self.sync = SyncCoordinator(self.engine, remote, self.player_id,
                                        interval_ms=self.config.sync_interval_ms, executor=executor)
            self.sync.pull()
        self.engine.start()
        self.hud_text = None
        self.engine.subscribe(self._on_change)

    def _on_change(self, state):
        # Any change invalidates the status line; it is rebuilt on the next draw
        self.hud_text = None

    # ===== Input =====

    def handle_key(self, event):
        engine = self.engine
        if event.key == pygame.K_f:
            engine.feed()
        elif event.key == pygame.K_c:
            engine.clean()
        elif event.key == pygame.K_p:
            engine.pet()
        elif event.key == pygame.K_s and event.mod & pygame.KMOD_CTRL:
            if self.sync is not None:
                self.sync.push_now()
        elif event.key == pygame.K_s:
            if engine.state.poops:
                engine.scoop_poop(engine.state.poops[0].id)
        elif event.key == pygame.K_g:
            amount = engine.claim_daily_gift()
            if amount:
                logger.info("Gift! +%d hearts", amount)
        elif event.key == pygame.K_b:
            self._cycle_background()

    def _cycle_background(self):
        unlocked = sorted(self.engine.state.unlocked_backgrounds)
        current = unlocked.index(self.engine.state.current_background)
        self.engine.set_background(unlocked[(current + 1) % len(unlocked)])

    # ===== Drawing =====

    def status_line(self):
        s = self.engine.state
        return (f"{MOOD_FACES[s.mood()]}  food {s.hunger_level}/2  bath {s.clean_level}/2  "
                f"joy {s.happy_level}/2  hearts {s.hearts}  Lv {s.level}  poops {len(s.poops)}")

    def draw(self):
        bg = self.engine.catalog.get_background(self.engine.state.current_background)
        self.screen.fill(bg['color'])
        if self.hud_text is None:
            self.hud_text = self.status_line()
        color = COLOR_WARNING if self.engine.state.mood() == Mood.SAD else COLOR_TEXT
        self.screen.blit(self.font.render(self.hud_text, True, color), (10, 10))
        if self.sync is not None and self.sync.online is False:
            self.screen.blit(self.font.render("offline", True, COLOR_WARNING), (10, SCREEN_HEIGHT - 30))
        pygame.display.flip()

    # ===== Main Loop =====

    def step(self):
        """Process a single loop iteration (useful for headless tests). Returns False to stop."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type == pygame.KEYDOWN:
                self.handle_key(event)
        self.engine.step()
        self.draw()
        return True

    def run(self):
        try:
            while self.step():
                self.clock.tick(FPS)
        finally:
            self.close()

    def close(self):
        self.engine.close()
        self.store.close()
        pygame.quit()


def main():
    configure_logging()
    if os.environ.get("RABBITCARE_HEADLESS") == "1":
        os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
    logger.info("Starting Rabbit Care...")
    app = RabbitCareApp()
    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
