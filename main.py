import argparse
import logging
import signal
import sys

import pygame

from tetris_audio import NullAudio, PygameAudio
from tetris_config import CONFIG
from tetris_input import PygameInput
from tetris_layout import compute_dims
from tetris_net import NetError, NetLink, parse_address
from tetris_render import PygameRenderer
from tetris_rng import LCGRandom
from tetris_session import GameMode, GameSession

log = logging.getLogger("tetris")


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Falling-block puzzle, solo or head to head over TCP.")
    p.add_argument("mode", nargs="?", choices=[m.value for m in GameMode], default=GameMode.ENDLESS.value,
                   help="a: endless, b: clear a number of lines, 2: two players")
    p.add_argument("address", nargs="?", default=None,
                   help="two players only: ':port' to wait for a peer, 'host:port' to join one")
    p.add_argument("--level", type=int, default=0, help="starting level 0-9")
    p.add_argument("--high", type=int, default=0, help="handicap: rows of random blocks / 2 (0-5)")
    p.add_argument("--seed", type=int, default=CONFIG["RNG_SEED"], help="random seed (default: clock)")
    p.add_argument("--mute", action="store_true", help="disable sound cues")
    p.add_argument("--verbose", action="store_true", help="debug logging")
    args = p.parse_args(argv)
    if args.mode == GameMode.VERSUS.value and not args.address:
        p.error("two player mode needs ':port' or 'host:port'")
    return args


def open_link(address: str) -> NetLink:
    host, port = parse_address(address)
    if host is None:
        return NetLink.serve(port)
    return NetLink.connect(host, port)


def run(args) -> int:
    mode = GameMode(args.mode)
    rng = LCGRandom(args.seed)

    net = None
    if mode is GameMode.VERSUS:
        try:
            net = open_link(args.address)
        except NetError as exc:
            log.error("%s", exc)
            return 1
        except KeyboardInterrupt:
            log.info("Interrupted before a peer joined")
            return 1

    stop = []
    def on_signal(signum, frame):
        stop.append(signum)
    previous = {sig: signal.signal(sig, on_signal) for sig in (signal.SIGINT, signal.SIGTERM)}

    try:
        pygame.init()
        dims = compute_dims()
        try:
            screen = pygame.display.set_mode((dims.total_w, dims.total_h))
        except pygame.error as exc:
            log.error("Cannot open display: %s", exc)
            return 1
        pygame.display.set_caption("Tetris Duel")
        font = pygame.font.SysFont(None, 22)
        big_font = pygame.font.SysFont(None, 42)

        audio = PygameAudio.open() if CONFIG["MUSIC"] and not args.mute else NullAudio()
        renderer = PygameRenderer(screen, dims, font, big_font)
        keys = PygameInput()
        session = GameSession(mode, level=args.level, high=args.high, rng=rng, net=net,
                              renderer=renderer, audio=audio, input_source=keys)
        renderer.present()
        pygame.time.wait(CONFIG["START_DELAY_MS"])
        keys.flush()

        # tick() sleeps out the rest of the frame; a late frame is not caught up
        clock = pygame.time.Clock()
        fps = 1000 / CONFIG["FRAME_MS"]
        while not session.finished:
            if stop:
                session.quit()
                break
            session.tick()
            renderer.present()
            clock.tick(fps)

        renderer.show_message(session.result_text())
        renderer.present()
        pygame.time.wait(CONFIG["RESULT_DELAY_MS"])
        log.info("Final score %d", session.score)
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
        if net is not None:
            net.close()
        pygame.quit()
    return 0


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="[TETRIS] %(asctime)s - %(message)s")
    sys.exit(run(args))


if __name__ == '__main__':
    main()
