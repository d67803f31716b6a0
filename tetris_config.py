
CONFIG = {
    "CELL_SIZE": 32,
    "FRAME_MS": 23,
    "INITIAL_PERIOD": 50,
    "FREEZE_FRAMES": 10,
    "BLINK_TICKS": 120,
    "GOAL_LINES": 25,
    "NET_PORT": 37280,
    "RNG_SEED": None,
    "MUSIC": True,
    "START_DELAY_MS": 1000,
    "RESULT_DELAY_MS": 2000,
}

# Frames between two automatic drops, indexed by level. Levels past the end
# of the table reuse the last entry.
GRAVITY_PERIODS = tuple(CONFIG["INITIAL_PERIOD"] - 2 * lvl for lvl in range(20))


def gravity_period(level: int) -> int:
    return GRAVITY_PERIODS[min(max(level, 0), len(GRAVITY_PERIODS) - 1)]
