"""
Tape VM — runtime configuration

VMConfig carries every knob the executors read. Named profiles play the
same role as the compiler's target profiles: a dict of defaults that the
CLI (or a caller) can override field by field.
"""

from dataclasses import dataclass, fields
from typing import Optional

MODES = ("compiled", "direct")


PROFILES = {
    "standard": {
        "tape_size": 30_000,
        "growth_block": 100,
        "mode": "compiled",
        "description": "Classic 30,000-cell tape, compiled execution",
    },
    "compact": {
        "tape_size": 256,
        "growth_block": 16,
        "mode": "compiled",
        "description": "Small tape that grows in 16-cell blocks",
    },
    "direct": {
        "tape_size": 30_000,
        "growth_block": 100,
        "mode": "direct",
        "description": "Interpret raw source with lazy jump resolution",
    },
}


@dataclass(frozen=True)
class VMConfig:
    tape_size: int = 30_000
    growth_block: int = 100
    mode: str = "compiled"
    comments: bool = True
    history: bool = False
    max_steps: Optional[int] = None

    def __post_init__(self):
        if self.tape_size < 1:
            raise ValueError(f"tape_size must be >= 1, got {self.tape_size}")
        if self.growth_block < 1:
            raise ValueError(f"growth_block must be >= 1, got {self.growth_block}")
        if self.mode not in MODES:
            raise ValueError(f"mode must be one of {MODES}, got {self.mode!r}")
        if self.max_steps is not None and self.max_steps < 0:
            raise ValueError(f"max_steps must be >= 0, got {self.max_steps}")


def load_config(profile: str = "standard", **overrides) -> VMConfig:
    """Build a VMConfig from a named profile plus per-field overrides.

    Overrides set to None are ignored so argparse defaults pass through.
    """
    if profile not in PROFILES:
        raise ValueError(f"Unknown profile {profile!r} (choices: {', '.join(PROFILES)})")
    known = {f.name for f in fields(VMConfig)}
    unknown = set(overrides) - known
    if unknown:
        raise ValueError(f"Unknown config field(s): {', '.join(sorted(unknown))}")

    values = {k: v for k, v in PROFILES[profile].items() if k in known}
    values.update({k: v for k, v in overrides.items() if v is not None})
    return VMConfig(**values)
