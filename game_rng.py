"""Integrated GameRNG module.

Deterministic random number source threaded explicitly through every stage of
dungeon generation.  Two flavours share one interface:

* :class:`GameRNG` wraps a seeded numpy ``Generator``.
* :class:`CallableRNG` adapts a bare ``() -> float`` source (any function
  returning floats in ``[0, 1)``) so callers can replay an exact stream.

Every helper used by the generator ultimately draws through ``get_float`` or
``get_int``; feeding two bit-identical streams yields identical dungeons.
"""

from __future__ import annotations

import math
import random
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import numpy as np

FloatSource = Callable[[], float]


class GameRNG:
    def __init__(self, seed: Optional[int] = None) -> None:
        self.initial_seed = seed if seed is not None else random.randint(0, 2**32 - 1)
        self.rng = np.random.default_rng(self.initial_seed)
        self.weighted_choice_cache: Dict[Any, np.ndarray] = {}
        self.weighted_choice_cache_size = 100

    # ------------------------------------------------------------------
    # basic random helpers
    # ------------------------------------------------------------------
    def get_int(self, a: int, b: int) -> int:
        if a > b:
            raise ValueError("a <= b")
        return int(self.rng.integers(a, b + 1))

    def get_float(self, a: float = 0.0, b: float = 1.0) -> float:
        if a > b:
            raise ValueError("a <= b")
        val = float(self.rng.random())
        return a + (b - a) * val

    def chance(self, probability: float) -> bool:
        """Return ``True`` with the given probability."""
        if not 0.0 <= probability <= 1.0:
            raise ValueError("probability out of range")
        return self.get_float() < probability

    def choice(self, seq: Sequence[Any]) -> Any:
        """Return a random element from *seq*."""
        if not seq:
            raise ValueError("cannot choose from an empty sequence")
        return seq[self.get_int(0, len(seq) - 1)]

    # ------------------------------------------------------------------
    # weighted helpers
    # ------------------------------------------------------------------
    def weighted_choice(
        self,
        items: Sequence[Any],
        weights: Sequence[float],
        cache_key: Any | None = None,
    ) -> Any:
        if len(items) != len(weights):
            raise ValueError("items/weights length mismatch")
        if not items:
            raise ValueError("items empty")
        total = float(sum(weights))
        if total <= 0:
            raise ValueError("weight sum must be positive")

        cdf = None
        if cache_key is not None:
            cdf = self.weighted_choice_cache.get(cache_key)
        if cdf is None:
            cdf = np.cumsum(np.asarray(weights, dtype=float))
            cdf[-1] = total
            if cache_key is not None:
                if len(self.weighted_choice_cache) >= self.weighted_choice_cache_size:
                    # Evict the oldest entry; dicts keep insertion order.
                    oldest = next(iter(self.weighted_choice_cache))
                    del self.weighted_choice_cache[oldest]
                self.weighted_choice_cache[cache_key] = cdf

        r = self.get_float(0.0, total)
        idx = int(np.searchsorted(cdf, r, side="right"))
        return items[min(idx, len(items) - 1)]

    # ------------------------------------------------------------------
    # sequence utilities
    # ------------------------------------------------------------------
    def shuffle(self, seq: List[Any]) -> None:
        """Fisher-Yates shuffle in place, drawing through ``get_int``."""
        for i in range(len(seq) - 1, 0, -1):
            j = self.get_int(0, i)
            seq[i], seq[j] = seq[j], seq[i]

    def sample(self, items: Sequence[Any], k: int) -> List[Any]:
        """Return ``k`` distinct elements of ``items`` (without replacement)."""
        if k < 0:
            raise ValueError("k >= 0")
        if k > len(items):
            raise ValueError("k <= len(items) without replacement")
        pool = list(items)
        picked: List[Any] = []
        for _ in range(k):
            picked.append(pool.pop(self.get_int(0, len(pool) - 1)))
        return picked

    # ------------------------------------------------------------------
    # state management
    # ------------------------------------------------------------------
    def get_state(self) -> Dict[str, Any]:
        return {
            "random_state": self.rng.bit_generator.state,
            "initial_seed": self.initial_seed,
        }

    def set_state(self, state: Dict[str, Any]) -> None:
        if "random_state" in state:
            self.rng.bit_generator.state = state["random_state"]
        if "initial_seed" in state:
            self.initial_seed = state["initial_seed"]
        self.weighted_choice_cache.clear()


class CallableRNG(GameRNG):
    """Adapter exposing the :class:`GameRNG` API over a bare float source.

    ``source`` must return floats in ``[0, 1)``.  Integers are derived as
    ``a + floor(r * (b - a + 1))`` so one draw is consumed per call.
    """

    def __init__(self, source: FloatSource) -> None:
        if not callable(source):
            raise TypeError("CallableRNG requires a callable float source")
        self.source = source
        self.initial_seed = None
        self.weighted_choice_cache = {}
        self.weighted_choice_cache_size = 100

    def get_int(self, a: int, b: int) -> int:
        if a > b:
            raise ValueError("a <= b")
        val = a + math.floor(self._draw() * (b - a + 1))
        return min(val, b)

    def get_float(self, a: float = 0.0, b: float = 1.0) -> float:
        if a > b:
            raise ValueError("a <= b")
        return a + (b - a) * self._draw()

    def _draw(self) -> float:
        val = float(self.source())
        if not 0.0 <= val < 1.0:
            raise ValueError(f"float source returned {val!r}, expected [0, 1)")
        return val

    def get_state(self) -> Dict[str, Any]:
        raise NotImplementedError("a bare float source has no retrievable state")

    def set_state(self, state: Dict[str, Any]) -> None:
        raise NotImplementedError("a bare float source has no settable state")


RandomSource = Union[GameRNG, FloatSource, int, None]


def as_game_rng(source: RandomSource) -> GameRNG:
    """Coerce any supported random source into a :class:`GameRNG`.

    ``None`` yields an unseeded generator, an ``int`` is used as a seed and a
    callable is wrapped in :class:`CallableRNG`.
    """
    if isinstance(source, GameRNG):
        return source
    if source is None:
        return GameRNG()
    if isinstance(source, bool):
        raise TypeError("a bool is not a valid random source")
    if isinstance(source, (int, np.integer)):
        return GameRNG(seed=int(source))
    if callable(source):
        return CallableRNG(source)
    raise TypeError(f"Unsupported random source: {type(source).__name__}")


__all__ = ["GameRNG", "CallableRNG", "RandomSource", "as_game_rng"]
