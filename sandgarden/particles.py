"""Cosmetic sand scatter thrown up by the rake.

Purely visual: particles never touch the height field, they only mark
where they were and are so the renderer repaints those cells.
"""

import math

import numpy as np

MAX_PARTICLES = 150
MARK_RADIUS = 4
FRAME_MS = 16.67


class ParticlePool:
    """Fixed-capacity particle arrays; dead particles are swap-removed."""

    def __init__(self, capacity=MAX_PARTICLES, rng=None):
        self.capacity = capacity
        self.rng = rng if rng is not None else np.random.RandomState()
        self.count = 0
        self.x = np.zeros(capacity)
        self.y = np.zeros(capacity)
        self.vx = np.zeros(capacity)
        self.vy = np.zeros(capacity)
        self.life = np.zeros(capacity)
        self.max_life = np.zeros(capacity)
        self.color = np.zeros((capacity, 3))

    @property
    def active(self):
        return self.count > 0

    def spawn(self, result, width, intensity):
        """Throw a few grains from the cells a carve just displaced."""
        n = len(result)
        if n == 0 or intensity <= 0:
            return 0
        sample_rate = 0.04 * (intensity / 50)
        max_spawn = max(1, math.floor(5 * (intensity / 50) + 0.5))
        count = min(max_spawn, math.ceil(n * sample_rate))
        step = max(1, n // count)
        dir_x, dir_y = result.direction

        spawned = 0
        for s in range(count):
            if self.count >= self.capacity:
                break
            di = (s * step) % n
            amount = result.amount[di]
            if amount < 0.01:
                continue

            base_x, base_y = dir_x, dir_y
            if base_x == 0 and base_y == 0:
                angle = self.rng.random_sample() * 2 * math.pi
                base_x, base_y = math.cos(angle), math.sin(angle)
            jitter = (self.rng.random_sample() - 0.5) * math.pi * 0.5
            cos_j, sin_j = math.cos(jitter), math.sin(jitter)
            speed = (1.5 + self.rng.random_sample() * 2) * min(amount * 4, 1)

            i = self.count
            idx = int(result.index[di])
            self.x[i] = idx % width
            self.y[i] = idx // width
            self.vx[i] = (base_x * cos_j - base_y * sin_j) * speed
            self.vy[i] = (base_x * sin_j + base_y * cos_j) * speed
            self.life[i] = self.max_life[i] = 200 + self.rng.random_sample() * 200
            self.color[i] = result.color[di]
            self.count += 1
            spawned += 1
        return spawned

    def update(self, dt, tracker):
        """Age, move and cull particles over ``dt`` milliseconds."""
        friction = 0.92 ** (dt / FRAME_MS)
        i = 0
        while i < self.count:
            self.life[i] -= dt
            if self.life[i] <= 0:
                self._swap_remove(i)
                continue
            tracker.mark(self.x[i], self.y[i], MARK_RADIUS)
            self.vx[i] *= friction
            self.vy[i] *= friction
            self.x[i] += self.vx[i] * (dt / FRAME_MS)
            self.y[i] += self.vy[i] * (dt / FRAME_MS)
            tracker.mark(self.x[i], self.y[i], MARK_RADIUS)
            i += 1

    def _swap_remove(self, i):
        self.count -= 1
        last = self.count
        if i < last:
            for arr in (self.x, self.y, self.vx, self.vy, self.life,
                        self.max_life, self.color):
                arr[i] = arr[last]
